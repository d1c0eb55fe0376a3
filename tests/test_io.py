# -*- coding: utf-8 -*-
"""Tests for vector and raster input/output."""

import json

import numpy as np
import pytest
import rasterio

from geocompy import (
    LayerError,
    layer_to_raster,
    layer_to_vector,
    raster_calc,
    read_points_csv,
    read_raster,
    read_raster_layer,
    read_vector,
    read_vector_layer,
    write_raster,
    write_vector,
)


@pytest.mark.parametrize("extension", [".geojson", ".gpkg", ".shp"])
def test_vector_formats_round_trip(regions, tmp_path, extension):
    path = tmp_path / "nested" / f"regions{extension}"
    write_vector(regions.objects, str(path))

    gdf = read_vector(str(path))
    assert len(gdf) == 4
    assert sorted(gdf["name"]) == ["Alder", "Birch", "Cedar", "Dogwood"]
    assert gdf.crs.to_epsg() == 32633


def test_geojson_output_is_feature_collection(regions, tmp_path):
    path = tmp_path / "regions.geojson"
    layer_to_vector(regions, str(path))

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    assert data["type"] == "FeatureCollection"
    assert len(data["features"]) == 4


def test_read_vector_layer_names_layer_after_file(regions, tmp_path):
    path = tmp_path / "districts.gpkg"
    write_vector(regions.objects, str(path))

    layer = read_vector_layer(str(path))
    assert layer.name == "districts"
    assert layer.type == "vector"
    assert len(layer.objects) == 4


def test_unsupported_vector_format(regions, tmp_path):
    with pytest.raises(ValueError, match="Unsupported vector format"):
        write_vector(regions.objects, str(tmp_path / "regions.kml"))


def test_layer_to_vector_requires_objects(elev, tmp_path):
    with pytest.raises(LayerError):
        layer_to_vector(elev, str(tmp_path / "elev.geojson"))


def test_read_points_csv_drops_rows_without_coordinates(tmp_path, caplog):
    path = tmp_path / "stations.csv"
    path.write_text("station,lon,lat,temp\nA,10.0,50.0,3.5\nB,,51.0,2.0\nC,11.5,49.5,4.1\n", encoding="utf-8")

    with caplog.at_level("WARNING"):
        gdf = read_points_csv(str(path))

    assert list(gdf["station"]) == ["A", "C"]
    assert gdf.crs.to_epsg() == 4326
    assert gdf.geometry.iloc[1].x == pytest.approx(11.5)
    assert gdf.geometry.iloc[1].y == pytest.approx(49.5)
    assert "Dropping 1 row(s)" in caplog.text


def test_read_points_csv_custom_columns(tmp_path):
    path = tmp_path / "sites.csv"
    path.write_text("x;y;id\n500100;5000100;1\n", encoding="utf-8")

    gdf = read_points_csv(str(path), x="x", y="y", crs="EPSG:32633", sep=";")
    assert len(gdf) == 1
    assert gdf.crs.to_epsg() == 32633


def test_read_points_csv_missing_columns(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("a,b\n1,2\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Coordinate column"):
        read_points_csv(str(path))


def test_write_and_read_raster(elev, tmp_path):
    path = tmp_path / "rasters" / "elev.tif"
    write_raster(str(path), elev.raster, elev.transform, elev.crs)

    data, transform, crs = read_raster(str(path))
    assert data.shape == (1, 6, 6)
    assert transform == elev.transform
    assert crs.to_epsg() == 4326
    np.testing.assert_array_equal(data[0], elev.raster)


def test_read_raster_layer_keeps_nodata(elev, tmp_path):
    path = tmp_path / "elev.tif"
    write_raster(str(path), elev.raster, elev.transform, elev.crs, nodata=36)

    layer = read_raster_layer(str(path))
    assert layer.name == "elev"
    assert layer.raster.shape == (6, 6)
    assert layer.nodata == 36
    assert np.isnan(layer.band(1)[5, 5])


def test_layer_to_raster_writes_grid(elev, tmp_path):
    path = tmp_path / "copy.tif"
    assert layer_to_raster(elev, str(path)) is None

    with rasterio.open(path) as src:
        assert src.count == 1
        assert src.read(1)[2, 3] == 16


def test_layer_to_raster_rasterizes_categories(regions, tmp_path):
    path = tmp_path / "regions.tif"
    value_map = layer_to_raster(regions, str(path), column="name", resolution=1000)

    assert value_map == {"Alder": 1, "Birch": 2, "Cedar": 3, "Dogwood": 4}
    with rasterio.open(path) as src:
        data = src.read(1)
        assert data.shape == (20, 20)
        assert src.transform.a == pytest.approx(1000)
    assert set(np.unique(data)) == {1, 2, 3, 4}
    # Alder is the north-west square
    assert data[0, 0] == 1
    assert data[-1, -1] == 4


def test_layer_to_raster_numeric_column(regions, tmp_path):
    path = tmp_path / "population.tif"
    assert layer_to_raster(regions, str(path), column="population", resolution=5000) is None

    with rasterio.open(path) as src:
        data = src.read(1)
    assert data.shape == (4, 4)
    assert data[0, 0] == 12000


def test_layer_to_raster_unknown_column(regions, tmp_path):
    with pytest.raises(LayerError):
        layer_to_raster(regions, str(tmp_path / "x.tif"), column="missing")


def test_layer_to_raster_string_dtype_categories(regions, tmp_path):
    regions.objects["name"] = regions.objects["name"].astype("string")
    value_map = layer_to_raster(regions, str(tmp_path / "names.tif"), column="name", resolution=5000)
    assert value_map == {"Alder": 1, "Birch": 2, "Cedar": 3, "Dogwood": 4}


def test_layer_to_raster_keeps_zeros_and_nan(elev, tmp_path):
    shifted = raster_calc("elev - 1", {"elev": elev})
    shifted.raster[5, 5] = np.nan
    path = tmp_path / "shifted.tif"
    layer_to_raster(shifted, str(path))

    layer = read_raster_layer(str(path))
    values = layer.band(1)
    assert np.isnan(layer.nodata)
    assert values[0, 0] == 0
    assert np.isnan(values[5, 5])
    assert np.isnan(values).sum() == 1
