# -*- coding: utf-8 -*-
"""Tests for the Layer container, the LayerManager and the CRS checks."""

import geopandas as gpd
import numpy as np
import pytest

from geocompy import CRSMismatchError, Layer, LayerError, LayerManager, ensure_same_crs, is_geographic, to_crs


def test_raster_layer_bounds_and_shape(elev):
    assert elev.shape == (6, 6)
    assert elev.bounds == pytest.approx((-1.5, -1.5, 1.5, 1.5))
    assert elev.is_raster and not elev.is_vector


def test_vector_layer_bounds(regions):
    assert regions.bounds == pytest.approx((500000.0, 5000000.0, 520000.0, 5020000.0))
    assert regions.crs == regions.objects.crs


def test_band_replaces_nodata_with_nan(elev):
    elev.nodata = 1
    values = elev.band(1)
    assert np.isnan(values[0, 0])
    assert values[0, 1] == 2
    assert elev.raster[0, 0] == 1, "Reading a band must not modify the stored raster."


def test_band_out_of_range():
    layer = Layer.from_raster(np.zeros((2, 3, 3)), None, None)
    assert layer.band(2).shape == (3, 3)
    with pytest.raises(LayerError):
        layer.band(3)


def test_empty_layer_has_no_bounds():
    with pytest.raises(LayerError):
        Layer(name="empty").bounds


def test_attach_function_records_result(regions):
    def count_features(layer, minimum=0):
        return max(len(layer.objects), minimum)

    returned = regions.attach_function(count_features, name="n", minimum=2)
    assert returned is regions
    assert regions.get_function_result("n") == 4
    assert regions.attached_functions["n"]["args"] == {"minimum": 2}

    with pytest.raises(LayerError):
        regions.get_function_result("missing")


def test_copy_is_independent(elev):
    elev.metadata["source"] = "sample"
    duplicate = elev.copy()
    duplicate.raster[0, 0] = 100
    duplicate.metadata["source"] = "changed"

    assert elev.raster[0, 0] == 1
    assert elev.metadata["source"] == "sample"
    assert duplicate.name == "elev_copy"
    assert duplicate.transform == elev.transform


def test_str_describes_content(regions, elev):
    assert "objects: 4" in str(regions)
    assert "raster: 6x6" in str(elev)


def test_layer_manager_lookup_and_removal():
    manager = LayerManager()
    first = manager.add_layer(Layer(name="first"))
    second = manager.add_layer(Layer(name="second"))

    assert manager.active_layer is second
    assert manager.get_layer("first") is first
    assert manager.get_layer(second.id) is second
    assert manager.get_layer_names() == ["first", "second"]

    manager.remove_layer("second")
    assert manager.active_layer is first

    manager.remove_layer(first.id)
    assert manager.active_layer is None

    with pytest.raises(LayerError):
        manager.get_layer("first")


def test_ensure_same_crs(regions):
    reprojected = regions.objects.to_crs(4326)
    assert ensure_same_crs(regions, regions.objects).to_epsg() == 32633

    with pytest.raises(CRSMismatchError):
        ensure_same_crs(regions.objects, reprojected)

    without_crs = gpd.GeoDataFrame(geometry=list(regions.objects.geometry))
    with pytest.raises(CRSMismatchError):
        ensure_same_crs(regions.objects, without_crs)

    assert ensure_same_crs(without_crs, without_crs) is None


def test_crs_errors_are_value_errors(regions):
    with pytest.raises(ValueError):
        ensure_same_crs(regions.objects, regions.objects.to_crs(3857))


def test_to_crs_reprojects_vector_layer(regions, manager):
    result = to_crs(regions, "EPSG:4326", layer_manager=manager)

    assert is_geographic(result.crs)
    assert not is_geographic(regions.crs)
    assert result.parent is regions
    assert result.metadata["operation"] == "to_crs"
    assert 14 < result.bounds[0] < 16, "UTM 33N sample lies around 15 degrees east."
    assert manager.active_layer is result


def test_to_crs_requires_objects(elev):
    with pytest.raises(LayerError):
        to_crs(elev, 3857)
