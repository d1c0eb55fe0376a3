# -*- coding: utf-8 -*-
"""Manages vector data I/O, supporting formats like Shapefile, GeoJSON and GeoPackage.

CSV files with coordinate columns are turned into point layers, the way tabular observations usually enter a
spatial analysis.
"""

import logging
import os

import geopandas as gpd
import pandas as pd

from ..core.layer import Layer
from ..errors import LayerError

logger = logging.getLogger(__name__)

VECTOR_DRIVERS = {
    ".shp": "ESRI Shapefile",
    ".geojson": "GeoJSON",
    ".json": "GeoJSON",
    ".gpkg": "GPKG",
}


def read_vector(vector_path, layer=None):
    """Read a vector file into a GeoDataFrame.

    Parameters:
    -----------
    vector_path : str
        Path to the vector file
    layer : str, optional
        Layer to read from multi-layer sources such as GeoPackage

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        GeoDataFrame with vector data
    """
    if layer is not None:
        gdf = gpd.read_file(vector_path, layer=layer)
    else:
        gdf = gpd.read_file(vector_path)
    logger.info("Read %d features from %s", len(gdf), vector_path)
    return gdf


def read_vector_layer(vector_path, name=None, layer=None):
    """Read a vector file straight into a Layer."""
    gdf = read_vector(vector_path, layer=layer)
    if not name:
        name = os.path.splitext(os.path.basename(vector_path))[0]
    return Layer.from_vector(gdf, name=name)


def read_points_csv(csv_path, x="lon", y="lat", crs="EPSG:4326", **read_csv_kwargs):
    """Read a CSV table with coordinate columns into a point GeoDataFrame.

    Parameters:
    -----------
    csv_path : str
        Path to the CSV file
    x, y : str
        Names of the coordinate columns
    crs : str or int
        Coordinate reference system of the coordinates
    **read_csv_kwargs : dict
        Passed on to pandas.read_csv

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        Point features, one per row with complete coordinates
    """
    df = pd.read_csv(csv_path, **read_csv_kwargs)

    missing = [col for col in (x, y) if col not in df.columns]
    if missing:
        raise ValueError(f"Coordinate column(s) {missing} not found in {csv_path}")

    complete = df[x].notna() & df[y].notna()
    dropped = int((~complete).sum())
    if dropped:
        logger.warning("Dropping %d row(s) without coordinates from %s", dropped, csv_path)
    df = df[complete]

    return gpd.GeoDataFrame(df, geometry=gpd.points_from_xy(df[x], df[y]), crs=crs)


def write_vector(gdf, output_path):
    """Write a GeoDataFrame to a vector file.

    Parameters:
    -----------
    gdf : geopandas.GeoDataFrame
        GeoDataFrame to write
    output_path : str
        Path to the output vector file (.shp, .geojson, .json or .gpkg)
    """
    file_extension = os.path.splitext(output_path)[1].lower()
    if file_extension not in VECTOR_DRIVERS:
        raise ValueError(f"Unsupported vector format: {file_extension}")

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    gdf.to_file(output_path, driver=VECTOR_DRIVERS[file_extension])
    logger.info("Wrote %d features to %s", len(gdf), output_path)


def layer_to_vector(layer, output_path):
    """Save a layer's objects to a vector file.

    Parameters:
    -----------
    layer : Layer
        Layer to save
    output_path : str
        Path to the output vector file
    """
    if layer.objects is None:
        raise LayerError(f"Layer '{layer.name}' has no vector objects")

    write_vector(layer.objects, output_path)
