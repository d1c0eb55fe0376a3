# -*- coding: utf-8 -*-
"""Handles raster input and output operations, including reading and saving multi-band GeoTIFFs.

Vector layers can be burned into a raster grid here as well, which is how attribute values end up on the same grid
as the raster data they are compared against.
"""

import logging
import os

import numpy as np
import pandas as pd
import rasterio
from rasterio import features
from rasterio.transform import from_origin

from ..core.layer import Layer
from ..errors import LayerError

logger = logging.getLogger(__name__)


def read_raster(raster_path):
    """Read a raster file and return its data, transform, and CRS.

    Parameters:
    -----------
    raster_path : str
        Path to the raster file

    Returns:
    --------
    image_data : numpy.ndarray
        Array with raster data values (bands, rows, cols)
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    """
    with rasterio.open(raster_path) as src:
        image_data = src.read()
        transform = src.transform
        crs = src.crs

    return image_data, transform, crs


def read_raster_layer(raster_path, name=None):
    """Read a raster file into a Layer, keeping its nodata value.

    Single-band files are stored as a 2-D grid.
    """
    with rasterio.open(raster_path) as src:
        data = src.read()
        transform = src.transform
        crs = src.crs
        nodata = src.nodata

    if data.shape[0] == 1:
        data = data[0]

    if not name:
        name = os.path.splitext(os.path.basename(raster_path))[0]

    logger.info("Read raster %s with shape %s", raster_path, data.shape)
    return Layer.from_raster(data, transform, crs, name=name, nodata=nodata)


def write_raster(output_path, data, transform, crs, nodata=None):
    """Write raster data to a GeoTIFF file.

    Parameters:
    -----------
    output_path : str
        Path to the output raster file
    data : numpy.ndarray
        Array with raster data values
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    nodata : int or float, optional
        No data value
    """
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if len(data.shape) == 2:
        data = data.reshape(1, *data.shape)

    height, width = data.shape[-2], data.shape[-1]
    count = data.shape[0]

    with rasterio.open(
        output_path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=count,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
    ) as dst:
        dst.write(data)

    logger.info("Wrote raster %s (%d band(s), %dx%d)", output_path, count, height, width)


def layer_to_raster(layer, output_path, column=None, nodata=0, resolution=None):
    """Save a layer to a raster file.

    Parameters:
    -----------
    layer : Layer
        Layer to save
    output_path : str
        Path to the output raster file
    column : str, optional
        Column to rasterize (if saving from vector objects)
    nodata : int or float, optional
        No data value
    resolution : float, optional
        Cell size used when the layer has no grid of its own (default 10 units)

    Returns:
    --------
    value_map : dict or None
        Mapping of categorical values to the integer codes written, if any
    """
    if layer.raster is not None and column is None:
        if layer.nodata is not None:
            nodata = layer.nodata
        elif np.issubdtype(layer.raster.dtype, np.floating):
            # NaN already marks the missing cells of float grids
            nodata = np.nan
        write_raster(output_path, layer.raster, layer.transform, layer.crs, nodata)
        return None

    if layer.objects is None or column is None:
        raise LayerError("Layer must have either raster data or objects with a specified column")

    if column not in layer.objects.columns:
        raise LayerError(f"Column '{column}' not found in layer objects")

    objects = layer.objects
    col_values = objects[column]
    value_map = None
    if pd.api.types.is_numeric_dtype(col_values):
        shapes = [(geom, float(val)) for geom, val in zip(objects.geometry, col_values, strict=False)]
    else:
        unique_vals = col_values.dropna().unique()
        # 0 stays free for nodata
        value_map = {val: idx + 1 for idx, val in enumerate(unique_vals)}
        logger.info("Mapping categorical values: %s", value_map)
        shapes = [
            (geom, value_map[val]) for geom, val in zip(objects.geometry, col_values, strict=False) if val in value_map
        ]

    transform = layer.transform
    if layer.raster is not None:
        out_shape = layer.shape
    else:
        bounds = objects.total_bounds
        if resolution is None:
            resolution = abs(transform.a) if transform is not None else 10
        width = max(int(np.ceil((bounds[2] - bounds[0]) / resolution)), 1)
        height = max(int(np.ceil((bounds[3] - bounds[1]) / resolution)), 1)
        out_shape = (height, width)
        transform = from_origin(bounds[0], bounds[3], resolution, resolution)

    output = np.full(out_shape, nodata, dtype=np.float32)
    features.rasterize(shapes, out=output, transform=transform, fill=nodata)

    write_raster(output_path, output, transform, layer.crs, nodata)
    return value_map
