# -*- coding: utf-8 -*-
"""Moves raster layers between grids and coordinate reference systems.

Both functions warp through GDAL via rasterio; cells without a source value come back as NaN.
"""

import logging

import numpy as np
from rasterio.crs import CRS
from rasterio.enums import Resampling
from rasterio.transform import array_bounds
from rasterio.warp import calculate_default_transform, reproject

from ..errors import CRSMismatchError, LayerError

logger = logging.getLogger(__name__)


def _resampling(method):
    try:
        return Resampling[method]
    except KeyError as e:
        raise ValueError(f"Unknown resampling method '{method}'") from e


def resample_raster(source_layer, target_layer, method="bilinear", layer_manager=None, layer_name=None):
    """Resample a raster onto the grid of another raster layer.

    Parameters:
    -----------
    source_layer : Layer
        Raster to resample
    target_layer : Layer
        Raster whose grid (shape, transform, CRS) the result adopts
    method : str
        rasterio resampling method name ("nearest", "bilinear", "cubic", "average", ...)
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Resampled raster on the target grid
    """
    if source_layer.raster is None or target_layer.raster is None:
        raise LayerError("Both layers need raster data to resample")

    destination = np.full(target_layer.shape, np.nan)
    reproject(
        source=source_layer.band(1),
        destination=destination,
        src_transform=source_layer.transform,
        src_crs=source_layer.crs,
        src_nodata=np.nan,
        dst_transform=target_layer.transform,
        dst_crs=target_layer.crs,
        dst_nodata=np.nan,
        resampling=_resampling(method),
    )

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_resampled",
        "raster_algebra",
        raster=destination,
        metadata={"operation": "resample", "method": method, "target": target_layer.name},
    )
    result_layer.transform = target_layer.transform
    result_layer.crs = target_layer.crs

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def reproject_raster(source_layer, dst_crs, resolution=None, method="nearest", layer_manager=None, layer_name=None):
    """Reproject a raster to another CRS.

    Parameters:
    -----------
    source_layer : Layer
        Raster to reproject
    dst_crs : str, int or CRS
        Target coordinate reference system
    resolution : float or tuple, optional
        Target cell size, derived by GDAL when omitted
    method : str
        rasterio resampling method name; use "nearest" for categorical rasters
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Reprojected raster
    """
    if source_layer.raster is None:
        raise LayerError(f"Layer '{source_layer.name}' has no raster data")
    if source_layer.crs is None:
        raise CRSMismatchError(f"Layer '{source_layer.name}' has no CRS, cannot reproject")

    rows, cols = source_layer.shape
    bounds = array_bounds(rows, cols, source_layer.transform)
    kwargs = {"resolution": resolution} if resolution is not None else {}
    dst_transform, width, height = calculate_default_transform(
        source_layer.crs, dst_crs, cols, rows, *bounds, **kwargs
    )

    destination = np.full((height, width), np.nan)
    reproject(
        source=source_layer.band(1),
        destination=destination,
        src_transform=source_layer.transform,
        src_crs=source_layer.crs,
        src_nodata=np.nan,
        dst_transform=dst_transform,
        dst_crs=dst_crs,
        dst_nodata=np.nan,
        resampling=_resampling(method),
    )

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_reprojected",
        "raster_algebra",
        raster=destination,
        metadata={"operation": "reproject", "dst_crs": str(dst_crs), "method": method},
    )
    result_layer.transform = dst_transform
    result_layer.crs = CRS.from_user_input(dst_crs)
    logger.info("Reprojected raster '%s' to %s (%dx%d)", source_layer.name, dst_crs, height, width)

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer
