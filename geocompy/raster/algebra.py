# -*- coding: utf-8 -*-
"""Raster algebra: local, focal, zonal and global operations on raster layers.

Local operations work cell by cell (expressions, reclassification), focal operations look at a moving window around
each cell, zonal operations summarise one raster within the zones of another, and global operations reduce a whole
raster to one value. Nodata cells are carried as NaN throughout, so every result is a float grid.
"""

import logging
import warnings

import geopandas as gpd
import numexpr as ne
import numpy as np
import pandas as pd
from affine import Affine
from rasterio import features, windows
from rasterio.transform import rowcol
from scipy import ndimage
from shapely.geometry import shape
from skimage.measure import block_reduce

from ..core.crs import ensure_same_crs
from ..core.layer import Layer
from ..errors import ExpressionError, LayerError

logger = logging.getLogger(__name__)

FOCAL_FUNCTIONS = {
    "mean": np.mean,
    "sum": np.sum,
    "min": np.min,
    "max": np.max,
    "median": np.median,
    "std": np.std,
}

NAN_FUNCTIONS = {
    "mean": np.nanmean,
    "sum": np.nansum,
    "min": np.nanmin,
    "max": np.nanmax,
    "median": np.nanmedian,
    "std": np.nanstd,
}


def _resolve(func, table):
    if callable(func):
        return func
    if func not in table:
        raise ValueError(f"Unknown function '{func}', expected one of {sorted(table)} or a callable")
    return table[func]


def _func_name(func):
    return func if isinstance(func, str) else getattr(func, "__name__", "value")


def _require_raster(layer):
    if layer.raster is None:
        raise LayerError(f"Layer '{layer.name}' has no raster data")


def _check_aligned(layers):
    reference = layers[0]
    for other in layers[1:]:
        if other.shape != reference.shape:
            raise LayerError(f"Raster '{other.name}' has shape {other.shape}, expected {reference.shape}")
        if other.transform is not None and reference.transform is not None:
            if not other.transform.almost_equals(reference.transform):
                raise LayerError(f"Raster '{other.name}' is not on the grid of '{reference.name}'")
    ensure_same_crs(*layers)


def raster_calc(expression, layers, layer_manager=None, layer_name=None):
    """Evaluate a cell-wise expression over one or more aligned rasters.

    Parameters:
    -----------
    expression : str
        numexpr expression, e.g. "(elev - 10) * 2" or "where(elev > 20, 1, 0)"
    layers : dict
        Mapping of the names used in the expression to raster layers on the same grid
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with the float result, NaN wherever an input is nodata
    """
    if not layers:
        raise ValueError("raster_calc needs at least one input raster")

    inputs = list(layers.values())
    for layer in inputs:
        _require_raster(layer)
    _check_aligned(inputs)

    local_dict = {name: layer.band(1) for name, layer in layers.items()}

    try:
        result = ne.evaluate(expression, local_dict=local_dict)
    except Exception as e:
        raise ExpressionError(f"Error evaluating raster expression '{expression}': {str(e)}") from e

    result = np.asarray(result, dtype=float)
    invalid = np.zeros(inputs[0].shape, dtype=bool)
    for values in local_dict.values():
        invalid |= np.isnan(values)
    result = np.where(invalid, np.nan, result)

    source = inputs[0]
    result_layer = source.derive(
        layer_name or f"{source.name}_calc",
        "raster_algebra",
        raster=result,
        metadata={"operation": "raster_calc", "expression": expression, "inputs": list(layers)},
    )

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def reclassify(source_layer, rules, right_closed=True, others=None, layer_manager=None, layer_name=None):
    """Reclassify raster values with a table of (from, to, value) rules.

    Parameters:
    -----------
    source_layer : Layer
        Raster layer to reclassify
    rules : sequence of (from, to, value)
        Intervals are (from, to] when ``right_closed``, [from, to) otherwise; the first matching rule wins
    right_closed : bool
        Which side of the intervals is closed
    others : float, optional
        Value for cells no rule matches, NaN when None
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Reclassified raster
    """
    _require_raster(source_layer)
    values = source_layer.band(1)

    result = np.full(values.shape, np.nan if others is None else float(others))
    assigned = np.zeros(values.shape, dtype=bool)

    for rule in rules:
        if len(rule) != 3:
            raise ValueError(f"Reclassification rule {rule!r} must be a (from, to, value) triple")
        low, high, new_value = rule
        if high < low:
            raise ValueError(f"Reclassification rule {rule!r} has from > to")
        if right_closed:
            hit = (values > low) & (values <= high)
        else:
            hit = (values >= low) & (values < high)
        hit &= ~assigned
        result[hit] = new_value
        assigned |= hit

    result[np.isnan(values)] = np.nan

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_reclassified",
        "raster_algebra",
        raster=result,
        metadata={
            "operation": "reclassify",
            "rules": [tuple(rule) for rule in rules],
            "right_closed": right_closed,
            "others": others,
        },
    )

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def focal(source_layer, size=3, func="mean", layer_manager=None, layer_name=None):
    """Apply a moving-window statistic.

    Cells whose window reaches outside the raster, or covers a nodata cell, become NaN.

    Parameters:
    -----------
    source_layer : Layer
        Raster layer
    size : int
        Odd window width in cells
    func : str or callable
        "mean", "sum", "min", "max", "median", "std" or a function reducing a 1-D array
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with the focal statistic
    """
    _require_raster(source_layer)
    if size < 1 or size % 2 == 0:
        raise ValueError("Focal window size must be a positive odd integer")

    function = _resolve(func, FOCAL_FUNCTIONS)
    values = source_layer.band(1)

    result = ndimage.generic_filter(values, function, size=size, mode="constant", cval=np.nan)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_focal_{_func_name(func)}",
        "raster_algebra",
        raster=result,
        metadata={"operation": "focal", "size": size, "func": _func_name(func)},
    )

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def zonal(source_layer, zones_layer, func="mean"):
    """Summarise a raster within the zones of a second raster on the same grid.

    Parameters:
    -----------
    source_layer : Layer
        Raster with the values to summarise
    zones_layer : Layer
        Raster of zone codes; ``metadata["categories"]`` (code -> label) names the zones when present
    func : str or callable
        Aggregation passed to pandas

    Returns:
    --------
    table : pandas.DataFrame
        One row per zone, indexed by zone code or label
    """
    _require_raster(source_layer)
    _require_raster(zones_layer)
    _check_aligned([source_layer, zones_layer])

    frame = pd.DataFrame({"zone": zones_layer.band(1).ravel(), "value": source_layer.band(1).ravel()}).dropna()
    table = frame.groupby("zone")["value"].agg(func).to_frame(_func_name(func))

    categories = zones_layer.metadata.get("categories")
    if categories:
        table.index = [categories.get(int(code), code) for code in table.index]
    table.index.name = "zone"

    return table


def global_stat(source_layer, func="mean"):
    """Reduce a whole raster to one value, ignoring nodata."""
    _require_raster(source_layer)
    function = _resolve(func, NAN_FUNCTIONS)
    return float(function(source_layer.band(1)))


def extract_values(source_layer, points, band=1):
    """Read raster values at point locations.

    Parameters:
    -----------
    source_layer : Layer
        Raster layer
    points : Layer or geopandas.GeoDataFrame
        Point features in the raster's CRS
    band : int
        Band to read

    Returns:
    --------
    values : pandas.Series
        One value per point, indexed like the points; NaN outside the raster
    """
    _require_raster(source_layer)
    gdf = points.objects if isinstance(points, Layer) else points
    ensure_same_crs(source_layer, gdf)

    values = source_layer.band(band)
    rows, cols = rowcol(source_layer.transform, gdf.geometry.x.to_numpy(), gdf.geometry.y.to_numpy())
    rows = np.asarray(rows)
    cols = np.asarray(cols)

    n_rows, n_cols = values.shape
    inside = (rows >= 0) & (rows < n_rows) & (cols >= 0) & (cols < n_cols)

    extracted = np.full(len(gdf), np.nan)
    extracted[inside] = values[rows[inside], cols[inside]]

    return pd.Series(extracted, index=gdf.index, name=source_layer.name)


def mask_raster(source_layer, mask_layer, crop=False, invert=False, layer_manager=None, layer_name=None):
    """Set the cells outside (or inside, with ``invert``) the mask polygons to NaN.

    Parameters:
    -----------
    source_layer : Layer
        Raster layer
    mask_layer : Layer
        Vector layer with the mask polygons
    crop : bool
        Also shrink the grid to the rows and columns that keep data
    invert : bool
        Blank the cells inside the polygons instead
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Masked raster
    """
    _require_raster(source_layer)
    if mask_layer.objects is None:
        raise LayerError(f"Layer '{mask_layer.name}' has no vector objects")
    ensure_same_crs(source_layer, mask_layer.objects)

    values = source_layer.band(1)
    outside = features.geometry_mask(
        list(mask_layer.objects.geometry), out_shape=values.shape, transform=source_layer.transform
    )
    blank = ~outside if invert else outside
    values[blank] = np.nan

    transform = source_layer.transform
    if crop:
        keep = ~np.isnan(values)
        if not keep.any():
            raise LayerError(f"Mask '{mask_layer.name}' leaves no cells of '{source_layer.name}'")
        row_idx = np.where(keep.any(axis=1))[0]
        col_idx = np.where(keep.any(axis=0))[0]
        window = windows.Window(
            col_idx[0], row_idx[0], col_idx[-1] - col_idx[0] + 1, row_idx[-1] - row_idx[0] + 1
        )
        values = values[row_idx[0] : row_idx[-1] + 1, col_idx[0] : col_idx[-1] + 1]
        transform = windows.transform(window, transform)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_masked",
        "raster_algebra",
        raster=values,
        metadata={"operation": "mask", "mask": mask_layer.name, "crop": crop, "invert": invert},
    )
    result_layer.transform = transform

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def aggregate_raster(source_layer, fact=2, func="mean", layer_manager=None, layer_name=None):
    """Coarsen a raster by combining blocks of ``fact`` x ``fact`` cells.

    Partial blocks at the right and bottom edges are summarised from the cells they hold.
    """
    _require_raster(source_layer)
    if fact < 1:
        raise ValueError("Aggregation factor must be at least 1")
    function = _resolve(func, NAN_FUNCTIONS)

    with warnings.catch_warnings():
        # all-NaN blocks
        warnings.simplefilter("ignore", category=RuntimeWarning)
        result = block_reduce(source_layer.band(1), block_size=(fact, fact), func=function, cval=np.nan)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_aggregated",
        "raster_algebra",
        raster=result,
        metadata={"operation": "aggregate", "fact": fact, "func": _func_name(func)},
    )
    result_layer.transform = source_layer.transform * Affine.scale(fact)

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def disaggregate_raster(source_layer, fact=2, layer_manager=None, layer_name=None):
    """Refine a raster by splitting every cell into ``fact`` x ``fact`` cells of the same value."""
    _require_raster(source_layer)
    if fact < 1:
        raise ValueError("Disaggregation factor must be at least 1")

    result = np.repeat(np.repeat(source_layer.band(1), fact, axis=0), fact, axis=1)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_disaggregated",
        "raster_algebra",
        raster=result,
        metadata={"operation": "disaggregate", "fact": fact},
    )
    result_layer.transform = source_layer.transform * Affine.scale(1 / fact)

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def polygonize(source_layer, band=1, layer_manager=None, layer_name=None):
    """Turn connected cells of equal value into polygons with a ``value`` column."""
    _require_raster(source_layer)
    values = source_layer.band(band).astype(np.float32)
    valid = ~np.isnan(values)

    records = [
        {"value": float(value), "geometry": shape(geom)}
        for geom, value in features.shapes(values, mask=valid, transform=source_layer.transform)
    ]
    gdf = gpd.GeoDataFrame(records, columns=["value", "geometry"], geometry="geometry", crs=source_layer.crs)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_polygons",
        "vector",
        objects=gdf,
        metadata={"operation": "polygonize", "band": band},
    )

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer
