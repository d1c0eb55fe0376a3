# -*- coding: utf-8 -*-
"""Spatial statistics for layers in geocompy."""

import logging

import numpy as np

from ..core.crs import is_geographic

logger = logging.getLogger(__name__)


def _ensure_area(layer, area_column):
    if area_column not in layer.objects.columns:
        if is_geographic(layer.objects.crs):
            logger.warning("Layer '%s' uses a geographic CRS, areas are in square degrees", layer.name)
        layer.objects[area_column] = layer.objects.geometry.area


def attach_area_stats(layer, area_column="area", by_class=None):
    """Calculate area statistics for objects in a layer.

    Parameters:
    -----------
    layer : Layer
        Layer to calculate statistics for
    area_column : str
        Column containing area values, computed from the geometries when absent
    by_class : str, optional
        Column to group by (e.g., 'region_group')

    Returns:
    --------
    stats : dict
        Dictionary with area statistics
    """
    if layer.objects is None:
        return {}

    _ensure_area(layer, area_column)
    total_area = layer.objects[area_column].sum()

    if by_class and by_class in layer.objects.columns:
        class_areas = {}
        class_percentages = {}

        for class_value, group in layer.objects.groupby(by_class):
            class_area = group[area_column].sum()
            class_areas[class_value] = class_area
            class_percentages[class_value] = round(class_area / total_area * 100, 2) if total_area else 0.0

        return {
            "total_area": total_area,
            "class_areas": class_areas,
            "class_percentages": class_percentages,
        }

    areas = layer.objects[area_column]
    return {
        "total_area": total_area,
        "min_area": areas.min(),
        "max_area": areas.max(),
        "mean_area": areas.mean(),
        "median_area": areas.median(),
        "std_area": areas.std(),
    }


def attach_shape_metrics(layer, area_column="area"):
    """Calculate shape metrics for objects in a layer.

    Adds ``perimeter``, ``shape_index`` (1 for a circle) and ``compactness`` (Polsby-Popper) columns.

    Returns:
    --------
    metrics : dict
        Dictionary with shape metrics
    """
    if layer.objects is None:
        return {}

    layer.objects["perimeter"] = layer.objects.geometry.length
    _ensure_area(layer, area_column)

    area = layer.objects[area_column]
    perimeter = layer.objects["perimeter"]

    layer.objects["shape_index"] = (
        (perimeter / (2 * np.sqrt(np.pi * area))).replace([np.inf, -np.inf], np.nan).fillna(0)
    )
    layer.objects["compactness"] = (
        (4 * np.pi * area / (perimeter**2)).replace([np.inf, -np.inf], np.nan).fillna(0)
    )

    return {
        metric: {
            "mean": layer.objects[metric].mean(),
            "min": layer.objects[metric].min(),
            "max": layer.objects[metric].max(),
            "std": layer.objects[metric].std(),
        }
        for metric in ("shape_index", "compactness")
    }
