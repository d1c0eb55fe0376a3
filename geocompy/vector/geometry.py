# -*- coding: utf-8 -*-
"""Implements geometry operations on vector layers: buffers, centroids, simplification, unions and overlays.

Every function takes a source layer and returns a new layer whose parent is the source, so that the chain of
operations applied to a dataset stays visible. The geometry work itself is done by GEOS through shapely and geopandas;
the functions here choose parameters, check coordinate reference systems and record what was done in the layer
metadata.
"""

import logging

import geopandas as gpd
import numpy as np
import shapely

from ..core.crs import ensure_same_crs, is_geographic
from ..errors import LayerError

logger = logging.getLogger(__name__)

OVERLAY_MODES = ("intersection", "union", "difference", "symmetric_difference", "identity")
PREDICATES = ("intersects", "within", "contains", "touches", "crosses", "overlaps", "disjoint")


def _require_objects(layer):
    if layer.objects is None:
        raise LayerError(f"Layer '{layer.name}' has no vector objects")
    return layer.objects


def _finish(result_layer, layer_manager):
    logger.info("Created layer %s", result_layer)
    if layer_manager:
        layer_manager.add_layer(result_layer)
    return result_layer


def count_vertices(geometries):
    """Total number of coordinates in a GeoSeries or sequence of geometries."""
    return int(np.sum(shapely.get_num_coordinates(np.asarray(list(geometries), dtype=object))))


def buffer_layer(source_layer, distance, resolution=16, layer_manager=None, layer_name=None):
    """Buffer every feature of a layer.

    Parameters:
    -----------
    source_layer : Layer
        Source layer with geometries to buffer
    distance : float
        Buffer distance in CRS units (negative values shrink polygons)
    resolution : int
        Number of segments used to approximate a quarter circle
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with buffered geometries
    """
    objects = _require_objects(source_layer).copy()

    if is_geographic(objects.crs):
        logger.warning(
            "Layer '%s' uses a geographic CRS, buffer distance %s is interpreted in degrees", source_layer.name, distance
        )

    objects["geometry"] = objects.geometry.buffer(distance, resolution=resolution)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_buffer",
        "geometry",
        objects=objects,
        metadata={"operation": "buffer", "distance": distance, "resolution": resolution},
    )
    return _finish(result_layer, layer_manager)


def centroid_layer(source_layer, layer_manager=None, layer_name=None):
    """Replace every geometry by its centroid, keeping the attributes."""
    objects = _require_objects(source_layer).copy()

    if is_geographic(objects.crs):
        logger.warning("Centroids of layer '%s' are computed on planar longitude/latitude", source_layer.name)

    objects["geometry"] = objects.geometry.centroid

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_centroids",
        "geometry",
        objects=objects,
        metadata={"operation": "centroid"},
    )
    return _finish(result_layer, layer_manager)


def simplify_layer(source_layer, tolerance, preserve_topology=True, layer_manager=None, layer_name=None):
    """Simplify geometries with the Douglas-Peucker algorithm.

    Parameters:
    -----------
    source_layer : Layer
        Source layer with geometries to simplify
    tolerance : float
        Maximum allowed displacement, in CRS units
    preserve_topology : bool
        Keep polygons valid and avoid self-intersections
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with simplified geometries; metadata holds the vertex counts before and after
    """
    if tolerance < 0:
        raise ValueError("Simplification tolerance must not be negative")

    objects = _require_objects(source_layer).copy()
    vertices_before = count_vertices(objects.geometry)

    objects["geometry"] = objects.geometry.simplify(tolerance, preserve_topology=preserve_topology)
    vertices_after = count_vertices(objects.geometry)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_simplified",
        "geometry",
        objects=objects,
        metadata={
            "operation": "simplify",
            "tolerance": tolerance,
            "preserve_topology": preserve_topology,
            "vertices_before": vertices_before,
            "vertices_after": vertices_after,
        },
    )
    logger.info("Simplified '%s': %d -> %d vertices", source_layer.name, vertices_before, vertices_after)
    return _finish(result_layer, layer_manager)


def union_layer(source_layer, layer_manager=None, layer_name=None):
    """Dissolve all features of a layer into a single geometry."""
    objects = _require_objects(source_layer)

    merged = gpd.GeoDataFrame(geometry=[objects.geometry.union_all()], crs=objects.crs)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_union",
        "geometry",
        objects=merged,
        metadata={"operation": "union", "features_merged": len(objects)},
    )
    return _finish(result_layer, layer_manager)


def overlay_layers(layer_a, layer_b, how="intersection", layer_manager=None, layer_name=None):
    """Overlay two polygon layers.

    Parameters:
    -----------
    layer_a, layer_b : Layer
        Layers to overlay; both must share one CRS
    how : str
        One of "intersection", "union", "difference", "symmetric_difference" or "identity"
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with the overlay result, attributes of both inputs where they apply
    """
    if how not in OVERLAY_MODES:
        raise ValueError(f"Unknown overlay mode '{how}', expected one of {OVERLAY_MODES}")

    objects_a = _require_objects(layer_a)
    objects_b = _require_objects(layer_b)
    ensure_same_crs(objects_a, objects_b)

    result = gpd.overlay(objects_a, objects_b, how=how, keep_geom_type=True)

    result_layer = layer_a.derive(
        layer_name or f"{layer_a.name}_{how}_{layer_b.name}",
        "geometry",
        objects=result,
        metadata={"operation": "overlay", "how": how, "other": layer_b.name},
    )
    return _finish(result_layer, layer_manager)


def clip_layer(source_layer, mask_layer, layer_manager=None, layer_name=None):
    """Clip the features of a layer to the extent of the mask layer's polygons."""
    objects = _require_objects(source_layer)
    mask = _require_objects(mask_layer)
    ensure_same_crs(objects, mask)

    clipped = gpd.clip(objects, mask)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_clipped",
        "geometry",
        objects=clipped,
        metadata={"operation": "clip", "mask": mask_layer.name},
    )
    return _finish(result_layer, layer_manager)


def spatial_filter(target_layer, selector_layer, predicate="intersects", layer_manager=None, layer_name=None):
    """Keep the features of a layer that satisfy a spatial predicate against a selector layer.

    A feature is kept when the predicate holds for at least one selector feature, except for "disjoint",
    which keeps features that touch none of them.

    Parameters:
    -----------
    target_layer : Layer
        Layer to subset
    selector_layer : Layer
        Layer whose geometries drive the selection
    predicate : str
        One of "intersects", "within", "contains", "touches", "crosses", "overlaps" or "disjoint"
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with the selected features
    """
    if predicate not in PREDICATES:
        raise ValueError(f"Unknown predicate '{predicate}', expected one of {PREDICATES}")

    objects = _require_objects(target_layer)
    selector = _require_objects(selector_layer)
    ensure_same_crs(objects, selector)

    join_predicate = "intersects" if predicate == "disjoint" else predicate
    joined = gpd.sjoin(objects, selector[["geometry"]], how="inner", predicate=join_predicate)
    hit = objects.index.isin(joined.index.unique())
    if predicate == "disjoint":
        hit = ~hit

    selected = objects[hit].copy()

    result_layer = target_layer.derive(
        layer_name or f"{target_layer.name}_{predicate}_{selector_layer.name}",
        "geometry",
        objects=selected,
        metadata={"operation": "spatial_filter", "predicate": predicate, "selector": selector_layer.name},
    )
    return _finish(result_layer, layer_manager)


def select_by_area(
    source_layer,
    min_area=None,
    max_area=None,
    area_column="area",
    layer_manager=None,
    layer_name=None,
):
    """Select features based on area.

    Parameters:
    -----------
    source_layer : Layer
        Source layer with features to filter
    min_area : float, optional
        Minimum area threshold
    max_area : float, optional
        Maximum area threshold
    area_column : str
        Column containing area values, computed from the geometries when absent
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with filtered features
    """
    objects = _require_objects(source_layer).copy()

    if area_column not in objects.columns:
        objects[area_column] = objects.geometry.area

    if min_area is not None:
        objects = objects[objects[area_column] >= min_area]

    if max_area is not None:
        objects = objects[objects[area_column] <= max_area]

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_area_filtered",
        "geometry",
        objects=objects,
        metadata={
            "operation": "select_by_area",
            "min_area": min_area,
            "max_area": max_area,
            "area_column": area_column,
        },
    )
    return _finish(result_layer, layer_manager)
