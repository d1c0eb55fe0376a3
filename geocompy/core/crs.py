# -*- coding: utf-8 -*-
"""Coordinate reference system checks shared by the binary vector and raster operations."""

import logging

from pyproj import CRS

from ..errors import CRSMismatchError, LayerError

logger = logging.getLogger(__name__)


def _crs_of(item):
    # Layer and GeoDataFrame both expose .crs
    crs = getattr(item, "crs", None)
    if crs is None:
        return None
    return CRS.from_user_input(crs)


def ensure_same_crs(*items):
    """Raise CRSMismatchError unless all layers or frames share one CRS.

    Inputs without a CRS only count as a mismatch when another input has one.

    Returns:
    --------
    crs : pyproj.CRS or None
        The common CRS
    """
    crs_list = [_crs_of(item) for item in items]
    known = [crs for crs in crs_list if crs is not None]

    if not known:
        return None

    if len(known) != len(crs_list):
        raise CRSMismatchError("Cannot combine inputs with and without a coordinate reference system")

    reference = known[0]
    for other in known[1:]:
        if not reference.equals(other):
            raise CRSMismatchError(f"CRS mismatch: {reference.to_string()} vs {other.to_string()}")

    return reference


def is_geographic(crs):
    """True when the CRS uses angular (longitude/latitude) units."""
    if crs is None:
        return False
    return CRS.from_user_input(crs).is_geographic


def to_crs(layer, crs, layer_manager=None, layer_name=None):
    """Reproject the vector objects of a layer.

    Parameters:
    -----------
    layer : Layer
        Layer with vector objects
    crs : str, int or pyproj.CRS
        Target coordinate reference system
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Reprojected layer
    """
    if layer.objects is None:
        raise LayerError(f"Layer '{layer.name}' has no vector objects to reproject")
    if layer.objects.crs is None:
        raise CRSMismatchError(f"Layer '{layer.name}' has no CRS, cannot reproject")

    target = CRS.from_user_input(crs)
    objects = layer.objects.to_crs(target)

    result_layer = layer.derive(
        layer_name or f"{layer.name}_{target.to_epsg() or 'reprojected'}",
        "geometry",
        objects=objects,
        metadata={"operation": "to_crs", "source_crs": layer.objects.crs.to_string(), "target_crs": target.to_string()},
    )
    logger.info("Reprojected '%s' to %s", layer.name, target.to_string())

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer
