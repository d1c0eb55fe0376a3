# -*- coding: utf-8 -*-
"""Attribute operations on vector layers: expression filters, table joins and aggregations.

Joins and aggregations come in two flavours. Attribute joins and group aggregations match rows on key columns,
spatial joins and spatial aggregations match them on geometry. Both keep the result as a layer derived from the
input, with the parameters of the operation stored in its metadata.
"""

import logging

import geopandas as gpd
import numexpr as ne
import numpy as np
import pandas as pd

from ..core.crs import ensure_same_crs
from ..errors import ExpressionError, LayerError

logger = logging.getLogger(__name__)


def _require_objects(layer):
    if layer.objects is None:
        raise LayerError(f"Layer '{layer.name}' has no vector objects")
    return layer.objects


def _expression_columns(objects):
    local_dict = {}
    for col in objects.columns:
        if col == objects.geometry.name:
            continue
        series = objects[col]
        if pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(series):
            local_dict[col] = series.to_numpy()
        else:
            # numexpr only compares byte strings
            local_dict[col] = series.astype(str).str.encode("utf-8").to_numpy().astype("S")
    return local_dict


def filter_by_expression(source_layer, expression, layer_manager=None, layer_name=None):
    """Keep the features for which a boolean expression holds.

    Parameters:
    -----------
    source_layer : Layer
        Layer with attribute columns
    expression : str
        numexpr expression over column names (e.g. "(population > 1000) & (area_km2 < 50)").
        String columns are compared against byte literals, e.g. ``name == b'North'``.
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with the matching features
    """
    objects = _require_objects(source_layer)

    try:
        mask = ne.evaluate(expression, local_dict=_expression_columns(objects))
    except Exception as e:
        raise ExpressionError(f"Error evaluating expression '{expression}': {str(e)}") from e

    mask = np.broadcast_to(np.asarray(mask, dtype=bool), (len(objects),))
    filtered = objects[mask].copy()

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_filtered",
        "vector",
        objects=filtered,
        metadata={"operation": "filter_by_expression", "expression": expression, "kept": int(mask.sum())},
    )
    logger.info("Expression '%s' kept %d of %d features", expression, int(mask.sum()), len(objects))

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def attribute_join(source_layer, table, on=None, left_on=None, right_on=None, how="left", layer_manager=None, layer_name=None):
    """Join a plain table to a vector layer on key columns.

    Parameters:
    -----------
    source_layer : Layer
        Layer with vector objects
    table : pandas.DataFrame
        Table to join, without geometry
    on : str or list, optional
        Key column(s) present in both inputs
    left_on, right_on : str or list, optional
        Key column(s) when their names differ
    how : str
        "left" keeps every feature, "inner" keeps only matched ones
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with the joined attributes; metadata records how many features found no match
    """
    if how not in ("left", "inner"):
        raise ValueError("Attribute joins support how='left' or how='inner'")

    objects = _require_objects(source_layer)

    if isinstance(table, gpd.GeoDataFrame):
        table = pd.DataFrame(table.drop(columns=table.geometry.name))

    merged = objects.merge(table, on=on, left_on=left_on, right_on=right_on, how=how, indicator=True)
    unmatched = int((merged["_merge"] == "left_only").sum())
    merged = merged.drop(columns="_merge")

    if unmatched:
        logger.warning("%d feature(s) of '%s' found no match in the joined table", unmatched, source_layer.name)

    joined = gpd.GeoDataFrame(merged, geometry=objects.geometry.name, crs=objects.crs)

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_joined",
        "join",
        objects=joined,
        metadata={
            "operation": "attribute_join",
            "on": on,
            "left_on": left_on,
            "right_on": right_on,
            "how": how,
            "unmatched": unmatched,
        },
    )

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def aggregate_by(source_layer, by, aggfunc="sum", columns=None, layer_manager=None, layer_name=None):
    """Dissolve features by group and aggregate their attributes.

    Parameters:
    -----------
    source_layer : Layer
        Layer with vector objects
    by : str or list
        Grouping column(s)
    aggfunc : str, callable or dict
        Aggregation applied to the attribute columns
    columns : list, optional
        Columns to aggregate; defaults to the numeric ones
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        One feature per group with the merged geometry and a ``n_features`` count
    """
    objects = _require_objects(source_layer)
    group_cols = [by] if isinstance(by, str) else list(by)

    missing = [col for col in group_cols if col not in objects.columns]
    if missing:
        raise LayerError(f"Grouping column(s) {missing} not found in layer '{source_layer.name}'")

    if columns is None:
        columns = [
            col
            for col in objects.select_dtypes(include="number").columns
            if col not in group_cols
        ]

    subset = objects[group_cols + list(columns) + [objects.geometry.name]]
    dissolved = subset.dissolve(by=group_cols, aggfunc=aggfunc)
    counts = objects.groupby(group_cols).size()
    dissolved["n_features"] = counts.reindex(dissolved.index).to_numpy()
    dissolved = dissolved.reset_index()

    result_layer = source_layer.derive(
        layer_name or f"{source_layer.name}_by_{'_'.join(group_cols)}",
        "aggregation",
        objects=dissolved,
        metadata={
            "operation": "aggregate_by",
            "by": group_cols,
            "aggfunc": aggfunc if isinstance(aggfunc, str) else getattr(aggfunc, "__name__", repr(aggfunc)),
            "columns": list(columns),
        },
    )

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def spatial_join(left_layer, right_layer, predicate="intersects", how="left", layer_manager=None, layer_name=None):
    """Attach the attributes of the right layer to the features of the left layer they relate to.

    A left feature matching several right features appears once per match.
    """
    left = _require_objects(left_layer)
    right = _require_objects(right_layer)
    ensure_same_crs(left, right)

    joined = gpd.sjoin(left, right, how=how, predicate=predicate)
    joined = joined.drop(columns=[col for col in ("index_right", "index_left") if col in joined.columns])

    result_layer = left_layer.derive(
        layer_name or f"{left_layer.name}_sjoin_{right_layer.name}",
        "join",
        objects=joined,
        metadata={"operation": "spatial_join", "predicate": predicate, "how": how, "other": right_layer.name},
    )

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer


def spatial_aggregate(
    points_layer, polygons_layer, column, aggfunc="mean", id_column=None, layer_manager=None, layer_name=None
):
    """Summarise the values of the points falling in each polygon.

    Parameters:
    -----------
    points_layer : Layer
        Layer with the features carrying ``column``
    polygons_layer : Layer
        Layer with the zones to aggregate into
    column : str
        Column of the points layer to summarise
    aggfunc : str or callable
        Aggregation applied per polygon ("mean", "sum", "count", ...)
    id_column : str, optional
        Polygon column with unique identifiers; the result is indexed by it
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        The polygons with ``column`` holding the aggregate (NaN, or 0 for counts, where no point falls)
        and ``n_points`` holding the number of points
    """
    points = _require_objects(points_layer)
    polygons = _require_objects(polygons_layer)
    ensure_same_crs(points, polygons)

    if column not in points.columns:
        raise LayerError(f"Column '{column}' not found in layer '{points_layer.name}'")

    if id_column is not None:
        if id_column not in polygons.columns:
            raise LayerError(f"Column '{id_column}' not found in layer '{polygons_layer.name}'")
        if polygons[id_column].duplicated().any():
            raise LayerError(f"Column '{id_column}' of layer '{polygons_layer.name}' has duplicate values")

    # sjoin names the right index column after the index name, so join against an unnamed one
    zones = polygons[[polygons.geometry.name]].rename_axis(None)
    joined = gpd.sjoin(points[[column, points.geometry.name]], zones, how="inner", predicate="intersects")
    grouped = joined.groupby("index_right")[column]
    summary = grouped.agg(aggfunc)
    counts = grouped.size()

    result = polygons.copy()
    result[column] = result.index.map(summary)
    result["n_points"] = result.index.map(counts).fillna(0).astype(int)
    if aggfunc in ("count", "size", "sum"):
        result[column] = result[column].fillna(0)
    if id_column is not None:
        result = result.set_index(id_column)

    result_layer = polygons_layer.derive(
        layer_name or f"{polygons_layer.name}_{column}_{aggfunc if isinstance(aggfunc, str) else 'agg'}",
        "aggregation",
        objects=result,
        metadata={
            "operation": "spatial_aggregate",
            "column": column,
            "aggfunc": aggfunc,
            "points": points_layer.name,
            "id_column": id_column,
        },
    )
    logger.info("Aggregated %d point(s) of '%s' into %d polygon(s)", len(joined), points_layer.name, len(polygons))

    if layer_manager:
        layer_manager.add_layer(result_layer)

    return result_layer
