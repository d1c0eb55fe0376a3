# -*- coding: utf-8 -*-
"""Helpers , Aren't they useful ?"""

import json
import logging
import os

logger = logging.getLogger(__name__)


def summarize_layers(layer_manager, output_file=None):
    """Calculate a summary for all layers in a layer manager.

    Parameters:
    -----------
    layer_manager : LayerManager
        Layer manager containing layers
    output_file : str, optional
        Path to save the summary to (as JSON)

    Returns:
    --------
    summary : dict
        Dictionary keyed by layer name
    """
    summary = {}

    for layer in layer_manager.layers.values():
        layer_summary = {
            "type": layer.type,
            "created_at": str(layer.created_at),
            "parent": layer.parent.name if layer.parent else None,
            "crs": str(layer.crs) if layer.crs is not None else None,
            "operation": layer.metadata.get("operation"),
        }

        if layer.objects is not None:
            layer_summary["object_count"] = len(layer.objects)
            layer_summary["geometry_types"] = sorted(str(t) for t in layer.objects.geom_type.dropna().unique())

        if layer.raster is not None:
            rows, cols = layer.shape
            layer_summary["raster_shape"] = [rows, cols]

        if layer.attached_functions:
            layer_summary["functions"] = list(layer.attached_functions.keys())

        summary[layer.name] = layer_summary

    if output_file:
        directory = os.path.dirname(output_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output_file, "w") as f:
            json.dump(summary, f, indent=2, default=str)
        logger.info("Wrote layer summary to %s", output_file)

    return summary
