# -*- coding: utf-8 -*-
"""Test suite for the geocompy walkthrough.

Runs the complete sequence on the bundled sample data: geometry operations, joins and aggregations, raster
algebra, maps and exports, then checks the generated outputs.
"""

import json
import os

import pandas as pd
import rasterio

from geocompy import LayerManager, WorkflowConfig, read_vector, run_walkthrough


def check_geojson_features(filepath):
    """Check if the GeoJSON file contains features."""
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)
    assert data.get("type") == "FeatureCollection", "Invalid GeoJSON: wrong type."
    features = data.get("features")
    assert isinstance(features, list), "GeoJSON features is not a list."
    assert len(features) > 0, f"No features found in {filepath}."


def test_full_walkthrough(tmp_path):
    """Run every step and check what was written."""
    output_dir = tmp_path / "output"
    manager = LayerManager()
    config = WorkflowConfig(output_dir=str(output_dir), sample_points=30)

    outputs = run_walkthrough(config, manager=manager)

    for name, path in outputs.items():
        assert os.path.exists(path), f"Output '{name}' was not written to {path}."

    for key in ("regions_vector", "aggregated_vector", "reclass_polygons"):
        check_geojson_features(outputs[key])

    joined = read_vector(outputs["regions_vector"])
    assert "gdp" in joined.columns, "Attribute join did not add the gdp column."

    point_means = read_vector(outputs["aggregated_vector"])
    assert point_means["n_points"].sum() == 30, "Every sample point should fall in one region."

    with rasterio.open(outputs["calc_raster"]) as src:
        assert src.shape == (6, 6)

    zonal = pd.read_csv(outputs["zonal_table"], index_col=0)
    assert set(zonal.index) <= {"clay", "silt", "sand"}

    with open(outputs["web_map"], "r", encoding="utf-8") as f:
        assert "leaflet" in f.read().lower()

    with open(outputs["summary"], "r", encoding="utf-8") as f:
        summary = json.load(f)
    assert summary["regions_simplified"]["operation"] == "simplify"

    available_layers = manager.get_layer_names()
    assert len(available_layers) >= 15, "Expected every step to register its layer."
    assert "regions_joined" in available_layers
