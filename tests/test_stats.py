# -*- coding: utf-8 -*-
"""Tests for the attribute statistics attached to layers."""

import pytest

from geocompy import LayerError, attach_basic_stats, attach_class_distribution, attach_count, summarize_layers


def test_basic_stats_with_prefix(regions):
    regions.attach_function(attach_basic_stats, name="population_stats", column="population", prefix="pop")
    stats = regions.get_function_result("population_stats")

    assert stats["pop_min"] == 4100
    assert stats["pop_max"] == 23000
    assert stats["pop_sum"] == 47600
    assert stats["pop_count"] == 4
    assert stats["pop_percentile_50"] == pytest.approx(10250)


def test_basic_stats_unknown_column(regions):
    with pytest.raises(LayerError):
        attach_basic_stats(regions, "gdp")


def test_count_by_class(regions, elev):
    assert attach_count(regions) == 4
    assert attach_count(regions, class_column="region_group", class_value="north") == 2
    assert attach_count(elev) == 0


def test_class_distribution(regions):
    distribution = attach_class_distribution(regions, class_column="region_group")
    assert distribution["counts"] == {"north": 2, "south": 2}
    assert distribution["percentages"] == {"north": 50.0, "south": 50.0}
    assert distribution["total"] == 4

    assert attach_class_distribution(regions, class_column="missing") == {}


def test_summarize_layers(manager, regions, elev, tmp_path):
    manager.add_layer(regions)
    manager.add_layer(elev)

    summary = summarize_layers(manager, output_file=str(tmp_path / "summary.json"))

    assert summary["regions"]["object_count"] == 4
    assert summary["regions"]["geometry_types"] == ["Polygon"]
    assert summary["elev"]["raster_shape"] == [6, 6]
    assert (tmp_path / "summary.json").exists()
