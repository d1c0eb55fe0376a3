# -*- coding: utf-8 -*-
"""Tests for static maps, charts and interactive web maps."""

import folium
import matplotlib.figure
import numpy as np
import pytest

from geocompy import (
    LayerError,
    attach_area_stats,
    choropleth_breaks,
    interactive_map,
    plot_choropleth,
    plot_comparison,
    plot_histogram,
    plot_layer,
    plot_raster,
    plot_statistics,
    simplify_layer,
)
from geocompy.viz.maps import _classify_values


def test_equal_interval_breaks():
    edges = choropleth_breaks(np.arange(11), scheme="equal_interval", k=5)
    np.testing.assert_allclose(edges, [0, 2, 4, 6, 8, 10])


def test_quantile_breaks_collapse_ties():
    edges = choropleth_breaks([1, 1, 1, 1, 5, np.nan], scheme="quantiles", k=4)
    assert list(edges) == [1, 5]


def test_breaks_reject_bad_input():
    with pytest.raises(ValueError):
        choropleth_breaks([1, 2, 3], scheme="jenks")
    with pytest.raises(ValueError):
        choropleth_breaks([np.nan], scheme="quantiles")


def test_classify_values_includes_lowest_edge():
    edges = np.array([0.0, 2.0, 4.0, 6.0])
    np.testing.assert_array_equal(_classify_values([0, 2, 2.5, 6], edges), [0, 0, 1, 2])


def test_plot_choropleth_records_breaks(regions, tmp_path):
    fig = plot_choropleth(regions, "population", scheme="equal_interval", k=2)

    assert isinstance(fig, matplotlib.figure.Figure)
    assert regions.metadata["choropleth_breaks"] == [4100.0, 13550.0, 23000.0]
    fig.savefig(tmp_path / "choropleth.png")
    assert (tmp_path / "choropleth.png").exists()


def test_plot_choropleth_manual_breaks(regions):
    plot_choropleth(regions, "population", breaks=[0, 10000, 30000])
    assert regions.metadata["choropleth_breaks"] == [0.0, 10000.0, 30000.0]


def test_plot_choropleth_unknown_column(regions):
    with pytest.raises(LayerError):
        plot_choropleth(regions, "gdp")


def test_plot_layer_vector_and_raster(regions, elev):
    fig = plot_layer(regions, attribute="population", title="Population")
    assert fig.axes[0].get_title() == "Population"

    fig = plot_layer(elev)
    assert fig.axes[0].get_title() == "elev"

    with pytest.raises(LayerError):
        plot_layer(regions, attribute="missing")


def test_plot_raster_categorical_legend(grain):
    fig = plot_raster(grain, categorical=True)
    labels = [text.get_text() for text in fig.axes[0].get_legend().get_texts()]
    assert set(labels) <= {"clay", "silt", "sand"}
    assert labels


def test_plot_raster_requires_raster(regions):
    with pytest.raises(LayerError):
        plot_raster(regions)


def test_plot_comparison(regions):
    simplified = simplify_layer(regions, 2500)
    fig = plot_comparison(regions, simplified, title="Simplification")
    assert len(fig.axes) == 2
    assert fig.axes[0].get_title().startswith("Before")


def test_charts(regions, elev):
    fig = plot_histogram(regions, "population", bins=4, by_class="region_group")
    assert fig.axes[0].get_title() == "Histogram of population"

    fig = plot_histogram(elev)
    assert fig.axes[0].get_xlabel() == "Cell value"

    stats = attach_area_stats(regions, by_class="region_group")
    assert isinstance(plot_statistics(stats, kind="pie"), matplotlib.figure.Figure)
    assert isinstance(plot_statistics({"a": 1.0, "b": {"c": 2.0}}, kind="bar"), matplotlib.figure.Figure)


def test_histogram_requires_data(regions):
    with pytest.raises(LayerError):
        plot_histogram(regions)


def test_interactive_map_writes_html(regions, elev, tmp_path):
    path = tmp_path / "maps" / "index.html"
    fmap = interactive_map([regions, elev], column="population", tooltip=["name", "population"], path=str(path))

    assert isinstance(fmap, folium.Map)
    html = path.read_text(encoding="utf-8")
    assert "leaflet" in html.lower()
    assert "Alder" in html


def test_interactive_map_single_layer_without_saving(regions):
    fmap = interactive_map(regions, zoom_start=8)
    assert isinstance(fmap, folium.Map)
    assert 44 < fmap.location[0] < 46


def test_interactive_map_needs_layers():
    with pytest.raises(ValueError):
        interactive_map([])
