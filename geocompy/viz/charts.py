# -*- coding: utf-8 -*-
"""Visualization functions for plotting histograms and statistics."""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from ..errors import LayerError


def plot_histogram(layer, attribute=None, bins=20, figsize=(10, 6), by_class=None):
    """Plot a histogram of attribute values, or of the raster cells when no attribute is given.

    Parameters:
    -----------
    layer : Layer
        Layer containing data
    attribute : str, optional
        Attribute to plot
    bins : int
        Number of bins
    figsize : tuple
        Figure size
    by_class : str, optional
        Column to group by (e.g., 'region_group')

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    if attribute is None:
        if layer.raster is None:
            raise LayerError(f"Layer '{layer.name}' has no raster data and no attribute was given")
        values = layer.band(1).ravel()
        sns.histplot(values[~np.isnan(values)], bins=bins, ax=ax)
        ax.set_title(f"Histogram of {layer.name}")
        ax.set_xlabel("Cell value")
        ax.set_ylabel("Count")
        return fig

    if layer.objects is None or attribute not in layer.objects.columns:
        raise LayerError(f"Attribute '{attribute}' not found in layer objects")

    if by_class and by_class in layer.objects.columns:
        data = layer.objects[[attribute, by_class]].copy()

        for class_value, group in data.groupby(by_class):
            sns.histplot(group[attribute], bins=bins, alpha=0.6, label=str(class_value), ax=ax)

        ax.legend(title=by_class)
    else:
        sns.histplot(layer.objects[attribute], bins=bins, ax=ax)

    ax.set_title(f"Histogram of {attribute}")
    ax.set_xlabel(attribute)
    ax.set_ylabel("Count")

    return fig


def plot_statistics(stats_dict, figsize=(12, 8), kind="bar", y_log=False):
    """Plot statistics from a statistics dictionary.

    Parameters:
    -----------
    stats_dict : dict
        Dictionary with statistics (from attach_* functions), nested dicts are flattened
    figsize : tuple
        Figure size
    kind : str
        Plot type: 'bar', 'line', or 'pie'
    y_log : bool
        Whether to use logarithmic scale for y-axis

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    flat_stats = {}

    def _flatten_dict(d, prefix=""):
        for key, value in d.items():
            if isinstance(value, dict):
                _flatten_dict(value, f"{prefix}{key}_")
            else:
                flat_stats[f"{prefix}{key}"] = value

    _flatten_dict(stats_dict)

    fig, ax = plt.subplots(figsize=figsize)

    if kind == "pie" and "class_percentages" in stats_dict:
        percentages = stats_dict["class_percentages"]
        ax.pie(list(percentages.values()), labels=list(percentages.keys()), autopct="%1.1f%%", startangle=90)
        ax.axis("equal")
        ax.set_title("Class Distribution")

    else:
        stats_df = pd.DataFrame({"Metric": list(flat_stats.keys()), "Value": list(flat_stats.values())})

        if kind != "line":
            stats_df = stats_df.sort_values("Value", ascending=False)

        if kind == "line":
            sns.lineplot(x="Metric", y="Value", data=stats_df, ax=ax, marker="o")
        else:
            sns.barplot(x="Metric", y="Value", data=stats_df, ax=ax)
        ax.tick_params(axis="x", labelrotation=45)

        if y_log:
            ax.set_yscale("log")

        ax.set_title("Statistics Summary")

    fig.tight_layout()
    return fig
