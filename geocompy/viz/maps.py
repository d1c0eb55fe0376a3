# -*- coding: utf-8 -*-
"""Functions to create static and interactive maps of layers."""

import logging
import os

import folium
import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
import numpy as np
from folium.raster_layers import ImageOverlay
from matplotlib import colormaps
from matplotlib.colors import ListedColormap, Normalize, to_hex
from pyproj import CRS
from rasterio.plot import plotting_extent

from ..errors import LayerError
from ..raster.resample import reproject_raster

logger = logging.getLogger(__name__)

SCHEMES = ("quantiles", "equal_interval")


def choropleth_breaks(values, scheme="quantiles", k=5):
    """Class edges for a choropleth.

    Parameters:
    -----------
    values : array-like
        Values to classify, NaN ignored
    scheme : str
        "quantiles" or "equal_interval"
    k : int
        Number of classes

    Returns:
    --------
    edges : numpy.ndarray
        Increasing class edges, first and last equal to the data range; tied quantiles are collapsed
    """
    if scheme not in SCHEMES:
        raise ValueError(f"Unknown classification scheme '{scheme}', expected one of {SCHEMES}")
    if k < 1:
        raise ValueError("Number of classes must be at least 1")

    values = np.asarray(values, dtype=float)
    values = values[~np.isnan(values)]
    if values.size == 0:
        raise ValueError("Cannot classify an empty set of values")

    if scheme == "equal_interval":
        edges = np.linspace(values.min(), values.max(), k + 1)
    else:
        edges = np.quantile(values, np.linspace(0, 1, k + 1))

    return np.unique(edges)


def _classify_values(values, edges):
    """Class index (0-based) of every value; the lowest class includes its lower edge."""
    values = np.asarray(values, dtype=float)
    return np.clip(np.digitize(values, edges[1:-1], right=True), 0, max(len(edges) - 2, 0))


def _break_labels(edges):
    if len(edges) == 1:
        return [f"{edges[0]:g}"]
    return [f"{low:g} - {high:g}" for low, high in zip(edges[:-1], edges[1:], strict=False)]


def plot_raster(layer, cmap="viridis", title=None, categorical=False, figsize=(8, 8), ax=None):
    """Plot a raster layer in map coordinates.

    Categorical rasters get one colour per value and a legend, labelled from ``metadata["categories"]`` when present.
    """
    if layer.raster is None:
        raise LayerError(f"Layer '{layer.name}' has no raster data")

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    values = layer.band(1)
    extent = plotting_extent(values, layer.transform) if layer.transform is not None else None

    if categorical:
        codes = [v for v in np.unique(values) if not np.isnan(v)]
        colors = plt.cm.tab20(np.linspace(0, 1, max(len(codes), 1)))
        index = np.full(values.shape, np.nan)
        for i, code in enumerate(codes):
            index[values == code] = i
        ax.imshow(index, cmap=ListedColormap(colors[: max(len(codes), 1)]), extent=extent, interpolation="nearest",
                  vmin=-0.5, vmax=max(len(codes), 1) - 0.5)
        labels = layer.metadata.get("categories", {})
        patches = [mpatches.Patch(color=colors[i], label=str(labels.get(int(code), code))) for i, code in enumerate(codes)]
        if patches:
            ax.legend(handles=patches, loc="upper right")
    else:
        image = ax.imshow(values, cmap=cmap, extent=extent, interpolation="nearest")
        fig.colorbar(image, ax=ax, shrink=0.8)

    ax.set_title(title or layer.name)
    ax.set_xlabel("X Coordinate")
    ax.set_ylabel("Y Coordinate")
    return fig


def plot_layer(layer, attribute=None, title=None, cmap="viridis", figsize=(10, 8), ax=None, **plot_kwargs):
    """Plot a vector layer, optionally coloured by an attribute, or a raster layer."""
    if layer.objects is None:
        return plot_raster(layer, cmap=cmap, title=title, figsize=figsize, ax=ax)

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    if attribute:
        if attribute not in layer.objects.columns:
            raise LayerError(f"Attribute '{attribute}' not found in layer '{layer.name}'")
        layer.objects.plot(column=attribute, cmap=cmap, ax=ax, legend=True, edgecolor="black", linewidth=0.5, **plot_kwargs)
        ax.set_title(title or f"{attribute} by feature")
    else:
        layer.objects.plot(ax=ax, edgecolor="black", linewidth=0.5, **plot_kwargs)
        ax.set_title(title or layer.name)

    ax.grid(alpha=0.3)
    return fig


def plot_choropleth(layer, column, scheme="quantiles", k=5, breaks=None, cmap="YlOrRd", title=None, figsize=(10, 8)):
    """Plot a classed choropleth map of a numeric column.

    Parameters:
    -----------
    layer : Layer
        Vector layer with polygons
    column : str
        Numeric column to shade by
    scheme : str
        "quantiles" or "equal_interval", ignored when ``breaks`` is given
    k : int
        Number of classes
    breaks : sequence, optional
        Explicit class edges
    cmap : str
        Matplotlib colormap name
    title : str, optional
        Plot title
    figsize : tuple
        Figure size

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object; the edges used are stored in ``layer.metadata["choropleth_breaks"]``
    """
    if layer.objects is None or column not in layer.objects.columns:
        raise LayerError(f"Column '{column}' not found in layer objects")

    values = layer.objects[column].to_numpy(dtype=float)
    edges = np.unique(np.asarray(breaks, dtype=float)) if breaks is not None else choropleth_breaks(values, scheme, k)
    classes = _classify_values(values, edges)

    n_classes = max(len(edges) - 1, 1)
    palette = colormaps[cmap].resampled(n_classes)
    colors = [to_hex(palette(i)) for i in range(n_classes)]

    fig, ax = plt.subplots(figsize=figsize)
    missing = np.isnan(values)
    face = [colors[c] if not m else "#d9d9d9" for c, m in zip(classes, missing, strict=False)]
    layer.objects.plot(ax=ax, color=face, edgecolor="black", linewidth=0.5)

    patches = [mpatches.Patch(color=colors[i], label=label) for i, label in enumerate(_break_labels(edges))]
    ax.legend(handles=patches, loc="upper right", title=column)

    ax.set_title(title or f"{column} ({scheme if breaks is None else 'manual breaks'})")
    ax.set_xlabel("X Coordinate")
    ax.set_ylabel("Y Coordinate")

    layer.metadata["choropleth_breaks"] = [float(edge) for edge in edges]
    return fig


def plot_comparison(before_layer, after_layer, attribute=None, figsize=(16, 8), title=None):
    """Plot before and after views of layers for comparison."""
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    if title:
        fig.suptitle(title)

    for ax, layer, label in ((ax1, before_layer, "Before"), (ax2, after_layer, "After")):
        if layer.objects is None:
            plot_raster(layer, ax=ax, title=label)
            continue
        if attribute and attribute in layer.objects.columns:
            layer.objects.plot(column=attribute, ax=ax, legend=True, edgecolor="black", linewidth=0.5)
            ax.set_title(f"{label}: {attribute}")
        else:
            layer.objects.plot(ax=ax, facecolor="none", edgecolor="black", linewidth=0.8)
            layer.objects.geometry.get_coordinates().plot.scatter(x="x", y="y", ax=ax, s=4, color="tab:red")
            ax.set_title(f"{label}: {layer.name}")

    return fig


def _raster_overlay(layer, cmap):
    if CRS.from_user_input(layer.crs).to_epsg() != 4326:
        layer = reproject_raster(layer, "EPSG:4326")

    values = layer.band(1)
    valid = ~np.isnan(values)
    rgba = np.zeros(values.shape + (4,))
    if valid.any():
        norm = Normalize(vmin=np.nanmin(values), vmax=np.nanmax(values))
        rgba = colormaps[cmap](norm(np.where(valid, values, np.nanmin(values))))
        rgba[~valid, 3] = 0.0

    west, south, east, north = layer.bounds
    overlay = ImageOverlay(
        image=(rgba * 255).astype(np.uint8), bounds=[[south, west], [north, east]], opacity=0.7, name=layer.name
    )
    return overlay, np.array([west, south, east, north])


def interactive_map(layers, column=None, tooltip=None, cmap="YlOrRd", path=None, zoom_start=None):
    """Build a Leaflet web map of one or more layers.

    Parameters:
    -----------
    layers : Layer or list of Layer
        Vector layers become GeoJSON overlays, raster layers become image overlays
    column : str, optional
        Numeric column used to shade the vector layers that have it
    tooltip : list of str, optional
        Columns shown when hovering a feature
    cmap : str
        Matplotlib colormap name
    path : str, optional
        Save the map as a standalone HTML file
    zoom_start : int, optional
        Initial zoom; the map is fitted to the data when omitted

    Returns:
    --------
    fmap : folium.Map
        The web map
    """
    if not isinstance(layers, (list, tuple)):
        layers = [layers]
    if not layers:
        raise ValueError("interactive_map needs at least one layer")

    bounds = []
    overlays = []
    for layer in layers:
        if layer.objects is not None:
            gdf = layer.objects
            if gdf.crs is not None and CRS.from_user_input(gdf.crs).to_epsg() != 4326:
                gdf = gdf.to_crs(4326)
            bounds.append(gdf.total_bounds)
            overlays.append(_geojson_overlay(layer.name, gdf, column, tooltip, cmap))
        elif layer.raster is not None:
            overlay, overlay_bounds = _raster_overlay(layer, cmap)
            bounds.append(overlay_bounds)
            overlays.append(overlay)
        else:
            raise LayerError(f"Layer '{layer.name}' has neither objects nor raster data")

    extent = np.vstack(bounds)
    west, south = extent[:, 0].min(), extent[:, 1].min()
    east, north = extent[:, 2].max(), extent[:, 3].max()

    fmap = folium.Map(location=[(south + north) / 2, (west + east) / 2], zoom_start=zoom_start or 10, tiles="OpenStreetMap")
    for overlay in overlays:
        overlay.add_to(fmap)
    folium.LayerControl().add_to(fmap)
    if zoom_start is None:
        fmap.fit_bounds([[south, west], [north, east]])

    if path:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fmap.save(path)
        logger.info("Saved interactive map to %s", path)

    return fmap


def _geojson_overlay(name, gdf, column, tooltip, cmap):
    style = {"color": "#333333", "weight": 1, "fillOpacity": 0.6, "fillColor": "#3388ff"}

    if column and column in gdf.columns:
        values = gdf[column].to_numpy(dtype=float)
        norm = Normalize(vmin=np.nanmin(values), vmax=np.nanmax(values))
        palette = colormaps[cmap]

        def style_function(feature):
            value = feature["properties"].get(column)
            fill = "#cccccc" if value is None else to_hex(palette(norm(value)))
            return {**style, "fillColor": fill}

    else:

        def style_function(feature):
            return style

    # keep only JSON-friendly columns
    columns = [col for col in gdf.columns if col == gdf.geometry.name or gdf[col].dtype.kind in "biufO"]
    gdf = gdf[columns]

    fields = [field for field in (tooltip or []) if field in gdf.columns]
    geojson_tooltip = folium.GeoJsonTooltip(fields=fields) if fields else None

    return folium.GeoJson(gdf.to_json(), name=name, style_function=style_function, tooltip=geojson_tooltip)
