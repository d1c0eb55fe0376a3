# -*- coding: utf-8 -*-
"""End-to-end walkthrough of the vector, attribute and raster operations.

Runs the same sequence of steps a geocomputation tutorial goes through, on the bundled sample data, and writes every
figure, vector file, raster and the interactive map to the output directory.
"""

import logging
import os

import matplotlib.pyplot as plt

from .config import WorkflowConfig
from .core.layer import LayerManager
from .datasets import (
    create_grain_layer,
    create_region_table,
    create_sample_data,
    create_sample_points,
    create_sample_regions,
)
from .io.raster import layer_to_raster
from .io.vector import layer_to_vector
from .raster.algebra import focal, global_stat, polygonize, raster_calc, reclassify, zonal
from .stats.basic import attach_raster_summary
from .stats.spatial import attach_area_stats
from .utils.helpers import summarize_layers
from .vector.attributes import aggregate_by, attribute_join, filter_by_expression, spatial_aggregate
from .vector.geometry import buffer_layer, centroid_layer, simplify_layer, spatial_filter
from .viz.maps import interactive_map, plot_choropleth, plot_comparison, plot_layer, plot_raster

logger = logging.getLogger(__name__)


def _save(fig, path, outputs, key):
    fig.savefig(path)
    plt.close(fig)
    outputs[key] = path


def run_walkthrough(config=None, manager=None):
    """Run the walkthrough and return a dict of the files written.

    Parameters:
    -----------
    config : WorkflowConfig, optional
        Walkthrough parameters, defaults when None
    manager : LayerManager, optional
        Layer manager collecting every layer produced

    Returns:
    --------
    outputs : dict
        Output name -> path
    """
    config = config or WorkflowConfig()
    manager = manager if manager is not None else LayerManager()
    output_dir = config.output_dir
    os.makedirs(output_dir, exist_ok=True)
    outputs = {}

    logger.info("Loading sample data")
    regions = manager.add_layer(create_sample_regions())
    points = manager.add_layer(create_sample_points(n=config.sample_points, seed=config.seed))
    elev = manager.add_layer(create_sample_data())
    grain = manager.add_layer(create_grain_layer(seed=config.seed))

    logger.info("Geometry operations")
    buffered = buffer_layer(centroid_layer(regions, layer_manager=manager), config.buffer_distance, layer_manager=manager)
    near_centres = spatial_filter(points, buffered, predicate="within", layer_manager=manager)
    logger.info("%d of %d points lie within the region buffers", len(near_centres.objects), len(points.objects))

    simplified = simplify_layer(regions, config.simplify_tolerance, layer_manager=manager)
    _save(
        plot_comparison(regions, simplified, title="Simplification"),
        os.path.join(output_dir, "1_simplification.png"),
        outputs,
        "simplification_figure",
    )

    logger.info("Attribute operations")
    joined = attribute_join(regions, create_region_table(), on="name", layer_manager=manager)
    joined.attach_function(attach_area_stats, name="area_by_group", by_class="region_group")
    populous = filter_by_expression(joined, "population > 5000", layer_manager=manager)
    by_group = aggregate_by(joined, "region_group", aggfunc="sum", columns=["population", "gdp"], layer_manager=manager)
    point_means = spatial_aggregate(points, regions, "value", aggfunc="mean", layer_manager=manager)
    logger.info("%d populous regions, %d region groups", len(populous.objects), len(by_group.objects))

    _save(
        plot_choropleth(point_means, "value", scheme=config.choropleth_scheme, k=config.choropleth_k, title="Mean point value"),
        os.path.join(output_dir, "2_choropleth.png"),
        outputs,
        "choropleth_figure",
    )
    _save(plot_layer(by_group, attribute="population"), os.path.join(output_dir, "3_groups.png"), outputs, "groups_figure")

    logger.info("Raster algebra")
    elev.attach_function(attach_raster_summary, name="summary")
    doubled = raster_calc("elev * 2 + grain", {"elev": elev, "grain": grain}, layer_manager=manager, layer_name="elev_calc")
    reclassed = reclassify(elev, config.reclass_rules, layer_manager=manager)
    smoothed = focal(elev, size=config.focal_size, func="mean", layer_manager=manager)
    zone_means = zonal(elev, grain, func="mean")
    logger.info("Mean elevation %.2f, zonal means:\n%s", global_stat(elev, "mean"), zone_means)
    reclass_polygons = polygonize(reclassed, layer_manager=manager)

    fig, axes = plt.subplots(1, 3, figsize=(18, 6))
    plot_raster(elev, ax=axes[0], title="Elevation")
    plot_raster(grain, ax=axes[1], categorical=True, title="Grain")
    plot_raster(smoothed, ax=axes[2], title=f"Focal mean ({config.focal_size}x{config.focal_size})")
    _save(fig, os.path.join(output_dir, "4_rasters.png"), outputs, "raster_figure")

    logger.info("Exporting results")
    outputs["regions_vector"] = os.path.join(output_dir, "regions_joined.geojson")
    layer_to_vector(joined, outputs["regions_vector"])
    outputs["aggregated_vector"] = os.path.join(output_dir, "point_means.geojson")
    layer_to_vector(point_means, outputs["aggregated_vector"])
    outputs["reclass_polygons"] = os.path.join(output_dir, "elev_classes.geojson")
    layer_to_vector(reclass_polygons, outputs["reclass_polygons"])
    outputs["calc_raster"] = os.path.join(output_dir, "elev_calc.tif")
    layer_to_raster(doubled, outputs["calc_raster"])
    outputs["zonal_table"] = os.path.join(output_dir, "zonal_means.csv")
    zone_means.to_csv(outputs["zonal_table"])

    outputs["web_map"] = os.path.join(output_dir, "map.html")
    interactive_map([point_means, buffered], column="value", tooltip=["name", "value", "n_points"], path=outputs["web_map"])

    outputs["summary"] = os.path.join(output_dir, "layers.json")
    summarize_layers(manager, outputs["summary"])

    logger.info("Results saved to %s", output_dir)
    for i, layer_name in enumerate(manager.get_layer_names()):
        logger.debug("  %d. %s", i + 1, layer_name)

    return outputs
