# -*- coding: utf-8 -*-
# geocompy/__init__.py

"""
geocompy: geocomputation walkthroughs for vector and raster data
===============================================================

geocompy packages the everyday steps of a geospatial analysis as small
functions around one container type, the Layer.

Key features:
- Reading and writing Shapefile, GeoJSON, GeoPackage, CSV points and GeoTIFF
- Geometry operations: buffers, centroids, simplification, overlays, spatial filters
- Attribute operations: expression filters, attribute and spatial joins, aggregations
- Raster algebra: local, focal, zonal and global operations, resampling
- Static maps and choropleths, and interactive Leaflet web maps
"""

__version__ = "0.1.0"

from .config import WorkflowConfig
from .core.crs import ensure_same_crs, is_geographic, to_crs
from .core.layer import Layer, LayerManager
from .datasets import (
    create_grain_layer,
    create_region_table,
    create_sample_data,
    create_sample_points,
    create_sample_regions,
)
from .errors import CRSMismatchError, ExpressionError, GeocompyError, LayerError
from .io.raster import layer_to_raster, read_raster, read_raster_layer, write_raster
from .io.vector import layer_to_vector, read_points_csv, read_vector, read_vector_layer, write_vector
from .logging_config import setup_logging
from .raster.algebra import (
    aggregate_raster,
    disaggregate_raster,
    extract_values,
    focal,
    global_stat,
    mask_raster,
    polygonize,
    raster_calc,
    reclassify,
    zonal,
)
from .raster.resample import reproject_raster, resample_raster
from .stats.basic import attach_basic_stats, attach_class_distribution, attach_count, attach_raster_summary
from .stats.spatial import attach_area_stats, attach_shape_metrics
from .utils.helpers import summarize_layers
from .vector.attributes import aggregate_by, attribute_join, filter_by_expression, spatial_aggregate, spatial_join
from .vector.geometry import (
    buffer_layer,
    centroid_layer,
    clip_layer,
    count_vertices,
    overlay_layers,
    select_by_area,
    simplify_layer,
    spatial_filter,
    union_layer,
)
from .viz.charts import plot_histogram, plot_statistics
from .viz.maps import choropleth_breaks, interactive_map, plot_choropleth, plot_comparison, plot_layer, plot_raster
from .walkthrough import run_walkthrough
