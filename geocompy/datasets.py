# -*- coding: utf-8 -*-
"""Small deterministic datasets for examples and tests.

The rasters follow the classic 6 x 6 teaching grids (an elevation surface and a soil grain map) and the vector data
is a block of four square regions with sample points scattered over them, all generated in memory.
"""

import geopandas as gpd
import numpy as np
import pandas as pd
import shapely
from rasterio.crs import CRS
from rasterio.transform import from_origin
from shapely.geometry import box

from .core.layer import Layer

GRAIN_CATEGORIES = {0: "clay", 1: "silt", 2: "sand"}
REGIONS_CRS = "EPSG:32633"
REGION_ORIGIN = (500000.0, 5000000.0)
REGION_SIZE = 10000.0


def create_sample_data():
    """Create the 6 x 6 elevation raster.

    Values run 1..36 row by row from the top left, the extent is -1.5..1.5 in both directions in EPSG:4326.

    Returns:
    --------
    layer : Layer
        Raster layer named "elev"
    """
    data = np.arange(1, 37, dtype=np.int32).reshape(6, 6)
    transform = from_origin(-1.5, 1.5, 0.5, 0.5)
    return Layer.from_raster(data, transform, CRS.from_epsg(4326), name="elev")


def create_grain_layer(seed=42):
    """Create a categorical 6 x 6 raster of soil grain sizes on the elevation grid."""
    rng = np.random.default_rng(seed)
    data = rng.choice(list(GRAIN_CATEGORIES), size=(6, 6)).astype(np.int32)
    transform = from_origin(-1.5, 1.5, 0.5, 0.5)
    layer = Layer.from_raster(data, transform, CRS.from_epsg(4326), name="grain")
    layer.metadata["categories"] = dict(GRAIN_CATEGORIES)
    return layer


def create_sample_regions():
    """Create four adjacent 10 km square regions in UTM zone 33N.

    The edges carry a vertex every 500 m, which simplification removes again.
    """
    x0, y0 = REGION_ORIGIN
    size = REGION_SIZE
    cells = [
        ("Alder", 0, 1, "north", 12000),
        ("Birch", 1, 1, "north", 8500),
        ("Cedar", 0, 0, "south", 23000),
        ("Dogwood", 1, 0, "south", 4100),
    ]

    records = []
    for name, col, row, group, population in cells:
        square = box(x0 + col * size, y0 + row * size, x0 + (col + 1) * size, y0 + (row + 1) * size)
        records.append(
            {
                "name": name,
                "region_group": group,
                "population": population,
                "area_km2": square.area / 1e6,
                "geometry": shapely.segmentize(square, 500.0),
            }
        )

    gdf = gpd.GeoDataFrame(records, geometry="geometry", crs=REGIONS_CRS)
    return Layer.from_vector(gdf, name="regions")


def create_sample_points(n=50, seed=42):
    """Scatter ``n`` points with a ``value`` attribute over the sample regions."""
    rng = np.random.default_rng(seed)
    x0, y0 = REGION_ORIGIN
    xs = rng.uniform(x0, x0 + 2 * REGION_SIZE, n)
    ys = rng.uniform(y0, y0 + 2 * REGION_SIZE, n)

    gdf = gpd.GeoDataFrame(
        {
            "point_id": np.arange(n),
            "value": rng.normal(100.0, 20.0, n).round(2),
        },
        geometry=gpd.points_from_xy(xs, ys),
        crs=REGIONS_CRS,
    )
    return Layer.from_vector(gdf, name="points")


def create_region_table():
    """Non-spatial table to join onto the sample regions; "Elm" has no matching region."""
    return pd.DataFrame(
        {
            "name": ["Alder", "Birch", "Cedar", "Elm"],
            "gdp": [410.0, 275.5, 830.2, 120.0],
        }
    )
