# -*- coding: utf-8 -*-
"""The io package contains modules for reading and writing both raster and vector data.

It covers Shapefile, GeoJSON, GeoPackage, CSV point tables and GeoTIFF rasters.
"""
