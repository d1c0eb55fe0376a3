# -*- coding: utf-8 -*-
"""The raster package provides raster algebra (local, focal, zonal and global operations) and resampling."""
