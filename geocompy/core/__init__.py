# -*- coding: utf-8 -*-
"""The core package holds the Layer container, the LayerManager and the CRS checks shared by all operations."""
