# -*- coding: utf-8 -*-
"""The vector package provides geometry operations and attribute operations on vector layers.

Geometry operations change the shapes (buffers, simplification, overlays, spatial filters), attribute operations
work on the table (expression filters, joins, aggregations).
"""
