# -*- coding: utf-8 -*-
"""Exception types raised by geocompy.

All of them derive from ``ValueError`` as well, so code that catches the plain
``ValueError`` raised by earlier versions keeps working.
"""


class GeocompyError(Exception):
    """Base class for errors raised by geocompy itself."""


class LayerError(GeocompyError, ValueError):
    """A layer is missing, unknown, or lacks the data an operation needs."""


class CRSMismatchError(GeocompyError, ValueError):
    """Two inputs of a binary operation are in different coordinate reference systems."""


class ExpressionError(GeocompyError, ValueError):
    """An attribute or raster expression could not be evaluated."""
