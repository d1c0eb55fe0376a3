# -*- coding: utf-8 -*-
"""Defines the Layer class and related functionality for organizing geospatial data.

A layer is the unit every geocompy operation consumes and produces. It holds vector objects (a GeoDataFrame),
a raster grid with its affine transform, or both, together with the coordinate reference system and a record of the
operation that created it. Layers derived from other layers keep a reference to their parent, so a chain of buffers,
joins and raster algebra steps can be traced back to the data that was read from disk.
The LayerManager keeps the layers of one analysis session together and lets them be looked up by id or name.
"""

import uuid

import numpy as np
import pandas as pd
from rasterio.transform import array_bounds

from ..errors import LayerError


class Layer:
    """A Layer represents vector objects and/or a raster with associated properties.

    Layers can be read from files, derived from geometry operations, joins, aggregations or raster algebra.
    Each layer can have functions attached to calculate additional properties.
    """

    def __init__(self, name=None, parent=None, type="generic"):
        """Initialize a Layer.

        Parameters:
        -----------
        name : str, optional
            Name of the layer. If None, a unique name will be generated.
        parent : Layer, optional
            Parent layer that this layer is derived from.
        type : str
            Type of layer: "vector", "raster", "geometry", "join", "aggregation", "raster_algebra" or "generic"
        """
        self.id = str(uuid.uuid4())
        self.name = name if name else f"Layer_{self.id[:8]}"
        self.parent = parent
        self.type = type
        self.created_at = pd.Timestamp.now()

        self.raster = None
        self.objects = None
        self.metadata = {}
        self.transform = None
        self.crs = None
        self.nodata = None

        self.attached_functions = {}

    @classmethod
    def from_vector(cls, gdf, name=None, parent=None, type="vector"):
        """Wrap a GeoDataFrame in a layer, taking over its CRS."""
        layer = cls(name=name, parent=parent, type=type)
        layer.objects = gdf
        layer.crs = gdf.crs
        return layer

    @classmethod
    def from_raster(cls, data, transform, crs, name=None, nodata=None, parent=None, type="raster"):
        """Wrap a raster array (bands, rows, cols) or (rows, cols) in a layer."""
        layer = cls(name=name, parent=parent, type=type)
        layer.raster = np.asarray(data)
        layer.transform = transform
        layer.crs = crs
        layer.nodata = nodata
        return layer

    @property
    def is_vector(self):
        return self.objects is not None

    @property
    def is_raster(self):
        return self.raster is not None

    @property
    def shape(self):
        """Rows and columns of the raster grid."""
        if self.raster is None:
            raise LayerError(f"Layer '{self.name}' has no raster data")
        return self.raster.shape[-2], self.raster.shape[-1]

    @property
    def bounds(self):
        """(minx, miny, maxx, maxy) of the objects, or of the raster extent."""
        if self.objects is not None:
            return tuple(self.objects.total_bounds)
        if self.raster is not None:
            rows, cols = self.shape
            west, south, east, north = array_bounds(rows, cols, self.transform)
            return (west, south, east, north)
        raise LayerError(f"Layer '{self.name}' has neither objects nor raster data")

    def band(self, index=1):
        """Return one band of the raster as float with nodata replaced by NaN."""
        if self.raster is None:
            raise LayerError(f"Layer '{self.name}' has no raster data")
        if self.raster.ndim == 3:
            if not 1 <= index <= self.raster.shape[0]:
                raise LayerError(f"Band {index} out of range for layer '{self.name}'")
            values = self.raster[index - 1].astype(float)
        else:
            values = self.raster.astype(float)
        if self.nodata is not None:
            values[values == self.nodata] = np.nan
        return values

    def derive(self, name, type, raster=None, objects=None, metadata=None):
        """Create a child layer sharing this layer's grid and CRS."""
        child = Layer(name=name, parent=self, type=type)
        child.transform = self.transform
        child.crs = self.crs
        child.raster = raster
        child.objects = objects
        if objects is not None and objects.crs is not None:
            child.crs = objects.crs
        child.metadata = metadata or {}
        return child

    def attach_function(self, function, name=None, **kwargs):
        """Attach a function to this layer and execute it.

        Parameters:
        -----------
        function : callable
            Function to attach and execute
        name : str, optional
            Name for this function. If None, uses function.__name__
        **kwargs : dict
            Arguments to pass to the function

        Returns:
        --------
        self : Layer
            Returns self for chaining
        """
        func_name = name if name else function.__name__

        result = function(self, **kwargs)

        self.attached_functions[func_name] = {
            "function": function,
            "args": kwargs,
            "result": result,
        }

        return self

    def get_function_result(self, function_name):
        """Get the result of an attached function.

        Parameters:
        -----------
        function_name : str
            Name of the attached function

        Returns:
        --------
        result : any
            Result of the function
        """
        if function_name not in self.attached_functions:
            raise LayerError(f"Function '{function_name}' not attached to this layer")

        return self.attached_functions[function_name]["result"]

    def copy(self):
        """Create a copy of this layer.

        Returns:
        --------
        layer_copy : Layer
            Copy of this layer
        """
        new_layer = Layer(name=f"{self.name}_copy", parent=self.parent, type=self.type)

        if self.raster is not None:
            new_layer.raster = self.raster.copy()

        if self.objects is not None:
            new_layer.objects = self.objects.copy()

        new_layer.metadata = self.metadata.copy()
        new_layer.transform = self.transform
        new_layer.crs = self.crs
        new_layer.nodata = self.nodata

        return new_layer

    def __str__(self):
        """String representation of the layer."""
        parent_name = self.parent.name if self.parent else "None"

        if self.objects is not None:
            content = f"objects: {len(self.objects)}"
        elif self.raster is not None:
            rows, cols = self.shape
            content = f"raster: {rows}x{cols}"
        else:
            content = "empty"

        return f"Layer '{self.name}' (type: {self.type}, parent: {parent_name}, {content})"


class LayerManager:
    """Manages a collection of layers and their relationships."""

    def __init__(self):
        """Initialize the layer manager."""
        self.layers = {}
        self.active_layer = None

    def add_layer(self, layer, set_active=True):
        """Add a layer to the manager.

        Parameters:
        -----------
        layer : Layer
            Layer to add
        set_active : bool
            Whether to set this layer as the active layer

        Returns:
        --------
        layer : Layer
            The added layer
        """
        self.layers[layer.id] = layer

        if set_active:
            self.active_layer = layer

        return layer

    def get_layer(self, layer_id_or_name):
        """Get a layer by ID or name.

        Parameters:
        -----------
        layer_id_or_name : str
            Layer ID or name

        Returns:
        --------
        layer : Layer
            The requested layer
        """
        if layer_id_or_name in self.layers:
            return self.layers[layer_id_or_name]

        for layer in self.layers.values():
            if layer.name == layer_id_or_name:
                return layer

        raise LayerError(f"Layer '{layer_id_or_name}' not found")

    def get_layer_names(self):
        """Get a list of all layer names."""
        return [layer.name for layer in self.layers.values()]

    def remove_layer(self, layer_id_or_name):
        """Remove a layer from the manager.

        Parameters:
        -----------
        layer_id_or_name : str
            Layer ID or name
        """
        layer = self.get_layer(layer_id_or_name)

        del self.layers[layer.id]

        if self.active_layer and self.active_layer.id == layer.id:
            if self.layers:
                self.active_layer = list(self.layers.values())[-1]
            else:
                self.active_layer = None
