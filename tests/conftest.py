# -*- coding: utf-8 -*-
"""Shared fixtures for the geocompy test suite."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from geocompy import (  # noqa: E402
    LayerManager,
    create_grain_layer,
    create_sample_data,
    create_sample_points,
    create_sample_regions,
)


@pytest.fixture(autouse=True)
def close_figures():
    """Close every figure a test leaves open."""
    yield
    plt.close("all")


@pytest.fixture
def manager():
    return LayerManager()


@pytest.fixture
def regions():
    return create_sample_regions()


@pytest.fixture
def points():
    return create_sample_points(n=50, seed=42)


@pytest.fixture
def elev():
    return create_sample_data()


@pytest.fixture
def grain():
    return create_grain_layer(seed=42)
