# -*- coding: utf-8 -*-
"""Configuration for the geocompy walkthrough."""

import logging
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowConfig:
    """Parameters for the end-to-end walkthrough."""

    output_dir: str = "output"
    buffer_distance: float = 5000.0
    simplify_tolerance: float = 2500.0
    choropleth_scheme: str = "quantiles"
    choropleth_k: int = 4
    focal_size: int = 3
    # (from, to, value) triples, intervals are (from, to]
    reclass_rules: tuple = ((0, 12, 1), (12, 24, 2), (24, 36, 3))
    sample_points: int = 50
    seed: int = 42
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, mapping):
        """Build a config from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            if key not in known:
                logger.warning("Ignoring unknown configuration key '%s'", key)
                continue
            if key == "reclass_rules":
                value = tuple(tuple(rule) for rule in value)
            kwargs[key] = value
        return cls(**kwargs)

    @classmethod
    def from_toml(cls, path):
        """Read the ``[geocompy]`` table of a TOML file."""
        with open(Path(path), "rb") as f:
            data = tomllib.load(f)
        return cls.from_mapping(data.get("geocompy", {}))
