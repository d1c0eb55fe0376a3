# -*- coding: utf-8 -*-
"""Tests for the walkthrough configuration and logging setup."""

import dataclasses
import logging

import pytest

from geocompy import WorkflowConfig, setup_logging


def test_defaults_are_frozen():
    config = WorkflowConfig()
    assert config.output_dir == "output"
    assert config.reclass_rules[0] == (0, 12, 1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.output_dir = "elsewhere"


def test_from_mapping_ignores_unknown_keys(caplog):
    with caplog.at_level("WARNING"):
        config = WorkflowConfig.from_mapping({"buffer_distance": 250.0, "colour": "red"})

    assert config.buffer_distance == 250.0
    assert "colour" in caplog.text


def test_from_toml(tmp_path):
    path = tmp_path / "geocompy.toml"
    path.write_text(
        '[geocompy]\noutput_dir = "results"\nchoropleth_k = 3\nreclass_rules = [[0, 18, 1], [18, 36, 2]]\n',
        encoding="utf-8",
    )

    config = WorkflowConfig.from_toml(path)
    assert config.output_dir == "results"
    assert config.choropleth_k == 3
    assert config.reclass_rules == ((0, 18, 1), (18, 36, 2))


def test_from_toml_without_table(tmp_path):
    path = tmp_path / "empty.toml"
    path.write_text("[other]\nx = 1\n", encoding="utf-8")
    assert WorkflowConfig.from_toml(path) == WorkflowConfig()


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "run.log"
    logger = setup_logging(logging.DEBUG, log_file=str(log_file))
    try:
        logging.getLogger("geocompy.test").info("hello from the tests")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "hello from the tests" in log_file.read_text(encoding="utf-8")

        setup_logging(logging.INFO)
        assert len(logger.handlers) == 1, "Calling setup_logging again must not stack handlers."
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
