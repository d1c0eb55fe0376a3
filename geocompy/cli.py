# -*- coding: utf-8 -*-
"""Command-line entry point running the geocompy walkthrough."""

import argparse
import dataclasses
import logging
from pathlib import Path

from .config import WorkflowConfig
from .logging_config import setup_logging
from .walkthrough import run_walkthrough


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the geocompy walkthrough on the bundled sample data")
    parser.add_argument("--out-dir", type=Path, default=None, help="Directory for figures, vector files and maps.")
    parser.add_argument("--config", type=Path, default=None, help="TOML file with a [geocompy] table.")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Overrides the configured log level.",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    config = WorkflowConfig.from_toml(args.config) if args.config else WorkflowConfig()
    overrides = {}
    if args.out_dir is not None:
        overrides["output_dir"] = str(args.out_dir)
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    if overrides:
        config = dataclasses.replace(config, **overrides)

    setup_logging(getattr(logging, config.log_level.upper(), logging.INFO))

    outputs = run_walkthrough(config)
    for name, path in outputs.items():
        print(f"Saved {name}: {path}")


if __name__ == "__main__":
    main()
