# -*- coding: utf-8 -*-
"""Logging setup for the ``geocompy`` namespace."""

import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the ``geocompy`` logger.

    Parameters:
    -----------
    level : int
        Logging level (e.g. logging.DEBUG, logging.INFO)
    log_file : str, optional
        Path of a file that receives the same records as the console

    Returns:
    --------
    logger : logging.Logger
        The configured package logger
    """
    logger = logging.getLogger("geocompy")
    logger.setLevel(level)

    # Avoid duplicate records when called again (e.g. from a notebook)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
