"""Logging setup for backlinker."""

from __future__ import annotations

import logging
import sys

ROOT_LOGGER = "backlinker"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the ``backlinker`` logger, or a child named after *component*."""
    if component:
        return logging.getLogger(f"{ROOT_LOGGER}.{component}")
    return logging.getLogger(ROOT_LOGGER)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure and return the backlinker logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    if logger.handlers:
        return logger

    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
