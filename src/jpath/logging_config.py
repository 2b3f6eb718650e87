"""Logging configuration for the jpath CLI."""

from __future__ import annotations

import logging
import sys


LOGGER_NAME = "jpath"

VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

INFO_FORMAT = "%(message)s"
DEBUG_FORMAT = "%(levelname)s %(module)s: %(message)s"


def level_for_verbosity(verbosity: int) -> int:
    """Map the number of --verbose flags onto a logging level."""
    index = min(max(verbosity, 0), len(VERBOSITY_LEVELS) - 1)
    return VERBOSITY_LEVELS[index]


def configure_logging(verbosity: int) -> None:
    """Configure logging output based on verbosity.

    Log records are written to stderr, stdout only carries query results.

    Args:
        verbosity: 0 for warnings only, 1 for INFO, 2 or more for DEBUG
            evaluation traces
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = False
    logger.handlers.clear()

    level = level_for_verbosity(verbosity)
    logger.setLevel(level)
    if level == logging.WARNING:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(INFO_FORMAT if level == logging.INFO else DEBUG_FORMAT))
    logger.addHandler(handler)
