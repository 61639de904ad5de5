"""Logging configuration for the tracker CLI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO


LOGGER_NAME = "tracker"


def _stream_handler(stream: TextIO, level: int, fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(verbose: bool) -> None:
    """Configure logging output based on verbosity.

    Verbose runs log every processed and skipped note to stdout. Otherwise
    only warnings, such as tables that had to be skipped, reach stderr.

    Args:
        verbose: Whether to enable INFO logging to stdout
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = False
    logger.handlers.clear()

    if verbose:
        logger.setLevel(logging.INFO)
        logger.addHandler(_stream_handler(sys.stdout, logging.INFO, "%(message)s"))
    else:
        logger.setLevel(logging.WARNING)
        logger.addHandler(_stream_handler(sys.stderr, logging.WARNING, "warning: %(message)s"))
