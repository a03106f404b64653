"""Logging configuration for the treepath CLI.

`--verbose` reports config and argument handling at INFO. `--debug` also
shows the engine DEBUG records, such as filter selection counts.
"""

from __future__ import annotations

import logging
import sys


LOGGER_NAME = "treepath"
MESSAGE_FORMAT = "%(message)s"
DEBUG_FORMAT = "%(levelname)s %(module)s: %(message)s"


def _stream_handler(logger: logging.Logger) -> logging.Handler:
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            return handler
    handler = logging.StreamHandler(sys.stdout)
    logger.addHandler(handler)
    return handler


def configure_logging(verbose: bool, debug: bool = False) -> None:
    """Configure the treepath logger.

    Args:
        verbose: Whether to enable INFO logging to stdout
        debug: Whether to enable DEBUG logging, implies verbose
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = False

    if not (verbose or debug):
        logger.setLevel(logging.WARNING)
        logger.handlers.clear()
        return

    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    handler = _stream_handler(logger)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(DEBUG_FORMAT if debug else MESSAGE_FORMAT))
