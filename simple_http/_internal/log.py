"""Logger setup for the simple_http namespace."""

import logging
import sys

ROOT_LOGGER_NAME = "simple_http"
DEBUG_FORMAT = "[simple-http] %(levelname)s %(name)s: %(message)s"

_debug_handler: logging.Handler | None = None


def enable_debug_logging() -> None:
    """Send simple_http DEBUG records to stderr.

    Idempotent: calling it again does not attach a second handler.
    """
    global _debug_handler
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    if _debug_handler is None:
        _debug_handler = logging.StreamHandler(sys.stderr)
        _debug_handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
        logger.addHandler(_debug_handler)
