"""
Logging setup for the gateway process.

Stdout carries the MCP stdio protocol, so log records go to stderr.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stderr handler to the ``x_gateway`` logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("x_gateway")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_x_gateway", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._x_gateway = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
