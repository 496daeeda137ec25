"""Logging setup for the tracerz package.

Modules log through `logging.getLogger(__name__)`, which places them under the
"tracerz" logger configured here.
"""

from __future__ import annotations

import logging
import sys


DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(level: str = "WARNING", format_string: str | None = None) -> logging.Logger:
    """Configure the package logger with a single stderr handler.

    Safe to call more than once; existing handlers are replaced.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    root_logger = logging.getLogger("tracerz")
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    return root_logger
