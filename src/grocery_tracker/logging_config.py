"""Logging configuration for the Grocery Tracker application."""

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "grocery_tracker"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Request-level chatter of the Supabase HTTP stack
NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for the package and return its root logger.

    Args:
        level: Level name such as DEBUG or WARNING. Unknown names and None
               fall back to INFO.

    Records go to stderr so CLI reports printed on stdout stay parseable.
    """
    log_level = logging.getLevelName((level or "INFO").upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(log_level)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger nested below the package logger.

    Modules inside the package keep their dotted name; anything else, such as
    the backend modules, is prefixed with ``grocery_tracker.``.
    """
    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
