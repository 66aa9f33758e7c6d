"""Logging configuration for the path tracer."""

import logging
from typing import Optional

from src.pathtracer.config import LOG_FORMAT, LOG_LEVEL

# Root logger of the package; module loggers propagate into it
PACKAGE_LOGGER = "src.pathtracer"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Set up console logging for the package.

    Calling this more than once only updates the level; a second handler is
    never attached.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to ``PATHTRACER_LOG_LEVEL``.

    Returns:
        The configured package logger.
    """
    if level is None:
        level = LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)

    if not any(getattr(h, "_pathtracer_handler", False) for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        console_handler._pathtracer_handler = True
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(numeric_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the package logger."""
    return logging.getLogger(name)
