"""Logging configuration for the open items process."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


def configure_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Attach a stderr handler to the package logger (idempotent).

    Args:
        level: Logging level (defaults to OPEN_ITEMS_LOG_LEVEL)

    Returns:
        The "open_items" logger
    """
    if level is None:
        from .config import LOG_LEVEL
        level = LOG_LEVEL

    logger = logging.getLogger("open_items")
    logger.setLevel(level)
    if not any(getattr(handler, "_open_items", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._open_items = True
        logger.addHandler(handler)
    return logger
