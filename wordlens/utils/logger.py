"""Logging setup."""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(name: str = "wordlens", level: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger once with a console handler.

    Args:
        name: Logger name (the package root by default)
        level: Level name; falls back to WORDLENS_LOG_LEVEL, then INFO

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    level_name = (level or os.environ.get("WORDLENS_LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.propagate = False
    return logger
