"""Logging setup shared by the client and the notify endpoints."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | int = "INFO") -> None:
    """Configure root logging to stdout.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR) or numeric level
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=sys.stdout,
    )


def get_logger(name: str) -> logging.Logger:
    """Get module logger."""
    return logging.getLogger(name)
