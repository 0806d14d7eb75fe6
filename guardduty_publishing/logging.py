"""Loguru sink configuration for the command line tool."""
from __future__ import annotations

import sys
from typing import Literal

from loguru import logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(level: LogLevel = "WARNING") -> int:
    """Replace loguru's default sink with a stderr sink at *level*.

    Returns the id of the new sink so callers can remove it again.
    """

    logger.remove()
    return logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=None)


__all__ = ["CONSOLE_FORMAT", "LogLevel", "configure_logging"]
