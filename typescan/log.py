"""Logging configuration using Loguru.

Usage:
    from typescan.log import logger
    logger.debug("scanned {}", path)

Environment Variables:
    TYPESCAN_LOG_LEVEL: TRACE|DEBUG|INFO|WARNING|ERROR (default: WARNING)
    TYPESCAN_LOG_FILE: path to an additional log file (optional)
"""

import os
import sys

from loguru import logger

# Remove default handler
logger.remove()

_log_level = os.environ.get("TYPESCAN_LOG_LEVEL", "WARNING").upper()
_log_file = os.environ.get("TYPESCAN_LOG_FILE")

_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.add(sys.stderr, level=_log_level, format=_format, colorize=None)

if _log_file:
    logger.add(_log_file, level="DEBUG", format=_format, enqueue=True)

__all__ = ["logger"]
