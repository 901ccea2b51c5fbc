"""
Logging setup for SplitSpree

Usage:
    from log_setup import get_logger
    logger = get_logger(__name__)

Environment variables:
    SPLITSPREE_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Default: INFO
"""

import logging
import sys
from typing import Optional

from config import LOG_LEVEL

LOGGER_NAMESPACE = "splitspree"

DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def configure_logging(level: Optional[int] = None):
    """Configure the namespace logger once; later calls are ignored"""
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = _LEVELS.get(LOG_LEVEL.upper(), DEFAULT_LOG_LEVEL)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT))

    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module, typically called with __name__"""
    configure_logging()
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def set_log_level(level: int):
    """Change the log level at runtime"""
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level)

    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT))
