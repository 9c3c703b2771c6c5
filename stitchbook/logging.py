"""Centralized logging configuration for stitchbook.

Usage:
    from stitchbook.logging import get_logger
    logger = get_logger(__name__)

Environment variables:
    STITCHBOOK_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Default: INFO
"""

import logging
import os
import sys

DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"

# Flask's app.logger is named after the import name, so configuring this
# logger also covers current_app.logger.
ROOT_LOGGER_NAME = "stitchbook"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def _resolve_level(level) -> int:
    if isinstance(level, int):
        return level
    name = (level or os.environ.get("STITCHBOOK_LOG_LEVEL", "")).strip().upper()
    return _LEVELS.get(name, DEFAULT_LOG_LEVEL)


def configure_logging(level: int | str | None = None) -> None:
    """Attach a stderr handler to the package logger.

    Args:
        level: Log level as an int or a level name. If None, reads
               STITCHBOOK_LOG_LEVEL or uses DEFAULT_LOG_LEVEL.
    """
    global _logging_configured

    if _logging_configured:
        return

    level = _resolve_level(level)
    log_format = LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(log_format))

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.addHandler(handler)

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
