"""Logging setup for the ragamuffin package logger."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ragamuffin.constants import LOG_BACKUP_COUNT, LOG_MAX_BYTES

PACKAGE_LOGGER = "ragamuffin"


def _build_formatter(level: int) -> logging.Formatter:
    if level == logging.DEBUG:
        return logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
            datefmt="%H:%M:%S",
        )
    return logging.Formatter("%(message)s")


def configure_logging(log_level: str, log_file: Path | None = None) -> logging.Logger:
    """Configure the ragamuffin logger.

    Safe to call repeatedly; existing handlers are replaced.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional log file path. When set, output goes to a
            rotating file instead of stderr.

    Returns:
        The configured package logger.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    app_logger = logging.getLogger(PACKAGE_LOGGER)
    app_logger.setLevel(level)
    # Keep output out of the root logger
    app_logger.propagate = False
    app_logger.handlers.clear()

    handler: logging.Handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            mode="a",
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(_build_formatter(level))
    app_logger.addHandler(handler)
    return app_logger


def set_log_level(log_level: str) -> None:
    """Change the package logger level in place, keeping its handlers."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    app_logger = logging.getLogger(PACKAGE_LOGGER)
    app_logger.setLevel(level)
    for handler in app_logger.handlers:
        handler.setFormatter(_build_formatter(level))


def is_debug_enabled() -> bool:
    """Whether the package logger currently emits DEBUG records."""
    return logging.getLogger(PACKAGE_LOGGER).isEnabledFor(logging.DEBUG)
