"""Logging configuration helpers for the Explorer scraper."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_DIR = os.getenv("FLORISCRAPER_LOG_DIR", "logs")
LOG_FILE = os.path.join(LOG_DIR, "scraper.log")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_PACKAGE_LOGGERS: set[str] = set()


def _build_handlers(level: str) -> list[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler()

    handlers: list[logging.Handler] = [file_handler, console_handler]
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
    return handlers


def get_logger(name: str) -> logging.Logger:
    """Return a logger writing to the console and the rotating run log."""
    os.makedirs(LOG_DIR, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(DEFAULT_LEVEL)
    logger.propagate = False

    if not logger.handlers:
        for handler in _build_handlers(DEFAULT_LEVEL):
            logger.addHandler(handler)

    _PACKAGE_LOGGERS.add(name)
    return logger


def set_level(level: str) -> None:
    """Apply *level* to every logger handed out by :func:`get_logger`."""

    resolved = level.upper()
    for name in _PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(resolved)
        for handler in logger.handlers:
            handler.setLevel(resolved)
