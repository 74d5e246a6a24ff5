"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from booking_optimizer.utils.config import get_settings


PACKAGE_LOGGER_NAME = "booking_optimizer"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach one stdout handler to the package logger.

    Only the ``booking_optimizer`` hierarchy is configured; the root logger
    and server loggers keep whatever the host process set up. Calling again
    only adjusts the level.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    resolved_level = (level or get_settings().log_level).upper()
    package_logger.setLevel(resolved_level)

    if not any(getattr(handler, "_optimizer_handler", False) for handler in package_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._optimizer_handler = True
        package_logger.addHandler(handler)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the package hierarchy.

    Modules outside the package, such as the app factory, are nested under
    it so that every search and availability line shares one handler.
    """
    if name != PACKAGE_LOGGER_NAME and not name.startswith(f"{PACKAGE_LOGGER_NAME}."):
        name = f"{PACKAGE_LOGGER_NAME}.{name}"
    if not logging.getLogger(PACKAGE_LOGGER_NAME).handlers:
        configure_logging()
    return logging.getLogger(name)
