from __future__ import annotations

import logging

from booking_optimizer.utils.logger import PACKAGE_LOGGER_NAME, configure_logging, get_logger


def _optimizer_handlers() -> list[logging.Handler]:
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    return [handler for handler in package_logger.handlers if getattr(handler, "_optimizer_handler", False)]


def test_repeated_configuration_keeps_single_handler():
    configure_logging("INFO")
    configure_logging("DEBUG")

    assert len(_optimizer_handlers()) == 1
    assert logging.getLogger(PACKAGE_LOGGER_NAME).level == logging.DEBUG
    configure_logging("INFO")


def test_outside_modules_are_nested_under_package():
    assert get_logger("app").name == f"{PACKAGE_LOGGER_NAME}.app"
    assert get_logger("booking_optimizer.services.ranking_service").name == (
        "booking_optimizer.services.ranking_service"
    )


def test_root_logger_is_left_alone():
    root_handlers = list(logging.getLogger().handlers)

    configure_logging()

    assert logging.getLogger().handlers == root_handlers
