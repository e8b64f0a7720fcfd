"""Tests for logging configuration."""

import logging

from meal_nutrition.app_logging import LOG_FORMAT, PACKAGE_LOGGER, configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("meal_nutrition")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.propagate is False


def test_configure_logging_updates_level() -> None:
    logger = logging.getLogger("meal_nutrition")

    configure_logging(logging.DEBUG)
    assert logger.level == logging.DEBUG

    configure_logging()
    assert logger.level == logging.INFO


def test_configure_logging_uses_package_format() -> None:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    configure_logging()

    assert logger.handlers[0].formatter._fmt == LOG_FORMAT
