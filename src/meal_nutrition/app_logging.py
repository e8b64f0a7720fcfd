"""Logger setup for the meal nutrition package."""

import logging

PACKAGE_LOGGER = "meal_nutrition"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Route ``meal_nutrition.*`` records to stderr at ``level``.

    Safe to call once per app factory: the handler is installed on the first
    call and later calls only adjust the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
