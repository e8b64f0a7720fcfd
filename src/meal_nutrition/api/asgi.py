"""ASGI entrypoint, e.g. ``uvicorn meal_nutrition.api.asgi:app``."""

import logging

from meal_nutrition.api.app import create_app
from meal_nutrition.config import Settings
from meal_nutrition.containers import build_container

settings = Settings()
app = create_app(build_container(settings))

logging.getLogger(__name__).info(
    "Meal nutrition API ready: environment=%s dataset_source=%s",
    settings.environment,
    settings.dataset_source,
)
