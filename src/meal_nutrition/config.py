"""Application configuration."""

import os
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    dataset_source: Literal["file", "http", "supabase"] = "file"
    dataset_path: str = "data/food_nutrition_database.json"
    dataset_url: str | None = None
    dataset_timeout_seconds: float = 15.0
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    admin_token: str = ""
    min_similarity: float = Field(default=0.5, ge=0.0, le=1.0)
    low_confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    fuzzy_limit: int = Field(default=5, ge=1)
    similarity_scorer: Literal["containment", "levenshtein"] = "containment"
    balance_scorer: Literal["evenness", "fulfillment"] = "evenness"
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
