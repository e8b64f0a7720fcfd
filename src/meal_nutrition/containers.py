"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from meal_nutrition.adapters.file_dataset_source import JsonFileDatasetSource
from meal_nutrition.adapters.http_dataset_source import HttpxDatasetSource
from meal_nutrition.adapters.supabase_dataset_source import SupabaseDatasetSource
from meal_nutrition.config import Settings
from meal_nutrition.services.aggregation import NutritionAggregationService
from meal_nutrition.services.balance import get_balance_scorer
from meal_nutrition.services.matching import FoodMatchingService
from meal_nutrition.services.reference_store import DatasetSource, ReferenceStore
from meal_nutrition.services.similarity import get_scorer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    reference_store: ReferenceStore
    matching_service: FoodMatchingService
    aggregation_service: NutritionAggregationService
    close_resources: Callable[[], Awaitable[None]]


async def _no_resources() -> None:
    return None


def build_dataset_source(
    settings: Settings,
) -> tuple[DatasetSource, Callable[[], Awaitable[None]]]:
    """Create the configured dataset source and its cleanup callback."""
    if settings.dataset_source == "http":
        if not settings.dataset_url:
            raise ValueError("DATASET_URL is required for the http dataset source")
        http_source = HttpxDatasetSource.create(
            url=settings.dataset_url,
            timeout_seconds=settings.dataset_timeout_seconds,
        )
        return http_source, http_source.close
    if settings.dataset_source == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required for the "
                "supabase dataset source"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseDatasetSource(client), _no_resources
    return JsonFileDatasetSource(Path(settings.dataset_path)), _no_resources


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    source, close_source = build_dataset_source(resolved_settings)
    reference_store = ReferenceStore(
        source=source,
        scorer=get_scorer(resolved_settings.similarity_scorer),
        fuzzy_limit=resolved_settings.fuzzy_limit,
    )
    matching_service = FoodMatchingService(
        repository=reference_store,
        min_similarity=resolved_settings.min_similarity,
    )
    aggregation_service = NutritionAggregationService(
        matching_service=matching_service,
        balance_scorer=get_balance_scorer(resolved_settings.balance_scorer),
        low_confidence_threshold=resolved_settings.low_confidence_threshold,
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        await close_source()

    return AppContainer(
        settings=resolved_settings,
        reference_store=reference_store,
        matching_service=matching_service,
        aggregation_service=aggregation_service,
        close_resources=close_resources,
    )
