"""Shared test fixtures."""

import asyncio
import copy
import logging
from dataclasses import dataclass, field

import pytest

from meal_nutrition.config import Settings
from meal_nutrition.containers import AppContainer
from meal_nutrition.errors import DatasetUnavailableError
from meal_nutrition.services.aggregation import NutritionAggregationService
from meal_nutrition.services.matching import FoodMatchingService
from meal_nutrition.services.reference_store import DatasetSource, ReferenceStore

SAMPLE_DATASET: dict[str, object] = {
    "foods": {
        "apple": {
            "name": "apple",
            "category": "fruit",
            "aliases": ["りんご"],
            "standard_quantity": "1個(200g)",
            "calories": 100,
            "protein": 0.2,
            "iron": 0.1,
            "folic_acid": 5,
            "calcium": 4,
            "vitamin_d": 0,
            "confidence": 0.9,
        },
        "banana": {
            "name": "banana",
            "category": "fruit",
            "aliases": ["バナナ"],
            "standard_quantity": "1本(100g)",
            "calories": 90,
            "protein": 1.0,
            "iron": 0.3,
            "folic_acid": 26,
            "calcium": 6,
            "vitamin_d": 0,
        },
        "rice": {
            "name": "cooked rice",
            "category": "grains-rice",
            "aliases": ["ごはん", "white rice"],
            "standard_quantity": "1膳(150g)",
            "calories": 150,
            "protein": 2.5,
            "iron": 0.1,
            "folic_acid": 3,
            "calcium": 3,
            "vitamin_d": 0,
        },
        "salmon": {
            "name": "salmon",
            "category": "seafood",
            "aliases": ["鮭"],
            "standard_quantity": "1切れ(80g)",
            "calories": 130,
            "protein": 22.0,
            "iron": 0.5,
            "folic_acid": 20,
            "calcium": 14,
            "vitamin_d": 30.0,
        },
        "natto": {
            "name": "natto",
            "category": "soy",
            "aliases": ["納豆"],
            "standard_quantity": "1パック(50g)",
            "basis": "perServing",
            "calories": 100,
            "protein": 8.0,
            "iron": 1.6,
            "folic_acid": 60,
            "calcium": 45,
            "vitamin_d": 0,
        },
        "yogurt": {
            "name": "plain yogurt",
            "category": "dairy",
            "aliases": ["ヨーグルト"],
            "standard_quantity": "100g",
            "calories": 60,
            "protein": 3.6,
            "iron": 0.0,
            "folic_acid": 11,
            "calcium": 120,
            "vitamin_d": 0.0,
        },
    }
}


@dataclass
class FakeDatasetSource(DatasetSource):
    """In-memory dataset source that counts loads."""

    payload: object = field(default_factory=lambda: copy.deepcopy(SAMPLE_DATASET))
    error: Exception | None = None
    calls: int = 0
    delay_seconds: float = 0.0

    async def load(self) -> object:
        self.calls += 1
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.payload


def unavailable() -> DatasetUnavailableError:
    return DatasetUnavailableError("dataset offline")


@pytest.fixture
def propagating_logs(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """Let package log records reach caplog."""
    monkeypatch.setattr(logging.getLogger("meal_nutrition"), "propagate", True)


@pytest.fixture
def dataset_source() -> FakeDatasetSource:
    return FakeDatasetSource()


@pytest.fixture
def reference_store(dataset_source: FakeDatasetSource) -> ReferenceStore:
    return ReferenceStore(source=dataset_source, retry_attempts=0)


@pytest.fixture
def matching_service(reference_store: ReferenceStore) -> FoodMatchingService:
    return FoodMatchingService(repository=reference_store)


@pytest.fixture
def aggregation_service(
    matching_service: FoodMatchingService,
) -> NutritionAggregationService:
    return NutritionAggregationService(matching_service=matching_service)


@pytest.fixture
def settings(tmp_path) -> Settings:  # type: ignore[no-untyped-def]
    return Settings(
        dataset_source="file",
        dataset_path=str(tmp_path / "missing.json"),
        admin_token="admin-token",
        _env_file=None,
    )


@pytest.fixture
def container(
    settings: Settings,
    reference_store: ReferenceStore,
    matching_service: FoodMatchingService,
    aggregation_service: NutritionAggregationService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        reference_store=reference_store,
        matching_service=matching_service,
        aggregation_service=aggregation_service,
        close_resources=close_resources,
    )
