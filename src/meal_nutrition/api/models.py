"""Request and response models for the HTTP API."""

from pydantic import BaseModel, Field

from meal_nutrition.domain.foods import FoodRecord, StoreStats
from meal_nutrition.domain.nutrition import ParsedFoodInput


class AnalyzeRequest(BaseModel):
    """Batch of parsed food mentions."""

    items: list[ParsedFoodInput]


class AnalyzeTextRequest(BaseModel):
    """Free-text meal description."""

    text: str = Field(max_length=10_000)


class FoodPayload(BaseModel):
    """Reference food as returned by lookup endpoints."""

    id: str
    name: str
    category: str
    aliases: list[str]
    standard_quantity: str
    basis: str
    source_confidence: float
    nutrients: dict[str, float]

    @classmethod
    def from_record(cls, record: FoodRecord) -> "FoodPayload":
        return cls(
            id=record.id,
            name=record.name,
            category=record.category,
            aliases=list(record.aliases),
            standard_quantity=record.standard_quantity,
            basis=record.basis,
            source_confidence=record.source_confidence,
            nutrients=record.nutrients.as_dict(),
        )


class FoodSearchHit(BaseModel):
    food: FoodPayload
    similarity: float | None = None


class ReferenceStatus(BaseModel):
    """Reference dataset state exposed to administrators."""

    loaded: bool
    record_count: int
    name_count: int
    alias_count: int
    generation: int
    loaded_at: str | None = None

    @classmethod
    def from_stats(cls, stats: StoreStats) -> "ReferenceStatus":
        return cls(
            loaded=stats.loaded,
            record_count=stats.record_count,
            name_count=stats.name_count,
            alias_count=stats.alias_count,
            generation=stats.generation,
            loaded_at=stats.loaded_at.isoformat() if stats.loaded_at else None,
        )
