"""Meal nutrition input and report models."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from meal_nutrition.domain.quantity import ParsedQuantity


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParsedFoodInput(_CamelModel):
    """One food mention produced by an upstream recognizer or the text parser."""

    food_name: str
    quantity_text: str | None = None
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)

    @field_validator("food_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip()

    @field_validator("confidence", mode="before")
    @classmethod
    def _default_missing_confidence(cls, value: object) -> object:
        return 1.0 if value is None else value


@dataclass(frozen=True)
class MealFoodItem:
    """A matched food with its gram amount and combined confidence."""

    food_id: str
    original_input: str
    grams: float
    confidence: float
    quantity: ParsedQuantity | None = None


@dataclass(frozen=True)
class NutrientDeficiency:
    """A nutrient whose total falls short of its target."""

    nutrient: str
    fulfillment_ratio: float
    current: float
    target: float


class Nutrient(_CamelModel):
    name: str
    value: float
    unit: str


class FoodBreakdown(_CamelModel):
    """Nutrient contribution of one meal item."""

    food_id: str
    name: str
    original_input: str
    grams: float
    confidence: float
    calories: float
    nutrients: list[Nutrient]


class Reliability(_CamelModel):
    """How much the computed totals can be trusted."""

    confidence: float
    balance_score: float
    completeness: float


class NutritionReport(_CamelModel):
    total_calories: float
    total_nutrients: list[Nutrient]
    food_breakdown: list[FoodBreakdown]
    reliability: Reliability

    def totals(self) -> dict[str, float]:
        """Return total nutrient values keyed by nutrient name."""
        return {nutrient.name: nutrient.value for nutrient in self.total_nutrients}


class AnalyzedFood(_CamelModel):
    name: str
    quantity: str
    confidence: float


class NutritionSummary(BaseModel):
    """Flat nutrient totals plus the overall confidence score."""

    calories: float
    protein: float
    iron: float
    folic_acid: float
    calcium: float
    vitamin_d: float
    confidence_score: float


class MatchedFoodSummary(_CamelModel):
    original: str
    matched: str
    similarity: float


class AnalysisMeta(_CamelModel):
    """Diagnostics describing what happened to each input item."""

    unmatched_foods: list[str] = Field(default_factory=list)
    low_confidence_matches: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    total_items_found: int = 0
    total_input_items: int = 0
    calculation_time: float = 0.0
    matched_foods: list[MatchedFoodSummary] = Field(default_factory=list)


class NutritionAnalysisResult(_CamelModel):
    """Full result of analyzing a meal."""

    success: bool = True
    foods: list[AnalyzedFood]
    nutrition: NutritionSummary
    report: NutritionReport
    meta: AnalysisMeta
