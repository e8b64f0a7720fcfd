"""Validation of raw reference dataset payloads."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from meal_nutrition.domain.foods import (
    BASIS_PER_100G,
    FoodRecord,
    NutrientProfile,
)

DEFAULT_SOURCE_CONFIDENCE = 0.8


class FoodRecordPayload(BaseModel):
    """Raw food entry as stored in the reference dataset."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str | None = None
    name: str = Field(min_length=1)
    category: str = ""
    aliases: list[str] = Field(default_factory=list)
    standard_quantity: str = "100g"
    basis: Literal["per100g", "perServing"] = BASIS_PER_100G
    calories: float = Field(default=0.0, ge=0.0)
    protein: float = Field(default=0.0, ge=0.0)
    iron: float = Field(default=0.0, ge=0.0)
    folic_acid: float = Field(default=0.0, ge=0.0)
    calcium: float = Field(default=0.0, ge=0.0)
    vitamin_d: float = Field(default=0.0, ge=0.0)
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("category", "standard_quantity", mode="before")
    @classmethod
    def _none_to_default(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("aliases", mode="before")
    @classmethod
    def _coerce_aliases(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator(
        "calories", "protein", "iron", "folic_acid", "calcium", "vitamin_d",
        mode="before",
    )
    @classmethod
    def _missing_nutrient_is_zero(cls, value: object) -> object:
        return 0.0 if value is None else value

    def to_record(self, fallback_id: str) -> FoodRecord:
        """Convert the validated payload into a domain record."""
        aliases = tuple(alias for alias in (a.strip() for a in self.aliases) if alias)
        return FoodRecord(
            id=self.id or fallback_id,
            name=self.name,
            category=self.category,
            aliases=aliases,
            standard_quantity=self.standard_quantity or "100g",
            nutrients=NutrientProfile(
                calories=self.calories,
                protein=self.protein,
                iron=self.iron,
                folic_acid=self.folic_acid,
                calcium=self.calcium,
                vitamin_d=self.vitamin_d,
            ),
            basis=self.basis,
            source_confidence=(
                self.confidence
                if self.confidence is not None
                else DEFAULT_SOURCE_CONFIDENCE
            ),
        )


@dataclass(frozen=True)
class ValidRecord:
    """A dataset entry that passed validation."""

    record: FoodRecord


@dataclass(frozen=True)
class InvalidRecord:
    """A dataset entry that was rejected."""

    key: str
    reason: str


RecordOutcome = ValidRecord | InvalidRecord


@dataclass(frozen=True)
class DatasetParseResult:
    """Outcome of validating a whole dataset payload."""

    records: list[FoodRecord]
    invalid: list[InvalidRecord]
    malformed: bool = False


def validate_record(key: str, raw: object) -> RecordOutcome:
    """Validate one raw dataset entry."""
    if not isinstance(raw, dict):
        return InvalidRecord(key=key, reason="entry is not an object")
    try:
        payload = FoodRecordPayload.model_validate(raw)
    except ValidationError as exc:
        return InvalidRecord(key=key, reason=_summarize_errors(exc))
    return ValidRecord(record=payload.to_record(fallback_id=key))


def parse_dataset(payload: object) -> DatasetParseResult:
    """Validate a dataset payload into records.

    The expected shape is ``{"foods": {id: {...}}}``. A ``foods`` list, or a
    bare list of entries, is accepted too. Anything else is reported as
    malformed with zero records.
    """
    entries = _entries(payload)
    if entries is None:
        return DatasetParseResult(records=[], invalid=[], malformed=True)

    records: list[FoodRecord] = []
    invalid: list[InvalidRecord] = []
    for key, raw in entries:
        outcome = validate_record(key, raw)
        if isinstance(outcome, ValidRecord):
            records.append(outcome.record)
        else:
            invalid.append(outcome)
    return DatasetParseResult(records=records, invalid=invalid)


def _entries(payload: object) -> list[tuple[str, object]] | None:
    foods = payload.get("foods") if isinstance(payload, dict) else payload
    if isinstance(foods, dict):
        return [(str(key), raw) for key, raw in foods.items()]
    if isinstance(foods, list):
        return [(_list_key(index, raw), raw) for index, raw in enumerate(foods)]
    return None


def _list_key(index: int, raw: object) -> str:
    if isinstance(raw, dict) and raw.get("id") not in (None, ""):
        return str(raw["id"])
    return str(index)


def _summarize_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "entry"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)
