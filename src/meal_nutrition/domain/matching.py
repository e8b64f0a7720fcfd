"""Domain models for food matching."""

from dataclasses import dataclass
from enum import StrEnum

from meal_nutrition.domain.foods import FoodRecord


class ConfidenceTier(StrEnum):
    """Named confidence bands for a similarity or confidence score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"


@dataclass(frozen=True)
class ConfidenceDisplay:
    """Presentation hints for a confidence score."""

    level: ConfidenceTier | None
    color_class: str
    icon: str
    message: str


@dataclass(frozen=True)
class FoodCandidate:
    """A reference food returned by a search, with its similarity."""

    record: FoodRecord
    similarity: float


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one raw food name."""

    original_input: str
    record: FoodRecord | None
    similarity: float = 0.0
    tier: ConfidenceTier | None = None
    below_threshold: bool = False

    @property
    def matched(self) -> bool:
        """Return True when a reference record was found."""
        return self.record is not None


@dataclass(frozen=True)
class MatchingOptions:
    """Per-call overrides for food matching."""

    min_similarity: float | None = None
    limit: int | None = None
    category: str | None = None
    strict_mode: bool = False


@dataclass(frozen=True)
class MatchedPair:
    """A matched name together with its original quantity text."""

    name: str
    quantity_text: str | None
    match: MatchResult


@dataclass(frozen=True)
class PairMatches:
    """Name/quantity pairs partitioned into matched and not found."""

    matched: list[MatchedPair]
    not_found: list[str]
