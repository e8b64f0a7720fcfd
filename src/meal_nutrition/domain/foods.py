"""Reference food domain models."""

from dataclasses import asdict, dataclass
from datetime import datetime

NUTRIENT_UNITS: dict[str, str] = {
    "calories": "kcal",
    "protein": "g",
    "iron": "mg",
    "folic_acid": "mcg",
    "calcium": "mg",
    "vitamin_d": "mcg",
}

BASIS_PER_100G = "per100g"
BASIS_PER_SERVING = "perServing"


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient amounts for one basis quantity of a food."""

    calories: float = 0.0
    protein: float = 0.0
    iron: float = 0.0
    folic_acid: float = 0.0
    calcium: float = 0.0
    vitamin_d: float = 0.0

    def as_dict(self) -> dict[str, float]:
        """Return nutrient amounts keyed by nutrient name."""
        return asdict(self)

    def scaled(self, factor: float) -> "NutrientProfile":
        """Return a copy with every amount multiplied by factor."""
        return NutrientProfile(
            **{name: value * factor for name, value in self.as_dict().items()}
        )


@dataclass(frozen=True)
class FoodRecord:
    """A single food from the reference nutrition dataset."""

    id: str
    name: str
    category: str
    aliases: tuple[str, ...]
    standard_quantity: str
    nutrients: NutrientProfile
    basis: str = BASIS_PER_100G
    source_confidence: float = 0.8


@dataclass(frozen=True)
class StoreStats:
    """Snapshot of the reference store state."""

    loaded: bool
    record_count: int
    name_count: int
    alias_count: int
    generation: int
    loaded_at: datetime | None
