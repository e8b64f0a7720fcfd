"""Quantity value objects."""

from dataclasses import dataclass

_COMPACT_UNITS = frozenset({"g", "kg", "mg", "ml", "l", "oz", "lb"})


@dataclass(frozen=True)
class ParsedQuantity:
    """Structured form of a free-text quantity."""

    value: float
    unit: str
    confidence: float

    def display(self) -> str:
        """Return a short human readable form such as ``150g`` or ``2 piece``."""
        if self.unit in _COMPACT_UNITS:
            return f"{self.value:g}{self.unit}"
        return f"{self.value:g} {self.unit}"


@dataclass(frozen=True)
class GramsResult:
    """A quantity converted to grams."""

    grams: float
    confidence: float


@dataclass(frozen=True)
class StandardQuantity:
    """Parsed form of a food's standard-quantity descriptor, e.g. ``1個(200g)``."""

    count: float
    unit: str | None
    grams: float
