"""Exceptions raised by the nutrition core."""


class MealNutritionError(Exception):
    """Base class for nutrition core errors."""


class DatasetUnavailableError(MealNutritionError):
    """Raised when the reference dataset cannot be read at all."""


class QuantityError(MealNutritionError):
    """Base class for per-item quantity failures."""


class QuantityParseError(QuantityError):
    """Raised when a quantity text cannot be parsed."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Cannot parse quantity {text!r} ({reason})")


class QuantityConversionError(QuantityError):
    """Raised when a parsed quantity cannot be converted to grams."""

    def __init__(self, value: float, unit: str, reason: str) -> None:
        self.value = value
        self.unit = unit
        self.reason = reason
        super().__init__(f"Cannot convert {value:g} {unit} to grams ({reason})")
