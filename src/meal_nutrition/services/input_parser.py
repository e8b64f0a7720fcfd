"""Split free-text meal descriptions into food names and quantity text."""

import re
import unicodedata

from meal_nutrition.domain.nutrition import ParsedFoodInput

_NUMBER = r"\d+(?:[./]\d+)?"
_UNIT = r"[^\W\d_]+"
_QUANTITY = rf"{_NUMBER}\s*{_UNIT}"

# Ordered from most to least specific.
_PATTERNS: tuple[tuple[re.Pattern[str], float], ...] = (
    (re.compile(rf"^(?P<name>.+?)\s+(?P<quantity>{_QUANTITY})$"), 0.9),
    (re.compile(rf"^(?P<name>.+?)\s*[(](?P<quantity>{_QUANTITY})[)]$"), 0.9),
    (re.compile(rf"^(?P<name>.*?[^\d\s.])(?P<quantity>{_QUANTITY})$"), 0.7),
    (re.compile(rf"^(?P<quantity>{_QUANTITY})\s+(?P<name>.+)$"), 0.7),
    (re.compile(rf"^(?P<name>.+?)\s+(?P<quantity>{_NUMBER})$"), 0.7),
    (re.compile(rf"^(?P<quantity>{_NUMBER})\s+(?P<name>.+)$"), 0.7),
)
_SEPARATORS = re.compile(r"\n|、|,|;")


def parse_input(text: str | None) -> ParsedFoodInput:
    """Split one entry such as ``rice 150g`` or ``ごはん(150g)``.

    Entries without a recognizable quantity keep the whole text as the food
    name with a null quantity.
    """
    if not text or not text.strip():
        return ParsedFoodInput(food_name="", quantity_text=None, confidence=0.0)

    normalized = unicodedata.normalize("NFKC", text).strip()
    for pattern, confidence in _PATTERNS:
        match = pattern.match(normalized)
        if match is None:
            continue
        name = match["name"].strip()
        if not name:
            continue
        return ParsedFoodInput(
            food_name=name,
            quantity_text=match["quantity"].strip(),
            confidence=confidence,
        )
    return ParsedFoodInput(food_name=normalized, quantity_text=None, confidence=0.8)


def parse_bulk_input(text: str | None) -> list[ParsedFoodInput]:
    """Split text on newlines, commas, semicolons and 、 and parse each entry."""
    if not text or not text.strip():
        return []
    entries = (entry.strip() for entry in _SEPARATORS.split(text))
    return [parse_input(entry) for entry in entries if entry]
