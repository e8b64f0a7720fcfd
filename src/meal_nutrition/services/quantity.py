"""Free-text quantity parsing and conversion to grams."""

import logging
import math
import re

from meal_nutrition.domain.quantity import GramsResult, ParsedQuantity, StandardQuantity
from meal_nutrition.errors import QuantityConversionError, QuantityParseError
from meal_nutrition.services.text import fold, normalize_key

_logger = logging.getLogger(__name__)

DEFAULT_UNIT = "piece"
SERVING_UNIT = "serving"

UNIT_ALIASES: dict[str, str] = {
    "g": "g",
    "gr": "g",
    "gram": "g",
    "grams": "g",
    "グラム": "g",
    "kg": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "キロ": "kg",
    "キログラム": "kg",
    "mg": "mg",
    "milligram": "mg",
    "milligrams": "mg",
    "ml": "ml",
    "cc": "ml",
    "milliliter": "ml",
    "millilitre": "ml",
    "ミリリットル": "ml",
    "l": "l",
    "liter": "l",
    "litre": "l",
    "リットル": "l",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "tbsp": "tbsp",
    "tablespoon": "tbsp",
    "大さじ": "tbsp",
    "大匙": "tbsp",
    "tsp": "tsp",
    "teaspoon": "tsp",
    "小さじ": "tsp",
    "小匙": "tsp",
    "cup": "cup",
    "カップ": "cup",
    "bowl": "bowl",
    "杯": "bowl",
    "膳": "bowl",
    "serving": "serving",
    "portion": "serving",
    "人前": "serving",
    "人分": "serving",
    "標準量": "serving",
    "go": "go",
    "合": "go",
    "piece": "piece",
    "pc": "piece",
    "pcs": "piece",
    "small": "piece",
    "medium": "piece",
    "large": "piece",
    "個": "piece",
    "つ": "piece",
    "slice": "slice",
    "切れ": "slice",
    "切": "slice",
    "sheet": "sheet",
    "枚": "sheet",
    "stick": "stick",
    "本": "stick",
    "bag": "bag",
    "packet": "bag",
    "pack": "bag",
    "袋": "bag",
    "パック": "bag",
    "can": "can",
    "缶": "can",
    "clove": "clove",
    "かけ": "clove",
    "片": "clove",
    "bunch": "bunch",
    "束": "bunch",
    "fish": "fish",
    "尾": "fish",
    "匹": "fish",
    "head": "head",
    "株": "head",
}

MASS_UNIT_GRAMS: dict[str, float] = {
    "g": 1.0,
    "kg": 1000.0,
    "mg": 0.001,
    "oz": 28.3495,
    "lb": 453.592,
}
# Treated as water density.
VOLUME_UNIT_GRAMS: dict[str, float] = {"ml": 1.0, "l": 1000.0}
MEASURE_UNIT_GRAMS: dict[str, float] = {
    "tbsp": 15.0,
    "tsp": 5.0,
    "cup": 200.0,
    "bowl": 150.0,
    "go": 150.0,
}
COUNTING_UNIT_GRAMS: dict[str, float] = {
    "piece": 50.0,
    "slice": 80.0,
    "sheet": 60.0,
    "stick": 40.0,
    "bag": 100.0,
    "can": 100.0,
    "clove": 3.0,
    "bunch": 100.0,
    "fish": 80.0,
    "head": 100.0,
}
DEFAULT_SERVING_GRAMS = 100.0
# Upper bound for one item; keeps nutrient totals finite.
MAX_GRAMS = 1_000_000.0

_RICE_UNITS = {"bowl": 150.0, "cup": 150.0}
_LEAFY_UNITS = {"bunch": 80.0, "head": 100.0}
_MEAT_UNITS = {"slice": 100.0, "sheet": 100.0}
_SEAFOOD_UNITS = {"slice": 80.0, "fish": 100.0}
_FRUIT_PIECES = {
    "apple": 200.0,
    "りんご": 200.0,
    "リンゴ": 200.0,
    "mandarin": 80.0,
    "みかん": 80.0,
    "banana": 100.0,
    "バナナ": 100.0,
}

CATEGORY_UNIT_GRAMS: dict[str, dict[str, float]] = {
    "rice": _RICE_UNITS,
    "grains-rice": _RICE_UNITS,
    "穀類-米": _RICE_UNITS,
    "vegetables-leafy": _LEAFY_UNITS,
    "野菜-葉物": _LEAFY_UNITS,
    "meat": _MEAT_UNITS,
    "肉類": _MEAT_UNITS,
    "seafood": _SEAFOOD_UNITS,
    "魚介類": _SEAFOOD_UNITS,
}
FOOD_UNIT_GRAMS: dict[str, dict[str, dict[str, float]]] = {
    "fruit": {"piece": _FRUIT_PIECES},
    "果物": {"piece": _FRUIT_PIECES},
}
# Counting unit assumed for a bare number, by category.
CATEGORY_DEFAULT_UNITS: dict[str, str] = {
    "rice": "bowl",
    "grains-rice": "bowl",
    "穀類-米": "bowl",
}

WORD_NUMBERS: dict[str, float] = {
    "a": 1.0,
    "an": 1.0,
    "one": 1.0,
    "two": 2.0,
    "three": 3.0,
    "four": 4.0,
    "five": 5.0,
    "six": 6.0,
    "seven": 7.0,
    "eight": 8.0,
    "nine": 9.0,
    "ten": 10.0,
    "half": 0.5,
    "一": 1.0,
    "二": 2.0,
    "三": 3.0,
    "四": 4.0,
    "五": 5.0,
    "六": 6.0,
    "七": 7.0,
    "八": 8.0,
    "九": 9.0,
    "十": 10.0,
    "半": 0.5,
}

_NUMBER = r"\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|\d+(?:\.\d+)?|\.\d+"
_LEADING_NUMBER = re.compile(rf"^(?P<number>{_NUMBER})\s*(?P<unit>.*)$")
_TRAILING_NUMBER = re.compile(rf"^(?P<unit>\D+?)\s*(?P<number>{_NUMBER})$")
_LEADING_WORD = re.compile(r"^(?P<word>[a-z]+)\b\s*(?P<unit>.*)$")
_LEADING_KANJI = re.compile(r"^(?P<word>[一二三四五六七八九十半])\s*(?P<unit>.*)$")
_EXPLICIT_WEIGHT = re.compile(
    rf"[(]\s*(?P<number>{_NUMBER})\s*(?P<unit>g|kg|mg|ml|l|oz|lb)\s*[)]\s*$"
)
_PARENTHETICAL = re.compile(r"[(][^)]*[)]")
_OF_SUFFIX = re.compile(r"\s+of\b.*$")
_STANDARD_QUANTITY = re.compile(
    rf"^(?P<count>{_NUMBER})?\s*(?P<unit>[^\d(]*?)\s*"
    rf"[(]\s*(?P<grams>{_NUMBER})\s*(?P<mass>g|kg|mg|ml|l|oz|lb)\s*[)]$"
)


def parse_quantity(
    quantity_text: str | None,
    food_name: str | None = None,
    category: str | None = None,
) -> ParsedQuantity:
    """Parse free-text quantity such as ``150g``, ``大さじ2`` or ``two slices``.

    Missing text means one serving at low confidence. A bare number uses the
    counting unit for the category, or pieces.

    Raises:
        QuantityParseError: if the unit is unknown or the text has neither a
            number nor a unit.
    """
    if quantity_text is None or not quantity_text.strip():
        return ParsedQuantity(value=1.0, unit=SERVING_UNIT, confidence=0.5)

    text = " ".join(fold(quantity_text).split())

    explicit = _EXPLICIT_WEIGHT.search(text)
    if explicit:
        return ParsedQuantity(
            value=_to_number(explicit["number"], quantity_text),
            unit=UNIT_ALIASES[explicit["unit"]],
            confidence=0.9,
        )
    text = _PARENTHETICAL.sub("", text).strip()
    default_unit = CATEGORY_DEFAULT_UNITS.get(normalize_key(category), DEFAULT_UNIT)

    match = _LEADING_NUMBER.match(text)
    if match:
        value = _to_number(match["number"], quantity_text)
        return _with_unit(value, match["unit"], 0.9, quantity_text, default_unit)

    match = _TRAILING_NUMBER.match(text)
    if match:
        unit = resolve_unit(match["unit"])
        if unit is None:
            raise QuantityParseError(quantity_text, "unknown_unit")
        return ParsedQuantity(
            value=_to_number(match["number"], quantity_text),
            unit=unit,
            confidence=0.9,
        )

    match = _LEADING_WORD.match(text) or _LEADING_KANJI.match(text)
    if match and match["word"] in WORD_NUMBERS:
        value = WORD_NUMBERS[match["word"]]
        return _with_unit(value, match["unit"], 0.8, quantity_text, default_unit)

    unit = resolve_unit(text)
    if unit is not None:
        return ParsedQuantity(value=1.0, unit=unit, confidence=0.7)

    _logger.debug(
        "Unparseable quantity: text=%r food=%r category=%r",
        quantity_text,
        food_name,
        category,
    )
    raise QuantityParseError(quantity_text, "malformed")


def resolve_unit(token: str) -> str | None:
    """Map a unit spelling (English or Japanese, singular or plural) to its key."""
    cleaned = _OF_SUFFIX.sub("", fold(token)).strip().rstrip(".")
    if not cleaned:
        return None
    if cleaned in UNIT_ALIASES:
        return UNIT_ALIASES[cleaned]
    if cleaned.endswith("es") and cleaned[:-2] in UNIT_ALIASES:
        return UNIT_ALIASES[cleaned[:-2]]
    if cleaned.endswith("s") and cleaned[:-1] in UNIT_ALIASES:
        return UNIT_ALIASES[cleaned[:-1]]
    return None


def parse_standard_quantity(descriptor: str | None) -> StandardQuantity | None:
    """Parse descriptors like ``1個(200g)``, ``1 serving (150g)`` or ``100g``."""
    if not descriptor or not descriptor.strip():
        return None
    text = " ".join(fold(descriptor).split())

    match = _STANDARD_QUANTITY.match(text)
    if match:
        try:
            count = _to_number(match["count"], descriptor) if match["count"] else 1.0
            grams = _to_number(match["grams"], descriptor)
        except QuantityParseError:
            return None
        unit_text = match["unit"].strip()
        unit = resolve_unit(unit_text) if unit_text else SERVING_UNIT
        factor = _gram_factor(UNIT_ALIASES[match["mass"]])
        if count <= 0:
            return None
        return StandardQuantity(count=count, unit=unit, grams=grams * factor)

    match = _LEADING_NUMBER.match(text)
    if match:
        unit = resolve_unit(match["unit"])
        if unit is None or _gram_factor(unit) is None:
            return None
        try:
            value = _to_number(match["number"], descriptor)
        except QuantityParseError:
            return None
        if value <= 0:
            return None
        return StandardQuantity(count=value, unit=unit, grams=value * _gram_factor(unit))
    return None


def convert_to_grams(
    quantity: ParsedQuantity,
    food_name: str | None = None,
    category: str | None = None,
    standard_quantity: str | None = None,
) -> GramsResult:
    """Convert a parsed quantity to grams.

    Lookups run from most to least specific: mass and volume units, the
    food's own standard quantity, food and category tables, then generic
    per-unit weights.

    Raises:
        QuantityConversionError: if the value is negative, the result exceeds
            ``MAX_GRAMS`` or the unit has no gram equivalent.
    """
    value, unit = quantity.value, quantity.unit
    if math.isnan(value) or value < 0:
        raise QuantityConversionError(value, unit, "negative quantity")
    if not math.isfinite(value):
        raise QuantityConversionError(value, unit, "quantity out of range")

    result = _lookup_grams(value, unit, food_name, category, standard_quantity)
    if not math.isfinite(result.grams) or result.grams > MAX_GRAMS:
        raise QuantityConversionError(value, unit, "quantity out of range")
    return result


def _lookup_grams(
    value: float,
    unit: str,
    food_name: str | None,
    category: str | None,
    standard_quantity: str | None,
) -> GramsResult:
    if unit in MASS_UNIT_GRAMS:
        return GramsResult(grams=value * MASS_UNIT_GRAMS[unit], confidence=1.0)
    if unit in VOLUME_UNIT_GRAMS:
        return GramsResult(grams=value * VOLUME_UNIT_GRAMS[unit], confidence=0.98)

    standard = parse_standard_quantity(standard_quantity)
    if standard is not None:
        if standard.unit == unit:
            return GramsResult(
                grams=value * standard.grams / standard.count, confidence=0.95
            )
        if unit == SERVING_UNIT:
            return GramsResult(grams=value * standard.grams, confidence=0.9)

    category_key = normalize_key(category)
    if category_key:
        food_key = normalize_key(food_name)
        specific = FOOD_UNIT_GRAMS.get(category_key, {}).get(unit, {})
        for keyword, grams in specific.items():
            if food_key and normalize_key(keyword) in food_key:
                return GramsResult(grams=value * grams, confidence=0.95)
        grams = CATEGORY_UNIT_GRAMS.get(category_key, {}).get(unit)
        if grams is not None:
            return GramsResult(grams=value * grams, confidence=0.9)

    if unit in MEASURE_UNIT_GRAMS:
        return GramsResult(grams=value * MEASURE_UNIT_GRAMS[unit], confidence=0.85)
    if unit in COUNTING_UNIT_GRAMS:
        return GramsResult(grams=value * COUNTING_UNIT_GRAMS[unit], confidence=0.7)
    if unit == SERVING_UNIT:
        return GramsResult(grams=value * DEFAULT_SERVING_GRAMS, confidence=0.6)
    raise QuantityConversionError(value, unit, "unknown unit")


def serving_grams(standard_quantity: str | None) -> float | None:
    """Return the gram weight of one standard quantity, if it can be parsed."""
    standard = parse_standard_quantity(standard_quantity)
    if standard is None or standard.grams <= 0:
        return None
    return standard.grams


def _with_unit(
    value: float,
    unit_text: str,
    confidence: float,
    original: str,
    default_unit: str,
) -> ParsedQuantity:
    if not unit_text.strip():
        return ParsedQuantity(value=value, unit=default_unit, confidence=0.7)
    unit = resolve_unit(unit_text)
    if unit is None:
        raise QuantityParseError(original, "unknown_unit")
    return ParsedQuantity(value=value, unit=unit, confidence=confidence)


def _to_number(token: str, original: str) -> float:
    parts = token.replace("/", " / ").split()
    try:
        if "/" not in parts:
            value = float(token)
        elif len(parts) == 3:
            value = float(parts[0]) / float(parts[2])
        elif len(parts) == 4:
            value = float(parts[0]) + float(parts[1]) / float(parts[3])
        else:
            raise QuantityParseError(original, "malformed")
    except (ValueError, ZeroDivisionError) as exc:
        raise QuantityParseError(original, "malformed") from exc
    if not math.isfinite(value):
        raise QuantityParseError(original, "malformed")
    return value


def _gram_factor(unit: str) -> float | None:
    if unit in MASS_UNIT_GRAMS:
        return MASS_UNIT_GRAMS[unit]
    return VOLUME_UNIT_GRAMS.get(unit)
