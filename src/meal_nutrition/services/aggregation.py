"""Meal nutrition aggregation."""

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from statistics import fmean

from pydantic import ValidationError

from meal_nutrition.domain.foods import BASIS_PER_SERVING, NUTRIENT_UNITS, FoodRecord
from meal_nutrition.domain.nutrition import (
    AnalysisMeta,
    AnalyzedFood,
    FoodBreakdown,
    MatchedFoodSummary,
    MealFoodItem,
    Nutrient,
    NutritionAnalysisResult,
    NutritionReport,
    NutritionSummary,
    ParsedFoodInput,
    Reliability,
)
from meal_nutrition.errors import QuantityError
from meal_nutrition.services.balance import BalanceScorer, EvennessBalanceScorer
from meal_nutrition.services.confidence import combine_confidences
from meal_nutrition.services.input_parser import parse_bulk_input
from meal_nutrition.services.matching import FoodMatchingService
from meal_nutrition.services.quantity import (
    convert_to_grams,
    parse_quantity,
    serving_grams,
)

_logger = logging.getLogger(__name__)


@dataclass
class NutritionAggregationService:
    """Turns parsed food mentions into a nutrition report.

    Every input item is accounted for: it contributes to the totals, lands in
    the unmatched list, or produces an error entry. One bad item never aborts
    the batch.
    """

    matching_service: FoodMatchingService
    balance_scorer: BalanceScorer = field(default_factory=EvennessBalanceScorer)
    low_confidence_threshold: float = 0.7
    debug: bool = False

    async def process_parsed_foods(
        self, items: Sequence[ParsedFoodInput | Mapping[str, object]]
    ) -> NutritionAnalysisResult:
        """Match, convert and aggregate a batch of parsed food mentions."""
        started = time.perf_counter()
        errors: list[str] = []
        inputs: list[ParsedFoodInput] = []
        for position, raw in enumerate(items, start=1):
            try:
                inputs.append(_coerce_input(raw))
            except ValidationError as exc:
                _logger.warning("Rejected input item #%s: %s", position, exc)
                errors.append(
                    f"Invalid input item #{position}: {exc.error_count()} validation error(s)"
                )

        matches = await self.matching_service.match_foods(
            [item.food_name for item in inputs]
        )

        meal_items: list[MealFoodItem] = []
        records: dict[str, FoodRecord] = {}
        foods: list[AnalyzedFood] = []
        matched_foods: list[MatchedFoodSummary] = []
        unmatched: list[str] = []
        low_confidence: list[str] = []

        for item in inputs:
            match = matches.get(item.food_name)
            if match is None or match.record is None:
                unmatched.append(item.food_name)
                continue
            record = match.record
            try:
                quantity = parse_quantity(
                    item.quantity_text, record.name, record.category
                )
                grams = convert_to_grams(
                    quantity, record.name, record.category, record.standard_quantity
                )
            except QuantityError as exc:
                _logger.warning(
                    "Quantity handling failed: food=%r quantity=%r error=%s",
                    item.food_name,
                    item.quantity_text,
                    exc,
                )
                errors.append(f"Error processing {item.food_name}: {exc}")
                continue

            confidence = combine_confidences(
                match.similarity,
                item.confidence,
                quantity.confidence,
                grams.confidence,
            )
            if match.similarity < self.low_confidence_threshold:
                low_confidence.append(item.food_name)
            meal_items.append(
                MealFoodItem(
                    food_id=record.id,
                    original_input=item.food_name,
                    grams=grams.grams,
                    confidence=confidence,
                    quantity=quantity,
                )
            )
            records[record.id] = record
            foods.append(
                AnalyzedFood(
                    name=item.food_name,
                    quantity=quantity.display(),
                    confidence=confidence,
                )
            )
            matched_foods.append(
                MatchedFoodSummary(
                    original=item.food_name,
                    matched=record.name,
                    similarity=match.similarity,
                )
            )

        report = calculate_nutrition(
            meal_items,
            records,
            total_inputs=len(items),
            balance_scorer=self.balance_scorer,
        )
        totals = report.totals()
        elapsed_ms = (time.perf_counter() - started) * 1000
        if self.debug:
            _logger.info(
                "Meal analyzed: inputs=%s matched=%s unmatched=%s errors=%s ms=%.1f",
                len(items),
                len(meal_items),
                len(unmatched),
                len(errors),
                elapsed_ms,
            )
        return NutritionAnalysisResult(
            foods=foods,
            nutrition=NutritionSummary(
                calories=totals["calories"],
                protein=totals["protein"],
                iron=totals["iron"],
                folic_acid=totals["folic_acid"],
                calcium=totals["calcium"],
                vitamin_d=totals["vitamin_d"],
                confidence_score=report.reliability.confidence,
            ),
            report=report,
            meta=AnalysisMeta(
                unmatched_foods=unmatched,
                low_confidence_matches=low_confidence,
                errors=errors,
                total_items_found=len(meal_items),
                total_input_items=len(items),
                calculation_time=elapsed_ms,
                matched_foods=matched_foods,
            ),
        )

    async def analyze_text(self, text: str) -> NutritionAnalysisResult:
        """Parse a free-text meal description and analyze it."""
        return await self.process_parsed_foods(parse_bulk_input(text))

    async def calculate_from_name_quantities(
        self, pairs: Sequence[tuple[str, str | None]]
    ) -> NutritionAnalysisResult:
        """Analyze explicit name and quantity pairs at full input confidence."""
        return await self.process_parsed_foods(
            [
                ParsedFoodInput(food_name=name, quantity_text=quantity, confidence=1.0)
                for name, quantity in pairs
            ]
        )


def calculate_nutrition(
    items: Sequence[MealFoodItem],
    records: Mapping[str, FoodRecord],
    *,
    total_inputs: int,
    balance_scorer: BalanceScorer,
) -> NutritionReport:
    """Sum nutrient contributions of matched items into a report.

    Items whose record is missing are skipped with a warning.
    """
    totals = dict.fromkeys(NUTRIENT_UNITS, 0.0)
    breakdown: list[FoodBreakdown] = []
    for item in items:
        record = records.get(item.food_id)
        if record is None:
            _logger.warning("No reference record for food_id=%s", item.food_id)
            continue
        contribution = record.nutrients.scaled(_scale_factor(record, item.grams))
        amounts = contribution.as_dict()
        for name, value in amounts.items():
            totals[name] += value
        breakdown.append(
            FoodBreakdown(
                food_id=record.id,
                name=record.name,
                original_input=item.original_input,
                grams=item.grams,
                confidence=item.confidence,
                calories=contribution.calories,
                nutrients=_nutrient_list(amounts),
            )
        )

    confidences = [item.confidence for item in items]
    completeness = min(1.0, len(items) / total_inputs) if total_inputs > 0 else 0.0
    balance = max(0.0, min(100.0, balance_scorer.score(totals)))
    return NutritionReport(
        total_calories=totals["calories"],
        total_nutrients=_nutrient_list(totals),
        food_breakdown=breakdown,
        reliability=Reliability(
            confidence=fmean(confidences) if confidences else 0.0,
            balance_score=balance,
            completeness=completeness,
        ),
    )


def _scale_factor(record: FoodRecord, grams: float) -> float:
    """Return the multiplier from the record's basis amount to grams."""
    if grams <= 0:
        return 0.0
    if record.basis == BASIS_PER_SERVING:
        serving = serving_grams(record.standard_quantity)
        if serving:
            return grams / serving
    return grams / 100


def _nutrient_list(amounts: Mapping[str, float]) -> list[Nutrient]:
    return [
        Nutrient(name=name, value=amounts.get(name, 0.0), unit=unit)
        for name, unit in NUTRIENT_UNITS.items()
    ]


def _coerce_input(raw: ParsedFoodInput | Mapping[str, object]) -> ParsedFoodInput:
    if isinstance(raw, ParsedFoodInput):
        return raw
    return ParsedFoodInput.model_validate(raw)
