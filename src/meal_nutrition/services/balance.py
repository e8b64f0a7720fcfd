"""Nutrient balance scoring."""

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from meal_nutrition.domain.nutrition import NutrientDeficiency

# Adult reference daily intake per nutrient, in the units of NUTRIENT_UNITS.
REFERENCE_DAILY_INTAKE: dict[str, float] = {
    "calories": 2000.0,
    "protein": 50.0,
    "iron": 10.5,
    "folic_acid": 240.0,
    "calcium": 650.0,
    "vitamin_d": 8.5,
}


class BalanceScorer(Protocol):
    """Scores nutrient totals on a 0-100 scale."""

    def score(self, totals: Mapping[str, float]) -> float:
        """Return a balance score between 0 and 100."""


@dataclass
class EvennessBalanceScorer:
    """Scores how evenly a meal covers each nutrient's reference intake.

    Each nutrient's share of its reference intake is capped at 1. The score is
    the normalized Shannon entropy of those shares, so 100 means every
    nutrient is covered to the same degree and 0 means nothing is covered.
    """

    reference: Mapping[str, float] = field(
        default_factory=lambda: dict(REFERENCE_DAILY_INTAKE)
    )

    def score(self, totals: Mapping[str, float]) -> float:
        ratios = [
            min(1.0, max(0.0, totals.get(name, 0.0)) / intake)
            for name, intake in self.reference.items()
            if intake > 0
        ]
        covered = sum(ratios)
        if covered <= 0:
            return 0.0
        if len(ratios) == 1:
            return 100.0
        entropy = 0.0
        for ratio in ratios:
            share = ratio / covered
            if share > 0:
                entropy -= share * math.log(share)
        return round(100.0 * entropy / math.log(len(ratios)), 1)


@dataclass
class TargetFulfillmentBalanceScorer:
    """Scores the mean fulfillment of per-nutrient targets, each capped at 100%."""

    targets: Mapping[str, float] = field(
        default_factory=lambda: dict(REFERENCE_DAILY_INTAKE)
    )

    def score(self, totals: Mapping[str, float]) -> float:
        fulfillment = [
            min(1.0, max(0.0, totals.get(name, 0.0)) / target)
            for name, target in self.targets.items()
            if target > 0
        ]
        if not fulfillment:
            return 0.0
        return float(round(sum(fulfillment) / len(fulfillment) * 100))


BALANCE_SCORERS: dict[str, Callable[[], BalanceScorer]] = {
    "evenness": EvennessBalanceScorer,
    "fulfillment": TargetFulfillmentBalanceScorer,
}


def get_balance_scorer(name: str) -> BalanceScorer:
    try:
        return BALANCE_SCORERS[name]()
    except KeyError as exc:
        raise ValueError(f"Unknown balance scorer: {name}") from exc


def identify_deficient_nutrients(
    totals: Mapping[str, float],
    targets: Mapping[str, float],
    threshold: float = 0.7,
) -> list[NutrientDeficiency]:
    """List nutrients whose fulfillment of a positive target is below threshold."""
    deficiencies: list[NutrientDeficiency] = []
    for nutrient, target in targets.items():
        if target <= 0:
            continue
        current = max(0.0, totals.get(nutrient, 0.0))
        ratio = current / target
        if ratio < threshold:
            deficiencies.append(
                NutrientDeficiency(
                    nutrient=nutrient,
                    fulfillment_ratio=ratio,
                    current=current,
                    target=target,
                )
            )
    return deficiencies
