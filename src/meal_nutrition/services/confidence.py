"""Confidence tiers, display hints and score combination."""

import math

from meal_nutrition.domain.matching import ConfidenceDisplay, ConfidenceTier

TIER_THRESHOLDS: tuple[tuple[ConfidenceTier, float], ...] = (
    (ConfidenceTier.HIGH, 0.8),
    (ConfidenceTier.MEDIUM, 0.6),
    (ConfidenceTier.LOW, 0.4),
    (ConfidenceTier.VERY_LOW, 0.2),
)
MIN_MATCH_SIMILARITY = TIER_THRESHOLDS[-1][1]

_DISPLAYS: dict[ConfidenceTier, ConfidenceDisplay] = {
    ConfidenceTier.HIGH: ConfidenceDisplay(
        level=ConfidenceTier.HIGH,
        color_class="text-green-600",
        icon="check-circle",
        message="High confidence",
    ),
    ConfidenceTier.MEDIUM: ConfidenceDisplay(
        level=ConfidenceTier.MEDIUM,
        color_class="text-yellow-600",
        icon="exclamation-circle",
        message="Medium confidence",
    ),
    ConfidenceTier.LOW: ConfidenceDisplay(
        level=ConfidenceTier.LOW,
        color_class="text-orange-600",
        icon="exclamation-triangle",
        message="Low confidence - please verify",
    ),
    ConfidenceTier.VERY_LOW: ConfidenceDisplay(
        level=ConfidenceTier.VERY_LOW,
        color_class="text-red-500",
        icon="question-circle",
        message="Very low confidence - manual check recommended",
    ),
}
_NO_MATCH_DISPLAY = ConfidenceDisplay(
    level=None,
    color_class="text-red-600",
    icon="times-circle",
    message="No match - manual entry required",
)


def confidence_tier(score: float) -> ConfidenceTier | None:
    """Return the tier for a score, or None below the lowest threshold."""
    if math.isnan(score):
        return None
    for tier, threshold in TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return None


def confidence_display(score: float) -> ConfidenceDisplay:
    tier = confidence_tier(score)
    if tier is None:
        return _NO_MATCH_DISPLAY
    return _DISPLAYS[tier]


def combine_confidences(*scores: float) -> float:
    """Combine independent confidence signals; the weakest one bounds the result."""
    if not scores:
        return 0.0
    usable = [score for score in scores if not math.isnan(score)]
    if not usable:
        return 0.0
    return max(0.0, min(1.0, min(usable)))
