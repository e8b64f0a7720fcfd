"""Tests for confidence tiers and display hints."""

import math

import pytest

from meal_nutrition.domain.matching import ConfidenceTier
from meal_nutrition.services.confidence import (
    combine_confidences,
    confidence_display,
    confidence_tier,
)


@pytest.mark.parametrize(
    ("score", "tier"),
    [
        (1.0, ConfidenceTier.HIGH),
        (0.8, ConfidenceTier.HIGH),
        (0.79, ConfidenceTier.MEDIUM),
        (0.6, ConfidenceTier.MEDIUM),
        (0.59, ConfidenceTier.LOW),
        (0.4, ConfidenceTier.LOW),
        (0.39, ConfidenceTier.VERY_LOW),
        (0.2, ConfidenceTier.VERY_LOW),
        (0.19, None),
        (0.0, None),
        (-3.0, None),
        (7.5, ConfidenceTier.HIGH),
        (math.nan, None),
    ],
)
def test_confidence_tier_cut_points(score: float, tier: ConfidenceTier | None) -> None:
    assert confidence_tier(score) is tier


def test_confidence_display_for_tiers() -> None:
    high = confidence_display(0.95)
    assert high.level is ConfidenceTier.HIGH
    assert high.color_class == "text-green-600"
    assert high.icon == "check-circle"

    low = confidence_display(0.45)
    assert low.level is ConfidenceTier.LOW
    assert "verify" in low.message


def test_confidence_display_without_tier() -> None:
    for score in (0.05, -1.0, math.nan):
        display = confidence_display(score)
        assert display.level is None
        assert display.message == "No match - manual entry required"


def test_combine_confidences_takes_weakest_signal() -> None:
    assert combine_confidences(0.9, 1.0, 0.7, 0.85) == 0.7
    assert combine_confidences(1.2, 1.5) == 1.0
    assert combine_confidences(0.5, -0.2) == 0.0
    assert combine_confidences(0.6, math.nan) == 0.6
    assert combine_confidences() == 0.0
