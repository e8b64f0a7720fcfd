"""Tests for nutrient balance scoring."""

import pytest

from meal_nutrition.services.balance import (
    REFERENCE_DAILY_INTAKE,
    EvennessBalanceScorer,
    TargetFulfillmentBalanceScorer,
    get_balance_scorer,
    identify_deficient_nutrients,
)


def test_evenness_is_zero_without_nutrients() -> None:
    scorer = EvennessBalanceScorer()

    assert scorer.score(dict.fromkeys(REFERENCE_DAILY_INTAKE, 0.0)) == 0.0
    assert scorer.score({}) == 0.0


def test_evenness_is_full_for_even_coverage() -> None:
    scorer = EvennessBalanceScorer()
    totals = {name: intake * 0.3 for name, intake in REFERENCE_DAILY_INTAKE.items()}

    assert scorer.score(totals) == 100.0


def test_evenness_penalizes_single_nutrient_meals() -> None:
    scorer = EvennessBalanceScorer()
    lopsided = {"calories": 800.0}
    mixed = {"calories": 800.0, "protein": 20.0, "calcium": 300.0}

    assert scorer.score(lopsided) == 0.0
    assert 0.0 < scorer.score(mixed) < 100.0


def test_evenness_caps_ratios_at_full_intake() -> None:
    scorer = EvennessBalanceScorer(reference={"calories": 2000.0, "protein": 50.0})

    assert scorer.score({"calories": 9000.0, "protein": 50.0}) == 100.0


def test_target_fulfillment_mean() -> None:
    scorer = TargetFulfillmentBalanceScorer(targets={"protein": 50.0, "iron": 10.0})

    assert scorer.score({"protein": 25.0, "iron": 20.0}) == 75.0
    assert scorer.score({}) == 0.0
    assert TargetFulfillmentBalanceScorer(targets={"iron": 0.0}).score({}) == 0.0


def test_get_balance_scorer() -> None:
    assert isinstance(get_balance_scorer("evenness"), EvennessBalanceScorer)
    assert isinstance(get_balance_scorer("fulfillment"), TargetFulfillmentBalanceScorer)
    with pytest.raises(ValueError):
        get_balance_scorer("vibes")


def test_identify_deficient_nutrients() -> None:
    deficiencies = identify_deficient_nutrients(
        {"protein": 20.0, "iron": 9.0, "calcium": 100.0},
        {"protein": 50.0, "iron": 10.0, "calcium": 650.0, "vitamin_d": 0.0},
    )

    assert [d.nutrient for d in deficiencies] == ["protein", "calcium"]
    assert deficiencies[0].fulfillment_ratio == pytest.approx(0.4)
    assert deficiencies[0].current == 20.0
    assert deficiencies[0].target == 50.0
