"""Tests for the deterministic extraction model."""

from __future__ import annotations

import itertools

import pytest

from espresso_sim.engine.models import ExtractionParameters, ExtractionProfile, ExtractionQuality
from espresso_sim.engine.simulator import DEFAULT_MODEL, ExtractionModel, simulate


def _params(temperature: float = 93.0, pressure: float = 9.0, time_seconds: float = 25.0):
    return ExtractionParameters(
        temperature=temperature, pressure=pressure, time_seconds=time_seconds
    )


def test_ideal_shot_is_perfect_and_balanced() -> None:
    outcome = simulate(_params())

    assert outcome.quality_score == 100.0
    assert outcome.quality is ExtractionQuality.PERFECT
    assert outcome.result == "Perfect Extraction"
    assert outcome.extraction_yield_percent == 20.0
    assert outcome.profile is ExtractionProfile.BALANCED
    assert outcome.beverage_mass_grams == 37.5
    assert outcome.dose_grams == 18.0
    assert outcome.brew_ratio == 2.08


def test_shot_inside_tolerance_window_is_perfect() -> None:
    outcome = simulate(_params(95.0, 9.5, 27.0))

    assert outcome.quality is ExtractionQuality.PERFECT
    assert outcome.quality_score == 73.17
    assert outcome.extraction_yield_percent == 21.34
    assert outcome.profile is ExtractionProfile.BALANCED


def test_shot_within_twice_tolerance_is_good() -> None:
    outcome = simulate(_params(temperature=99.0))

    assert outcome.quality is ExtractionQuality.GOOD
    assert outcome.result == "Good Extraction"
    assert outcome.quality_score == 60.0


def test_cold_shot_is_suboptimal_and_under_extracted() -> None:
    outcome = simulate(_params(temperature=85.0))

    assert outcome.quality is ExtractionQuality.SUBOPTIMAL
    assert outcome.result == "Suboptimal Extraction"
    assert outcome.extraction_yield_percent == 17.2
    assert outcome.profile is ExtractionProfile.UNDER_EXTRACTED


def test_hot_long_high_pressure_shot_is_over_extracted() -> None:
    outcome = simulate(_params(100.0, 12.0, 40.0))

    assert outcome.quality_score == 0.0
    assert outcome.quality is ExtractionQuality.SUBOPTIMAL
    assert outcome.extraction_yield_percent == 26.65
    assert outcome.profile is ExtractionProfile.OVER_EXTRACTED


def test_higher_pressure_increases_beverage_mass() -> None:
    low = simulate(_params(pressure=8.0))
    high = simulate(_params(pressure=10.0))

    assert high.beverage_mass_grams > low.beverage_mass_grams
    assert high.brew_ratio > low.brew_ratio


def test_simulation_is_deterministic() -> None:
    params = _params(91.3, 8.7, 23.0)

    assert simulate(params) == simulate(params)


def test_simulation_is_total_over_validated_domain() -> None:
    temperatures = [85.0 + 0.75 * step for step in range(21)]
    pressures = [6.0 + 0.5 * step for step in range(13)]
    times = [15.0 + 2.5 * step for step in range(11)]

    for temperature, pressure, time_seconds in itertools.product(temperatures, pressures, times):
        outcome = simulate(_params(temperature, pressure, time_seconds))
        assert 0.0 <= outcome.quality_score <= 100.0
        low, high = DEFAULT_MODEL.yield_bounds
        assert low <= outcome.extraction_yield_percent <= high
        assert outcome.beverage_mass_grams > 0


def test_custom_model_changes_dose() -> None:
    model = ExtractionModel(dose_grams=20.0)

    outcome = simulate(_params(), model)

    assert outcome.dose_grams == 20.0
    assert outcome.brew_ratio == pytest.approx(37.5 / 20.0, abs=0.01)
