"""Deterministic espresso extraction model.

The model scores a shot by how far each parameter sits from an ideal point,
measured in units of that parameter's tolerance:

    d = |value - ideal| / tolerance
    axis score = max(0, 1 - d / 2)
    quality score = 100 * sum(weight * axis score)

A shot is ``perfect`` when every axis is within tolerance (d <= 1), ``good``
when every axis is within twice the tolerance, and ``suboptimal`` otherwise.

Extraction yield is a linear response around 20 % at the ideal point and
decides whether the cup reads under-extracted, balanced or over-extracted.
Beverage mass follows a flow rate proportional to pump pressure.

Every function here is pure so the model can be exercised over the whole
validated parameter space without a store or an HTTP client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .models import ExtractionOutcome, ExtractionParameters, ExtractionProfile, ExtractionQuality


@dataclass(frozen=True)
class AxisModel:
    ideal: float
    tolerance: float
    weight: float

    def deviation(self, value: float) -> float:
        return abs(value - self.ideal) / self.tolerance

    def score(self, value: float) -> float:
        return max(0.0, 1.0 - self.deviation(value) / 2.0)

    @property
    def window(self) -> Tuple[float, float]:
        return (self.ideal - self.tolerance, self.ideal + self.tolerance)


@dataclass(frozen=True)
class ExtractionModel:
    temperature: AxisModel = AxisModel(ideal=93.0, tolerance=3.0, weight=0.4)
    pressure: AxisModel = AxisModel(ideal=9.0, tolerance=1.0, weight=0.3)
    time_seconds: AxisModel = AxisModel(ideal=25.0, tolerance=5.0, weight=0.3)

    base_yield_percent: float = 20.0
    yield_per_degree: float = 0.35
    yield_per_bar: float = 0.8
    yield_per_second: float = 0.12
    yield_bounds: Tuple[float, float] = (12.0, 28.0)
    balanced_yield: Tuple[float, float] = (18.0, 22.0)

    flow_grams_per_second: float = 1.5
    dose_grams: float = 18.0

    def axes(self, params: ExtractionParameters) -> Tuple[Tuple[AxisModel, float], ...]:
        return (
            (self.temperature, params.temperature),
            (self.pressure, params.pressure),
            (self.time_seconds, params.time_seconds),
        )


DEFAULT_MODEL = ExtractionModel()


def quality_score(params: ExtractionParameters, model: ExtractionModel = DEFAULT_MODEL) -> float:
    total = sum(axis.weight * axis.score(value) for axis, value in model.axes(params))
    return round(min(100.0, max(0.0, 100.0 * total)), 2)


def classify(params: ExtractionParameters, model: ExtractionModel = DEFAULT_MODEL) -> ExtractionQuality:
    worst = max(axis.deviation(value) for axis, value in model.axes(params))
    if worst <= 1.0:
        return ExtractionQuality.PERFECT
    if worst <= 2.0:
        return ExtractionQuality.GOOD
    return ExtractionQuality.SUBOPTIMAL


def extraction_yield(params: ExtractionParameters, model: ExtractionModel = DEFAULT_MODEL) -> float:
    raw = (
        model.base_yield_percent
        + model.yield_per_degree * (params.temperature - model.temperature.ideal)
        + model.yield_per_bar * (params.pressure - model.pressure.ideal)
        + model.yield_per_second * (params.time_seconds - model.time_seconds.ideal)
    )
    low, high = model.yield_bounds
    return round(min(high, max(low, raw)), 2)


def _profile(yield_percent: float, model: ExtractionModel) -> ExtractionProfile:
    low, high = model.balanced_yield
    if yield_percent < low:
        return ExtractionProfile.UNDER_EXTRACTED
    if yield_percent > high:
        return ExtractionProfile.OVER_EXTRACTED
    return ExtractionProfile.BALANCED


def simulate(params: ExtractionParameters, model: ExtractionModel = DEFAULT_MODEL) -> ExtractionOutcome:
    """Derive the outcome of one shot from validated parameters."""
    quality = classify(params, model)
    yield_percent = extraction_yield(params, model)
    flow_rate = model.flow_grams_per_second * params.pressure / model.pressure.ideal
    beverage_mass = round(flow_rate * params.time_seconds, 2)
    return ExtractionOutcome(
        quality_score=quality_score(params, model),
        quality=quality,
        result=quality.label,
        extraction_yield_percent=yield_percent,
        profile=_profile(yield_percent, model),
        beverage_mass_grams=beverage_mass,
        dose_grams=model.dose_grams,
        brew_ratio=round(beverage_mass / model.dose_grams, 2),
    )


__all__ = [
    "AxisModel",
    "DEFAULT_MODEL",
    "ExtractionModel",
    "classify",
    "extraction_yield",
    "quality_score",
    "simulate",
]
