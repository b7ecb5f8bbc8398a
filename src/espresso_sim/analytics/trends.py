"""Summary statistics over a window of extraction history."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Sequence

from pydantic import Field

from ..engine.models import CamelModel, ExtractionQuality, ExtractionRecord


class TrendPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def window(self) -> timedelta:
        return _PERIOD_WINDOWS[self]


_PERIOD_WINDOWS = {
    TrendPeriod.DAILY: timedelta(days=1),
    TrendPeriod.WEEKLY: timedelta(days=7),
    TrendPeriod.MONTHLY: timedelta(days=30),
    TrendPeriod.YEARLY: timedelta(days=365),
}


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class AverageMetrics(CamelModel):
    temperature: float = 0.0
    pressure: float = 0.0
    time_seconds: float = 0.0
    quality_score: float = 0.0


class QualityDistribution(CamelModel):
    perfect: int = 0
    good: int = 0
    suboptimal: int = 0


class ExtractionTrends(CamelModel):
    period: TrendPeriod
    sample_size: int = Field(ge=0)
    perfect_extraction_rate: float
    average_metrics: AverageMetrics
    trend_direction: TrendDirection
    quality_distribution: QualityDistribution

    @classmethod
    def calculate(
        cls, records: Sequence[ExtractionRecord], period: TrendPeriod
    ) -> ExtractionTrends:
        return cls(
            period=period,
            sample_size=len(records),
            perfect_extraction_rate=perfect_rate(records),
            average_metrics=_average_metrics(records),
            trend_direction=_direction(records),
            quality_distribution=_distribution(records),
        )


def within_period(
    records: Iterable[ExtractionRecord], period: TrendPeriod, now: datetime
) -> list[ExtractionRecord]:
    cutoff = now - period.window
    return [record for record in records if record.timestamp >= cutoff]


def perfect_rate(records: Sequence[ExtractionRecord]) -> float:
    """Percentage of perfect shots; 0.0 for an empty window."""
    if not records:
        return 0.0
    perfect = sum(1 for record in records if record.outcome.quality is ExtractionQuality.PERFECT)
    return round(100.0 * perfect / len(records), 2)


def _average_metrics(records: Sequence[ExtractionRecord]) -> AverageMetrics:
    total = len(records)
    if total == 0:
        return AverageMetrics()
    return AverageMetrics(
        temperature=round(sum(r.parameters.temperature for r in records) / total, 2),
        pressure=round(sum(r.parameters.pressure for r in records) / total, 2),
        time_seconds=round(sum(r.parameters.time_seconds for r in records) / total, 2),
        quality_score=round(sum(r.outcome.quality_score for r in records) / total, 2),
    )


def _direction(records: Sequence[ExtractionRecord]) -> TrendDirection:
    if not records:
        return TrendDirection.STABLE
    rate = perfect_rate(records)
    if rate > 75.0:
        return TrendDirection.IMPROVING
    if rate > 50.0:
        return TrendDirection.STABLE
    return TrendDirection.DECLINING


def _distribution(records: Sequence[ExtractionRecord]) -> QualityDistribution:
    counts = {quality: 0 for quality in ExtractionQuality}
    for record in records:
        counts[record.outcome.quality] += 1
    return QualityDistribution(
        perfect=counts[ExtractionQuality.PERFECT],
        good=counts[ExtractionQuality.GOOD],
        suboptimal=counts[ExtractionQuality.SUBOPTIMAL],
    )


__all__ = [
    "AverageMetrics",
    "ExtractionTrends",
    "QualityDistribution",
    "TrendDirection",
    "TrendPeriod",
    "perfect_rate",
    "within_period",
]
