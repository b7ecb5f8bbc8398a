"""Tests for the extraction orchestration service."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from espresso_sim.analytics.alerts import AlertGenerator
from espresso_sim.analytics.trends import TrendDirection, TrendPeriod
from espresso_sim.engine.errors import MalformedParameterError, ParameterOutOfRangeError
from espresso_sim.engine.models import ExtractionQuality
from espresso_sim.services.extraction_service import ExtractionService
from espresso_sim.storage.metrics_store import MetricsStore


def test_start_without_parameters_uses_defaults(service: ExtractionService) -> None:
    record = service.start()

    assert record.id == 1
    assert record.parameters.temperature == 93.0
    assert record.parameters.pressure == 9.0
    assert record.parameters.time_seconds == 25
    assert record.outcome.quality is ExtractionQuality.PERFECT


def test_start_records_exact_parameters(service: ExtractionService) -> None:
    record = service.start(temperature="95", pressure="9.5", time_seconds="27")

    assert (record.parameters.temperature, record.parameters.pressure) == (95.0, 9.5)
    assert record.parameters.time_seconds == 27.0
    assert service.history()[-1] == record


def test_rejected_start_leaves_history_untouched(service: ExtractionService) -> None:
    service.start()

    with pytest.raises(ParameterOutOfRangeError) as excinfo:
        service.start(temperature=150)
    with pytest.raises(MalformedParameterError):
        service.start(pressure="strong")

    assert excinfo.value.field == "temperature"
    assert len(service.history()) == 1
    assert service.alerts() == ()


def test_history_is_in_call_order_with_increasing_ids(service: ExtractionService) -> None:
    temperatures = [90, 91, 92, 93, 94, 95]
    for temperature in temperatures:
        service.start(temperature=temperature)

    history = service.history()

    assert [record.parameters.temperature for record in history] == temperatures
    ids = [record.id for record in history]
    assert ids == sorted(ids) and len(set(ids)) == len(ids)


def test_consecutive_history_reads_are_identical(service: ExtractionService) -> None:
    service.start()
    service.start(pressure=8.5)

    assert service.history() == service.history()


def test_deviating_parameters_raise_alerts(service: ExtractionService) -> None:
    record = service.start(temperature=98, pressure=11)

    alerts = service.alerts()
    rules = {alert.rule for alert in alerts}
    assert rules == {"temperature_deviation", "pressure_instability"}
    assert all(alert.record_id == record.id for alert in alerts)


def test_low_perfect_rate_alert_after_minimum_samples(store: MetricsStore) -> None:
    service = ExtractionService(store, alert_window=5)

    for _ in range(4):
        service.start(time_seconds=38)
    assert not [a for a in service.alerts() if a.rule == "low_perfect_rate"]

    service.start(time_seconds=38)
    quality_alerts = [a for a in service.alerts() if a.rule == "low_perfect_rate"]
    assert len(quality_alerts) == 1
    assert quality_alerts[0].metadata["perfectRate"] == 0.0


def test_alerts_are_optional(store: MetricsStore) -> None:
    service = ExtractionService(store, alert_generator=AlertGenerator(rules=[]))

    service.start(temperature=99)

    assert service.alerts() == ()


def test_trends_cover_requested_period() -> None:
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    stamps = iter([now - timedelta(days=3), now - timedelta(hours=2), now - timedelta(hours=1)])
    service = ExtractionService(MetricsStore(clock=lambda: next(stamps)))
    service.start(temperature=99)
    service.start()
    service.start(temperature=85)

    daily = service.trends(TrendPeriod.DAILY, now=now)
    weekly = service.trends(TrendPeriod.WEEKLY, now=now)

    assert daily.sample_size == 2
    assert daily.quality_distribution.perfect == 1
    assert daily.quality_distribution.suboptimal == 1
    assert weekly.sample_size == 3
    assert weekly.quality_distribution.good == 1
    assert weekly.trend_direction is TrendDirection.DECLINING
