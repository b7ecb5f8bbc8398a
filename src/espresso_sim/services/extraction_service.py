"""Orchestration of validation, simulation and recording of extractions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Tuple

from ..analytics.alerts import Alert, AlertGenerator, AlertLog
from ..analytics.trends import ExtractionTrends, TrendPeriod, within_period
from ..engine.errors import ParameterValidationError
from ..engine.models import ExtractionRecord
from ..engine.simulator import DEFAULT_MODEL, ExtractionModel, simulate
from ..engine.validation import ParameterValidator, RawValue
from ..logging import get_logger
from ..storage.metrics_store import MetricsStore

logger = get_logger(__name__)


class ExtractionService:
    """Validate -> simulate -> append, plus read-through history.

    A failed validation leaves the store untouched. Alerts are evaluated
    after the record is stored and never affect whether ``start`` succeeds.
    """

    def __init__(
        self,
        store: MetricsStore,
        *,
        validator: Optional[ParameterValidator] = None,
        model: ExtractionModel = DEFAULT_MODEL,
        alert_generator: Optional[AlertGenerator] = None,
        alert_log: Optional[AlertLog] = None,
        alert_window: int = 10,
    ) -> None:
        self._store = store
        self._validator = validator or ParameterValidator()
        self._model = model
        self._alert_generator = alert_generator or AlertGenerator()
        self._alert_log = alert_log or AlertLog()
        self._alert_window = alert_window

    @property
    def store(self) -> MetricsStore:
        return self._store

    @property
    def validator(self) -> ParameterValidator:
        return self._validator

    def start(
        self,
        temperature: RawValue = None,
        pressure: RawValue = None,
        time_seconds: RawValue = None,
    ) -> ExtractionRecord:
        try:
            params = self._validator.validate(
                temperature=temperature, pressure=pressure, time_seconds=time_seconds
            )
        except ParameterValidationError as exc:
            logger.info(
                "extraction.rejected",
                field=exc.field,
                kind=exc.kind.value,
                value=str(exc.value),
            )
            raise

        outcome = simulate(params, self._model)
        record = self._store.append(params, outcome)
        logger.info(
            "extraction.recorded",
            recordId=record.id,
            quality=record.outcome.quality.value,
            qualityScore=record.outcome.quality_score,
        )
        self._raise_alerts(record)
        return record

    def history(self) -> Tuple[ExtractionRecord, ...]:
        return self._store.all()

    def trends(
        self, period: TrendPeriod = TrendPeriod.DAILY, now: Optional[datetime] = None
    ) -> ExtractionTrends:
        reference = now or datetime.now(timezone.utc)
        records = within_period(self._store.all(), period, reference)
        return ExtractionTrends.calculate(records, period)

    def alerts(self, limit: Optional[int] = None) -> Tuple[Alert, ...]:
        return self._alert_log.recent(limit)

    def close(self) -> None:
        self._store.close()

    def _raise_alerts(self, record: ExtractionRecord) -> None:
        # Window is taken after the append, so it ends at (or just past) this record.
        recent = self._store.latest(self._alert_window)
        alerts = self._alert_generator.evaluate(record, recent)
        for alert in alerts:
            logger.warning(
                "extraction.alert",
                rule=alert.rule,
                severity=alert.severity.value,
                recordId=record.id,
                message=alert.message,
            )
        self._alert_log.extend(alerts)


__all__ = ["ExtractionService"]
