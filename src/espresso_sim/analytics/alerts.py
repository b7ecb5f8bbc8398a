# ruff: noqa: UP006,UP007
"""Rule-based alerts raised when an extraction is recorded."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from pydantic import Field

from ..engine.models import CamelModel, ExtractionRecord
from ..engine.simulator import DEFAULT_MODEL, AxisModel, ExtractionModel
from .trends import perfect_rate


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AlertCategory(str, Enum):
    EXTRACTION_QUALITY = "extraction_quality"
    PARAMETER_DEVIATION = "parameter_deviation"
    PERFORMANCE_TREND = "performance_trend"


class Alert(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    severity: AlertSeverity
    category: AlertCategory
    rule: str
    message: str
    record_id: int
    metadata: Dict[str, Any] = Field(default_factory=dict)


RuleCheck = Callable[[ExtractionRecord, Sequence[ExtractionRecord]], Optional[Alert]]


@dataclass(frozen=True)
class AlertRule:
    name: str
    check: RuleCheck


def _window_rule(
    name: str, field: str, axis: AxisModel, unit: str, severity: AlertSeverity
) -> AlertRule:
    low, high = axis.window

    def check(record: ExtractionRecord, recent: Sequence[ExtractionRecord]) -> Optional[Alert]:
        value = getattr(record.parameters, field)
        if low <= value <= high:
            return None
        return Alert(
            severity=severity,
            category=AlertCategory.PARAMETER_DEVIATION,
            rule=name,
            message=f"{field} {value:g} {unit} outside the ideal window {low:g}-{high:g} {unit}",
            record_id=record.id,
            metadata={field: value, "window": {"min": low, "max": high}},
        )

    return AlertRule(name=name, check=check)


def low_perfect_rate_rule(threshold: float, min_samples: int) -> AlertRule:
    name = "low_perfect_rate"

    def check(record: ExtractionRecord, recent: Sequence[ExtractionRecord]) -> Optional[Alert]:
        if len(recent) < min_samples:
            return None
        rate = perfect_rate(recent)
        if rate >= threshold:
            return None
        return Alert(
            severity=AlertSeverity.WARNING,
            category=AlertCategory.EXTRACTION_QUALITY,
            rule=name,
            message=f"Perfect extraction rate {rate:g}% below {threshold:g}% over last {len(recent)} shots",
            record_id=record.id,
            metadata={"perfectRate": rate, "threshold": threshold, "sampleSize": len(recent)},
        )

    return AlertRule(name=name, check=check)


def default_rules(
    *,
    model: ExtractionModel = DEFAULT_MODEL,
    perfect_rate_threshold: float = 40.0,
    min_samples: int = 5,
) -> List[AlertRule]:
    return [
        _window_rule(
            "temperature_deviation", "temperature", model.temperature, "°C", AlertSeverity.CRITICAL
        ),
        _window_rule(
            "pressure_instability", "pressure", model.pressure, "bar", AlertSeverity.WARNING
        ),
        _window_rule(
            "time_deviation", "time_seconds", model.time_seconds, "s", AlertSeverity.WARNING
        ),
        low_perfect_rate_rule(perfect_rate_threshold, min_samples),
    ]


class AlertGenerator:
    def __init__(self, rules: Optional[Sequence[AlertRule]] = None) -> None:
        self._rules: Tuple[AlertRule, ...] = tuple(rules if rules is not None else default_rules())

    @property
    def rules(self) -> Tuple[AlertRule, ...]:
        return self._rules

    def evaluate(
        self, record: ExtractionRecord, recent: Sequence[ExtractionRecord]
    ) -> List[Alert]:
        alerts: list[Alert] = []
        for rule in self._rules:
            alert = rule.check(record, recent)
            if alert is not None:
                alerts.append(alert)
        return alerts


class AlertLog:
    """Thread-safe, append-only list of raised alerts."""

    def __init__(self) -> None:
        self._alerts: list[Alert] = []
        self._lock = threading.Lock()

    def extend(self, alerts: Sequence[Alert]) -> None:
        if not alerts:
            return
        with self._lock:
            self._alerts.extend(alerts)

    def recent(self, limit: Optional[int] = None) -> Tuple[Alert, ...]:
        """Return alerts newest first, optionally capped at ``limit``."""
        with self._lock:
            snapshot = list(reversed(self._alerts))
        if limit is not None:
            snapshot = snapshot[: max(0, limit)]
        return tuple(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._alerts)


__all__ = [
    "Alert",
    "AlertCategory",
    "AlertGenerator",
    "AlertLog",
    "AlertRule",
    "AlertSeverity",
    "default_rules",
    "low_perfect_rate_rule",
]
