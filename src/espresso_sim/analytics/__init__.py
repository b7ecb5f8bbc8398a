"""Trend summaries and alert rules computed from extraction history."""

from .alerts import Alert, AlertCategory, AlertGenerator, AlertLog, AlertSeverity, default_rules
from .trends import ExtractionTrends, TrendDirection, TrendPeriod

__all__ = [
    "Alert",
    "AlertCategory",
    "AlertGenerator",
    "AlertLog",
    "AlertSeverity",
    "ExtractionTrends",
    "TrendDirection",
    "TrendPeriod",
    "default_rules",
]
