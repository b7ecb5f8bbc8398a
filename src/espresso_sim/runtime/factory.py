"""Factories for building the runtime components shared by the HTTP layer."""

from __future__ import annotations

from ..analytics.alerts import AlertGenerator, AlertLog, default_rules
from ..config import AppConfig
from ..engine.validation import ParameterValidator
from ..services.extraction_service import ExtractionService
from ..storage.metrics_store import JsonlMetricsJournal, MetricsStore


def build_metrics_store(config: AppConfig) -> MetricsStore:
    """Create the history store, attaching a journal when a path is configured."""

    journal = None
    if config.metrics_journal_path:
        journal = JsonlMetricsJournal(config.metrics_journal_path)
    return MetricsStore(journal=journal)


def build_alert_generator(config: AppConfig) -> AlertGenerator:
    return AlertGenerator(
        default_rules(
            perfect_rate_threshold=config.alert_perfect_rate_threshold,
            min_samples=config.alert_min_samples,
        )
    )


def build_extraction_service(config: AppConfig, store: MetricsStore) -> ExtractionService:
    """Wire validator limits and alert rules from configuration around ``store``."""

    return ExtractionService(
        store,
        validator=ParameterValidator(config.extraction_limits()),
        alert_generator=build_alert_generator(config),
        alert_log=AlertLog(),
        alert_window=config.alert_window,
    )


def should_offload_service_calls(config: AppConfig) -> bool:
    """Return True when engine operations should run in background threads."""

    return bool(getattr(config, "service_to_thread", True))


__all__ = [
    "build_alert_generator",
    "build_extraction_service",
    "build_metrics_store",
    "should_offload_service_calls",
]
