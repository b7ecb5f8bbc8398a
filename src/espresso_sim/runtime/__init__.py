"""Runtime helper factories for the espresso simulation service."""

from .factory import (
    build_alert_generator,
    build_extraction_service,
    build_metrics_store,
    should_offload_service_calls,
)

__all__ = [
    "build_alert_generator",
    "build_extraction_service",
    "build_metrics_store",
    "should_offload_service_calls",
]
