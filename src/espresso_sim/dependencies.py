"""FastAPI dependency providers."""

from __future__ import annotations

from typing import Protocol, cast

from fastapi import Request

from .services.extraction_service import ExtractionService
from .storage.metrics_store import MetricsStore


class _AppState(Protocol):
    extraction_service: ExtractionService
    metrics_store: MetricsStore
    service_offload: bool


def get_extraction_service(request: Request) -> ExtractionService:
    state = cast(_AppState, request.app.state)
    return state.extraction_service


def should_offload_service(request: Request) -> bool:
    state = cast(_AppState, request.app.state)
    return getattr(state, "service_offload", True)
