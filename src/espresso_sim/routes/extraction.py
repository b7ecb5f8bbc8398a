# ruff: noqa: UP006,UP007
"""Extraction and history API routes."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from prometheus_client import Counter

from ..analytics.trends import TrendPeriod
from ..dependencies import get_extraction_service, should_offload_service
from ..engine.errors import ParameterValidationError
from ..errors import parameter_error_to_http
from ..logging import get_logger
from ..services.extraction_service import ExtractionService
from ..util.concurrency import maybe_to_thread

router = APIRouter()
logger = get_logger(__name__)

_EXTRACTIONS = Counter(
    "espresso_extractions_total",
    "Extractions recorded by the simulator, by quality class.",
    ("quality",),
)
_REJECTIONS = Counter(
    "espresso_extraction_rejections_total",
    "Extraction requests rejected during parameter validation.",
    ("field", "kind"),
)


@router.post("/start", status_code=status.HTTP_201_CREATED, tags=["extraction"])
async def start_extraction(
    request: Request,
    temperature: Optional[str] = Query(default=None, description="Brew temperature in °C"),
    pressure: Optional[str] = Query(default=None, description="Pump pressure in bar"),
    time_seconds: Optional[str] = Query(default=None, description="Shot time in seconds"),
    service: ExtractionService = Depends(get_extraction_service),
) -> Dict[str, Any]:
    try:
        record = await maybe_to_thread(
            should_offload_service(request),
            service.start,
            temperature=temperature,
            pressure=pressure,
            time_seconds=time_seconds,
        )
    except ParameterValidationError as exc:
        _REJECTIONS.labels(field=exc.field, kind=exc.kind.value).inc()
        logger.warning("extraction.invalid", field=exc.field, detail=str(exc))
        raise parameter_error_to_http(exc) from exc

    _EXTRACTIONS.labels(quality=record.outcome.quality.value).inc()
    return record.to_json_dict()


@router.get("/metrics", tags=["extraction"])
async def list_metrics(
    request: Request,
    service: ExtractionService = Depends(get_extraction_service),
) -> List[Dict[str, Any]]:
    records = await maybe_to_thread(should_offload_service(request), service.history)
    return [record.to_json_dict() for record in records]


@router.get("/metrics/trends", tags=["analytics"])
async def metrics_trends(
    request: Request,
    period: TrendPeriod = Query(default=TrendPeriod.DAILY),
    service: ExtractionService = Depends(get_extraction_service),
) -> Dict[str, Any]:
    trends = await maybe_to_thread(should_offload_service(request), service.trends, period)
    return trends.model_dump(mode="json", by_alias=True)


@router.get("/alerts", tags=["analytics"])
async def list_alerts(
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    service: ExtractionService = Depends(get_extraction_service),
) -> List[Dict[str, Any]]:
    return [alert.model_dump(mode="json", by_alias=True) for alert in service.alerts(limit)]
