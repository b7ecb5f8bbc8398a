"""Tests for centralized error handling."""

from __future__ import annotations

from fastapi import HTTPException
from fastapi.testclient import TestClient

from espresso_sim.app import create_app
from espresso_sim.config import AppConfig
from espresso_sim.constants import CORRELATION_HEADER
from espresso_sim.engine.errors import MalformedParameterError, ParameterOutOfRangeError
from espresso_sim.errors import ErrorCode, parameter_error_to_http


def _build_app():
    app = create_app(config=AppConfig())

    @app.get("/not-found")
    async def _not_found() -> None:
        raise HTTPException(status_code=404, detail="record missing")

    @app.get("/bad-request")
    async def _bad_request() -> None:
        raise HTTPException(status_code=400, detail="token=abcd")

    @app.get("/explode")
    async def _explode() -> None:
        raise RuntimeError("token=abcd")

    return app


def test_http_exception_translates_to_standard_payload() -> None:
    client = TestClient(_build_app(), raise_server_exceptions=False)

    response = client.get("/not-found")

    assert response.status_code == 404
    payload = response.json()
    assert payload["error"]["code"] == ErrorCode.NOT_FOUND.value
    assert payload["error"]["message"] == "record missing"
    assert payload["error"]["correlationId"] == response.headers[CORRELATION_HEADER]


def test_http_exception_message_is_redacted() -> None:
    client = TestClient(_build_app(), raise_server_exceptions=False)

    response = client.get("/bad-request")

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"]["code"] == ErrorCode.INVALID_INPUT.value
    assert payload["error"]["message"] == "token=***"


def test_unexpected_exception_returns_internal_error() -> None:
    client = TestClient(_build_app(), raise_server_exceptions=False)

    response = client.get("/explode")

    assert response.status_code == 500
    payload = response.json()
    assert payload["error"]["code"] == ErrorCode.INTERNAL_ERROR.value
    assert payload["error"]["message"] == "Internal server error"


def test_out_of_range_error_maps_to_bad_request_with_bounds() -> None:
    exc = parameter_error_to_http(ParameterOutOfRangeError("pressure", 13.0, (6.0, 12.0)))

    assert exc.status_code == 400
    assert exc.error_code is ErrorCode.INVALID_INPUT
    assert exc.retryable_hint is False
    detail = exc.error_details[0].to_dict()
    assert detail["field"] == "pressure"
    assert detail["code"] == "OutOfRange"
    assert detail["value"] == 13.0
    assert detail["allowedRange"] == {"min": 6.0, "max": 12.0}
    assert "between 6 and 12" in detail["hint"]


def test_malformed_error_maps_without_range() -> None:
    exc = parameter_error_to_http(MalformedParameterError("time_seconds", "long"))

    detail = exc.error_details[0].to_dict()
    assert detail["code"] == "Malformed"
    assert detail["value"] == "long"
    assert "allowedRange" not in detail
