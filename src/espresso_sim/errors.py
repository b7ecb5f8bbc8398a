"""Error utilities and standardized responses."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Any, Iterable, List, Optional, Tuple

from fastapi import HTTPException
from starlette.responses import JSONResponse

from .constants import CORRELATION_HEADER
from .engine.errors import ParameterOutOfRangeError, ParameterValidationError

_SENSITIVE_PATTERN = re.compile(r"(?i)(token|secret|password|key)=([^\s]+)")


class ErrorCode(str, Enum):
    INVALID_INPUT = "InvalidInput"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    INTERNAL_ERROR = "InternalError"


@dataclass(frozen=True)
class ErrorDetail:
    """Structured hint used by clients to self-correct failed requests."""

    issue: str
    field: Optional[str] = None
    hint: Optional[str] = None
    code: Optional[str] = None
    value: Any = None
    allowed_range: Optional[Tuple[float, float]] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"issue": self.issue}
        if self.field:
            payload["field"] = self.field
        if self.hint:
            payload["hint"] = self.hint
        if self.code:
            payload["code"] = self.code
        if self.value is not None:
            payload["value"] = self.value
        if self.allowed_range is not None:
            minimum, maximum = self.allowed_range
            payload["allowedRange"] = {"min": minimum, "max": maximum}
        return payload


class DetailedHTTPException(HTTPException):
    """HTTPException extended with structured error metadata."""

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: ErrorCode | None = None,
        retryable: bool | None = None,
        details: Iterable[ErrorDetail] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message)
        self.error_code = code
        self.retryable_hint = retryable
        self.error_details: list[ErrorDetail] = list(details or [])


def redact_sensitive(text: str) -> str:
    """Mask obvious secrets in error messages."""
    return _SENSITIVE_PATTERN.sub(lambda m: f"{m.group(1)}=***", text)


def map_status_to_code(status_code: int) -> ErrorCode:
    if status_code in {HTTPStatus.BAD_REQUEST, HTTPStatus.UNPROCESSABLE_ENTITY}:
        return ErrorCode.INVALID_INPUT
    if status_code == HTTPStatus.NOT_FOUND:
        return ErrorCode.NOT_FOUND
    if status_code == HTTPStatus.CONFLICT:
        return ErrorCode.CONFLICT
    return ErrorCode.INTERNAL_ERROR


def error_response(
    *,
    code: ErrorCode,
    message: str,
    correlation_id: str,
    status_code: int,
    retryable: bool | None = None,
    details: Iterable[ErrorDetail] | None = None,
) -> JSONResponse:
    payload: dict[str, Any] = {
        "error": {
            "code": code.value,
            "message": message,
            "correlationId": correlation_id,
        }
    }
    if retryable is not None:
        payload["error"]["retryable"] = retryable
    if details:
        payload["error"]["details"] = [item.to_dict() for item in details]

    return JSONResponse(
        status_code=status_code,
        content=payload,
        headers={CORRELATION_HEADER: correlation_id},
    )


def default_message(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:  # pragma: no cover
        return "Unexpected Error"


def error_detail(
    issue: str,
    *,
    field: Optional[str] = None,
    hint: Optional[str] = None,
    code: Optional[str] = None,
    value: Any = None,
    allowed_range: Optional[Tuple[float, float]] = None,
) -> ErrorDetail:
    """Convenience helper to build an ErrorDetail entry."""

    return ErrorDetail(
        issue=issue, field=field, hint=hint, code=code, value=value, allowed_range=allowed_range
    )


def join_field(parts: Iterable[Any]) -> Optional[str]:
    """Convert validation error locations into dotted field names."""

    formatted = []
    for part in parts:
        if part in {"__root__", "query", "body", None}:
            continue
        formatted.append(str(part))
    if not formatted:
        return None
    return ".".join(formatted)


def validation_errors_to_details(errors: Iterable[dict[str, Any]]) -> List[ErrorDetail]:
    """Translate pydantic/FastAPI validation entries into ErrorDetail records."""

    details: list[ErrorDetail] = []
    for item in errors:
        issue = item.get("msg", "Invalid value")
        field = join_field(item.get("loc") or ())
        ctx = item.get("ctx") or {}
        hint = ctx.get("hint")
        code = item.get("type")
        details.append(error_detail(issue=issue, field=field, hint=hint, code=code))
    return details


def parameter_error_to_http(exc: ParameterValidationError) -> DetailedHTTPException:
    """Map a rejected extraction parameter to a 400 response naming the field."""

    message = str(exc.args[0]) if exc.args else str(exc)
    allowed_range = None
    if isinstance(exc, ParameterOutOfRangeError):
        allowed_range = exc.allowed_range
        minimum, maximum = allowed_range
        hint = f"Provide {exc.field} between {minimum:g} and {maximum:g}, or omit it to use the default."
    else:
        hint = f"Provide {exc.field} as a plain decimal number, or omit it to use the default."

    detail = error_detail(
        issue=message,
        field=exc.field,
        hint=hint,
        code=exc.kind.value,
        value=exc.value,
        allowed_range=allowed_range,
    )
    return DetailedHTTPException(
        status_code=int(HTTPStatus.BAD_REQUEST),
        message=message,
        code=ErrorCode.INVALID_INPUT,
        retryable=False,
        details=[detail],
    )


__all__ = [
    "DetailedHTTPException",
    "ErrorCode",
    "ErrorDetail",
    "default_message",
    "error_detail",
    "error_response",
    "join_field",
    "map_status_to_code",
    "parameter_error_to_http",
    "redact_sensitive",
    "validation_errors_to_details",
]
