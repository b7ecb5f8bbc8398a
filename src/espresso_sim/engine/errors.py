"""Error types raised while validating extraction parameters."""

from __future__ import annotations

from enum import Enum
from typing import Any, Tuple


class ValidationErrorKind(str, Enum):
    MALFORMED = "Malformed"
    OUT_OF_RANGE = "OutOfRange"


class ParameterValidationError(ValueError):
    """Base error for rejected extraction parameters."""

    def __init__(self, kind: ValidationErrorKind, field: str, value: Any, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.field = field
        self.value = value

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.args[0]}"


class MalformedParameterError(ParameterValidationError):
    """Raised when a supplied parameter is not a finite number."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            ValidationErrorKind.MALFORMED,
            field,
            value,
            f"{field} must be a finite number, got {value!r}",
        )


class ParameterOutOfRangeError(ParameterValidationError):
    """Raised when a parameter parses but falls outside its allowed range."""

    def __init__(self, field: str, value: float, allowed_range: Tuple[float, float]) -> None:
        minimum, maximum = allowed_range
        super().__init__(
            ValidationErrorKind.OUT_OF_RANGE,
            field,
            value,
            f"{field}={value:g} is outside the allowed range [{minimum:g}, {maximum:g}]",
        )
        self.allowed_range = allowed_range


__all__ = [
    "MalformedParameterError",
    "ParameterOutOfRangeError",
    "ParameterValidationError",
    "ValidationErrorKind",
]
