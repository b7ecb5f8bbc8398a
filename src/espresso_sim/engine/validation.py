"""Range validation and defaulting for raw extraction parameters."""

from __future__ import annotations

import math
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import MalformedParameterError, ParameterOutOfRangeError
from .models import ExtractionParameters

RawValue = Union[str, int, float, None]

PARAMETER_FIELDS: Tuple[str, ...] = ("temperature", "pressure", "time_seconds")


class ParameterRange(BaseModel):
    """Inclusive bounds and the fallback used when a value is omitted."""

    model_config = ConfigDict(frozen=True)

    minimum: float
    maximum: float
    default: float

    @model_validator(mode="after")
    def _check_bounds(self) -> ParameterRange:
        if self.minimum > self.maximum:
            raise ValueError(f"minimum {self.minimum:g} exceeds maximum {self.maximum:g}")
        if not self.contains(self.default):
            raise ValueError(
                f"default {self.default:g} lies outside [{self.minimum:g}, {self.maximum:g}]"
            )
        return self

    @property
    def bounds(self) -> Tuple[float, float]:
        return (self.minimum, self.maximum)

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


class ExtractionLimits(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: ParameterRange = Field(
        default=ParameterRange(minimum=85.0, maximum=100.0, default=93.0)
    )
    pressure: ParameterRange = Field(
        default=ParameterRange(minimum=6.0, maximum=12.0, default=9.0)
    )
    time_seconds: ParameterRange = Field(
        default=ParameterRange(minimum=15.0, maximum=40.0, default=25.0)
    )

    def for_field(self, field: str) -> ParameterRange:
        return getattr(self, field)


def _parse_number(field: str, raw: RawValue) -> float:
    if isinstance(raw, bool):
        raise MalformedParameterError(field, raw)
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise MalformedParameterError(field, raw)
        try:
            value = float(text)
        except ValueError as exc:
            raise MalformedParameterError(field, raw) from exc
    elif isinstance(raw, (int, float)):
        value = float(raw)
    else:
        raise MalformedParameterError(field, raw)
    if not math.isfinite(value):
        raise MalformedParameterError(field, raw)
    return value


class ParameterValidator:
    """Merge raw inputs with configured defaults, then range-check them."""

    def __init__(self, limits: Optional[ExtractionLimits] = None) -> None:
        self._limits = limits or ExtractionLimits()

    @property
    def limits(self) -> ExtractionLimits:
        return self._limits

    def validate(
        self,
        temperature: RawValue = None,
        pressure: RawValue = None,
        time_seconds: RawValue = None,
    ) -> ExtractionParameters:
        raw = {"temperature": temperature, "pressure": pressure, "time_seconds": time_seconds}
        resolved: dict[str, float] = {}
        for field in PARAMETER_FIELDS:
            resolved[field] = self._resolve(field, raw[field])
        return ExtractionParameters(**resolved)

    def _resolve(self, field: str, raw: RawValue) -> float:
        bounds = self._limits.for_field(field)
        if raw is None:
            return bounds.default
        value = _parse_number(field, raw)
        if not bounds.contains(value):
            raise ParameterOutOfRangeError(field, value, bounds.bounds)
        return value


__all__ = [
    "ExtractionLimits",
    "PARAMETER_FIELDS",
    "ParameterRange",
    "ParameterValidator",
    "RawValue",
]
