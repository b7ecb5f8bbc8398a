"""Extraction engine: validation, simulation and domain models."""

from .errors import (
    MalformedParameterError,
    ParameterOutOfRangeError,
    ParameterValidationError,
    ValidationErrorKind,
)
from .models import (
    ExtractionOutcome,
    ExtractionParameters,
    ExtractionProfile,
    ExtractionQuality,
    ExtractionRecord,
)
from .simulator import DEFAULT_MODEL, ExtractionModel, simulate
from .validation import ExtractionLimits, ParameterRange, ParameterValidator

__all__ = [
    "DEFAULT_MODEL",
    "ExtractionLimits",
    "ExtractionModel",
    "ExtractionOutcome",
    "ExtractionParameters",
    "ExtractionProfile",
    "ExtractionQuality",
    "ExtractionRecord",
    "MalformedParameterError",
    "ParameterOutOfRangeError",
    "ParameterRange",
    "ParameterValidationError",
    "ParameterValidator",
    "ValidationErrorKind",
    "simulate",
]
