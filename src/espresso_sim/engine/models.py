"""Pydantic models describing extraction inputs, outcomes and records."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(string: str) -> str:
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=_to_camel, populate_by_name=True, frozen=True)


class ExtractionQuality(str, Enum):
    PERFECT = "perfect"
    GOOD = "good"
    SUBOPTIMAL = "suboptimal"

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} Extraction"


class ExtractionProfile(str, Enum):
    UNDER_EXTRACTED = "under_extracted"
    BALANCED = "balanced"
    OVER_EXTRACTED = "over_extracted"


class ExtractionParameters(CamelModel):
    """Validated brewing parameters. Only ParameterValidator should build these."""

    temperature: float = Field(description="Brew water temperature in °C")
    pressure: float = Field(description="Pump pressure in bar")
    time_seconds: float = Field(description="Shot duration in seconds")


class ExtractionOutcome(CamelModel):
    quality_score: float = Field(ge=0.0, le=100.0)
    quality: ExtractionQuality
    result: str
    extraction_yield_percent: float
    profile: ExtractionProfile
    beverage_mass_grams: float
    dose_grams: float
    brew_ratio: float


class ExtractionRecord(CamelModel):
    """One recorded extraction; immutable once appended to the store."""

    id: int = Field(ge=1)
    timestamp: datetime
    parameters: ExtractionParameters
    outcome: ExtractionOutcome

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "CamelModel",
    "ExtractionOutcome",
    "ExtractionParameters",
    "ExtractionProfile",
    "ExtractionQuality",
    "ExtractionRecord",
]
