"""Application configuration management."""

from __future__ import annotations

import os
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import __version__
from .constants import SERVICE_NAME
from .engine.validation import ExtractionLimits, ParameterRange
from .logging import DEFAULT_LOG_FORMAT, DEFAULT_LOG_LEVEL, LOG_FORMATS


class ConfigError(RuntimeError):
    """Raised when application configuration is invalid."""


class AppConfig(BaseModel):
    """Validated application configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    host: str = Field(default="0.0.0.0", description="Host interface to bind the HTTP server")
    port: int = Field(default=8000, ge=1, le=65535, description="Port for the HTTP server")
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Root log level")
    log_format: str = Field(default=DEFAULT_LOG_FORMAT, description="Log renderer (json or console)")
    service_name: str = Field(default=SERVICE_NAME, description="Service identifier")
    service_version: str = Field(default=__version__, description="Service version override")
    environment: str = Field(default="development", description="Deployment environment tag")
    service_to_thread: bool = Field(
        default=True,
        description="Offload extraction engine calls to background threads in API routes",
    )
    metrics_journal_path: Optional[str] = Field(
        default=None,
        description="JSON Lines file receiving every recorded extraction; unset disables",
    )
    temperature_min: float = Field(default=85.0, description="Lowest accepted temperature (°C)")
    temperature_max: float = Field(default=100.0, description="Highest accepted temperature (°C)")
    temperature_default: float = Field(default=93.0, description="Temperature used when omitted")
    pressure_min: float = Field(default=6.0, description="Lowest accepted pressure (bar)")
    pressure_max: float = Field(default=12.0, description="Highest accepted pressure (bar)")
    pressure_default: float = Field(default=9.0, description="Pressure used when omitted")
    time_seconds_min: float = Field(default=15.0, description="Shortest accepted shot (s)")
    time_seconds_max: float = Field(default=40.0, description="Longest accepted shot (s)")
    time_seconds_default: float = Field(default=25.0, description="Shot time used when omitted")
    alert_window: int = Field(
        default=10, ge=1, description="Number of recent records inspected by trend alerts"
    )
    alert_min_samples: int = Field(
        default=5, ge=1, description="Records required before the perfect-rate alert fires"
    )
    alert_perfect_rate_threshold: float = Field(
        default=40.0,
        ge=0.0,
        le=100.0,
        description="Perfect extraction rate (%) below which a quality alert is raised",
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        from logging import getLevelName

        candidate = value.upper()
        resolved = getLevelName(candidate)
        if isinstance(resolved, int):
            return candidate
        raise ValueError(f"Unsupported log level '{value}'")

    @field_validator("log_format")
    @classmethod
    def _normalise_log_format(cls, value: str) -> str:
        fmt = value.lower()
        if fmt not in LOG_FORMATS:
            raise ValueError(f"Unsupported log format '{value}'")
        return fmt

    @field_validator("metrics_journal_path")
    @classmethod
    def _blank_journal_is_disabled(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    def extraction_limits(self) -> ExtractionLimits:
        """Build validator limits, raising ConfigError for inconsistent bounds."""
        try:
            return ExtractionLimits(
                temperature=ParameterRange(
                    minimum=self.temperature_min,
                    maximum=self.temperature_max,
                    default=self.temperature_default,
                ),
                pressure=ParameterRange(
                    minimum=self.pressure_min,
                    maximum=self.pressure_max,
                    default=self.pressure_default,
                ),
                time_seconds=ParameterRange(
                    minimum=self.time_seconds_min,
                    maximum=self.time_seconds_max,
                    default=self.time_seconds_default,
                ),
            )
        except ValidationError as exc:
            raise ConfigError(f"Invalid extraction limits: {exc.errors()[0]['msg']}") from exc

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables (respecting .env)."""
        load_dotenv()
        try:
            raw: dict[str, Any] = {
                "host": os.getenv("HOST", cls.model_fields["host"].default),
                "port": os.getenv("PORT", cls.model_fields["port"].default),
                "log_level": os.getenv("LOG_LEVEL", cls.model_fields["log_level"].default),
                "log_format": os.getenv("LOG_FORMAT", cls.model_fields["log_format"].default),
                "service_name": os.getenv("SERVICE_NAME", cls.model_fields["service_name"].default),
                "service_version": os.getenv(
                    "SERVICE_VERSION", cls.model_fields["service_version"].default
                ),
                "environment": os.getenv("ENVIRONMENT", cls.model_fields["environment"].default),
                "service_to_thread": cls._env_to_bool(
                    "SERVICE_TO_THREAD", cls.model_fields["service_to_thread"].default
                ),
                "metrics_journal_path": os.getenv("METRICS_JOURNAL_PATH"),
                "alert_window": cls._env_to_int(
                    "ALERT_WINDOW", cls.model_fields["alert_window"].default
                ),
                "alert_min_samples": cls._env_to_int(
                    "ALERT_MIN_SAMPLES", cls.model_fields["alert_min_samples"].default
                ),
                "alert_perfect_rate_threshold": cls._env_to_float(
                    "ALERT_PERFECT_RATE_THRESHOLD",
                    cls.model_fields["alert_perfect_rate_threshold"].default,
                ),
            }
            for field in ("temperature", "pressure", "time_seconds"):
                for bound in ("min", "max", "default"):
                    name = f"{field}_{bound}"
                    raw[name] = cls._env_to_float(name.upper(), cls.model_fields[name].default)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError("Invalid application configuration") from exc

    @staticmethod
    def _env_to_bool(name: str, default: bool) -> bool:
        raw = os.getenv(name)
        if raw is None:
            return default
        lowered = raw.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"Environment variable {name} must be a boolean expression")

    @staticmethod
    def _env_to_int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError as exc:
            raise ValueError(f"Environment variable {name} must be an integer") from exc

    @staticmethod
    def _env_to_float(name: str, default: float) -> float:
        raw = os.getenv(name)
        if raw is None:
            return default
        try:
            return float(raw)
        except ValueError as exc:
            raise ValueError(f"Environment variable {name} must be a number") from exc


def load_config() -> AppConfig:
    """Convenience helper to load configuration with error propagation."""
    return AppConfig.from_env()
