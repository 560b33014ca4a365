"""Configuration contract for tenantscope.

This module provides the Pydantic-validated configuration model shared by
everything that embeds the resolver (LOG_LEVEL, landing fallback, etc.).

Applications extend ``ResolverConfig`` with their own settings. Direct
os.environ/os.getenv usage is limited to ``load_config_from_env``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class FailureRoute(str, Enum):
    """Where the landing resolver sends a user when resolution faults.

    - DASHBOARD: the generic dashboard (default)
    - LOGIN: back to the login screen
    """

    DASHBOARD = "dashboard"
    LOGIN = "login"


class ResolverConfig(BaseModel):
    """Configuration for the authorization resolver.

    RULE: settings come through this model. Only
    ``load_config_from_env`` reads the environment.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Service identification
    service_name: Optional[str] = Field(
        default=None,
        description="Name of the embedding service, attached to log records",
    )

    # Telemetry
    decision_events_enabled: bool = Field(
        default=True,
        description="Send an event to the DecisionSink for every authorization decision",
    )

    # Landing
    landing_failure_route: FailureRoute = Field(
        default=FailureRoute.DASHBOARD,
        description="Route returned when default-route resolution fails internally",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @field_validator("landing_failure_route", mode="before")
    @classmethod
    def validate_failure_route(cls, v: str | FailureRoute) -> FailureRoute:
        """Accept route names case-insensitively."""
        if isinstance(v, FailureRoute):
            return v
        if isinstance(v, str):
            try:
                return FailureRoute(v.strip().lower())
            except ValueError:
                raise ValueError(
                    f"Invalid landing failure route: {v}. Must be one of {[e.value for e in FailureRoute]}"
                )
        raise ValueError(f"Landing failure route must be a string, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",  # Prevent accidental extra fields
    }


def load_config_from_env() -> ResolverConfig:
    """Load resolver configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Name of the embedding service
    - DECISION_EVENTS_ENABLED: Emit decision events (true/false, default: true)
    - LANDING_FAILURE_ROUTE: dashboard | login

    Returns:
        ResolverConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: An environment variable holds an invalid value.
            ``details["errors"]`` lists the pydantic errors.
    """
    import os

    try:
        return ResolverConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
            service_name=os.getenv("SERVICE_NAME"),
            decision_events_enabled=os.getenv("DECISION_EVENTS_ENABLED", "true").lower() in ("true", "1", "yes", "on"),
            landing_failure_route=os.getenv("LANDING_FAILURE_ROUTE", "dashboard"),
        )
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")})
        raise ConfigurationError(
            f"Invalid resolver configuration in environment: {', '.join(fields) or 'unknown'}",
            errors=e.errors(include_url=False),
        ) from e


__all__ = [
    "FailureRoute",
    "LogLevel",
    "ResolverConfig",
    "load_config_from_env",
]
