"""Unified exception hierarchy for tenantscope.

Every error raised by the resolver inherits from TenantScopeError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to classes (e.g. when a caller
  serializes a denial reason and needs the original type)

Usage:
    from tenantscope.exceptions import (
        NotFoundError,
        InvalidAssignmentError,
        TenantScopeError,
    )

Only ``NotFoundError`` and ``TenantGraphError`` escape the public API.
Permission checks (``can``, ``is_in_scope``, ``is_blocked``, ``authorize``)
turn every other failure into a denial.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "TenantScopeError",
    "ConfigurationError",
    "NotFoundError",
    "InvalidAssignmentError",
    "ResolutionFailure",
    "TenantGraphError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class TenantScopeError(Exception):
    """Base exception for tenantscope.

    Attributes:
        code: Stable error code string (e.g. "NOT_FOUND").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(TenantScopeError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class NotFoundError(TenantScopeError):
    """Unknown tenant or user id. Propagated to the caller, never retried."""

    code: str = "NOT_FOUND"
    message: str = "Unknown id"


class InvalidAssignmentError(TenantScopeError):
    """A user's assignment does not match its role.

    Treated as a data-integrity warning; the requested action is denied.
    """

    code: str = "INVALID_ASSIGNMENT"
    message: str = "Assignment does not match role"


class ResolutionFailure(TenantScopeError):
    """Unexpected fault while computing a default landing route."""

    code: str = "RESOLUTION_FAILURE"
    message: str = "Default route could not be resolved"


class TenantGraphError(TenantScopeError):
    """Tenant rows do not form a valid System → Agency → Client hierarchy."""

    code: str = "TENANT_GRAPH_ERROR"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[TenantScopeError])


class ErrorRegistry:
    """Registry mapping stable error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[TenantScopeError]] = {}

    def register(self, code: str, error_cls: type[TenantScopeError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[TenantScopeError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[TenantScopeError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register an application-specific error type.

    Usage:
        @register_error("SOP_LOCKED")
        class SopLockedError(TenantScopeError):
            code = "SOP_LOCKED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", TenantScopeError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("NOT_FOUND", NotFoundError)
error_registry.register("INVALID_ASSIGNMENT", InvalidAssignmentError)
error_registry.register("RESOLUTION_FAILURE", ResolutionFailure)
error_registry.register("TENANT_GRAPH_ERROR", TenantGraphError)
