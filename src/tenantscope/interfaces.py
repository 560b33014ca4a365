from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional

from .models import SharedResource, Tenant, User

if TYPE_CHECKING:
    from .visibility import VisibilityPredicate

logger = logging.getLogger(__name__)


class TenantStore(ABC):
    """Tenant/user store owned by the surrounding application.

    Must return consistent data; the resolver does not detect staleness.
    """

    @abstractmethod
    def fetch_tenant(self, tenant_id: str) -> Optional[Tenant]:
        raise NotImplementedError

    @abstractmethod
    def fetch_user_assignments(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def fetch_children(self, tenant_id: str) -> List[Tenant]:
        raise NotImplementedError

    @abstractmethod
    def fetch_suspension_flags(self, tenant_ids: Iterable[str]) -> Mapping[str, bool]:
        raise NotImplementedError


class SharedResourceStore(ABC):
    """Store holding SOPs and SOP tags.

    Implementations translate the predicate into their native filter
    (see ``VisibilityPredicate.as_or_filter``) or, for small sets,
    evaluate it row by row.
    """

    @abstractmethod
    def query_visible(self, predicate: "VisibilityPredicate") -> List[SharedResource]:
        raise NotImplementedError


# ── Telemetry ───────────────────────────────────────────


@dataclass(frozen=True)
class DecisionEvent:
    """One authorization or landing decision."""

    kind: str
    user_id: str
    role: str
    allowed: bool
    subject: str = ""
    reason: str = ""
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FailureEvent:
    """An internal fault the resolver recovered from."""

    kind: str
    user_id: str
    role: str
    error_code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class DecisionSink(ABC):
    """Receives structured events for every decision and recovered fault."""

    @abstractmethod
    def record_decision(self, event: DecisionEvent) -> None:
        raise NotImplementedError

    @abstractmethod
    def record_failure(self, event: FailureEvent) -> None:
        raise NotImplementedError


class LoggingDecisionSink(DecisionSink):
    """Default sink: writes events as structured log records."""

    def __init__(self, name: str = "tenantscope.decisions"):
        self._logger = logging.getLogger(name)

    def record_decision(self, event: DecisionEvent) -> None:
        self._logger.info(
            "%s %s for %s: %s",
            event.kind,
            "allowed" if event.allowed else "denied",
            event.subject or "-",
            event.reason or "ok",
            extra={
                "user_id": event.user_id,
                "role": event.role,
                "decision": event.kind,
                "allowed": event.allowed,
                "decision_details": event.details,
            },
        )

    def record_failure(self, event: FailureEvent) -> None:
        self._logger.error(
            "%s failed: [%s] %s",
            event.kind,
            event.error_code,
            event.message,
            extra={
                "user_id": event.user_id,
                "role": event.role,
                "decision": event.kind,
                "error_code": event.error_code,
                "decision_details": event.details,
            },
        )


def emit_decision(sink: DecisionSink, event: DecisionEvent) -> None:
    """Send ``event`` to ``sink``; a failing sink is logged, never raised."""
    try:
        sink.record_decision(event)
    except Exception:
        logger.exception("Decision sink %s failed on %s event", type(sink).__name__, event.kind)


def emit_failure(sink: DecisionSink, event: FailureEvent) -> None:
    """Send ``event`` to ``sink``; a failing sink is logged, never raised."""
    try:
        sink.record_failure(event)
    except Exception:
        logger.exception("Decision sink %s failed on %s failure", type(sink).__name__, event.kind)


__all__ = [
    "DecisionEvent",
    "DecisionSink",
    "FailureEvent",
    "LoggingDecisionSink",
    "emit_decision",
    "emit_failure",
    "SharedResourceStore",
    "TenantStore",
]
