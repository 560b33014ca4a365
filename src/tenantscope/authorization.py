"""Combined authorization check for one requested action.

:func:`authorize` runs the three checks in order and stops at the first
denial:

1. Role policy: is the action legal for the role at all?
2. Scope: is the target tenant inside the user's scope? Read-only
   ancestors only admit ``view``.
3. Suspension: is the user, the target, or an ancestor suspended?

It never raises; every failure becomes a denied :class:`Decision`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import ResolverConfig
from .exceptions import InvalidAssignmentError, TenantScopeError
from .graph import TenantGraph
from .interfaces import DecisionEvent, DecisionSink, LoggingDecisionSink, emit_decision
from .models import User
from .permissions.access import can
from .permissions.constants import Action
from .scope import Scope, scope_of
from .suspension import blocking_reason

logger = logging.getLogger(__name__)


class DenyReason:
    POLICY = "policy"
    OUT_OF_SCOPE = "out_of_scope"
    READ_ONLY = "read_only"
    SUSPENDED = "suspended"
    INVALID_ASSIGNMENT = "invalid_assignment"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Decision:
    """Outcome of :func:`authorize`."""

    allowed: bool = True
    reason: str = ""
    detail: str = ""

    @property
    def denied(self) -> bool:
        return not self.allowed

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = Decision()


def _check(
    user: User,
    action: str,
    entity_type: str,
    graph: TenantGraph,
    target_tenant_id: Optional[str],
    scope: Optional[Scope],
) -> Decision:
    if not can(user.role, action, entity_type):
        return Decision(False, DenyReason.POLICY, f"{user.role} may not {action} {entity_type}")

    if target_tenant_id is not None:
        try:
            resolved = scope if scope is not None else scope_of(user, graph)
        except InvalidAssignmentError as e:
            logger.warning(
                "Data integrity: %s",
                e.message,
                extra={"user_id": user.id, "role": user.role, "error_code": e.code},
            )
            return Decision(False, DenyReason.INVALID_ASSIGNMENT, e.message)
        except TenantScopeError as e:
            return Decision(False, DenyReason.NOT_FOUND, e.message)

        if not resolved.contains(target_tenant_id):
            return Decision(False, DenyReason.OUT_OF_SCOPE, f"{target_tenant_id} is outside the user's scope")
        if action != Action.VIEW and not resolved.manages(target_tenant_id):
            return Decision(False, DenyReason.READ_ONLY, f"{target_tenant_id} is read-only for {user.role}")

    blocked = blocking_reason(user, target_tenant_id, graph)
    if blocked is not None:
        return Decision(False, DenyReason.SUSPENDED, blocked)

    return ALLOWED


def authorize(
    user: User,
    action: str,
    entity_type: str,
    graph: TenantGraph,
    target_tenant_id: Optional[str] = None,
    *,
    scope: Optional[Scope] = None,
    sink: Optional[DecisionSink] = None,
    config: Optional[ResolverConfig] = None,
) -> Decision:
    """Decide whether ``user`` may perform ``action`` on ``entity_type``.

    Args:
        user: The acting user.
        action: One of :class:`Action`.
        entity_type: One of :class:`EntityType`.
        graph: Tenant graph holding the target and the user's assignments.
        target_tenant_id: Tenant the action applies to; None for
            tenant-independent checks (e.g. listing project managers).
        scope: Pre-computed scope of ``user`` (computed from ``graph`` if omitted).
        sink: Receives the decision event.
        config: Decision-event switch.

    Returns:
        :class:`Decision`; truthy when allowed.

    Example::

        decision = authorize(user, Action.EDIT, EntityType.TASK, graph, "C1")
        if decision.denied:
            render_forbidden(decision.reason)
    """
    decision = _check(user, action, entity_type, graph, target_tenant_id, scope)

    if config is None or config.decision_events_enabled:
        emit_decision(
            sink or LoggingDecisionSink(),
            DecisionEvent(
                kind="authorize",
                user_id=user.id,
                role=user.role,
                allowed=decision.allowed,
                subject=f"{action}:{entity_type}:{target_tenant_id or '*'}",
                reason=decision.reason,
                details={"detail": decision.detail} if decision.detail else {},
            ),
        )
    return decision


__all__ = [
    "ALLOWED",
    "Decision",
    "DenyReason",
    "authorize",
]
