"""Suspension gate: final veto applied at the point of action.

Scope answers "does this relationship exist"; the gate answers "is it
currently allowed to act". A suspended agency's clients stay in scope,
so reactivating the agency needs no scope repair.
"""

from __future__ import annotations

import logging
from typing import Optional

from .exceptions import NotFoundError
from .graph import TenantGraph
from .models import User

logger = logging.getLogger(__name__)


def blocking_reason(user: User, target_tenant_id: Optional[str], graph: TenantGraph) -> Optional[str]:
    """Explain why an action on ``target_tenant_id`` is blocked.

    Returns:
        ``None`` when nothing blocks, otherwise a short reason naming the
        suspended user or the first suspended tenant from the root down.
        An unknown target blocks.
    """
    if user.suspended:
        return f"user {user.id} is suspended"
    if target_tenant_id is None:
        return None
    try:
        chain = graph.ancestors(target_tenant_id)
    except NotFoundError:
        return f"tenant {target_tenant_id} is unknown"
    for tenant in chain:
        if tenant.suspended:
            return f"{tenant.kind} {tenant.id} is suspended"
    return None


def is_blocked(user: User, target_tenant_id: Optional[str], graph: TenantGraph) -> bool:
    """True if the user, the target tenant, or any ancestor is suspended.

    Never raises. Without a target only the user's own flag is checked.
    """
    reason = blocking_reason(user, target_tenant_id, graph)
    if reason is not None:
        logger.debug("Blocked %s on %s: %s", user.id, target_tenant_id, reason)
        return True
    return False


__all__ = [
    "blocking_reason",
    "is_blocked",
]
