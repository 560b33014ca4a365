"""Role-level access checks over the policy table.

Provides runtime functions answering "is this action legal for this
role". Tenant scope and suspension are separate checks, combined by
:func:`tenantscope.authorization.authorize`.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .constants import Action, EntityType, Role
from .policy import ASSIGNABLE_ROLES, PUBLISH_LEVELS, ROLE_POLICIES

logger = logging.getLogger(__name__)


def can(role: str | None, action: str, entity_type: str) -> bool:
    """Check if ``role`` may perform ``action`` on ``entity_type``.

    Unknown roles, actions and entity types are denied, never raised.

    Args:
        role: One of :class:`Role` (``None`` for an unauthenticated caller).
        action: One of :class:`Action`.
        entity_type: One of :class:`EntityType`.

    Returns:
        True if the table grants the action.

    Example::

        can(Role.AGENCY_ADMIN, Action.VIEW, EntityType.SYSTEM)   # False
        can(Role.AGENCY_ADMIN, Action.CREATE, EntityType.CLIENT) # True
        can(Role.CLIENT_USER, Action.COMMENT, EntityType.TASK)   # True
    """
    policy = ROLE_POLICIES.get(role) if role else None
    if policy is None:
        logger.debug("Denied %s on %s: unknown role %r", action, entity_type, role)
        return False
    if action not in Action.ALL or entity_type not in EntityType.ALL:
        logger.debug("Denied %s on %s: unknown action or entity type", action, entity_type)
        return False
    return policy.allows(action, entity_type)


def allowed_actions(role: str | None, entity_type: str) -> frozenset[str]:
    """Return every action ``role`` holds on ``entity_type``.

    Useful for rendering only the buttons a user can press.
    """
    policy = ROLE_POLICIES.get(role) if role else None
    if policy is None:
        return frozenset()
    return policy.actions_for(entity_type)


def can_any(role: str | None, checks: Iterable[tuple[str, str]]) -> bool:
    """True if at least one ``(action, entity_type)`` pair is granted."""
    return any(can(role, action, entity_type) for action, entity_type in checks)


def can_all(role: str | None, checks: Iterable[tuple[str, str]]) -> bool:
    """True if every ``(action, entity_type)`` pair is granted.

    An empty ``checks`` iterable is vacuously granted.
    """
    return all(can(role, action, entity_type) for action, entity_type in checks)


def can_publish_at(role: str | None, access_level: str) -> bool:
    """Check if ``role`` may publish an SOP or tag at ``access_level``.

    Example::

        can_publish_at(Role.AGENCY_ADMIN, "agency")  # True
        can_publish_at(Role.AGENCY_ADMIN, "system")  # False
    """
    levels = PUBLISH_LEVELS.get(role) if role else None
    return levels is not None and access_level in levels


def assignable_roles(role: str | None) -> tuple[str, ...]:
    """Roles ``role`` may give to another user, most privileged first.

    Unknown roles and client users get an empty tuple.
    """
    granted = ASSIGNABLE_ROLES.get(role) if role else None
    if not granted:
        return ()
    return tuple(r for r in Role.ORDER if r in granted)


__all__ = [
    "allowed_actions",
    "assignable_roles",
    "can",
    "can_all",
    "can_any",
    "can_publish_at",
]
