"""Role policy table.

Provides:
- ``RolePolicy``: the capabilities one role holds per entity type.
- ``ROLE_POLICIES``: the fixed business rules for all four roles.
- ``PUBLISH_LEVELS``: access levels each role may publish shared resources at.
- ``ASSIGNABLE_ROLES``: roles each role may hand out to other users.

The table is written out entry by entry instead of being derived from a
role hierarchy, so a reviewer can read every grant directly.
"""

from __future__ import annotations

from .constants import Action, EntityType, Role

_NONE: frozenset[str] = frozenset()


class RolePolicy:
    """Capabilities granted to a role, keyed by entity type.

    Controls CAN (is the action legal for this role). Whether the target
    tenant is in the user's scope, or suspended, is checked elsewhere.

    Args:
        role: Role this policy applies to.
        grants: Mapping of entity type → allowed actions. Entity types
            missing from the mapping grant nothing.

    Example::

        policy = RolePolicy(
            role=Role.CLIENT_USER,
            grants={EntityType.TASK: frozenset({Action.VIEW, Action.COMMENT})},
        )
        policy.allows(Action.VIEW, EntityType.TASK)    # True
        policy.allows(Action.DELETE, EntityType.TASK)  # False
    """

    __slots__ = ("role", "grants")

    def __init__(self, *, role: str, grants: dict[str, frozenset[str]]) -> None:
        self.role = role
        self.grants = {entity: frozenset(actions) for entity, actions in grants.items()}

    def allows(self, action: str, entity_type: str) -> bool:
        """Return True if ``action`` on ``entity_type`` is granted."""
        return action in self.grants.get(entity_type, _NONE)

    def actions_for(self, entity_type: str) -> frozenset[str]:
        return self.grants.get(entity_type, _NONE)

    def __repr__(self) -> str:
        return f"RolePolicy(role={self.role!r}, grants={self.grants!r})"


# ── Policy Table ────────────────────────────────────────

ROLE_POLICIES: dict[str, RolePolicy] = {
    Role.SYSTEM_ADMIN: RolePolicy(
        role=Role.SYSTEM_ADMIN,
        grants={
            EntityType.SYSTEM: frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.SUSPEND}),
            EntityType.AGENCY: frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.SUSPEND}),
            EntityType.CLIENT: frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.SUSPEND}),
            EntityType.USER: frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.SUSPEND}),
            EntityType.TASK: frozenset(
                {Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.COMMENT, Action.ATTACH}
            ),
            EntityType.SOP: frozenset(
                {Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.COMMENT, Action.ATTACH}
            ),
            EntityType.REPORT: frozenset({Action.VIEW}),
            EntityType.PROJECT_MANAGER: frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE}),
        },
    ),
    Role.AGENCY_ADMIN: RolePolicy(
        role=Role.AGENCY_ADMIN,
        grants={
            EntityType.SYSTEM: _NONE,
            EntityType.AGENCY: frozenset({Action.VIEW, Action.EDIT}),
            EntityType.CLIENT: frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.SUSPEND}),
            EntityType.USER: frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.SUSPEND}),
            EntityType.TASK: frozenset(
                {Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.COMMENT, Action.ATTACH}
            ),
            EntityType.SOP: frozenset(
                {Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.COMMENT, Action.ATTACH}
            ),
            EntityType.REPORT: frozenset({Action.VIEW}),
            EntityType.PROJECT_MANAGER: _NONE,
        },
    ),
    Role.CLIENT_ADMIN: RolePolicy(
        role=Role.CLIENT_ADMIN,
        grants={
            EntityType.SYSTEM: _NONE,
            EntityType.AGENCY: _NONE,
            EntityType.CLIENT: frozenset({Action.VIEW, Action.EDIT}),
            EntityType.USER: frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE}),
            EntityType.TASK: frozenset(
                {Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.COMMENT, Action.ATTACH}
            ),
            EntityType.SOP: frozenset({Action.VIEW, Action.CREATE, Action.EDIT, Action.COMMENT, Action.ATTACH}),
            EntityType.REPORT: frozenset({Action.VIEW}),
            EntityType.PROJECT_MANAGER: _NONE,
        },
    ),
    Role.CLIENT_USER: RolePolicy(
        role=Role.CLIENT_USER,
        grants={
            EntityType.SYSTEM: _NONE,
            EntityType.AGENCY: _NONE,
            EntityType.CLIENT: frozenset({Action.VIEW}),
            EntityType.USER: _NONE,
            EntityType.TASK: frozenset({Action.VIEW, Action.COMMENT, Action.ATTACH}),
            EntityType.SOP: frozenset({Action.VIEW, Action.COMMENT, Action.ATTACH}),
            EntityType.REPORT: frozenset({Action.VIEW}),
            EntityType.PROJECT_MANAGER: _NONE,
        },
    ),
}


# Access levels (``AccessLevel`` values) each role may publish an SOP or tag at
PUBLISH_LEVELS: dict[str, frozenset[str]] = {
    Role.SYSTEM_ADMIN: frozenset({"system", "agency", "client"}),
    Role.AGENCY_ADMIN: frozenset({"agency", "client"}),
    Role.CLIENT_ADMIN: frozenset({"client"}),
    Role.CLIENT_USER: _NONE,
}

# Roles each role may give to a user it creates or edits
ASSIGNABLE_ROLES: dict[str, frozenset[str]] = {
    Role.SYSTEM_ADMIN: frozenset({Role.SYSTEM_ADMIN, Role.AGENCY_ADMIN, Role.CLIENT_ADMIN, Role.CLIENT_USER}),
    Role.AGENCY_ADMIN: frozenset({Role.AGENCY_ADMIN, Role.CLIENT_ADMIN, Role.CLIENT_USER}),
    Role.CLIENT_ADMIN: frozenset({Role.CLIENT_ADMIN, Role.CLIENT_USER}),
    Role.CLIENT_USER: _NONE,
}


__all__ = [
    "ASSIGNABLE_ROLES",
    "PUBLISH_LEVELS",
    "ROLE_POLICIES",
    "RolePolicy",
]
