"""Role policy table for tenantscope.

Defines:
- Role: the four user roles
- Action: view/create/edit/delete/suspend/comment/attach
- EntityType: System, Agency, Client, User, Task, SOP, Report, ProjectManager
- ROLE_POLICIES: role → per-entity capability sets
- can(): static lookup against the table
- can_publish_at(), assignable_roles(): publishing and role-granting limits
"""

from .access import (
    allowed_actions,
    assignable_roles,
    can,
    can_all,
    can_any,
    can_publish_at,
)
from .constants import Action, EntityType, Role
from .policy import ASSIGNABLE_ROLES, PUBLISH_LEVELS, ROLE_POLICIES, RolePolicy

__all__ = [
    "ASSIGNABLE_ROLES",
    "PUBLISH_LEVELS",
    "ROLE_POLICIES",
    "Action",
    "EntityType",
    "Role",
    "RolePolicy",
    "allowed_actions",
    "assignable_roles",
    "can",
    "can_all",
    "can_any",
    "can_publish_at",
]
