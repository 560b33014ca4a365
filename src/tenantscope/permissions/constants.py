"""Role, action and entity-type constants.

Provides:
- ``Role``: the four user roles, broadest first.
- ``Action``: operations a role may perform on an entity.
- ``EntityType``: the kinds of entity the policy table covers.
"""

from __future__ import annotations


class Role:
    """User roles, ordered from broadest to narrowest tenant position.

    The role also fixes which assignment variant a user carries:
    ``system_admin`` → systems, ``agency_admin`` → agencies,
    ``client_admin`` / ``client_user`` → clients.
    """

    SYSTEM_ADMIN = "system_admin"
    AGENCY_ADMIN = "agency_admin"
    CLIENT_ADMIN = "client_admin"
    CLIENT_USER = "client_user"

    ALL = frozenset({"system_admin", "agency_admin", "client_admin", "client_user"})
    CLIENT_ROLES = frozenset({"client_admin", "client_user"})

    # Display order for admin screens
    ORDER = ("system_admin", "agency_admin", "client_admin", "client_user")


class Action:
    """Operations checked against the policy table.

    ``comment`` and ``attach`` apply to Tasks and SOPs only; they are the
    write operations left to a ``client_user``.
    """

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    SUSPEND = "suspend"
    COMMENT = "comment"
    ATTACH = "attach"

    ALL = frozenset({"view", "create", "edit", "delete", "suspend", "comment", "attach"})


class EntityType:
    """Entity kinds covered by the policy table."""

    SYSTEM = "System"
    AGENCY = "Agency"
    CLIENT = "Client"
    USER = "User"
    TASK = "Task"
    SOP = "SOP"
    REPORT = "Report"
    PROJECT_MANAGER = "ProjectManager"

    ALL = frozenset({"System", "Agency", "Client", "User", "Task", "SOP", "Report", "ProjectManager"})

    # Entity types that are themselves tenants
    TENANTS = frozenset({"System", "Agency", "Client"})


__all__ = [
    "Action",
    "EntityType",
    "Role",
]
