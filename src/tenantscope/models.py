"""Immutable domain snapshots consumed by the resolver.

Every decision function reads these values and nothing else. They are
frozen so one snapshot can be shared by concurrent request handlers.

- ``Tenant``: a System, Agency or Client node.
- ``SystemScope`` / ``AgencyScope`` / ``ClientScope``: the assignment
  variant a user carries, fixed by the user's role.
- ``User``: role + assignment + suspension flag.
- ``SharedResource``: an SOP or tag with its declared access level.
- ``NavigationContext``: where the UI currently is.
- ``ProjectManager``: identity from the separate project-manager pool.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar, Iterable, Optional, Union

from .exceptions import InvalidAssignmentError, TenantGraphError
from .permissions.constants import Role


class TenantKind:
    """Tenant levels. Depth strictly increases from System to Client."""

    SYSTEM = "system"
    AGENCY = "agency"
    CLIENT = "client"

    ALL = frozenset({"system", "agency", "client"})
    DEPTH = {"system": 0, "agency": 1, "client": 2}


class AccessLevel:
    """Declared visibility tier of a shared resource."""

    SYSTEM = "system"
    AGENCY = "agency"
    CLIENT = "client"

    ALL = frozenset({"system", "agency", "client"})

    # Listing order: broader resources first
    PRIORITY = {"system": 0, "agency": 1, "client": 2}


class ResourceKind:
    SOP = "sop"
    TAG = "tag"

    ALL = frozenset({"sop", "tag"})


@dataclass(frozen=True)
class Tenant:
    """A node of the System → Agency → Client hierarchy."""

    id: str
    kind: str
    display_name: str = ""
    parent_id: Optional[str] = None
    suspended: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise TenantGraphError("Tenant id must not be empty")
        if self.kind not in TenantKind.ALL:
            raise TenantGraphError(f"Unknown tenant kind: {self.kind!r}", tenant_id=self.id)
        if self.kind == TenantKind.SYSTEM and self.parent_id is not None:
            raise TenantGraphError("A system has no parent", tenant_id=self.id)
        if self.kind != TenantKind.SYSTEM and not self.parent_id:
            raise TenantGraphError(f"A {self.kind} must have a parent", tenant_id=self.id)

    @property
    def depth(self) -> int:
        return TenantKind.DEPTH[self.kind]


# ── Assignments ─────────────────────────────────────────


def _unique_ids(ids: Iterable[str]) -> tuple[str, ...]:
    # Declared order is kept: the first id is the user's default landing tenant
    return tuple(dict.fromkeys(i for i in ids if i))


@dataclass(frozen=True)
class SystemScope:
    """Systems assigned to a ``system_admin``."""

    ids: tuple[str, ...] = ()
    kind: ClassVar[str] = TenantKind.SYSTEM

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", _unique_ids(self.ids))


@dataclass(frozen=True)
class AgencyScope:
    """Agencies assigned to an ``agency_admin``."""

    ids: tuple[str, ...] = ()
    kind: ClassVar[str] = TenantKind.AGENCY

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", _unique_ids(self.ids))


@dataclass(frozen=True)
class ClientScope:
    """Clients assigned to a ``client_admin`` or ``client_user``."""

    ids: tuple[str, ...] = ()
    kind: ClassVar[str] = TenantKind.CLIENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", _unique_ids(self.ids))


Assignment = Union[SystemScope, AgencyScope, ClientScope]

ROLE_ASSIGNMENT: dict[str, type] = {
    Role.SYSTEM_ADMIN: SystemScope,
    Role.AGENCY_ADMIN: AgencyScope,
    Role.CLIENT_ADMIN: ClientScope,
    Role.CLIENT_USER: ClientScope,
}


@dataclass(frozen=True)
class User:
    """An authenticated user's role and tenant position.

    The assignment variant must match the role; an empty variant is
    created when none is given. Users with no assigned ids have an empty
    scope and are locked out until assigned.

    Raises:
        InvalidAssignmentError: unknown role, or a variant of the wrong
            kind for the role.
    """

    id: str
    role: str
    assignment: Optional[Assignment] = None
    suspended: bool = False

    def __post_init__(self) -> None:
        expected = ROLE_ASSIGNMENT.get(self.role)
        if expected is None:
            raise InvalidAssignmentError(f"Unknown role: {self.role!r}", user_id=self.id)
        if self.assignment is None:
            object.__setattr__(self, "assignment", expected())
        elif not isinstance(self.assignment, expected):
            raise InvalidAssignmentError(
                f"Role {self.role} requires {expected.__name__}, got {type(self.assignment).__name__}",
                user_id=self.id,
                role=self.role,
            )

    @classmethod
    def for_role(cls, user_id: str, role: str, ids: Iterable[str] = (), *, suspended: bool = False) -> "User":
        """Build a user whose assignment variant is picked from ``role``."""
        variant = ROLE_ASSIGNMENT.get(role)
        if variant is None:
            raise InvalidAssignmentError(f"Unknown role: {role!r}", user_id=user_id)
        return cls(id=user_id, role=role, assignment=variant(tuple(ids)), suspended=suspended)

    @property
    def assigned_ids(self) -> tuple[str, ...]:
        return self.assignment.ids  # type: ignore[union-attr]

    @property
    def first_assigned(self) -> Optional[str]:
        ids = self.assigned_ids
        return ids[0] if ids else None

    def with_role(self, role: str, ids: Iterable[str] = ()) -> "User":
        """Return a copy of this user with a new role and fresh assignment.

        The previous assignment never carries over.
        """
        return User.for_role(self.id, role, ids, suspended=self.suspended)


# ── Shared resources ────────────────────────────────────


@dataclass(frozen=True)
class SharedResource:
    """An SOP or SOP tag published at a declared access level.

    ``owner_agency_id`` is set for agency-level resources (and may be set
    for client-level ones); ``owner_client_id`` is set for client-level
    resources. System-level resources carry neither.
    """

    id: str
    access_level: str
    owner_system_id: Optional[str] = None
    owner_agency_id: Optional[str] = None
    owner_client_id: Optional[str] = None
    title: str = ""
    kind: str = ResourceKind.SOP

    @property
    def priority(self) -> int:
        # Unknown levels sort after every known level
        return AccessLevel.PRIORITY.get(self.access_level, len(AccessLevel.PRIORITY))


# ── Navigation ──────────────────────────────────────────


@dataclass(frozen=True)
class NavigationContext:
    """Cursor over the tenant graph: where the UI currently is.

    Independent of the user's assignments and possibly narrower (a
    system admin drilled into one agency).
    """

    current_system_id: Optional[str] = None
    current_agency_id: Optional[str] = None
    current_client_id: Optional[str] = None

    def with_system(self, system_id: Optional[str]) -> "NavigationContext":
        return replace(self, current_system_id=system_id)

    def with_agency(self, agency_id: Optional[str]) -> "NavigationContext":
        return replace(self, current_agency_id=agency_id)

    def with_client(self, client_id: Optional[str]) -> "NavigationContext":
        return replace(self, current_client_id=client_id)

    def cleared(self) -> "NavigationContext":
        return NavigationContext()

    @property
    def is_empty(self) -> bool:
        return not (self.current_system_id or self.current_agency_id or self.current_client_id)


# ── Project managers ────────────────────────────────────


class ProjectManagerStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"

    ALL = frozenset({"active", "inactive"})


@dataclass(frozen=True)
class ProjectManager:
    """A project manager from the pool kept apart from platform users."""

    id: str
    email: str
    status: str = ProjectManagerStatus.ACTIVE
    full_name: str = field(default="", compare=False)

    @property
    def is_active(self) -> bool:
        return self.status == ProjectManagerStatus.ACTIVE

    @property
    def display_name(self) -> str:
        # Falls back to the mailbox name, as the assignment screen does
        return self.full_name or self.email.split("@", 1)[0]


__all__ = [
    "AccessLevel",
    "AgencyScope",
    "Assignment",
    "ClientScope",
    "NavigationContext",
    "ProjectManager",
    "ProjectManagerStatus",
    "ROLE_ASSIGNMENT",
    "ResourceKind",
    "SharedResource",
    "SystemScope",
    "Tenant",
    "TenantKind",
    "User",
]
