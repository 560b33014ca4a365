"""Row models for data read from the tenant and resource stores.

These are Pydantic models that validate raw rows (column names as in the
``systems``, ``agencies``, ``clients``, ``user_roles``, ``sops``,
``sop_tags`` and ``project_managers`` tables) and convert them into the
immutable snapshots in :mod:`tenantscope.models`.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .exceptions import InvalidAssignmentError
from .models import (
    ProjectManager,
    ResourceKind,
    SharedResource,
    Tenant,
    TenantKind,
    User,
)
from .permissions.constants import Role


class TenantRecord(BaseModel):
    """A row of the systems, agencies or clients table."""

    model_config = {"extra": "ignore"}

    id: str
    kind: Literal["system", "agency", "client"]
    name: str = ""
    system_id: Optional[str] = None
    agency_id: Optional[str] = None
    is_suspended: bool = False

    def to_tenant(self) -> Tenant:
        if self.kind == TenantKind.CLIENT:
            parent_id = self.agency_id
        elif self.kind == TenantKind.AGENCY:
            parent_id = self.system_id
        else:
            parent_id = None
        return Tenant(
            id=self.id,
            kind=self.kind,
            display_name=self.name,
            parent_id=parent_id,
            suspended=self.is_suspended,
        )


class UserRecord(BaseModel):
    """A user_roles row: role plus the three legacy assignment columns.

    Either the single-id columns (``system_id``...) or the list columns
    (``system_ids``...) may be populated; both are merged.
    """

    model_config = {"extra": "ignore"}

    user_id: str = Field(validation_alias=AliasChoices("user_id", "id"))
    role: str
    system_id: Optional[str] = None
    agency_id: Optional[str] = None
    client_id: Optional[str] = None
    system_ids: list[str] = Field(default_factory=list)
    agency_ids: list[str] = Field(default_factory=list)
    client_ids: list[str] = Field(default_factory=list)
    is_suspended: bool = False

    @field_validator("system_ids", "agency_ids", "client_ids", mode="before")
    @classmethod
    def none_to_empty(cls, v: Optional[list[str]]) -> list[str]:
        return [] if v is None else v

    def _ids(self, single: Optional[str], many: list[str]) -> list[str]:
        return ([single] if single else []) + [i for i in many if i]

    def to_user(self) -> User:
        """Build the :class:`User` snapshot.

        Raises:
            InvalidAssignmentError: unknown role, or assignment columns
                populated that do not belong to the role.
        """
        if self.role not in Role.ALL:
            raise InvalidAssignmentError(f"Unknown role: {self.role!r}", user_id=self.user_id)

        by_kind = {
            TenantKind.SYSTEM: self._ids(self.system_id, self.system_ids),
            TenantKind.AGENCY: self._ids(self.agency_id, self.agency_ids),
            TenantKind.CLIENT: self._ids(self.client_id, self.client_ids),
        }
        if self.role == Role.SYSTEM_ADMIN:
            own = TenantKind.SYSTEM
        elif self.role == Role.AGENCY_ADMIN:
            own = TenantKind.AGENCY
        else:
            own = TenantKind.CLIENT

        stray = sorted(kind for kind, ids in by_kind.items() if ids and kind != own)
        if stray:
            raise InvalidAssignmentError(
                f"{self.role} {self.user_id} has {', '.join(stray)} assignments",
                user_id=self.user_id,
                role=self.role,
            )
        return User.for_role(self.user_id, self.role, by_kind[own], suspended=self.is_suspended)


class SharedResourceRecord(BaseModel):
    """A row of the sops or sop_tags table."""

    model_config = {"extra": "ignore"}

    id: str
    access_level: Literal["system", "agency", "client"]
    title: str = Field(default="", validation_alias=AliasChoices("title", "name"))
    system_id: Optional[str] = None
    agency_id: Optional[str] = None
    client_id: Optional[str] = None

    def to_resource(self, kind: str = ResourceKind.SOP) -> SharedResource:
        return SharedResource(
            id=self.id,
            access_level=self.access_level,
            owner_system_id=self.system_id,
            owner_agency_id=self.agency_id,
            owner_client_id=self.client_id,
            title=self.title,
            kind=kind,
        )


class ProjectManagerRecord(BaseModel):
    """A row of the project_managers table."""

    model_config = {"extra": "ignore"}

    id: str
    email: str
    status: Literal["active", "inactive"] = "active"
    full_name: Optional[str] = None

    def to_project_manager(self) -> ProjectManager:
        return ProjectManager(id=self.id, email=self.email, status=self.status, full_name=self.full_name or "")


__all__ = [
    "ProjectManagerRecord",
    "SharedResourceRecord",
    "TenantRecord",
    "UserRecord",
]
