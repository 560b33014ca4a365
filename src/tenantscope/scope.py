"""Scope resolver: the tenant ids a user may act within.

A scope is the downward closure of the user's direct assignments plus
the read-only ancestors of those assignments:

- ``system_admin``: assigned systems and every agency/client below them.
- ``agency_admin``: assigned agencies, their clients, and the parent
  system (read-only).
- ``client_admin`` / ``client_user``: assigned clients plus their agency
  and system (read-only).

Suspension is deliberately ignored here; see :mod:`tenantscope.suspension`.
Compute the scope once per request, not once per listed row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .exceptions import InvalidAssignmentError, TenantScopeError
from .graph import TenantGraph
from .models import TenantKind, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scope:
    """Resolved tenant ids, split by tenant kind.

    Attributes:
        system_ids / agency_ids / client_ids: every id in scope.
        read_only_ids: ancestors pulled in above the user's assignments;
            visible but not managed.
    """

    system_ids: frozenset[str] = frozenset()
    agency_ids: frozenset[str] = frozenset()
    client_ids: frozenset[str] = frozenset()
    read_only_ids: frozenset[str] = frozenset()

    @property
    def all_ids(self) -> frozenset[str]:
        return self.system_ids | self.agency_ids | self.client_ids

    @property
    def is_empty(self) -> bool:
        return not (self.system_ids or self.agency_ids or self.client_ids)

    def contains(self, tenant_id: str | None) -> bool:
        if not tenant_id:
            return False
        return tenant_id in self.system_ids or tenant_id in self.agency_ids or tenant_id in self.client_ids

    def manages(self, tenant_id: str | None) -> bool:
        """True if ``tenant_id`` is in scope and not a read-only ancestor."""
        return self.contains(tenant_id) and tenant_id not in self.read_only_ids

    __contains__ = contains


EMPTY_SCOPE = Scope()


def scope_of(user: User, graph: TenantGraph) -> Scope:
    """Compute the scope of ``user`` over ``graph``.

    Args:
        user: User snapshot with its role-specific assignment.
        graph: Tenant graph holding every assigned tenant and its ancestors.

    Returns:
        The resolved :class:`Scope`. Empty when nothing is assigned.

    Raises:
        NotFoundError: an assigned id is not in the graph.
        InvalidAssignmentError: an assigned id is a tenant of the wrong kind.
    """
    assignment = user.assignment
    if not user.assigned_ids:
        return EMPTY_SCOPE

    ids: dict[str, set[str]] = {TenantKind.SYSTEM: set(), TenantKind.AGENCY: set(), TenantKind.CLIENT: set()}
    read_only: set[str] = set()

    for tenant_id in user.assigned_ids:
        tenant = graph.get(tenant_id)
        if tenant.kind != assignment.kind:  # type: ignore[union-attr]
            raise InvalidAssignmentError(
                f"{user.role} {user.id} is assigned {tenant.kind} {tenant_id}",
                user_id=user.id,
                tenant_id=tenant_id,
            )
        ids[tenant.kind].add(tenant.id)

        for ancestor in graph.ancestors(tenant_id)[:-1]:
            ids[ancestor.kind].add(ancestor.id)
            read_only.add(ancestor.id)

        for descendant_id in graph.descendants(tenant_id):
            ids[graph.kind_of(descendant_id)].add(descendant_id)

    # An ancestor that is also directly assigned is managed, not read-only
    read_only.difference_update(user.assigned_ids)

    scope = Scope(
        system_ids=frozenset(ids[TenantKind.SYSTEM]),
        agency_ids=frozenset(ids[TenantKind.AGENCY]),
        client_ids=frozenset(ids[TenantKind.CLIENT]),
        read_only_ids=frozenset(read_only),
    )
    logger.debug(
        "Resolved scope for %s (%s): %d systems, %d agencies, %d clients",
        user.id,
        user.role,
        len(scope.system_ids),
        len(scope.agency_ids),
        len(scope.client_ids),
    )
    return scope


def is_in_scope(user: User, tenant_id: str | None, graph: TenantGraph) -> bool:
    """Check whether ``tenant_id`` lies in the scope of ``user``.

    Never raises: missing or inconsistent data is a denial.
    """
    if not tenant_id:
        return False
    try:
        return scope_of(user, graph).contains(tenant_id)
    except TenantScopeError as e:
        logger.warning("Scope check for %s denied: [%s] %s", user.id, e.code, e.message)
        return False


__all__ = [
    "EMPTY_SCOPE",
    "Scope",
    "is_in_scope",
    "scope_of",
]
