"""Tenant graph: System → Agency → Client containment.

Built once per request from tenant rows fetched by the caller. Lookups
never mutate the graph, so one instance may be read from several threads.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping, Optional

from .exceptions import NotFoundError, TenantGraphError
from .models import Tenant, TenantKind

if TYPE_CHECKING:
    from .interfaces import TenantStore

logger = logging.getLogger(__name__)


class TenantGraph:
    """Immutable index over tenants keyed by id and by parent id.

    Args:
        tenants: Every tenant the request may touch. Parents must be
            included together with their children.

    Raises:
        TenantGraphError: duplicate ids, a parent missing from the rows,
            or a parent that is not exactly one level shallower.

    Example::

        graph = TenantGraph([
            Tenant("S1", TenantKind.SYSTEM),
            Tenant("A1", TenantKind.AGENCY, parent_id="S1"),
            Tenant("C1", TenantKind.CLIENT, parent_id="A1"),
        ])
        [t.id for t in graph.ancestors("C1")]  # ["S1", "A1", "C1"]
        graph.descendants("S1")                 # {"A1", "C1"}
    """

    __slots__ = ("_by_id", "_children")

    def __init__(self, tenants: Iterable[Tenant]) -> None:
        by_id: dict[str, Tenant] = {}
        for tenant in tenants:
            if tenant.id in by_id:
                raise TenantGraphError(f"Duplicate tenant id: {tenant.id}", tenant_id=tenant.id)
            by_id[tenant.id] = tenant

        children: dict[str, list[str]] = {}
        for tenant in by_id.values():
            if tenant.parent_id is None:
                continue
            parent = by_id.get(tenant.parent_id)
            if parent is None:
                raise TenantGraphError(
                    f"Parent {tenant.parent_id} of {tenant.id} is not in the graph",
                    tenant_id=tenant.id,
                )
            if parent.depth != tenant.depth - 1:
                raise TenantGraphError(
                    f"A {tenant.kind} cannot be a child of a {parent.kind}",
                    tenant_id=tenant.id,
                    parent_id=parent.id,
                )
            children.setdefault(parent.id, []).append(tenant.id)

        self._by_id: Mapping[str, Tenant] = by_id
        self._children: Mapping[str, tuple[str, ...]] = {k: tuple(v) for k, v in children.items()}

    @classmethod
    def from_store(
        cls,
        store: "TenantStore",
        tenant_ids: Iterable[str],
        *,
        include_descendants: bool = True,
    ) -> "TenantGraph":
        """Fetch ``tenant_ids``, their ancestors and (optionally) their subtrees.

        Suspension flags are re-read through ``fetch_suspension_flags`` so
        the graph reflects the latest toggles.

        Raises:
            NotFoundError: the store does not know one of the ids.
        """
        roots = [tid for tid in tenant_ids if tid]
        fetched: dict[str, Tenant] = {}
        pending = list(roots)
        while pending:
            tid = pending.pop()
            if tid in fetched:
                continue
            tenant = store.fetch_tenant(tid)
            if tenant is None:
                raise NotFoundError(f"Unknown tenant: {tid}", tenant_id=tid)
            fetched[tid] = tenant
            if tenant.parent_id and tenant.parent_id not in fetched:
                pending.append(tenant.parent_id)

        if include_descendants:
            below = list(roots)
            while below:
                for child in store.fetch_children(below.pop()):
                    if child.id not in fetched:
                        fetched[child.id] = child
                        below.append(child.id)

        flags = store.fetch_suspension_flags(list(fetched))
        tenants = []
        for tid, tenant in fetched.items():
            suspended = flags.get(tid, tenant.suspended)
            if suspended != tenant.suspended:
                tenant = Tenant(
                    id=tenant.id,
                    kind=tenant.kind,
                    display_name=tenant.display_name,
                    parent_id=tenant.parent_id,
                    suspended=suspended,
                )
            tenants.append(tenant)
        logger.debug("Loaded tenant graph with %d tenants", len(tenants))
        return cls(tenants)

    # ── Lookups ─────────────────────────────────────────

    def get(self, tenant_id: str) -> Tenant:
        """Return the tenant, raising :class:`NotFoundError` if unknown."""
        try:
            return self._by_id[tenant_id]
        except KeyError:
            raise NotFoundError(f"Unknown tenant: {tenant_id}", tenant_id=tenant_id) from None

    def find(self, tenant_id: Optional[str]) -> Optional[Tenant]:
        if not tenant_id:
            return None
        return self._by_id.get(tenant_id)

    def kind_of(self, tenant_id: str) -> str:
        return self.get(tenant_id).kind

    def parent(self, tenant_id: str) -> Optional[Tenant]:
        tenant = self.get(tenant_id)
        return self._by_id[tenant.parent_id] if tenant.parent_id else None

    def children(self, tenant_id: str) -> tuple[str, ...]:
        self.get(tenant_id)
        return self._children.get(tenant_id, ())

    def ancestors(self, tenant_id: str) -> list[Tenant]:
        """Return the chain from the root System down to ``tenant_id``, inclusive."""
        chain = [self.get(tenant_id)]
        while chain[-1].parent_id is not None:
            chain.append(self._by_id[chain[-1].parent_id])
        chain.reverse()
        return chain

    def descendants(self, tenant_id: str) -> set[str]:
        """Return the ids of every tenant below ``tenant_id`` (exclusive)."""
        self.get(tenant_id)
        found: set[str] = set()
        stack = list(self._children.get(tenant_id, ()))
        while stack:
            child = stack.pop()
            found.add(child)
            stack.extend(self._children.get(child, ()))
        return found

    def ids_of_kind(self, kind: str) -> frozenset[str]:
        return frozenset(t.id for t in self._by_id.values() if t.kind == kind)

    # ── Container protocol ──────────────────────────────

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Tenant]:
        return iter(self._by_id.values())

    def __repr__(self) -> str:
        counts = {kind: len(self.ids_of_kind(kind)) for kind in (TenantKind.SYSTEM, TenantKind.AGENCY, TenantKind.CLIENT)}
        return f"TenantGraph({counts!r})"


__all__ = ["TenantGraph"]
