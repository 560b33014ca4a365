"""Per-request facade over the resolver components.

One :class:`AccessResolver` binds a user and a freshly loaded tenant
graph. The scope is resolved at most once per instance, so list views
can check many rows without recomputing the closure. Create a new
instance for every request; never keep one across requests, since
suspension and assignment changes must be seen promptly.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from .authorization import Decision, authorize
from .config import ResolverConfig
from .exceptions import NotFoundError, TenantScopeError
from .graph import TenantGraph
from .interfaces import DecisionSink, LoggingDecisionSink, SharedResourceStore, TenantStore
from .landing import Route, default_route
from .logging import get_resolver_logger
from .models import NavigationContext, SharedResource, User
from .permissions.access import can
from .scope import Scope, scope_of
from .suspension import is_blocked
from .visibility import VisibilityPredicate, filter_visible, visible_predicate

logger = logging.getLogger(__name__)


class AccessResolver:
    """All authorization questions for one user within one request.

    Args:
        user: The acting user.
        graph: Tenant graph covering the user's assignments (and targets).
        sink: Receives decision and failure events (logging by default).
        config: Resolver configuration.

    Example::

        resolver = AccessResolver.from_store(store, "user-1")
        if resolver.authorize(Action.EDIT, EntityType.TASK, "C1"):
            ...
        sops = resolver.query_visible(sop_store)
        route = resolver.default_route(nav)
    """

    def __init__(
        self,
        user: User,
        graph: TenantGraph,
        *,
        sink: Optional[DecisionSink] = None,
        config: Optional[ResolverConfig] = None,
    ) -> None:
        self.user = user
        self.graph = graph
        self.config = config or ResolverConfig()
        self.sink = sink or LoggingDecisionSink()
        self._scope: Optional[Scope] = None
        self._log = get_resolver_logger(__name__, user=user)

    @classmethod
    def from_store(
        cls,
        store: TenantStore,
        user_id: str,
        *,
        extra_tenant_ids: Iterable[str] = (),
        sink: Optional[DecisionSink] = None,
        config: Optional[ResolverConfig] = None,
    ) -> "AccessResolver":
        """Load the user and the tenants it touches from ``store``.

        Args:
            extra_tenant_ids: Targets outside the user's assignments that
                the request will check (e.g. the current navigation ids).

        Raises:
            NotFoundError: the user or one of its assigned tenants is unknown.
        """
        user = store.fetch_user_assignments(user_id)
        if user is None:
            raise NotFoundError(f"Unknown user: {user_id}", user_id=user_id)

        graph = TenantGraph.from_store(store, user.assigned_ids)
        extra = [tid for tid in extra_tenant_ids if tid and tid not in graph]
        if extra:
            tenants = list(graph)
            for tenant in TenantGraph.from_store(store, extra, include_descendants=False):
                if tenant.id not in graph:
                    tenants.append(tenant)
            graph = TenantGraph(tenants)
        return cls(user, graph, sink=sink, config=config)

    # ── Scope ───────────────────────────────────────────

    @property
    def scope(self) -> Scope:
        """The user's scope, resolved once.

        Raises:
            NotFoundError / InvalidAssignmentError: see :func:`scope_of`.
        """
        if self._scope is None:
            self._scope = scope_of(self.user, self.graph)
        return self._scope

    def _safe_scope(self) -> Optional[Scope]:
        try:
            return self.scope
        except TenantScopeError as e:
            self._log.warning("Scope unavailable: [%s] %s", e.code, e.message)
            return None

    def is_in_scope(self, tenant_id: Optional[str]) -> bool:
        scope = self._safe_scope()
        return scope is not None and scope.contains(tenant_id)

    # ── Checks ──────────────────────────────────────────

    def can(self, action: str, entity_type: str) -> bool:
        return can(self.user.role, action, entity_type)

    def is_blocked(self, tenant_id: Optional[str]) -> bool:
        return is_blocked(self.user, tenant_id, self.graph)

    def authorize(self, action: str, entity_type: str, target_tenant_id: Optional[str] = None) -> Decision:
        return authorize(
            self.user,
            action,
            entity_type,
            self.graph,
            target_tenant_id,
            scope=self._safe_scope() if target_tenant_id is not None else None,
            sink=self.sink,
            config=self.config,
        )

    # ── Shared resources ────────────────────────────────

    def visible_predicate(self) -> VisibilityPredicate:
        """Predicate for SOPs and tags. A broken scope hides all non-system content."""
        scope = self._safe_scope()
        return visible_predicate(self.user, scope if scope is not None else Scope())

    def filter_visible(
        self,
        resources: Iterable[SharedResource],
        order_key: Optional[Callable[[SharedResource], Any]] = None,
    ) -> list[SharedResource]:
        return filter_visible(resources, self.visible_predicate(), order_key)

    def query_visible(
        self,
        store: SharedResourceStore,
        order_key: Optional[Callable[[SharedResource], Any]] = None,
    ) -> list[SharedResource]:
        """Query ``store`` with the visibility predicate and order the rows.

        Rows are re-checked against the predicate before being returned.
        """
        predicate = self.visible_predicate()
        if predicate.matches_nothing:
            return []
        rows = store.query_visible(predicate)
        visible = filter_visible(rows, predicate, order_key)
        if len(visible) != len(rows):
            self._log.warning("Store returned %d rows outside the visibility filter", len(rows) - len(visible))
        return visible

    # ── Landing ─────────────────────────────────────────

    def default_route(self, nav: Optional[NavigationContext] = None) -> Route:
        return default_route(
            self.user,
            nav,
            self.graph,
            scope=self._scope,
            sink=self.sink,
            config=self.config,
        )

    def __repr__(self) -> str:
        return f"AccessResolver(user={self.user.id!r}, role={self.user.role!r}, graph={self.graph!r})"


__all__ = ["AccessResolver"]
