"""Default landing resolver: where a user goes after login or context loss.

:func:`default_route` is total: it always returns a :class:`Route`. Any
internal fault is reported to the decision sink and degraded to the
configured failure route.

Rules, first match wins:

1. ``system_admin`` → system dashboard (navigation is ignored).
2. ``agency_admin`` with assigned agencies → the current agency if it is
   in scope, else the first assigned agency.
3. ``client_admin`` / ``client_user`` with assigned clients → the current
   client if it is in scope, else the first assigned client.
4. Current agency in scope → that agency.
5. Current client in scope → that client.
6. Generic dashboard.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .config import FailureRoute, ResolverConfig
from .exceptions import ResolutionFailure, TenantScopeError
from .graph import TenantGraph
from .interfaces import (
    DecisionEvent,
    DecisionSink,
    FailureEvent,
    LoggingDecisionSink,
    emit_decision,
    emit_failure,
)
from .models import NavigationContext, User
from .permissions.constants import Role
from .scope import EMPTY_SCOPE, Scope, scope_of

logger = logging.getLogger(__name__)


class RouteName:
    SYSTEM_DASHBOARD = "system_dashboard"
    AGENCY_DASHBOARD = "agency_dashboard"
    CLIENT_DASHBOARD = "client_dashboard"
    DASHBOARD = "dashboard"
    LOGIN = "login"


@dataclass(frozen=True)
class Route:
    """Opaque destination handed to the UI router."""

    name: str
    tenant_id: Optional[str] = None

    @property
    def path(self) -> str:
        if self.name == RouteName.SYSTEM_DASHBOARD:
            return "/system-dashboard"
        if self.name == RouteName.AGENCY_DASHBOARD:
            return f"/agencies/{self.tenant_id}"
        if self.name == RouteName.CLIENT_DASHBOARD:
            return f"/clients/{self.tenant_id}"
        if self.name == RouteName.LOGIN:
            return "/"
        return "/dashboard"

    @classmethod
    def agency(cls, agency_id: str) -> "Route":
        return cls(RouteName.AGENCY_DASHBOARD, agency_id)

    @classmethod
    def client(cls, client_id: str) -> "Route":
        return cls(RouteName.CLIENT_DASHBOARD, client_id)

    def __str__(self) -> str:
        return self.path


SYSTEM_DASHBOARD_ROUTE = Route(RouteName.SYSTEM_DASHBOARD)
DASHBOARD_ROUTE = Route(RouteName.DASHBOARD)
LOGIN_ROUTE = Route(RouteName.LOGIN)


def failure_route(config: Optional[ResolverConfig] = None) -> Route:
    if config is not None and config.landing_failure_route == FailureRoute.LOGIN:
        return LOGIN_ROUTE
    return DASHBOARD_ROUTE


def _resolve(user: User, nav: NavigationContext, scope_for: Callable[[], Scope]) -> Route:
    role = user.role

    if role == Role.SYSTEM_ADMIN:
        return SYSTEM_DASHBOARD_ROUTE

    if role == Role.AGENCY_ADMIN and user.assigned_ids:
        if nav.current_agency_id and nav.current_agency_id in scope_for().agency_ids:
            return Route.agency(nav.current_agency_id)
        return Route.agency(user.assigned_ids[0])

    if role in Role.CLIENT_ROLES and user.assigned_ids:
        if nav.current_client_id and nav.current_client_id in scope_for().client_ids:
            return Route.client(nav.current_client_id)
        return Route.client(user.assigned_ids[0])

    if nav.current_agency_id and nav.current_agency_id in scope_for().agency_ids:
        return Route.agency(nav.current_agency_id)

    if nav.current_client_id and nav.current_client_id in scope_for().client_ids:
        return Route.client(nav.current_client_id)

    return DASHBOARD_ROUTE


def default_route(
    user: User,
    nav: Optional[NavigationContext] = None,
    graph: Optional[TenantGraph] = None,
    *,
    scope: Optional[Scope] = None,
    sink: Optional[DecisionSink] = None,
    config: Optional[ResolverConfig] = None,
) -> Route:
    """Compute the canonical landing route for ``user``.

    Args:
        user: The authenticated user.
        nav: Current navigation context (empty if omitted).
        graph: Tenant graph used to resolve the scope on demand.
        scope: Pre-computed scope; skips resolution over ``graph``.
        sink: Receives the decision and any recovered failure.
        config: Supplies the failure route and the decision-event switch.

    Returns:
        A :class:`Route`. Never raises.
    """
    sink = sink or LoggingDecisionSink()
    nav = nav or NavigationContext()
    resolved: list[Scope] = []

    def scope_for() -> Scope:
        # Only computed when a navigation id has to be checked
        if not resolved:
            if scope is not None:
                resolved.append(scope)
            elif graph is not None:
                resolved.append(scope_of(user, graph))
            else:
                resolved.append(EMPTY_SCOPE)
        return resolved[0]

    try:
        route = _resolve(user, nav, scope_for)
    except Exception as e:
        failure = e if isinstance(e, TenantScopeError) else ResolutionFailure(f"Unexpected {type(e).__name__}: {e}")
        cause = e.code if isinstance(e, TenantScopeError) else type(e).__name__
        fallback = failure_route(config)
        logger.exception("Default route resolution failed; falling back to %s", fallback.path)
        emit_failure(
            sink,
            FailureEvent(
                kind="landing",
                user_id=str(getattr(user, "id", "")),
                role=str(getattr(user, "role", "")),
                error_code=ResolutionFailure.code,
                message=failure.message,
                details={"cause": cause, "fallback": fallback.path},
            ),
        )
        return fallback

    if config is None or config.decision_events_enabled:
        emit_decision(
            sink,
            DecisionEvent(
                kind="landing",
                user_id=user.id,
                role=user.role,
                allowed=True,
                subject=route.path,
                details={"navigation": not nav.is_empty},
            ),
        )
    return route


__all__ = [
    "DASHBOARD_ROUTE",
    "LOGIN_ROUTE",
    "SYSTEM_DASHBOARD_ROUTE",
    "Route",
    "RouteName",
    "default_route",
    "failure_route",
]
