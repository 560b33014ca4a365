"""Shared fixtures: a two-system tenant tree and in-memory stores.

    S1 ── A1 ── C1
       │     └─ C2
       └─ A2 ── C3
    S2 ── A3 ── C4
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional

import pytest

from tenantscope import (
    DecisionEvent,
    DecisionSink,
    FailureEvent,
    Role,
    SharedResourceStore,
    Tenant,
    TenantGraph,
    TenantKind,
    TenantStore,
    User,
)


def build_tenants(suspended: Iterable[str] = ()) -> list[Tenant]:
    off = set(suspended)
    rows = [
        ("S1", TenantKind.SYSTEM, None),
        ("S2", TenantKind.SYSTEM, None),
        ("A1", TenantKind.AGENCY, "S1"),
        ("A2", TenantKind.AGENCY, "S1"),
        ("A3", TenantKind.AGENCY, "S2"),
        ("C1", TenantKind.CLIENT, "A1"),
        ("C2", TenantKind.CLIENT, "A1"),
        ("C3", TenantKind.CLIENT, "A2"),
        ("C4", TenantKind.CLIENT, "A3"),
    ]
    return [
        Tenant(id=tid, kind=kind, display_name=f"Tenant {tid}", parent_id=parent, suspended=tid in off)
        for tid, kind, parent in rows
    ]


@pytest.fixture
def tenants() -> list[Tenant]:
    return build_tenants()


@pytest.fixture
def graph(tenants: list[Tenant]) -> TenantGraph:
    return TenantGraph(tenants)


@pytest.fixture
def system_admin() -> User:
    return User.for_role("u-sys", Role.SYSTEM_ADMIN, ["S1"])


@pytest.fixture
def agency_admin() -> User:
    return User.for_role("u-agency", Role.AGENCY_ADMIN, ["A1"])


@pytest.fixture
def client_admin() -> User:
    return User.for_role("u-cadmin", Role.CLIENT_ADMIN, ["C1"])


@pytest.fixture
def client_user() -> User:
    return User.for_role("u-cuser", Role.CLIENT_USER, ["C1"])


class RecordingSink(DecisionSink):
    """Keeps every event in memory."""

    def __init__(self) -> None:
        self.decisions: list[DecisionEvent] = []
        self.failures: list[FailureEvent] = []

    def record_decision(self, event: DecisionEvent) -> None:
        self.decisions.append(event)

    def record_failure(self, event: FailureEvent) -> None:
        self.failures.append(event)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


class FailingSink(DecisionSink):
    """Raises on every event, like a telemetry backend that is down."""

    def record_decision(self, event: DecisionEvent) -> None:
        raise RuntimeError("telemetry down")

    def record_failure(self, event: FailureEvent) -> None:
        raise RuntimeError("telemetry down")


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()


class InMemoryTenantStore(TenantStore):
    def __init__(self, tenants: Iterable[Tenant], users: Iterable[User] = (), suspended: Iterable[str] = ()):
        self.tenants = {t.id: t for t in tenants}
        self.users = {u.id: u for u in users}
        self.suspended = set(suspended)
        self.fetched: list[str] = []

    def fetch_tenant(self, tenant_id: str) -> Optional[Tenant]:
        self.fetched.append(tenant_id)
        return self.tenants.get(tenant_id)

    def fetch_children(self, tenant_id: str) -> List[Tenant]:
        return [t for t in self.tenants.values() if t.parent_id == tenant_id]

    def fetch_user_assignments(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def fetch_suspension_flags(self, tenant_ids: Iterable[str]) -> Mapping[str, bool]:
        return {tid: tid in self.suspended for tid in tenant_ids}


class InMemoryResourceStore(SharedResourceStore):
    def __init__(self, resources, apply_filter: bool = True):
        self.resources = list(resources)
        self.apply_filter = apply_filter
        self.filters: list[Optional[str]] = []

    def query_visible(self, predicate):
        self.filters.append(predicate.as_or_filter())
        if not self.apply_filter:
            return list(self.resources)
        return [r for r in self.resources if predicate(r)]


@pytest.fixture
def make_tenant_store():
    def factory(users: Iterable[User] = (), suspended: Iterable[str] = ()) -> InMemoryTenantStore:
        return InMemoryTenantStore(build_tenants(), users, suspended)

    return factory


@pytest.fixture
def make_graph():
    def factory(suspended: Iterable[str] = ()) -> TenantGraph:
        return TenantGraph(build_tenants(suspended))

    return factory


@pytest.fixture
def make_resource_store():
    def factory(resources, apply_filter: bool = True) -> InMemoryResourceStore:
        return InMemoryResourceStore(resources, apply_filter)

    return factory
