"""Tests for the shared-resource visibility filter."""

from __future__ import annotations

import random

import pytest

from tenantscope import (
    AccessLevel,
    ResourceKind,
    Role,
    SharedResource,
    TenantGraph,
    User,
    VisibilityPredicate,
    filter_visible,
    scope_of,
    sort_visible,
    visible_predicate,
)
from tenantscope.visibility import Condition


def sop(rid: str, level: str, agency: str | None = None, client: str | None = None, title: str = "") -> SharedResource:
    return SharedResource(
        id=rid,
        access_level=level,
        owner_system_id="S1",
        owner_agency_id=agency,
        owner_client_id=client,
        title=title or rid,
    )


@pytest.fixture
def resources() -> list[SharedResource]:
    return [
        sop("sys-b", AccessLevel.SYSTEM, title="Onboarding"),
        sop("sys-a", AccessLevel.SYSTEM, title="Escalation"),
        sop("sys-c", AccessLevel.SYSTEM, title="Billing"),
        sop("ag1-a", AccessLevel.AGENCY, agency="A1", title="Weekly report"),
        sop("ag1-b", AccessLevel.AGENCY, agency="A1", title="Kickoff"),
        sop("ag2-a", AccessLevel.AGENCY, agency="A2", title="Audit"),
        sop("cl1-a", AccessLevel.CLIENT, agency="A1", client="C1", title="Posting schedule"),
        sop("cl1-b", AccessLevel.CLIENT, client="C1", title="Brand voice"),
        sop("cl2-a", AccessLevel.CLIENT, agency="A1", client="C2", title="Approvals"),
        sop("cl3-a", AccessLevel.CLIENT, agency="A2", client="C3", title="Access"),
    ]


def predicate_for(user: User, graph: TenantGraph) -> VisibilityPredicate:
    return visible_predicate(user, scope_of(user, graph))


class TestVisiblePredicate:
    """Tests for the three OR-ed clauses."""

    def test_client_user_sees_own_client_and_agency(self, client_user, graph, resources) -> None:
        """Test a client user sees system, its agency and its client resources."""
        visible = {r.id for r in resources if predicate_for(client_user, graph)(r)}
        assert visible == {"sys-a", "sys-b", "sys-c", "ag1-a", "ag1-b", "cl1-a", "cl1-b"}

    def test_agency_admin_sees_agency_and_its_clients(self, agency_admin, graph, resources) -> None:
        """Test an agency admin sees its agency and the clients below it."""
        visible = {r.id for r in resources if predicate_for(agency_admin, graph)(r)}
        assert visible == {"sys-a", "sys-b", "sys-c", "ag1-a", "ag1-b", "cl1-a", "cl1-b", "cl2-a"}

    def test_system_admin_sees_whole_system(self, system_admin, graph, resources) -> None:
        """Test a system admin sees everything under its system."""
        visible = {r.id for r in resources if predicate_for(system_admin, graph)(r)}
        assert visible == {r.id for r in resources}

    def test_unassigned_user_sees_only_system(self, graph, resources) -> None:
        """Test a user without assignments sees system resources only."""
        user = User.for_role("u", Role.CLIENT_USER)
        visible = {r.id for r in resources if predicate_for(user, graph)(r)}
        assert visible == {"sys-a", "sys-b", "sys-c"}

    def test_suspended_user_sees_nothing(self, graph, resources) -> None:
        """Test a suspended user sees nothing, system resources included."""
        user = User.for_role("u", Role.CLIENT_USER, ["C1"], suspended=True)
        predicate = predicate_for(user, graph)
        assert predicate.matches_nothing
        assert not any(predicate(r) for r in resources)

    def test_missing_owner_not_visible(self) -> None:
        """Test rows without the owner id for their level are hidden."""
        predicate = VisibilityPredicate(agency_ids=frozenset({"A1"}), client_ids=frozenset({"C1"}))
        assert not predicate(sop("x", AccessLevel.AGENCY))
        assert not predicate(sop("y", AccessLevel.CLIENT, agency="A1"))

    def test_unknown_access_level_not_visible(self) -> None:
        """Test an unknown access level is hidden."""
        predicate = VisibilityPredicate(agency_ids=frozenset({"A1"}))
        assert not predicate(sop("x", "global", agency="A1"))

    def test_tags_use_same_predicate(self, client_user, graph) -> None:
        """Test SOP tags follow the same rule as SOPs."""
        tag = SharedResource(
            id="t1", access_level=AccessLevel.AGENCY, owner_agency_id="A2", title="Finance", kind=ResourceKind.TAG
        )
        assert not predicate_for(client_user, graph)(tag)


class TestVisibilityProperties:
    """Properties that hold for every user."""

    def _random_users(self, graph: TenantGraph, n: int = 150):
        rng = random.Random(7)
        pools = {
            Role.SYSTEM_ADMIN: sorted(graph.ids_of_kind("system")),
            Role.AGENCY_ADMIN: sorted(graph.ids_of_kind("agency")),
            Role.CLIENT_ADMIN: sorted(graph.ids_of_kind("client")),
            Role.CLIENT_USER: sorted(graph.ids_of_kind("client")),
        }
        for i in range(n):
            role = rng.choice(Role.ORDER)
            ids = rng.sample(pools[role], rng.randint(0, len(pools[role])))
            yield User.for_role(f"u{i}", role, ids)

    def test_system_resources_visible_to_every_active_user(self, graph, resources) -> None:
        """Test system resources are visible to every active user."""
        system_items = [r for r in resources if r.access_level == AccessLevel.SYSTEM]
        for user in self._random_users(graph):
            predicate = predicate_for(user, graph)
            assert all(predicate(r) for r in system_items)

    def test_client_resources_visible_iff_client_in_scope(self, graph, resources) -> None:
        """Test client resources are visible exactly when the client is in scope."""
        client_items = [r for r in resources if r.access_level == AccessLevel.CLIENT]
        for user in self._random_users(graph):
            scope = scope_of(user, graph)
            predicate = visible_predicate(user, scope)
            for r in client_items:
                assert predicate(r) == (r.owner_client_id in scope.client_ids)


class TestOrdering:
    def test_levels_then_title(self, system_admin, graph, resources) -> None:
        """Test listing order is system, agency, client, then title."""
        shuffled = list(resources)
        random.Random(3).shuffle(shuffled)
        ordered = filter_visible(shuffled, predicate_for(system_admin, graph))
        levels = [r.access_level for r in ordered]
        assert levels == [AccessLevel.SYSTEM] * 3 + [AccessLevel.AGENCY] * 3 + [AccessLevel.CLIENT] * 4
        assert [r.title for r in ordered[:3]] == ["Billing", "Escalation", "Onboarding"]
        assert [r.title for r in ordered[3:6]] == ["Audit", "Kickoff", "Weekly report"]

    def test_custom_order_key(self, resources) -> None:
        """Test a custom order key replaces the default."""
        ordered = sort_visible(resources, order_key=lambda r: r.id)
        assert [r.id for r in ordered[:3]] == ["sys-a", "sys-b", "sys-c"]

    def test_unknown_level_sorts_last(self) -> None:
        """Test unknown levels sort after every known level."""
        items = [sop("odd", "global"), sop("c", AccessLevel.CLIENT, client="C1"), sop("s", AccessLevel.SYSTEM)]
        assert [r.id for r in sort_visible(items)] == ["s", "c", "odd"]


class TestBackendFilter:
    """The predicate renders to the store's OR filter."""

    def test_or_filter_for_client_user(self, client_user, graph) -> None:
        """Test the full OR filter for a client user."""
        predicate = predicate_for(client_user, graph)
        assert predicate.as_or_filter() == (
            'access_level.eq."system",'
            'and(access_level.eq."agency",agency_id.in.("A1")),'
            'and(access_level.eq."client",client_id.in.("C1"))'
        )

    def test_or_filter_sorted_ids(self, agency_admin, graph) -> None:
        """Test ids are rendered in sorted order."""
        predicate = predicate_for(agency_admin, graph)
        assert 'client_id.in.("C1","C2")' in predicate.as_or_filter()

    def test_empty_scope_only_system_clause(self) -> None:
        """Test an empty scope renders the system clause only."""
        assert VisibilityPredicate().as_or_filter() == 'access_level.eq."system"'

    def test_disabled_predicate_has_no_filter(self) -> None:
        """Test a disabled predicate renders no filter."""
        predicate = VisibilityPredicate(enabled=False)
        assert predicate.conditions() == ()
        assert predicate.as_or_filter() is None

    def test_conditions_structure(self, client_user, graph) -> None:
        """Test conditions() groups the clauses per level."""
        groups = predicate_for(client_user, graph).conditions()
        assert len(groups) == 3
        assert [c.field for c in groups[1]] == ["access_level", "agency_id"]
        assert groups[2][1].op == "in"
        assert groups[2][1].value == ("C1",)

    def test_ids_with_delimiters_stay_one_value(self) -> None:
        """Test an id holding filter delimiters cannot add a clause."""
        predicate = VisibilityPredicate(client_ids=frozenset({"C1,client_id.neq.zzz"}))
        assert predicate.as_or_filter() == (
            'access_level.eq."system",'
            'and(access_level.eq."client",client_id.in.("C1,client_id.neq.zzz"))'
        )

    def test_quotes_and_backslashes_escaped(self) -> None:
        """Test double quotes and backslashes inside ids are escaped."""
        condition = Condition("client_id", "in", ('C"1', "C\\2"))
        assert condition.render() == 'client_id.in.("C\\"1","C\\\\2")'
