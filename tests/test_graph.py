"""Tests for the tenant graph."""

from __future__ import annotations

import pytest

from tenantscope import NotFoundError, Tenant, TenantGraph, TenantGraphError, TenantKind


class TestTenant:
    """Tests for Tenant construction rules."""

    def test_system_with_parent_rejected(self) -> None:
        """Test a system cannot have a parent."""
        with pytest.raises(TenantGraphError):
            Tenant("S9", TenantKind.SYSTEM, parent_id="S1")

    def test_agency_without_parent_rejected(self) -> None:
        """Test an agency needs a parent."""
        with pytest.raises(TenantGraphError):
            Tenant("A9", TenantKind.AGENCY)

    def test_unknown_kind_rejected(self) -> None:
        """Test an unknown tenant kind is rejected."""
        with pytest.raises(TenantGraphError, match="Unknown tenant kind"):
            Tenant("X1", "region", parent_id="S1")

    def test_depth(self) -> None:
        """Test the depth of each kind."""
        assert Tenant("S1", TenantKind.SYSTEM).depth == 0
        assert Tenant("A1", TenantKind.AGENCY, parent_id="S1").depth == 1
        assert Tenant("C1", TenantKind.CLIENT, parent_id="A1").depth == 2


class TestTenantGraph:
    """Tests for ancestors/descendants lookups."""

    def test_ancestors_root_to_leaf(self, graph: TenantGraph) -> None:
        """Test ancestors are listed from the root down."""
        assert [t.id for t in graph.ancestors("C1")] == ["S1", "A1", "C1"]

    def test_ancestors_of_root(self, graph: TenantGraph) -> None:
        """Test a system has no ancestors."""
        assert [t.id for t in graph.ancestors("S2")] == ["S2"]

    def test_descendants_of_system(self, graph: TenantGraph) -> None:
        """Test a system reaches its agencies and clients."""
        assert graph.descendants("S1") == {"A1", "A2", "C1", "C2", "C3"}

    def test_descendants_of_agency(self, graph: TenantGraph) -> None:
        """Test an agency reaches its clients only."""
        assert graph.descendants("A1") == {"C1", "C2"}

    def test_descendants_of_client_empty(self, graph: TenantGraph) -> None:
        """Test a client has no descendants."""
        assert graph.descendants("C4") == set()

    def test_unknown_id_raises_not_found(self, graph: TenantGraph) -> None:
        """Test unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            graph.ancestors("nope")
        assert exc_info.value.code == "NOT_FOUND"
        with pytest.raises(NotFoundError):
            graph.descendants("nope")

    def test_children_and_parent(self, graph: TenantGraph) -> None:
        """Test children and parent lookups."""
        assert set(graph.children("S1")) == {"A1", "A2"}
        assert graph.parent("C3").id == "A2"
        assert graph.parent("S1") is None

    def test_container_protocol(self, graph: TenantGraph) -> None:
        """Test len, in and iteration."""
        assert "C2" in graph
        assert "nope" not in graph
        assert len(graph) == 9
        assert {t.id for t in graph} >= {"S1", "C4"}

    def test_ids_of_kind(self, graph: TenantGraph) -> None:
        """Test ids are grouped by kind."""
        assert graph.ids_of_kind(TenantKind.AGENCY) == frozenset({"A1", "A2", "A3"})

    def test_find_returns_none_for_unknown(self, graph: TenantGraph) -> None:
        """Test find returns None for an unknown id."""
        assert graph.find("nope") is None
        assert graph.find(None) is None
        assert graph.find("A1").kind == TenantKind.AGENCY


class TestTenantGraphValidation:
    """Tests for structural validation at construction."""

    def test_duplicate_ids(self) -> None:
        """Test duplicate ids are rejected."""
        with pytest.raises(TenantGraphError, match="Duplicate"):
            TenantGraph([Tenant("S1", TenantKind.SYSTEM), Tenant("S1", TenantKind.SYSTEM)])

    def test_missing_parent(self) -> None:
        """Test a dangling parent id is rejected."""
        with pytest.raises(TenantGraphError, match="not in the graph"):
            TenantGraph([Tenant("A1", TenantKind.AGENCY, parent_id="S1")])

    def test_client_under_system_rejected(self) -> None:
        """Test a client directly under a system is rejected."""
        with pytest.raises(TenantGraphError, match="cannot be a child"):
            TenantGraph([Tenant("S1", TenantKind.SYSTEM), Tenant("C1", TenantKind.CLIENT, parent_id="S1")])


class TestFromStore:
    """Tests for loading a graph through the TenantStore contract."""

    def test_loads_ancestors_and_subtree(self, make_tenant_store) -> None:
        """Test loading a tenant brings its ancestors and subtree."""
        store = make_tenant_store()
        graph = TenantGraph.from_store(store, ["A1"])
        assert {t.id for t in graph} == {"S1", "A1", "C1", "C2"}

    def test_without_descendants(self, make_tenant_store) -> None:
        """Test descendants can be skipped."""
        store = make_tenant_store()
        graph = TenantGraph.from_store(store, ["C3"], include_descendants=False)
        assert {t.id for t in graph} == {"S1", "A2", "C3"}

    def test_suspension_flags_refreshed(self, make_tenant_store) -> None:
        """Test suspension flags come from the store, not the rows."""
        store = make_tenant_store(suspended={"A1"})
        graph = TenantGraph.from_store(store, ["C1"])
        assert graph.get("A1").suspended is True
        assert graph.get("C1").suspended is False

    def test_unknown_tenant(self, make_tenant_store) -> None:
        """Test an unknown tenant raises NotFoundError."""
        store = make_tenant_store()
        with pytest.raises(NotFoundError):
            TenantGraph.from_store(store, ["missing"])
