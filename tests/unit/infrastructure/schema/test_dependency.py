"""
Unit tests for foreign key dependency resolution.
"""

import pytest

from sqlayout.infrastructure.schema.core import (
    Column,
    ForeignKeySpec,
    PrimaryKeySpec,
    Schema,
    Table,
    View,
)
from sqlayout.infrastructure.schema.dependency import (
    build_dependency_graph,
    find_cycle_members,
    resolve_creation_order,
    resolve_table_order,
)
from sqlayout.infrastructure.schema.exceptions import CyclicDependencyError

pytestmark = pytest.mark.unit


def _table(name, *references, deferrable=False):
    columns = [Column("id", "integer", primary_key=PrimaryKeySpec())]
    for target in references:
        columns.append(
            Column(
                f"{target}_id",
                "integer",
                foreign_key=ForeignKeySpec(target, "id", deferrable=deferrable),
            )
        )
    return Table(name, tuple(columns))


def _names(tables):
    return [t.name for t in tables]


class TestBuildDependencyGraph:
    """Tests for graph construction."""

    def test_edges_point_from_dependent_to_dependency(self):
        graph = build_dependency_graph([_table("a"), _table("b", "a")])
        assert graph.get_dependencies("b") == ["a"]
        assert graph.get_dependents("a") == ["b"]
        assert graph.get_dependencies("a") == []

    def test_self_reference_adds_no_edge(self):
        graph = build_dependency_graph([_table("a", "a")])
        assert graph.get_dependencies("a") == []

    def test_edge_deferrable_only_if_all_fks_are(self):
        table = Table(
            "b",
            (
                Column("x", "integer", foreign_key=ForeignKeySpec("a", "id", deferrable=True)),
                Column("y", "integer", foreign_key=ForeignKeySpec("a", "id")),
            ),
        )
        graph = build_dependency_graph([_table("a"), table])
        assert graph.edges["b"] == {"a": False}

    def test_unknown_targets_are_ignored(self):
        graph = build_dependency_graph([_table("b", "missing")])
        assert graph.get_dependencies("b") == []


class TestResolveTableOrder:
    """Tests for creation order."""

    def test_dependency_precedes_dependent(self):
        schema = Schema(tables=(_table("A"), _table("B", "A")))
        assert _names(resolve_table_order(schema)) == ["A", "B"]

    def test_reorders_out_of_declaration_order(self):
        tables = [_table("comments", "posts"), _table("users"), _table("posts", "users")]
        assert _names(resolve_table_order(tables)) == ["users", "posts", "comments"]

    def test_independent_tables_keep_declaration_order(self):
        tables = [_table("c"), _table("a"), _table("b")]
        assert _names(resolve_table_order(tables)) == ["c", "a", "b"]

    def test_stable_tie_break(self):
        tables = [_table("d", "a"), _table("c", "a"), _table("a"), _table("b")]
        assert _names(resolve_table_order(tables)) == ["a", "d", "c", "b"]

    def test_self_reference_is_not_a_cycle(self):
        table = Table(
            "A",
            (
                Column("id", "integer", primary_key=PrimaryKeySpec()),
                Column("parent_id", "integer", foreign_key=ForeignKeySpec("A", "id")),
            ),
        )
        assert _names(resolve_table_order([table])) == ["A"]

    def test_order_is_deterministic(self):
        tables = [_table("e", "d"), _table("d", "b", "c"), _table("c", "a"), _table("b", "a"), _table("a")]
        first = _names(resolve_table_order(tables))
        assert first == _names(resolve_table_order(tables))
        assert first == ["a", "c", "b", "d", "e"]

    def test_two_table_cycle_raises(self):
        tables = [_table("X", "Y"), _table("Y", "X")]
        with pytest.raises(CyclicDependencyError) as exc_info:
            resolve_table_order(tables)
        assert exc_info.value.tables == ("X", "Y")
        assert "X, Y" in str(exc_info.value)

    def test_cycle_members_exclude_downstream_tables(self):
        tables = [_table("a"), _table("x", "y", "a"), _table("y", "x"), _table("z", "x")]
        with pytest.raises(CyclicDependencyError) as exc_info:
            resolve_table_order(tables)
        assert exc_info.value.tables == ("x", "y")

    def test_deferrable_cycle_is_released(self):
        tables = [_table("x", "y", deferrable=True), _table("y", "x", deferrable=True)]
        assert _names(resolve_table_order(tables)) == ["x", "y"]

    def test_deferrable_cycle_rejected_when_disabled(self):
        tables = [_table("x", "y", deferrable=True), _table("y", "x", deferrable=True)]
        with pytest.raises(CyclicDependencyError):
            resolve_table_order(tables, allow_deferrable_cycles=False)

    def test_mixed_cycle_released_at_deferrable_edge(self):
        tables = [_table("x", "y"), _table("y", "x", deferrable=True)]
        assert _names(resolve_table_order(tables)) == ["y", "x"]

    def test_mixed_cycle_released_when_deferrable_cycles_disabled(self):
        tables = [_table("x", "y"), _table("y", "x", deferrable=True)]
        assert _names(resolve_table_order(tables, allow_deferrable_cycles=False)) == ["y", "x"]

    def test_disabled_rejects_only_the_fully_deferrable_cycle(self):
        tables = [
            _table("a", "b"),
            _table("b", "a", deferrable=True),
            _table("x", "y", deferrable=True),
            _table("y", "x", deferrable=True),
        ]
        with pytest.raises(CyclicDependencyError) as exc_info:
            resolve_table_order(tables, allow_deferrable_cycles=False)
        assert exc_info.value.tables == ("x", "y")


class TestFindCycleMembers:
    def test_acyclic_graph_has_no_members(self):
        graph = build_dependency_graph([_table("a"), _table("b", "a")])
        assert find_cycle_members(graph) == []


class TestResolveCreationOrder:
    def test_views_follow_tables_in_declared_order(self):
        schema = Schema(
            tables=(_table("b", "a"), _table("a")),
            views=(View("v_two", "SELECT 2", ["x"]), View("v_one", "SELECT 1", ["x"])),
        )
        assert _names(resolve_creation_order(schema)) == ["a", "b", "v_two", "v_one"]
