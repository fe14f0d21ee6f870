"""Foreign key dependency resolution between tables.

Tables are nodes; a foreign key on table T pointing at table U adds the edge
T -> U (dependent -> dependency). Creation order is a topological order of
that graph in which every dependency precedes its dependents.

Ordering is Kahn's algorithm with a stable tie-break: at each step the
earliest-declared table whose dependencies have all been emitted goes next,
so unconstrained tables keep their declaration order and the output is
reproducible.

Self-references add no edge. When the remaining tables form a cycle, the
earliest-declared table whose outstanding dependencies are all
``DEFERRABLE INITIALLY DEFERRED`` is released; SQLite checks those
constraints at commit, not at creation. With ``allow_deferrable_cycles``
disabled, cycles made only of deferrable edges are not released. Any cycle
that cannot be released raises ``CyclicDependencyError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Union

from sqlayout.utils.logging import get_logger

from .core import Schema, Table, View
from .exceptions import CyclicDependencyError

logger = get_logger(__name__)


@dataclass
class DependencyGraph:
    """
    Foreign key graph keyed by lower-cased table name.

    Attributes:
        tables: Tables in declaration order
        edges: dependent -> {dependency: deferrable}. An edge is deferrable
            only if every foreign key behind it is deferrable.
    """

    tables: List[Table]
    edges: Dict[str, Dict[str, bool]] = field(default_factory=dict)

    def get_dependencies(self, name: str) -> List[str]:
        return list(self.edges.get(name.lower(), {}))

    def get_dependents(self, name: str) -> List[str]:
        key = name.lower()
        return [dependent for dependent, deps in self.edges.items() if key in deps]


def build_dependency_graph(tables: Sequence[Table]) -> DependencyGraph:
    """Build the foreign key graph for ``tables``.

    References to tables outside ``tables`` are ignored; validation reports
    them.
    """
    known = {t.name.lower() for t in tables}
    graph = DependencyGraph(tables=list(tables))
    for table in tables:
        key = table.name.lower()
        deps: Dict[str, bool] = {}
        for _, fk in table.foreign_keys():
            target = fk.foreign_table.lower()
            if target == key or target not in known:
                continue
            deps[target] = deps.get(target, True) and fk.deferrable
        graph.edges[key] = deps
    return graph


def _reachable(start: str, edges: Dict[str, Dict[str, bool]]) -> Set[str]:
    seen: Set[str] = set()
    stack = list(edges.get(start, {}))
    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        stack.extend(edges.get(node, {}))
    return seen


def find_cycle_members(graph: DependencyGraph) -> List[str]:
    """Return the names of all tables lying on a cycle, in declaration order."""
    return [
        table.name
        for table in graph.tables
        if table.name.lower() in _reachable(table.name.lower(), graph.edges)
    ]


def _fully_deferrable_cycle(key: str, edges: Dict[str, Dict[str, bool]]) -> bool:
    """True if every edge among the tables sharing a cycle with ``key`` is deferrable."""
    members = {key} | {
        node for node in _reachable(key, edges) if key in _reachable(node, edges)
    }
    return all(
        deferrable
        for node in members
        for target, deferrable in edges.get(node, {}).items()
        if target in members
    )


def resolve_table_order(
    tables: Union[Schema, Sequence[Table]],
    allow_deferrable_cycles: bool = True,
) -> List[Table]:
    """
    Compute a safe creation order for tables.

    Args:
        tables: A Schema or a sequence of tables in declaration order
        allow_deferrable_cycles: Release cycles made only of deferrable
            foreign keys. Cycles with a non-deferrable edge are broken at a
            deferrable edge either way.

    Returns:
        Tables ordered so that foreign key targets come first

    Raises:
        CyclicDependencyError: If a cycle cannot be broken
    """
    if isinstance(tables, Schema):
        tables = tables.tables
    graph = build_dependency_graph(tables)
    by_key = {t.name.lower(): t for t in graph.tables}
    pending = {key: dict(deps) for key, deps in graph.edges.items()}
    remaining = [t.name.lower() for t in graph.tables]
    ordered: List[Table] = []

    while remaining:
        ready = next((key for key in remaining if not pending[key]), None)
        if ready is None:
            ready = next(
                (
                    key
                    for key in remaining
                    if all(pending[key].values())
                    and (allow_deferrable_cycles or not _fully_deferrable_cycle(key, pending))
                ),
                None,
            )
            if ready is not None:
                logger.debug(
                    "schema.resolve.deferred",
                    table=by_key[ready].name,
                    deferred_dependencies=sorted(pending[ready]),
                )
        if ready is None:
            stuck = DependencyGraph(
                tables=[by_key[key] for key in remaining],
                edges={key: pending[key] for key in remaining},
            )
            raise CyclicDependencyError(find_cycle_members(stuck))

        remaining.remove(ready)
        ordered.append(by_key[ready])
        for key in remaining:
            pending[key].pop(ready, None)

    logger.debug("schema.resolved", order=[t.name for t in ordered])
    return ordered


def resolve_creation_order(
    schema: Schema, allow_deferrable_cycles: bool = True
) -> List[Union[Table, View]]:
    """Tables in dependency order, followed by views in declaration order."""
    ordered: List[Union[Table, View]] = []
    ordered.extend(resolve_table_order(schema, allow_deferrable_cycles))
    ordered.extend(schema.views)
    return ordered


__all__ = [
    "DependencyGraph",
    "build_dependency_graph",
    "find_cycle_members",
    "resolve_table_order",
    "resolve_creation_order",
]
