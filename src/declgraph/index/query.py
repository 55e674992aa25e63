"""Structural queries over a built dependency graph."""

from __future__ import annotations

from collections.abc import Iterable

from declgraph.core.errors import UnknownTypeError
from declgraph.index._internal.indexing.graph import DependencyGraph
from declgraph.index._internal.indexing.symbols import SymbolTable
from declgraph.index.models import Declaration, DeclarationKind, DeclId, Edge


class QueryEngine:
    """Read-only queries; safe to share between threads.

    Ambiguity is surfaced, not resolved: a name declared more than once
    matches every declaration.
    """

    def __init__(self, table: SymbolTable, graph: DependencyGraph) -> None:
        self._table = table
        self._graph = graph

    @property
    def table(self) -> SymbolTable:
        return self._table

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    def find_by_name(self, type_name: str) -> tuple[DeclId, ...]:
        """Type declarations named ``type_name`` (simple or ``Outer.Inner``).

        Falls back to extensions of that name when no type declares it.
        """
        hits = self._table.named(type_name)
        types = tuple(
            i
            for i in hits
            if self._table[i].kind.is_type_level
            and self._table[i].kind is not DeclarationKind.EXTENSION
        )
        if types:
            return types
        return tuple(i for i in hits if self._table[i].kind is DeclarationKind.EXTENSION)

    def deps(self, type_name: str) -> tuple[DeclId, ...]:
        """Everything ``type_name`` transitively depends on.

        Union of each match's closure, matches in discovery order, each
        closure keeping its breadth-first order.

        Raises:
            UnknownTypeError: nothing declares ``type_name``.
        """
        matches = self.find_by_name(type_name)
        if not matches:
            raise UnknownTypeError.for_name(type_name)

        result: dict[DeclId, None] = {}
        for match in matches:
            for decl_id in self._graph.transitive_closure(match):
                result.setdefault(decl_id, None)
        return tuple(result)

    def usages(self, type_name: str) -> dict[DeclId, tuple[Edge, ...]]:
        """Each dependency of ``type_name`` with the edges that reach it.

        Only edges leaving ``type_name`` or another of its dependencies count.
        Keys follow ``deps`` order; edges follow graph order.
        """
        dependencies = self.deps(type_name)
        found: dict[DeclId, list[Edge]] = {decl_id: [] for decl_id in dependencies}
        for source in dict.fromkeys((*self.find_by_name(type_name), *dependencies)):
            for edge in self._graph.edges(source):
                if edge.target in found:
                    found[edge.target].append(edge)
        return {decl_id: tuple(edges) for decl_id, edges in found.items()}

    def declarations(self, decl_ids: Iterable[DeclId]) -> list[Declaration]:
        return [self._table[i] for i in decl_ids]
