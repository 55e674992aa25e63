"""Dependency graph over declaration handles.

Nodes are DeclIds into the SymbolTable; declaration data is never copied
into the graph. Edges:

- ``reference``: owner of a resolved reference -> each candidate
- ``extends``: extended type -> extension

Multi-edges and cycles are allowed. The graph is built once and never
mutated, so any number of readers may query it concurrently.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from types import MappingProxyType

from declgraph.core.logging import get_logger
from declgraph.index._internal.indexing.symbols import SymbolTable
from declgraph.index.models import DeclId, Edge, EdgeKind, ExtensionBinding, Resolution

log = get_logger("graph")


class DependencyGraph:
    """Immutable directed graph with breadth-first transitive closure.

    Usage::

        graph = DependencyGraph.build(table, resolutions, bindings)
        graph.edges_from(decl_id)          # direct targets
        graph.transitive_closure(decl_id)  # everything reachable
    """

    def __init__(self, edges: Iterable[Edge]) -> None:
        raw: dict[DeclId, list[Edge]] = {}
        targets: dict[DeclId, dict[DeclId, None]] = {}
        nodes: dict[DeclId, None] = {}
        count = 0
        for edge in edges:
            count += 1
            raw.setdefault(edge.source, []).append(edge)
            targets.setdefault(edge.source, {})[edge.target] = None
            nodes[edge.source] = None
            nodes[edge.target] = None

        self._edges = MappingProxyType({k: tuple(v) for k, v in raw.items()})
        self._targets = MappingProxyType({k: tuple(v) for k, v in targets.items()})
        self._nodes = tuple(nodes)
        self._edge_count = count

    @classmethod
    def build(
        cls,
        table: SymbolTable,
        resolutions: Sequence[Resolution],
        bindings: Sequence[ExtensionBinding] = (),
    ) -> DependencyGraph:
        """Reference edges in resolution order, then extends edges in binding order."""
        edges: list[Edge] = []
        for resolution in resolutions:
            if resolution.source is None:
                continue
            for candidate in resolution.candidates:
                edges.append(
                    Edge(
                        source=resolution.source,
                        target=candidate,
                        kind=EdgeKind.REFERENCE,
                        reference=resolution.reference,
                    )
                )
        for binding in bindings:
            edges.append(
                Edge(source=binding.target, target=binding.extension, kind=EdgeKind.EXTENDS)
            )

        graph = cls(edges)
        log.debug(
            "graph_built",
            nodes=len(graph.nodes),
            edges=graph.edge_count,
            declarations=len(table),
        )
        return graph

    @property
    def nodes(self) -> tuple[DeclId, ...]:
        """Declarations with at least one edge, in first-seen order."""
        return self._nodes

    @property
    def edge_count(self) -> int:
        return self._edge_count

    def edges(self, decl: DeclId) -> tuple[Edge, ...]:
        """Raw outgoing edges, with their references and kinds."""
        return self._edges.get(decl, ())

    def edges_from(self, decl: DeclId) -> tuple[DeclId, ...]:
        """Deduplicated direct targets in first-discovery order."""
        return self._targets.get(decl, ())

    def transitive_closure(self, decl: DeclId) -> tuple[DeclId, ...]:
        """Every declaration reachable from ``decl``, each exactly once.

        Breadth-first; within a layer, first-discovery order. ``decl`` itself
        appears only if a cycle leads back to it, at the position where the
        cycle reaches it.
        """
        seen: set[DeclId] = set()
        order: list[DeclId] = []
        queue: deque[DeclId] = deque([decl])

        while queue:
            current = queue.popleft()
            for target in self.edges_from(current):
                if target not in seen:
                    seen.add(target)
                    order.append(target)
                    queue.append(target)

        return tuple(order)
