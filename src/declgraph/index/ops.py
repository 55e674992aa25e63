"""High-level orchestration of an analysis run.

The AnalysisCoordinator is the entry point for every analysis. It runs
the pipeline stages in order, each one finishing before the next starts:

    Discovery -> Extraction (per file, parallel) -> Collection -> Resolution
    -> Graph -> Query

Nothing is exposed until the whole run has completed.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from declgraph.config.models import DeclGraphConfig
from declgraph.core.logging import get_logger, set_run_id
from declgraph.index._internal.discovery import PackageDiscovery
from declgraph.index._internal.indexing import (
    DependencyGraph,
    ResolutionResult,
    Resolver,
    StructuralExtractor,
    SymbolTable,
)
from declgraph.index.models import (
    AnalysisStats,
    Diagnostic,
    DiagnosticKind,
    FileExtraction,
    PackageSpec,
    Resolution,
)
from declgraph.index.query import QueryEngine

log = get_logger("coordinator")


@dataclass
class AnalysisResult:
    """Everything one run produced. Immutable in practice once returned."""

    run_id: str
    packages: list[PackageSpec]
    extractions: list[FileExtraction]
    table: SymbolTable
    resolution: ResolutionResult
    graph: DependencyGraph
    query: QueryEngine
    diagnostics: list[Diagnostic] = field(default_factory=list)
    stats: AnalysisStats = field(default_factory=AnalysisStats)

    def diagnostic_counts(self) -> dict[DiagnosticKind, int]:
        counts = Counter(d.kind for d in self.diagnostics)
        return {kind: counts[kind] for kind in DiagnosticKind if counts[kind]}

    def resolutions_by_file(self) -> dict[tuple[str, str], list[Resolution]]:
        """Resolutions grouped by ``(package, file)``, each group in resolution order."""
        grouped: dict[tuple[str, str], list[Resolution]] = {}
        for resolution in self.resolution.resolutions:
            ref = resolution.reference
            grouped.setdefault((ref.package, ref.file), []).append(resolution)
        return grouped


class AnalysisCoordinator:
    """Runs the analysis pipeline over a path or a set of packages.

    Usage::

        coordinator = AnalysisCoordinator(config)
        result = coordinator.analyze_path(Path("."))
        for decl_id in result.query.deps("AppDelegate"):
            print(result.table[decl_id].qualified_name)
    """

    def __init__(self, config: DeclGraphConfig | None = None) -> None:
        self.config = config or DeclGraphConfig()

    def analyze_path(self, root: Path, *, keep_trees: bool = False) -> AnalysisResult:
        """Discover packages under ``root``, then analyze them.

        Raises:
            AnalysisPathError: root missing or unreadable.
        """
        run_id = set_run_id()
        log.info("analysis_started", root=str(root))
        packages = PackageDiscovery(root, self.config.analysis).discover()
        return self._run(run_id, packages, keep_trees)

    def analyze_packages(
        self, packages: Sequence[PackageSpec], *, keep_trees: bool = False
    ) -> AnalysisResult:
        run_id = set_run_id()
        log.info("analysis_started", packages=len(packages))
        return self._run(run_id, list(packages), keep_trees)

    def _run(self, run_id: str, packages: list[PackageSpec], keep_trees: bool) -> AnalysisResult:
        start = time.monotonic()

        extractor = StructuralExtractor(self.config.analysis)
        extractions = extractor.extract_packages(packages, keep_tree=keep_trees)

        # Barrier: every file is collected before anything is resolved
        table = SymbolTable.collect(extractions)
        resolution = Resolver(table, extractions, packages).resolve()
        graph = DependencyGraph.build(table, resolution.resolutions, resolution.bindings)

        diagnostics = [d for e in extractions for d in e.diagnostics]
        diagnostics.extend(table.diagnostics)
        diagnostics.extend(resolution.diagnostics)

        stats = AnalysisStats(
            files=len(extractions),
            files_failed=extractor.stats.files_failed,
            declarations=len(table),
            references=resolution.stats.refs_processed,
            resolved=resolution.stats.refs_resolved,
            edges=graph.edge_count,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        result = AnalysisResult(
            run_id=run_id,
            packages=packages,
            extractions=extractions,
            table=table,
            resolution=resolution,
            graph=graph,
            query=QueryEngine(table, graph),
            diagnostics=diagnostics,
            stats=stats,
        )
        stats.by_diagnostic = {k.value: v for k, v in result.diagnostic_counts().items()}
        log.info(
            "analysis_complete",
            packages=len(packages),
            files=stats.files,
            declarations=stats.declarations,
            references=stats.references,
            resolved=stats.resolved,
            edges=stats.edges,
            diagnostics=len(diagnostics),
            duration_ms=stats.duration_ms,
        )
        return result
