"""Per-file extraction pipeline.

Reads, parses, adapts and extracts each source file, optionally across a
process pool. Results are merged in input order, so the output never
depends on which worker finished first. A file that cannot be read or
parsed becomes a ``parse_error`` diagnostic; the run continues.
"""

from __future__ import annotations

import os
import time
from collections.abc import Sequence
from concurrent.futures import Future, ProcessPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path

from declgraph.config.models import AnalysisConfig
from declgraph.core.errors import ParseError
from declgraph.core.logging import get_logger
from declgraph.index._internal.extraction.extractor import extract
from declgraph.index._internal.parsing.tree import format_tree
from declgraph.index._internal.parsing.treesitter import TreeSitterParser
from declgraph.index.models import Diagnostic, DiagnosticKind, FileExtraction, PackageSpec

log = get_logger("structural")

# One parser per process; grammars are cached on it
_parser: TreeSitterParser | None = None


def _get_parser() -> TreeSitterParser:
    global _parser
    if _parser is None:
        _parser = TreeSitterParser()
    return _parser


def _failed(path: str, package: str, reason: str) -> FileExtraction:
    return FileExtraction(
        path=path,
        package=package,
        diagnostics=(
            Diagnostic(kind=DiagnosticKind.PARSE_ERROR, message=reason, file=path),
        ),
        error=reason,
    )


def _extract_file(path: str, package: str, max_bytes: int, keep_tree: bool) -> FileExtraction:
    """Extract one file (worker function, must stay picklable)."""
    try:
        file_path = Path(path)
        size = file_path.stat().st_size
        if size > max_bytes:
            return _failed(path, package, f"Skipped: {size} bytes exceeds limit of {max_bytes}")
        content = file_path.read_bytes()
    except OSError as e:
        return _failed(path, package, f"Cannot read file: {e.strerror or e}")

    try:
        parsed = _get_parser().parse(file_path, content)
    except ParseError as e:
        return _failed(path, package, e.message)

    extraction = extract(parsed.root, path, package, parsed.pack)
    if keep_tree:
        extraction = replace(extraction, tree_dump=format_tree(parsed.root))
    return extraction


@dataclass
class ExtractionStats:
    files_processed: int = 0
    files_failed: int = 0
    declarations: int = 0
    references: int = 0
    duration_ms: int = 0


class StructuralExtractor:
    """Runs per-file extraction for a set of packages.

    Usage::

        extractor = StructuralExtractor(config.analysis)
        extractions = extractor.extract_packages(packages)
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self.config = config or AnalysisConfig()
        self.stats = ExtractionStats()

    @property
    def workers(self) -> int:
        if self.config.workers == 0:
            return os.cpu_count() or 1
        return self.config.workers

    def extract_packages(
        self, packages: Sequence[PackageSpec], *, keep_tree: bool = False
    ) -> list[FileExtraction]:
        tasks = [(path, package.name) for package in packages for path in package.files]
        start = time.monotonic()

        if self.workers > 1 and len(tasks) > 1:
            results = self._parallel_extract(tasks, keep_tree)
        else:
            results = self._sequential_extract(tasks, keep_tree)

        stats = self.stats
        stats.files_processed = len(results)
        stats.files_failed = sum(1 for r in results if r.error is not None)
        stats.declarations = sum(len(r.declarations) for r in results)
        stats.references = sum(len(r.references) for r in results)
        stats.duration_ms = int((time.monotonic() - start) * 1000)
        log.info(
            "extraction_complete",
            files=stats.files_processed,
            failed=stats.files_failed,
            declarations=stats.declarations,
            references=stats.references,
            workers=self.workers,
            duration_ms=stats.duration_ms,
        )
        return results

    def _max_bytes(self) -> int:
        return self.config.max_file_size_kb * 1024

    def _sequential_extract(
        self, tasks: list[tuple[str, str]], keep_tree: bool
    ) -> list[FileExtraction]:
        results = []
        for path, package in tasks:
            result = _extract_file(path, package, self._max_bytes(), keep_tree)
            self._log_failure(result)
            results.append(result)
        return results

    def _parallel_extract(
        self, tasks: list[tuple[str, str]], keep_tree: bool
    ) -> list[FileExtraction]:
        """Extract in a process pool; merge in submission order."""
        results = []
        max_bytes = self._max_bytes()

        with ProcessPoolExecutor(max_workers=self.workers) as executor:
            futures: list[tuple[Future[FileExtraction], str, str]] = [
                (executor.submit(_extract_file, path, package, max_bytes, keep_tree), path, package)
                for path, package in tasks
            ]
            for future, path, package in futures:
                try:
                    result = future.result()
                except Exception as e:
                    result = _failed(path, package, f"Extraction failed: {e}")
                self._log_failure(result)
                results.append(result)

        return results

    @staticmethod
    def _log_failure(result: FileExtraction) -> None:
        if result.error is not None:
            log.warning("file_skipped", path=result.path, reason=result.error)
