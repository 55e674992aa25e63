"""Tests for the analysis coordinator (no grammar needed)."""

from __future__ import annotations

from pathlib import Path

import pytest

from declgraph.core.errors import AnalysisPathError
from declgraph.core.logging import get_run_id
from declgraph.index import AnalysisCoordinator, DiagnosticKind, PackageSpec
from declgraph.index.models import Reference, ReferenceKind, Resolution, Span


class TestAnalysisCoordinator:
    def test_empty_directory(self, temp_dir: Path) -> None:
        result = AnalysisCoordinator().analyze_path(temp_dir)

        assert result.packages == []
        assert result.extractions == []
        assert len(result.table) == 0
        assert result.graph.edge_count == 0
        assert result.diagnostics == []
        assert result.run_id == get_run_id()

    def test_missing_root(self, temp_dir: Path) -> None:
        with pytest.raises(AnalysisPathError):
            AnalysisCoordinator().analyze_path(temp_dir / "missing")

    def test_unreadable_file_is_a_diagnostic_not_a_failure(self, temp_dir: Path) -> None:
        missing = str(temp_dir / "Gone.swift")

        result = AnalysisCoordinator().analyze_packages([PackageSpec(name="App", files=(missing,))])

        assert result.stats.files == 1
        assert result.stats.files_failed == 1
        assert result.diagnostic_counts() == {DiagnosticKind.PARSE_ERROR: 1}
        assert result.stats.by_diagnostic == {"parse_error": 1}

    def test_each_run_gets_its_own_id(self, temp_dir: Path) -> None:
        coordinator = AnalysisCoordinator()

        first = coordinator.analyze_path(temp_dir)
        second = coordinator.analyze_path(temp_dir)

        assert first.run_id != second.run_id

    def test_resolutions_grouped_by_package_and_file(self, temp_dir: Path) -> None:
        """One pass groups resolutions; a path shared by two packages stays split."""
        span = Span(start_byte=0, end_byte=1, start_line=1, start_column=0, end_line=1, end_column=1)

        def resolution(name: str, file: str, package: str) -> Resolution:
            ref = Reference(name=name, kind=ReferenceKind.TYPE, file=file, span=span, package=package)
            return Resolution(reference=ref, source=None)

        result = AnalysisCoordinator().analyze_path(temp_dir)
        result.resolution.resolutions.extend(
            [
                resolution("A", "A.swift", "App"),
                resolution("B", "B.swift", "App"),
                resolution("C", "A.swift", "App"),
                resolution("D", "A.swift", "Tools"),
            ]
        )

        grouped = result.resolutions_by_file()

        assert {key: [r.reference.name for r in group] for key, group in grouped.items()} == {
            ("App", "A.swift"): ["A", "C"],
            ("App", "B.swift"): ["B"],
            ("Tools", "A.swift"): ["D"],
        }
