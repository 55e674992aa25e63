"""Tests for package discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from declgraph.config.models import AnalysisConfig
from declgraph.core.errors import AnalysisPathError, ErrorCode, ParseError
from declgraph.index._internal.discovery import PackageDiscovery


class UnparsableManifests:
    """Parser stand-in: every manifest fails, so names come from directories."""

    def parse(self, path: Path, content: bytes | None = None):  # noqa: ANN201, ARG002
        raise ParseError.failed(str(path), "not parsed in this test")


def _touch(root: Path, *rel_paths: str) -> None:
    for rel in rel_paths:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("// swift\n")


def _discover(root: Path, config: AnalysisConfig | None = None):  # noqa: ANN202
    return PackageDiscovery(root, config, parser=UnparsableManifests()).discover()  # type: ignore[arg-type]


class TestDiscovery:
    def test_missing_root_raises(self, temp_dir: Path) -> None:
        with pytest.raises(AnalysisPathError) as exc_info:
            _discover(temp_dir / "nope")

        assert exc_info.value.code is ErrorCode.PATH_NOT_FOUND

    def test_single_file_is_its_own_package(self, temp_dir: Path) -> None:
        _touch(temp_dir, "Main.swift")

        (package,) = _discover(temp_dir / "Main.swift")

        assert package.name == "Main"
        assert package.files == (str(temp_dir / "Main.swift"),)

    def test_no_manifest_gives_root_package(self, temp_dir: Path) -> None:
        _touch(temp_dir, "b/B.swift", "A.swift", "notes.txt")

        (package,) = _discover(temp_dir)

        assert package.name == temp_dir.resolve().name
        assert package.files == (str(temp_dir / "A.swift"), str(temp_dir / "b" / "B.swift"))

    def test_empty_directory_has_no_packages(self, temp_dir: Path) -> None:
        assert _discover(temp_dir) == []

    def test_files_go_to_the_nearest_manifest(self, temp_dir: Path) -> None:
        """Nested packages claim their own files; loose files stay in the root package."""
        _touch(
            temp_dir,
            "Script.swift",
            "Core/Package.swift",
            "Core/Sources/CoreUtils/Log.swift",
            "Core/Plugins/Inner/Package.swift",
            "Core/Plugins/Inner/Sources/Inner/Gen.swift",
        )

        packages = _discover(temp_dir)

        by_name = {p.name: p for p in packages}
        assert [p.name for p in packages] == [temp_dir.resolve().name, "Core", "Inner"]
        assert by_name["Core"].files == (str(temp_dir / "Core/Sources/CoreUtils/Log.swift"),)
        assert by_name["Core"].modules == ("CoreUtils",)
        assert by_name["Inner"].files == (str(temp_dir / "Core/Plugins/Inner/Sources/Inner/Gen.swift"),)
        assert by_name[temp_dir.resolve().name].files == (str(temp_dir / "Script.swift"),)

    def test_manifest_variants_are_not_sources(self, temp_dir: Path) -> None:
        _touch(temp_dir, "Package.swift", "Package@swift-5.9.swift", "Sources/App/main.swift")

        (package,) = _discover(temp_dir)

        assert package.files == (str(temp_dir / "Sources/App/main.swift"),)

    def test_build_directories_are_pruned(self, temp_dir: Path) -> None:
        _touch(temp_dir, "A.swift", ".build/checkouts/Dep/Dep.swift", "Pods/X/X.swift", "Vendor/V.swift")

        (package,) = _discover(temp_dir, AnalysisConfig(exclude_dirs=["vendor"]))

        assert package.files == (str(temp_dir / "A.swift"),)

    def test_extensions_are_configurable(self, temp_dir: Path) -> None:
        _touch(temp_dir, "A.swift", "B.swiftinterface")

        (package,) = _discover(temp_dir, AnalysisConfig(extensions=["swift", "swiftinterface"]))

        assert len(package.files) == 2
