"""Package discovery for an analysis root.

Every directory holding a manifest (``Package.swift``) defines a package.
Source files belong to the package with the longest matching directory
prefix; files under no manifest belong to a root package named after the
root directory. Directory names in the prune set are never entered.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from declgraph.config.models import AnalysisConfig
from declgraph.core.errors import AnalysisPathError, ParseError
from declgraph.core.excludes import build_prune_set
from declgraph.core.logging import get_logger
from declgraph.index._internal.extraction.manifest import read_manifest
from declgraph.index._internal.parsing.treesitter import TreeSitterParser
from declgraph.index.models import PackageSpec

log = get_logger("discovery")

SOURCES_DIR = "Sources"


def _walk_with_pruning(root: Path, prune: frozenset[str]) -> list[tuple[str, str]]:
    """Walk all files in sorted order, pruning directories. Returns (rel_dir_posix, filename)."""
    results: list[tuple[str, str]] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d.lower() not in prune)
        rel_dir_posix = Path(dirpath).relative_to(root).as_posix()
        if rel_dir_posix == ".":
            rel_dir_posix = ""
        for filename in sorted(filenames):
            results.append((rel_dir_posix, filename))
    return results


def _join(rel_dir: str, name: str) -> str:
    return f"{rel_dir}/{name}" if rel_dir else name


def _contains(package_dir: str, rel_dir: str) -> bool:
    return package_dir == "" or rel_dir == package_dir or rel_dir.startswith(package_dir + "/")


@dataclass
class _Candidate:
    rel_dir: str
    name: str
    modules: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)


class PackageDiscovery:
    """Finds packages and their source files under a root.

    Usage::

        packages = PackageDiscovery(Path("."), config.analysis).discover()
    """

    def __init__(
        self,
        root: Path,
        config: AnalysisConfig | None = None,
        parser: TreeSitterParser | None = None,
    ) -> None:
        self.root = root
        self.config = config or AnalysisConfig()
        self._parser = parser
        self._prune = build_prune_set(self.config.exclude_dirs)

    def discover(self) -> list[PackageSpec]:
        """Return packages in deterministic order (root package first).

        Raises:
            AnalysisPathError: root does not exist.
        """
        if not self.root.exists():
            raise AnalysisPathError.not_found(str(self.root))

        if self.root.is_file():
            return [PackageSpec(name=self.root.stem, files=(str(self.root),))]

        if not os.access(self.root, os.R_OK | os.X_OK):
            raise AnalysisPathError.unreadable(str(self.root), "permission denied")

        entries = _walk_with_pruning(self.root, self._prune)
        manifest = self.config.manifest_name

        packages = [
            self._read_package(rel_dir)
            for rel_dir, filename in entries
            if filename == manifest
        ]
        fallback = _Candidate(rel_dir="", name=self.root.resolve().name or "root")
        # Longest prefix wins: check deepest package directories first
        by_depth = sorted(packages, key=lambda c: len(c.rel_dir), reverse=True)

        for rel_dir, filename in entries:
            if not self._is_source(filename):
                continue
            owner = next((c for c in by_depth if _contains(c.rel_dir, rel_dir)), fallback)
            owner.files.append(str(self.root / _join(rel_dir, filename)))

        if fallback.files:
            packages.insert(0, fallback)

        result = [
            PackageSpec(
                name=c.name,
                files=tuple(c.files),
                modules=tuple(c.modules),
                root=str(self.root / c.rel_dir) if c.rel_dir else str(self.root),
            )
            for c in packages
        ]
        log.debug(
            "discovery_complete",
            root=str(self.root),
            packages=len(result),
            files=sum(len(p.files) for p in result),
        )
        return result

    def _is_source(self, filename: str) -> bool:
        manifest = Path(self.config.manifest_name)
        # Package.swift and versioned variants (Package@swift-5.9.swift)
        if filename == manifest.name or filename.startswith(manifest.stem + "@"):
            return False
        suffix = Path(filename).suffix.lower().lstrip(".")
        return bool(suffix) and suffix in self.config.extensions

    def _read_package(self, rel_dir: str) -> _Candidate:
        package_dir = self.root / rel_dir if rel_dir else self.root
        manifest_path = package_dir / self.config.manifest_name
        dir_name = package_dir.resolve().name or "root"

        name: str | None = None
        targets: tuple[str, ...] = ()
        try:
            if self._parser is None:
                self._parser = TreeSitterParser()
            parsed = self._parser.parse(manifest_path)
            info = read_manifest(parsed.root)
            name, targets = info.name, info.targets
        except (OSError, ParseError) as e:
            log.warning("manifest_unreadable", path=str(manifest_path), error=str(e))

        modules = list(targets)
        sources = package_dir / SOURCES_DIR
        if sources.is_dir():
            for child in sorted(sources.iterdir()):
                if child.is_dir() and child.name not in modules:
                    modules.append(child.name)

        return _Candidate(rel_dir=rel_dir, name=name or dir_name, modules=modules)
