"""Directory names pruned during package discovery.

Tier 0 (HARDCODED_DIRS): never traversed, not configurable.
Tier 1 (DEFAULT_PRUNABLE_DIRS): build outputs and dependency checkouts,
skipped by default. ``analysis.exclude_dirs`` adds more names on top.

Matching is case-insensitive: Xcode and CocoaPods directories are
conventionally capitalized but macOS file systems do not care.
"""

from __future__ import annotations

from collections.abc import Iterable

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        ".bzr",
        # Our own data
        ".declgraph",
    )
)

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # SwiftPM
        ".build",  # build products and resolved checkouts
        ".swiftpm",
        # Xcode / CocoaPods / Carthage
        "deriveddata",
        "pods",
        "carthage",
        "xcuserdata",
        # Editors
        ".idea",
        ".vscode",
        # Misc
        "node_modules",
        ".cache",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def is_hardcoded_dir(dirname: str) -> bool:
    """Check if directory is hardcoded (never traversable, not overridable)."""
    return dirname.lower() in HARDCODED_DIRS


def build_prune_set(extra: Iterable[str] = ()) -> frozenset[str]:
    """Default prunable names plus configured extras, lowercased."""
    return PRUNABLE_DIRS | frozenset(name.lower() for name in extra)


def should_prune(dirname: str, prune_set: frozenset[str] = PRUNABLE_DIRS) -> bool:
    return dirname.lower() in prune_set
