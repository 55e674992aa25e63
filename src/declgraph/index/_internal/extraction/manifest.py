"""Package manifest reading (``Package.swift``).

Reads the package name and target names from the manifest's syntax tree:

    let package = Package(
        name: "Core",
        targets: [.target(name: "CoreUtils"), .testTarget(name: "CoreTests")]
    )

Only literal string arguments are understood; manifests that compute names
fall back to the directory name.
"""

from __future__ import annotations

from dataclasses import dataclass

from declgraph.index._internal.parsing.tree import iter_nodes
from declgraph.index.models import SyntaxNode

_PACKAGE_CALLEE = "Package"
# Target factories whose names are importable modules
_MODULE_TARGETS = frozenset(
    {"target", "executableTarget", "macro", "systemLibrary", "binaryTarget", "plugin"}
)


@dataclass(frozen=True, slots=True)
class ManifestInfo:
    name: str | None
    targets: tuple[str, ...] = ()


def read_manifest(root: SyntaxNode) -> ManifestInfo:
    """Extract package name and module target names."""
    name: str | None = None
    targets: list[str] = []

    for node in iter_nodes(root):
        if node.kind != "call_expression" or not node.named_children:
            continue
        callee = node.named_children[0].text.split(".")[-1].strip()
        value = _string_argument(node, "name")
        if value is None:
            continue
        if callee == _PACKAGE_CALLEE and name is None:
            name = value
        elif callee in _MODULE_TARGETS and value not in targets:
            targets.append(value)

    return ManifestInfo(name=name, targets=tuple(targets))


def _string_argument(call: SyntaxNode, label: str) -> str | None:
    """Literal string value of ``label:`` among the call's direct arguments."""
    for suffix in call.children:
        if suffix.kind != "call_suffix":
            continue
        for arguments in suffix.children:
            if arguments.kind != "value_arguments":
                continue
            for argument in arguments.children:
                if argument.kind != "value_argument":
                    continue
                arg_label = argument.first_child_of_kind("value_argument_label")
                if arg_label is None or arg_label.text.strip() != label:
                    continue
                literal = argument.first_child_of_kind("line_string_literal")
                if literal is None:
                    return None
                return _string_text(literal)
    return None


def _string_text(literal: SyntaxNode) -> str | None:
    parts = [c.text for c in literal.children if c.kind == "line_str_text"]
    if any(c.kind == "interpolated_expression" for c in literal.children):
        return None
    if parts:
        return "".join(parts)
    text = literal.text.strip().strip('"')
    return text or None
