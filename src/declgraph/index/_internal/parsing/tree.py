"""Adapter from tree-sitter trees to immutable ``SyntaxNode`` trees.

Both directions are iterative (explicit stacks, tree cursor) so deeply
nested sources never hit the interpreter recursion limit.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from declgraph.index.models import Span, SyntaxNode


def _span(node: Any) -> Span:
    return Span(
        start_byte=node.start_byte,
        end_byte=node.end_byte,
        start_line=node.start_point[0] + 1,
        start_column=node.start_point[1],
        end_line=node.end_point[0] + 1,
        end_column=node.end_point[1],
    )


def _build(node: Any, field: str | None, children: list[SyntaxNode], source: bytes) -> SyntaxNode:
    return SyntaxNode(
        kind=node.type,
        span=_span(node),
        children=tuple(children),
        field=field,
        is_named=node.is_named,
        is_error=node.is_error or node.is_missing,
        text=source[node.start_byte : node.end_byte].decode("utf-8", errors="replace"),
    )


def adapt_tree(tree: Any, source: bytes) -> SyntaxNode:
    """Convert a tree-sitter ``Tree`` into a ``SyntaxNode`` tree.

    Every node is kept, named and anonymous, with its field name in the
    parent. ``source`` must be the bytes the tree was parsed from.
    """
    cursor = tree.walk()
    # (ts node, field name, adapted children so far); top mirrors the cursor
    stack: list[tuple[Any, str | None, list[SyntaxNode]]] = [(cursor.node, None, [])]

    while True:
        if cursor.goto_first_child():
            stack.append((cursor.node, cursor.field_name, []))
            continue

        while True:
            node, field, children = stack.pop()
            built = _build(node, field, children, source)
            if not stack:
                return built
            stack[-1][2].append(built)
            if cursor.goto_next_sibling():
                stack.append((cursor.node, cursor.field_name, []))
                break
            cursor.goto_parent()


def iter_nodes(root: SyntaxNode) -> Iterator[SyntaxNode]:
    """Pre-order traversal."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def format_tree(root: SyntaxNode) -> str:
    """Render as an indented s-expression.

    Example::

        (source_file
          (class_declaration
            declaration_kind: (class)
            name: (type_identifier 'Foo')
            body: (class_body
              ({)
              (}))))
    """
    lines: list[str] = []
    stack: list[tuple[SyntaxNode, int] | None] = [(root, 0)]

    while stack:
        item = stack.pop()
        if item is None:
            lines[-1] += ")"
            continue
        node, depth = item
        label = f"{node.field}: " if node.field else ""
        line = f"{'  ' * depth}{label}({node.kind}"
        if not node.children and node.is_named:
            line += " '" + node.text.replace("\n", "\\n") + "'"
        lines.append(line)
        stack.append(None)
        stack.extend((child, depth + 1) for child in reversed(node.children))

    return "\n".join(lines)


def error_root(root: SyntaxNode, error_kind: str) -> SyntaxNode | None:
    """The error node spanning the whole file, if the parser fell back to one.

    Either ``root`` itself or its only named child. Recovered declarations
    may still sit inside it.
    """
    if root.kind == error_kind:
        return root
    named = root.named_children
    if (
        len(named) == 1
        and named[0].kind == error_kind
        and named[0].span.start_byte <= root.span.start_byte
        and named[0].span.end_byte >= root.span.end_byte
    ):
        return named[0]
    return None
