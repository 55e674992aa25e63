"""Shared fixtures for index tests.

``nodes`` builds SyntaxNode trees by hand, so extraction can be tested
without a grammar. Each leaf gets its own line; parents span their
children and their text is the children's text joined by spaces.
"""

from __future__ import annotations

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from declgraph.index.models import Span, SyntaxNode


class NodeFactory:
    """Builds SyntaxNode trees with increasing, non-overlapping spans."""

    def __init__(self) -> None:
        self._offset = 0
        self._line = 0

    def __call__(
        self,
        kind: str,
        *children: SyntaxNode,
        text: str = "",
        field: str | None = None,
        named: bool = True,
        error: bool = False,
    ) -> SyntaxNode:
        if children:
            span = Span(
                start_byte=children[0].span.start_byte,
                end_byte=children[-1].span.end_byte,
                start_line=children[0].span.start_line,
                start_column=children[0].span.start_column,
                end_line=children[-1].span.end_line,
                end_column=children[-1].span.end_column,
            )
            text = text or " ".join(c.text for c in children)
        else:
            text = text or ("" if named else kind)
            self._line += 1
            span = Span(
                start_byte=self._offset,
                end_byte=self._offset + len(text),
                start_line=self._line,
                start_column=4,
                end_line=self._line,
                end_column=4 + len(text),
            )
            self._offset += len(text) + 1
        return SyntaxNode(
            kind=kind,
            span=span,
            children=children,
            field=field,
            is_named=named,
            is_error=error,
            text=text,
        )

    # -- Common Swift shapes --

    def tok(self, token: str, field: str | None = None) -> SyntaxNode:
        return self(token, named=False, field=field)

    def ident(self, name: str, field: str | None = None) -> SyntaxNode:
        return self("simple_identifier", text=name, field=field)

    def type_id(self, name: str, field: str | None = None) -> SyntaxNode:
        return self("type_identifier", text=name, field=field)

    def user_type(self, *names: str, args: SyntaxNode | None = None, field: str | None = None) -> SyntaxNode:
        parts: list[SyntaxNode] = []
        for i, name in enumerate(names):
            if i:
                parts.append(self.tok("."))
            parts.append(self.type_id(name))
        if args is not None:
            parts.append(args)
        return self("user_type", *parts, field=field)

    def type_args(self, *types: SyntaxNode) -> SyntaxNode:
        return self("type_arguments", self.tok("<"), *types, self.tok(">"))

    def inherits(self, *names: str) -> SyntaxNode:
        return self("inheritance_specifier", self.user_type(*names, field="inherits_from"))

    def body(self, *members: SyntaxNode, kind: str = "class_body") -> SyntaxNode:
        return self(kind, self.tok("{"), *members, self.tok("}"), field="body")

    def type_decl(
        self, keyword: str, name: str, *rest: SyntaxNode, members: tuple[SyntaxNode, ...] = ()
    ) -> SyntaxNode:
        """class/struct/enum/actor declaration."""
        return self(
            "class_declaration",
            self.tok(keyword, field="declaration_kind"),
            self.type_id(name, field="name"),
            *rest,
            self.body(*members),
        )

    def extension(self, *names: str, members: tuple[SyntaxNode, ...] = ()) -> SyntaxNode:
        return self(
            "class_declaration",
            self.tok("extension", field="declaration_kind"),
            self.user_type(*names, field="name"),
            self.body(*members),
        )

    def protocol(self, name: str, *rest: SyntaxNode, members: tuple[SyntaxNode, ...] = ()) -> SyntaxNode:
        return self(
            "protocol_declaration",
            self.tok("protocol"),
            self.type_id(name, field="name"),
            *rest,
            self.body(*members, kind="protocol_body"),
        )

    def property(self, name: str, type_node: SyntaxNode | None = None) -> SyntaxNode:
        parts = [
            self("value_binding_pattern", self.tok("var")),
            self("pattern", self.ident(name, field="bound_identifier"), field="name"),
        ]
        if type_node is not None:
            parts.append(self("type_annotation", self.tok(":"), type_node))
        return self("property_declaration", *parts)

    def function(
        self,
        name: str,
        *rest: SyntaxNode,
        statements: tuple[SyntaxNode, ...] = (),
        generics: tuple[str, ...] = (),
    ) -> SyntaxNode:
        parts: list[SyntaxNode] = [self.tok("func"), self.ident(name, field="name")]
        if generics:
            params = [self("type_parameter", self.type_id(g)) for g in generics]
            parts.append(self("type_parameters", self.tok("<"), *params, self.tok(">")))
        parts.extend(rest)
        parts.append(
            self("function_body", self.tok("{"), self("statements", *statements), self.tok("}"))
            if statements
            else self("function_body", self.tok("{"), self.tok("}"))
        )
        return self("function_declaration", *parts)

    def call(self, callee: SyntaxNode) -> SyntaxNode:
        return self(
            "call_expression",
            callee,
            self("call_suffix", self("value_arguments", self.tok("("), self.tok(")"))),
        )

    def navigation(self, target: SyntaxNode, member: str) -> SyntaxNode:
        return self(
            "navigation_expression",
            target,
            self("navigation_suffix", self.tok("."), self.ident(member, field="suffix"), field="suffix"),
        )

    def import_(self, dotted: str) -> SyntaxNode:
        parts: list[SyntaxNode] = []
        for i, name in enumerate(dotted.split(".")):
            if i:
                parts.append(self.tok("."))
            parts.append(self.ident(name))
        return self("import_declaration", self.tok("import"), self("identifier", *parts))

    def source(self, *decls: SyntaxNode) -> SyntaxNode:
        return self("source_file", *decls)


@pytest.fixture
def nodes() -> NodeFactory:
    return NodeFactory()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(ignore_cleanup_errors=True) as tmpdir:
        yield Path(tmpdir)
