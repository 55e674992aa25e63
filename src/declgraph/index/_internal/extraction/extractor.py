"""Declaration and reference extraction from one adapted syntax tree.

The walk is depth-first with an explicit stack. Each pending node carries
its lexical context (scope path, owning declarations, generic parameter
names in scope, inheritance clause flag), so leaving a declaration needs
no bookkeeping: its children simply stop inheriting its context.

Shapes recognized (node kinds come from the LanguagePack):
- declarations: see ``LanguagePack.declarations``
- ``user_type``: one type reference, components joined with ``.``
- bare ``type_identifier`` in a type position: one type reference
- anything under an inheritance specifier: kind ``inheritance``
- ``call_expression`` with a plain identifier callee: call reference
- ``navigation_expression`` with a plain identifier target: member reference

``ERROR`` subtrees are opaque and reported as ``skipped_node``, except an
error spanning the whole file, which is walked for what the parser recovered.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from declgraph.index._internal.parsing.packs import SWIFT_PACK, LanguagePack
from declgraph.index._internal.parsing.tree import error_root, iter_nodes
from declgraph.index.models import (
    Declaration,
    DeclarationKind,
    Diagnostic,
    DiagnosticKind,
    FileExtraction,
    Reference,
    ReferenceKind,
    SyntaxNode,
)


@dataclass(frozen=True, slots=True)
class _Context:
    scope_path: tuple[str, ...] = ()
    type_owner: int | None = None
    owner: int | None = None
    generics: frozenset[str] = frozenset()
    inheritance: bool = False

    @property
    def reference_owner(self) -> int | None:
        return self.type_owner if self.type_owner is not None else self.owner


class DeclarationExtractor:
    """Walks one file's tree and collects declarations, references and imports.

    One instance per file; call :meth:`run` once.
    """

    def __init__(self, file_path: str, package: str, pack: LanguagePack = SWIFT_PACK) -> None:
        self._file = file_path
        self._package = package
        self._pack = pack
        self._shapes = pack.references
        self._declarations: list[Declaration] = []
        self._references: list[Reference] = []
        self._diagnostics: list[Diagnostic] = []
        self._imports: list[str] = []
        self._recovery: SyntaxNode | None = None

    def run(self, root: SyntaxNode) -> FileExtraction:
        self._recovery = error_root(root, self._pack.error_node)
        stack: list[tuple[SyntaxNode, _Context]] = [(root, _Context())]
        while stack:
            node, ctx = stack.pop()
            children = self._visit(node, ctx)
            stack.extend(reversed(children))

        return FileExtraction(
            path=self._file,
            package=self._package,
            declarations=tuple(self._declarations),
            references=tuple(self._references),
            diagnostics=tuple(self._diagnostics),
            imports=tuple(dict.fromkeys(self._imports)),
        )

    # -----------------------------------------------------------------
    # Dispatch
    # -----------------------------------------------------------------

    def _visit(self, node: SyntaxNode, ctx: _Context) -> list[tuple[SyntaxNode, _Context]]:
        """Handle one node; return the children to walk next, with their context."""
        shapes = self._shapes

        if node.is_error:
            self._skip(node)
            if node is self._recovery:
                # Whole-file error: recovered declarations sit inside it
                return [(c, ctx) for c in node.children]
            return []

        if node.kind in self._pack.declarations:
            return self._visit_declaration(node, ctx)

        if node.kind == self._pack.import_node:
            self._visit_import(node)
            return []

        if node.kind == shapes.qualified_type:
            self._visit_qualified_type(node, ctx)
            return [(c, ctx) for c in node.children if c.kind == shapes.type_arguments]

        if node.kind == shapes.type_identifier:
            self._emit_type(node.text, node, ctx)
            return []

        if node.kind == shapes.type_parameter:
            # The first identifier is the parameter's own name
            name = node.first_child_of_kind(shapes.type_identifier, shapes.identifier)
            return [(c, ctx) for c in node.children if c is not name]

        if node.kind == shapes.inheritance:
            inner = replace(ctx, inheritance=True)
            return [(c, inner) for c in node.children]

        if node.kind == shapes.call:
            callee = node.named_children[0] if node.named_children else None
            if callee is not None and callee.kind == shapes.identifier:
                self._emit(callee.text, ReferenceKind.CALL, callee, ctx)

        elif node.kind == shapes.navigation:
            target = node.child_by_field(shapes.navigation_target_field)
            if target is None and node.named_children:
                target = node.named_children[0]
            if target is not None and target.kind == shapes.identifier:
                self._emit(target.text, ReferenceKind.MEMBER, target, ctx)

        return [(c, ctx) for c in node.children]

    # -----------------------------------------------------------------
    # Declarations
    # -----------------------------------------------------------------

    def _visit_declaration(
        self, node: SyntaxNode, ctx: _Context
    ) -> list[tuple[SyntaxNode, _Context]]:
        shape = self._pack.declarations[node.kind]
        keyword = node.child_by_field("declaration_kind")
        tokens = (keyword.kind,) if keyword is not None else _tokens(node)
        kind = shape.resolve_kind(tokens)

        name_node = node.child_by_field(shape.name_field)
        if name_node is None:
            name_node = node.first_child_of_kind(
                self._shapes.type_identifier, self._shapes.identifier
            )
        name = self._declaration_name(name_node) if name_node is not None else ""

        if kind is None or name_node is None or not name:
            # Anonymous: nothing emitted, no scope pushed
            return [(c, ctx) for c in node.children]

        generics = ctx.generics | self._generic_names(node)
        index = len(self._declarations)
        is_extension = kind is DeclarationKind.EXTENSION
        self._declarations.append(
            Declaration(
                name=name,
                kind=kind,
                file=self._file,
                span=name_node.span,
                scope_path=ctx.scope_path,
                is_extension_of=name if is_extension else None,
                package=self._package,
            )
        )

        inner = _Context(
            scope_path=(*ctx.scope_path, *name.split(".")),
            type_owner=index if kind.is_type_level else ctx.type_owner,
            owner=index,
            generics=generics,
        )
        return [(c, inner) for c in node.children if c is not name_node]

    def _declaration_name(self, name_node: SyntaxNode) -> str:
        shapes = self._shapes
        if name_node.kind == shapes.qualified_type:
            parts = [c.text for c in name_node.children if c.kind == shapes.type_identifier]
            return ".".join(parts)
        if not name_node.children:
            return name_node.text.strip()
        # Patterns (let (a, b) = ...): first bound identifier
        for inner in iter_nodes(name_node):
            if inner.kind in (shapes.identifier, shapes.type_identifier):
                return inner.text.strip()
        return ""

    def _generic_names(self, node: SyntaxNode) -> frozenset[str]:
        shapes = self._shapes
        params = node.first_child_of_kind(shapes.type_parameters)
        if params is None:
            return frozenset()
        names = set()
        for param in params.children:
            if param.kind != shapes.type_parameter:
                continue
            name = param.first_child_of_kind(shapes.type_identifier, shapes.identifier)
            if name is not None:
                names.add(name.text)
        return frozenset(names)

    # -----------------------------------------------------------------
    # References
    # -----------------------------------------------------------------

    def _visit_qualified_type(self, node: SyntaxNode, ctx: _Context) -> None:
        parts = [c.text for c in node.children if c.kind == self._shapes.type_identifier]
        if parts:
            self._emit_type(".".join(parts), node, ctx, head=parts[0])

    def _emit_type(
        self, name: str, node: SyntaxNode, ctx: _Context, head: str | None = None
    ) -> None:
        if (head or name) in ctx.generics:
            return
        kind = ReferenceKind.INHERITANCE if ctx.inheritance else ReferenceKind.TYPE
        self._emit(name, kind, node, ctx, head=head)

    def _emit(
        self,
        name: str,
        kind: ReferenceKind,
        node: SyntaxNode,
        ctx: _Context,
        head: str | None = None,
    ) -> None:
        if not name or (head or name) in self._shapes.reserved:
            return
        self._references.append(
            Reference(
                name=name,
                kind=kind,
                file=self._file,
                span=node.span,
                scope_path=ctx.scope_path,
                owner=ctx.reference_owner,
                package=self._package,
            )
        )

    # -----------------------------------------------------------------
    # Imports and errors
    # -----------------------------------------------------------------

    def _visit_import(self, node: SyntaxNode) -> None:
        path = node.first_child_of_kind(self._pack.import_path_node)
        if path is None:
            return
        # import Foundation.NSString -> Foundation
        module = path.text.split(".")[0].strip()
        if module:
            self._imports.append(module)

    def _skip(self, node: SyntaxNode) -> None:
        what = "unparsable code" if node.kind == self._pack.error_node else f"missing {node.kind}"
        self._diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.SKIPPED_NODE,
                message=f"Skipped {what} at {node.span.location}",
                file=self._file,
                span=node.span,
            )
        )


def _tokens(node: SyntaxNode) -> tuple[str, ...]:
    return tuple(c.kind for c in node.children if not c.is_named)


def extract(
    root: SyntaxNode,
    file_path: str,
    package: str,
    pack: LanguagePack = SWIFT_PACK,
) -> FileExtraction:
    """Extract declarations, references, imports and diagnostics from one file."""
    return DeclarationExtractor(file_path, package, pack).run(root)
