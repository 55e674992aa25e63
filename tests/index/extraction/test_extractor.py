"""Tests for declaration and reference extraction on hand-built trees."""

from __future__ import annotations

from typing import TYPE_CHECKING

from declgraph.index._internal.extraction import extract
from declgraph.index.models import DeclarationKind, DiagnosticKind, ReferenceKind

if TYPE_CHECKING:
    from tests.index.conftest import NodeFactory


def _names(items) -> list[str]:  # noqa: ANN001
    return [item.name for item in items]


class TestDeclarations:
    """Declaration shapes, names and scopes."""

    def test_class_keyword_selects_kind(self, nodes: NodeFactory) -> None:
        """The declaration keyword distinguishes kinds sharing one node kind."""
        tree = nodes.source(
            nodes.type_decl("class", "A"),
            nodes.type_decl("struct", "B"),
            nodes.type_decl("enum", "C"),
            nodes.type_decl("actor", "D"),
        )

        result = extract(tree, "Types.swift", "App")

        assert [(d.name, d.kind) for d in result.declarations] == [
            ("A", DeclarationKind.CLASS),
            ("B", DeclarationKind.STRUCT),
            ("C", DeclarationKind.ENUM),
            ("D", DeclarationKind.ACTOR),
        ]
        assert all(d.package == "App" and d.file == "Types.swift" for d in result.declarations)

    def test_protocol_and_members(self, nodes: NodeFactory) -> None:
        """Protocol members are declared in the protocol's scope."""
        tree = nodes.source(
            nodes.protocol(
                "Store",
                members=(
                    nodes(
                        "associatedtype_declaration",
                        nodes.tok("associatedtype"),
                        nodes.type_id("Item", field="name"),
                    ),
                    nodes(
                        "protocol_function_declaration",
                        nodes.tok("func"),
                        nodes.ident("load", field="name"),
                    ),
                ),
            )
        )

        result = extract(tree, "Store.swift", "App")

        assert [(d.name, d.kind, d.scope_path) for d in result.declarations] == [
            ("Store", DeclarationKind.PROTOCOL, ()),
            ("Item", DeclarationKind.ASSOCIATEDTYPE, ("Store",)),
            ("load", DeclarationKind.FUNCTION, ("Store",)),
        ]

    def test_nested_declarations_use_full_scope_path(self, nodes: NodeFactory) -> None:
        """Nested types and their members carry every enclosing name."""
        inner = nodes.type_decl("struct", "Inner", members=(nodes.property("x", nodes.user_type("Outer", "Inner")),))
        tree = nodes.source(nodes.type_decl("class", "Outer", members=(inner,)))

        result = extract(tree, "Outer.swift", "App")

        assert [(d.qualified_name, d.scope_path) for d in result.declarations] == [
            ("Outer", ()),
            ("Outer.Inner", ("Outer",)),
            ("Outer.Inner.x", ("Outer", "Inner")),
        ]
        (ref,) = result.references
        assert ref.name == "Outer.Inner"
        assert ref.scope_path == ("Outer", "Inner", "x")
        # Nearest enclosing type-level declaration owns the reference
        assert ref.owner == 1

    def test_extension_records_extended_type(self, nodes: NodeFactory) -> None:
        """Extensions are named after the extended type and open its scope."""
        bar = nodes.function("bar", nodes.tok("->"), nodes.user_type("Baz", field="return_type"))
        tree = nodes.source(nodes.extension("Foo", members=(bar,)))

        result = extract(tree, "Foo+Bar.swift", "App")

        ext, func = result.declarations
        assert ext.kind is DeclarationKind.EXTENSION
        assert ext.name == "Foo"
        assert ext.is_extension_of == "Foo"
        assert func.scope_path == ("Foo",)
        # The extended name itself is not a reference
        assert _names(result.references) == ["Baz"]
        assert result.references[0].owner == 0

    def test_dotted_extension(self, nodes: NodeFactory) -> None:
        """Extending a nested type opens every component as scope."""
        tree = nodes.source(nodes.extension("Outer", "Inner", members=(nodes.function("f"),)))

        result = extract(tree, "Ext.swift", "App")

        ext, func = result.declarations
        assert ext.name == "Outer.Inner"
        assert ext.member_scope == ("Outer", "Inner")
        assert func.scope_path == ("Outer", "Inner")

    def test_declaration_span_is_name_span(self, nodes: NodeFactory) -> None:
        """Declarations are located at their name."""
        tree = nodes.source(nodes.type_decl("class", "Foo"))

        (decl,) = extract(tree, "Foo.swift", "App").declarations

        # Leaf lines: 1 = "class", 2 = "Foo"
        assert decl.span.start_line == 2
        assert decl.span.location == "2:5"

    def test_anonymous_declaration_is_not_emitted(self, nodes: NodeFactory) -> None:
        """A declaration without a name pushes no scope; children are still walked."""
        nameless = nodes(
            "class_declaration",
            nodes.tok("class", field="declaration_kind"),
            nodes.body(nodes.property("x", nodes.user_type("Bar"))),
        )

        result = extract(nodes.source(nameless), "Anon.swift", "App")

        assert [(d.name, d.scope_path) for d in result.declarations] == [("x", ())]
        (ref,) = result.references
        assert ref.owner == 0

    def test_overloads_are_all_emitted(self, nodes: NodeFactory) -> None:
        tree = nodes.source(nodes.function("run"), nodes.function("run"))

        result = extract(tree, "Run.swift", "App")

        assert _names(result.declarations) == ["run", "run"]


class TestReferences:
    """Reference shapes and kinds."""

    def test_inheritance_clause(self, nodes: NodeFactory) -> None:
        """Superclass and conformances are inheritance references owned by the type."""
        tree = nodes.source(
            nodes.type_decl(
                "class",
                "Foo",
                nodes.tok(":"),
                nodes.inherits("Base"),
                nodes.tok(","),
                nodes.inherits("Proto"),
            )
        )

        result = extract(tree, "Foo.swift", "App")

        assert [(r.name, r.kind, r.owner) for r in result.references] == [
            ("Base", ReferenceKind.INHERITANCE, 0),
            ("Proto", ReferenceKind.INHERITANCE, 0),
        ]

    def test_generic_arguments_are_separate_references(self, nodes: NodeFactory) -> None:
        """Array<Item> yields Array and Item, in source order."""
        array = nodes.user_type("Array", args=nodes.type_args(nodes.user_type("Item")))
        tree = nodes.source(nodes.type_decl("struct", "Box", members=(nodes.property("items", array),)))

        result = extract(tree, "Box.swift", "App")

        assert [(r.name, r.kind) for r in result.references] == [
            ("Array", ReferenceKind.TYPE),
            ("Item", ReferenceKind.TYPE),
        ]

    def test_generic_parameters_are_local(self, nodes: NodeFactory) -> None:
        """Generic parameter names and their uses never become references."""
        constrained = nodes(
            "type_parameters",
            nodes.tok("<"),
            nodes("type_parameter", nodes.type_id("T"), nodes.tok(":"), nodes.user_type("Equatable")),
            nodes.tok(">"),
        )
        param = nodes("parameter", nodes.ident("value", field="name"), nodes.tok(":"), nodes.user_type("T"))
        func = nodes(
            "function_declaration",
            nodes.tok("func"),
            nodes.ident("wrap", field="name"),
            constrained,
            param,
            nodes.tok("->"),
            nodes.user_type("Wrapper", args=nodes.type_args(nodes.user_type("T")), field="return_type"),
        )

        result = extract(nodes.source(func), "Wrap.swift", "App")

        assert _names(result.references) == ["Equatable", "Wrapper"]

    def test_calls_and_member_access(self, nodes: NodeFactory) -> None:
        """Plain-identifier callees and receivers are references; chained ones are not."""
        func = nodes.function(
            "run",
            statements=(
                nodes.call(nodes.ident("Foo")),
                nodes.navigation(nodes.ident("Bar"), "shared"),
                nodes.call(nodes.navigation(nodes.ident("Baz"), "make")),
            ),
        )

        result = extract(nodes.source(func), "Run.swift", "App")

        assert [(r.name, r.kind) for r in result.references] == [
            ("Foo", ReferenceKind.CALL),
            ("Bar", ReferenceKind.MEMBER),
            ("Baz", ReferenceKind.MEMBER),
        ]
        # No type-level declaration encloses them: the function owns them
        assert {r.owner for r in result.references} == {0}

    def test_top_level_code_has_no_owner(self, nodes: NodeFactory) -> None:
        tree = nodes.source(nodes.call(nodes.ident("main")))

        (ref,) = extract(tree, "main.swift", "App").references

        assert ref.owner is None
        assert ref.scope_path == ()

    def test_self_is_never_a_reference(self, nodes: NodeFactory) -> None:
        func = nodes.function(
            "copy",
            nodes.tok("->"),
            nodes.user_type("Self", field="return_type"),
            statements=(nodes.navigation(nodes.ident("self"), "value"),),
        )

        result = extract(nodes.source(func), "Copy.swift", "App")

        assert result.references == ()

    def test_self_reference_is_recorded(self, nodes: NodeFactory) -> None:
        """A type mentioning itself is an ordinary reference."""
        tree = nodes.source(
            nodes.type_decl("class", "Node", members=(nodes.property("next", nodes.user_type("Node")),))
        )

        (ref,) = extract(tree, "Node.swift", "App").references

        assert ref.name == "Node"
        assert ref.owner == 0


class TestImportsAndErrors:
    def test_imports_keep_first_component_in_order(self, nodes: NodeFactory) -> None:
        tree = nodes.source(
            nodes.import_("Foundation"),
            nodes.import_("Core.Utils"),
            nodes.import_("Foundation"),
        )

        result = extract(tree, "main.swift", "App")

        assert result.imports == ("Foundation", "Core")

    def test_error_nodes_are_skipped_with_diagnostic(self, nodes: NodeFactory) -> None:
        """Error subtrees are opaque: nothing inside is extracted, the rest is."""
        tree = nodes.source(
            nodes("ERROR", nodes.user_type("Lost"), error=True),
            nodes.type_decl("struct", "Ok"),
        )

        result = extract(tree, "Broken.swift", "App")

        assert _names(result.declarations) == ["Ok"]
        assert result.references == ()
        (diag,) = result.diagnostics
        assert diag.kind is DiagnosticKind.SKIPPED_NODE
        assert diag.file == "Broken.swift"

    def test_whole_file_error_root_is_walked(self, nodes: NodeFactory) -> None:
        """An error root keeps the declarations the parser recovered inside it."""
        tree = nodes(
            "ERROR",
            nodes.type_decl("struct", "Ok", members=(nodes.property("b", nodes.user_type("B")),)),
            nodes.tok("class"),
            nodes.tok("{"),
            nodes.type_decl("struct", "AlsoOk"),
            error=True,
        )

        result = extract(tree, "Broken.swift", "App")

        assert _names(result.declarations) == ["Ok", "b", "AlsoOk"]
        assert _names(result.references) == ["B"]
        (diag,) = result.diagnostics
        assert diag.kind is DiagnosticKind.SKIPPED_NODE

    def test_error_spanning_the_file_is_walked(self, nodes: NodeFactory) -> None:
        tree = nodes.source(nodes("ERROR", nodes.type_decl("class", "Foo"), error=True))

        result = extract(tree, "Broken.swift", "App")

        assert _names(result.declarations) == ["Foo"]
        assert len(result.diagnostics) == 1

    def test_inner_errors_under_error_root_stay_opaque(self, nodes: NodeFactory) -> None:
        tree = nodes(
            "ERROR",
            nodes.type_decl("struct", "Ok"),
            nodes("ERROR", nodes.user_type("Lost"), error=True),
            error=True,
        )

        result = extract(tree, "Broken.swift", "App")

        assert _names(result.declarations) == ["Ok"]
        assert result.references == ()
        assert len(result.diagnostics) == 2

    def test_extraction_does_not_touch_the_tree(self, nodes: NodeFactory) -> None:
        tree = nodes.source(nodes.type_decl("class", "Foo"))
        before = repr(tree)

        extract(tree, "Foo.swift", "App")

        assert repr(tree) == before
