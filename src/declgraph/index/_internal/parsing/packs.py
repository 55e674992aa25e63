"""LanguagePack: single source of truth for per-language tree-sitter config.

A pack carries the grammar module, file detection, and the node
shapes the extractor recognizes:

- declaration shapes (node kind -> DeclarationKind, with keyword tokens
  distinguishing kinds that share one node kind)
- reference shapes (qualified type nodes, call and member access nodes)
- scope-local names (generic parameters) that never become references

The PACKS registry is the canonical lookup: ``PACKS["swift"]``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from declgraph.index.models import DeclarationKind

# =========================================================================
# Dataclasses
# =========================================================================


@dataclass(frozen=True)
class DeclarationShape:
    """How one node kind introduces a declaration."""

    kind: DeclarationKind | None = None
    # Keyword token -> kind, for node kinds shared by several declarations
    keyword_kinds: tuple[tuple[str, DeclarationKind], ...] = ()
    name_field: str = "name"

    def resolve_kind(self, tokens: tuple[str, ...]) -> DeclarationKind | None:
        for keyword, kind in self.keyword_kinds:
            if keyword in tokens:
                return kind
        return self.kind


@dataclass(frozen=True)
class ReferenceShapes:
    """Node kinds that produce references, and the nodes around them."""

    # Dotted type: direct children of this kind are the name components
    qualified_type: str = "user_type"
    type_identifier: str = "type_identifier"
    type_arguments: str = "type_arguments"
    identifier: str = "simple_identifier"
    inheritance: str = "inheritance_specifier"
    call: str = "call_expression"
    navigation: str = "navigation_expression"
    navigation_target_field: str = "target"
    # Generic parameter list and parameter; the first identifier is the name
    type_parameters: str = "type_parameters"
    type_parameter: str = "type_parameter"
    # Names that never refer to a declaration
    reserved: frozenset[str] = frozenset()


@dataclass(frozen=True)
class LanguagePack:
    """Complete tree-sitter configuration for a single language."""

    # -- Identity --
    name: str
    grammar_name: str

    # -- Grammar --
    grammar_package: str  # distribution to install ("tree-sitter-swift")
    grammar_module: str  # Python import ("tree_sitter_swift")
    language_func: str | None = None

    # -- File detection --
    extensions: frozenset[str] = field(default_factory=frozenset)

    # -- Extraction --
    declarations: dict[str, DeclarationShape] = field(default_factory=dict)
    references: ReferenceShapes = field(default_factory=ReferenceShapes)
    import_node: str | None = None
    import_path_node: str = "identifier"
    error_node: str = "ERROR"


# =========================================================================
# SWIFT
# =========================================================================

_SWIFT_DECLARATIONS: dict[str, DeclarationShape] = {
    "class_declaration": DeclarationShape(
        kind=DeclarationKind.CLASS,
        keyword_kinds=(
            ("class", DeclarationKind.CLASS),
            ("struct", DeclarationKind.STRUCT),
            ("enum", DeclarationKind.ENUM),
            ("actor", DeclarationKind.ACTOR),
            ("extension", DeclarationKind.EXTENSION),
        ),
    ),
    "protocol_declaration": DeclarationShape(kind=DeclarationKind.PROTOCOL),
    "typealias_declaration": DeclarationShape(kind=DeclarationKind.TYPEALIAS),
    "associatedtype_declaration": DeclarationShape(kind=DeclarationKind.ASSOCIATEDTYPE),
    "function_declaration": DeclarationShape(kind=DeclarationKind.FUNCTION),
    "protocol_function_declaration": DeclarationShape(kind=DeclarationKind.FUNCTION),
    "property_declaration": DeclarationShape(kind=DeclarationKind.PROPERTY),
    "protocol_property_declaration": DeclarationShape(kind=DeclarationKind.PROPERTY),
}

SWIFT_PACK = LanguagePack(
    name="swift",
    grammar_name="swift",
    grammar_package="tree-sitter-swift",
    grammar_module="tree_sitter_swift",
    extensions=frozenset({"swift"}),
    declarations=_SWIFT_DECLARATIONS,
    references=ReferenceShapes(reserved=frozenset({"Self", "self", "super"})),
    import_node="import_declaration",
)


# =========================================================================
# Registry
# =========================================================================

_ALL_PACKS: tuple[LanguagePack, ...] = (SWIFT_PACK,)

# name -> Pack
PACKS: dict[str, LanguagePack] = {pack.name: pack for pack in _ALL_PACKS}

# Extension -> Pack
_EXT_TO_PACK: dict[str, LanguagePack] = {}
for _pack in _ALL_PACKS:
    for _ext in _pack.extensions:
        _EXT_TO_PACK[_ext] = _pack


def get_pack_for_ext(ext: str) -> LanguagePack | None:
    """Get a LanguagePack for a file extension (without leading dot)."""
    return _EXT_TO_PACK.get(ext.lower())


def get_pack(name: str) -> LanguagePack | None:
    """Get a LanguagePack by language name."""
    return PACKS.get(name)
