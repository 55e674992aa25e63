"""Records shared by every analysis stage.

All records are frozen dataclasses so they can cross process boundaries
(extraction runs in a process pool) and be shared by concurrent readers
once the graph is built.

Handles:
- ``DeclId``: integer index of a Declaration in the symbol table arena.
- ``Reference.owner``: index of the owning Declaration within the same
  file's declaration list (translated to a DeclId during resolution).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DeclId = int


# ============================================================================
# ENUMS
# ============================================================================


class DeclarationKind(str, Enum):
    """Kind of a named construct introduced by source code."""

    CLASS = "class"
    STRUCT = "struct"
    ENUM = "enum"
    ACTOR = "actor"
    PROTOCOL = "protocol"
    EXTENSION = "extension"
    TYPEALIAS = "typealias"
    ASSOCIATEDTYPE = "associatedtype"
    FUNCTION = "function"
    PROPERTY = "property"

    @property
    def is_type_level(self) -> bool:
        """True for kinds that own references (types, extensions, aliases)."""
        return self in _TYPE_LEVEL_KINDS

    @property
    def is_overloadable(self) -> bool:
        """True if several declarations may share one name in a scope."""
        return self is DeclarationKind.FUNCTION


_TYPE_LEVEL_KINDS = frozenset(
    {
        DeclarationKind.CLASS,
        DeclarationKind.STRUCT,
        DeclarationKind.ENUM,
        DeclarationKind.ACTOR,
        DeclarationKind.PROTOCOL,
        DeclarationKind.EXTENSION,
        DeclarationKind.TYPEALIAS,
    }
)


class ReferenceKind(str, Enum):
    """Syntactic position of a use site."""

    TYPE = "type"  # var x: Foo
    CALL = "call"  # foo(), Foo()
    INHERITANCE = "inheritance"  # class A: Foo
    MEMBER = "member"  # Foo.shared


class DiagnosticKind(str, Enum):
    """Non-fatal problems attached to an analysis result."""

    PARSE_ERROR = "parse_error"
    SKIPPED_NODE = "skipped_node"
    DUPLICATE_DECLARATION = "duplicate_declaration"
    UNRESOLVED_REFERENCE = "unresolved_reference"


class EdgeKind(str, Enum):
    """Dependency edge kind."""

    REFERENCE = "reference"  # owner -> resolved declaration
    EXTENDS = "extends"  # extended type -> extension


# ============================================================================
# RECORDS
# ============================================================================


@dataclass(frozen=True, slots=True)
class Span:
    """Source range. Lines are 1-based, columns and bytes 0-based."""

    start_byte: int
    end_byte: int
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @property
    def location(self) -> str:
        """``line:column`` as editors count them (both 1-based)."""
        return f"{self.start_line}:{self.start_column + 1}"

    def to_dict(self) -> dict[str, int]:
        return {
            "start_line": self.start_line,
            "start_column": self.start_column,
            "end_line": self.end_line,
            "end_column": self.end_column,
        }


@dataclass(frozen=True, slots=True)
class SyntaxNode:
    """Language-agnostic view of one parser node.

    Anonymous tokens (``class``, ``:``, ``.``) are kept as children with
    ``is_named`` False, so keyword-driven shapes can be recognized.
    """

    kind: str
    span: Span
    children: tuple[SyntaxNode, ...] = ()
    field: str | None = None
    is_named: bool = True
    is_error: bool = False
    text: str = ""

    @property
    def named_children(self) -> tuple[SyntaxNode, ...]:
        return tuple(c for c in self.children if c.is_named)

    def child_by_field(self, name: str) -> SyntaxNode | None:
        for child in self.children:
            if child.field == name:
                return child
        return None

    def first_child_of_kind(self, *kinds: str) -> SyntaxNode | None:
        for child in self.children:
            if child.kind in kinds:
                return child
        return None


@dataclass(frozen=True, slots=True)
class Declaration:
    """A named construct introduced by source code."""

    name: str
    kind: DeclarationKind
    file: str
    span: Span
    scope_path: tuple[str, ...] = ()
    is_extension_of: str | None = None
    package: str = ""

    @property
    def qualified_name(self) -> str:
        return ".".join((*self.scope_path, self.name))

    @property
    def member_scope(self) -> tuple[str, ...]:
        """Scope path seen by declarations nested inside this one."""
        return (*self.scope_path, *self.name.split("."))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "qualified_name": self.qualified_name,
            "kind": self.kind.value,
            "file": self.file,
            "line": self.span.start_line,
            "column": self.span.start_column + 1,
            "package": self.package,
            "extends": self.is_extension_of,
        }


@dataclass(frozen=True, slots=True)
class Reference:
    """A use-site mention of a name."""

    name: str
    kind: ReferenceKind
    file: str
    span: Span
    scope_path: tuple[str, ...] = ()
    owner: int | None = None
    package: str = ""


@dataclass(frozen=True, slots=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    file: str | None = None
    span: Span | None = None
    name: str | None = None

    def __str__(self) -> str:
        where = self.file or "<analysis>"
        if self.span is not None:
            where = f"{where}:{self.span.location}"
        return f"{where}: {self.kind.value}: {self.message}"


@dataclass(frozen=True, slots=True)
class FileExtraction:
    """Everything extracted from one file. Picklable."""

    path: str
    package: str
    declarations: tuple[Declaration, ...] = ()
    references: tuple[Reference, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    imports: tuple[str, ...] = ()
    error: str | None = None
    # Rendered parse tree, only when requested (print --full)
    tree_dump: str | None = None


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving one Reference."""

    reference: Reference
    source: DeclId | None
    candidates: tuple[DeclId, ...] = ()

    @property
    def is_resolved(self) -> bool:
        return bool(self.candidates)


@dataclass(frozen=True, slots=True)
class ExtensionBinding:
    """An extension bound to the type it extends."""

    extension: DeclId
    target: DeclId


@dataclass(frozen=True, slots=True)
class Edge:
    source: DeclId
    target: DeclId
    kind: EdgeKind
    reference: Reference | None = None


@dataclass(frozen=True, slots=True)
class PackageSpec:
    """A named group of source files.

    ``modules`` are the import names that reach this package.
    """

    name: str
    files: tuple[str, ...] = ()
    modules: tuple[str, ...] = ()
    root: str | None = None


@dataclass(slots=True)
class AnalysisStats:
    """Counters for one analysis run."""

    files: int = 0
    files_failed: int = 0
    declarations: int = 0
    references: int = 0
    resolved: int = 0
    edges: int = 0
    duration_ms: int = 0
    by_diagnostic: dict[str, int] = field(default_factory=dict)
