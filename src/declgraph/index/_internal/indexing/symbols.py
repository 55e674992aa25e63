"""Symbol table: declaration arena plus scoped name index.

Collection is the first of two passes. Every file's declarations are
inserted (file order, then declaration order) before any reference is
resolved, so lookups never depend on which file finished parsing first.

A ``DeclId`` is the index of a declaration in the arena. The name index
maps ``(package, scope_path, name)`` to the canonical DeclIds for lookups:

- extensions always accumulate
- overloadable declarations (functions) accumulate with each other
- any other clash is a duplicate: the newest declaration becomes canonical,
  the older one stays in the arena (and may still own graph edges)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from declgraph.core.logging import get_logger
from declgraph.index.models import (
    DeclarationKind,
    Declaration,
    DeclId,
    Diagnostic,
    DiagnosticKind,
    FileExtraction,
)

log = get_logger("symbols")

ScopeKey = tuple[str, tuple[str, ...]]


class SymbolTable:
    """Arena of all declarations with a scoped lookup index.

    Usage::

        table = SymbolTable.collect(extractions)
        for decl_id in table.lookup("App", ("Foo",), "bar"):
            print(table[decl_id].qualified_name)
    """

    def __init__(self) -> None:
        self._arena: list[Declaration] = []
        self._index: dict[tuple[str, tuple[str, ...], str], list[DeclId]] = {}
        self._by_name: dict[str, list[DeclId]] = {}
        self._file_offsets: dict[tuple[str, str], int] = {}
        self._diagnostics: list[Diagnostic] = []

    @classmethod
    def collect(cls, extractions: Iterable[FileExtraction]) -> SymbolTable:
        table = cls()
        for extraction in extractions:
            table.add_file(extraction)
        log.debug(
            "symbols_collected",
            declarations=len(table),
            duplicates=len(table.diagnostics),
        )
        return table

    def add_file(self, extraction: FileExtraction) -> None:
        self._file_offsets[(extraction.package, extraction.path)] = len(self._arena)
        for decl in extraction.declarations:
            self._add(decl)

    def _add(self, decl: Declaration) -> DeclId:
        decl_id = len(self._arena)
        self._arena.append(decl)
        self._by_name.setdefault(decl.name, []).append(decl_id)

        entries = self._index.setdefault((decl.package, decl.scope_path, decl.name), [])
        if decl.kind is not DeclarationKind.EXTENSION:
            prior = [i for i in entries if self._arena[i].kind is not DeclarationKind.EXTENSION]
            overloads = decl.kind.is_overloadable and all(
                self._arena[i].kind.is_overloadable for i in prior
            )
            if prior and not overloads:
                self._report_duplicate(decl, self._arena[prior[-1]])
                entries[:] = [i for i in entries if i not in prior]
        entries.append(decl_id)
        return decl_id

    def _report_duplicate(self, decl: Declaration, previous: Declaration) -> None:
        self._diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.DUPLICATE_DECLARATION,
                message=(
                    f"{decl.kind.value} {decl.qualified_name} redeclares "
                    f"{previous.kind.value} at {previous.file}:{previous.span.location}"
                ),
                file=decl.file,
                span=decl.span,
                name=decl.qualified_name,
            )
        )

    # -----------------------------------------------------------------
    # Read API (the table is not mutated after collection)
    # -----------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._arena)

    def __getitem__(self, decl_id: DeclId) -> Declaration:
        return self._arena[decl_id]

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self._arena)

    @property
    def declarations(self) -> Sequence[Declaration]:
        return tuple(self._arena)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return list(self._diagnostics)

    def lookup(self, package: str, scope_path: tuple[str, ...], name: str) -> tuple[DeclId, ...]:
        """Canonical declarations named ``name`` directly in one scope."""
        return tuple(self._index.get((package, scope_path, name), ()))

    def decl_id(self, package: str, file: str, local_index: int) -> DeclId:
        """Translate a per-file declaration index into a DeclId.

        Files are keyed by package too: one path may be analyzed as part of
        more than one package.
        """
        return self._file_offsets[(package, file)] + local_index

    def named(self, name: str) -> tuple[DeclId, ...]:
        """Every declaration whose name or qualified name is ``name``, in arena order.

        Includes superseded duplicates.
        """
        simple = name.rsplit(".", 1)[-1]
        hits = {
            i
            for key in dict.fromkeys((name, simple))
            for i in self._by_name.get(key, ())
            if self._arena[i].name == name or self._arena[i].qualified_name == name
        }
        return tuple(sorted(hits))
