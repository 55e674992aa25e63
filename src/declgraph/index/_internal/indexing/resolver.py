"""Reference resolution: the second pass over a collected symbol table.

Resolution runs in two steps:

1. Extension binding. Each extension's extended name is resolved like a
   type reference from the extension's own scope. On success the two
   member scopes are merged for every later lookup, and the binding
   becomes an ``extends`` edge (type -> extension).
2. Reference resolution. A name is looked up from the innermost scope of
   the use site outward within its own package, then at the top level of
   each package the file imports (in import order). The first level with a
   match wins and every match at that level is a candidate (overloads).
   Dotted names resolve their head that way and each further component as
   a member of the previous candidates.

The table is read-only here; scope merges live in the resolver.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field

from declgraph.core.logging import get_logger
from declgraph.index._internal.indexing.symbols import ScopeKey, SymbolTable
from declgraph.index.models import (
    Declaration,
    DeclarationKind,
    DeclId,
    Diagnostic,
    DiagnosticKind,
    ExtensionBinding,
    FileExtraction,
    PackageSpec,
    Reference,
    ReferenceKind,
    Resolution,
)

log = get_logger("resolver")

Accept = Callable[[Declaration], bool]


def _any(decl: Declaration) -> bool:  # noqa: ARG001
    return True


def _type_like(decl: Declaration) -> bool:
    return decl.kind.is_type_level or decl.kind is DeclarationKind.ASSOCIATEDTYPE


def _type_level(decl: Declaration) -> bool:
    return decl.kind.is_type_level


def _extendable(decl: Declaration) -> bool:
    return decl.kind.is_type_level and decl.kind is not DeclarationKind.EXTENSION


_ACCEPT_BY_KIND: dict[ReferenceKind, Accept] = {
    ReferenceKind.TYPE: _type_like,
    ReferenceKind.INHERITANCE: _type_like,
    ReferenceKind.MEMBER: _type_level,
    ReferenceKind.CALL: _any,
}


@dataclass
class ResolutionStats:
    """Statistics from reference resolution."""

    refs_processed: int = 0
    refs_resolved: int = 0
    refs_unresolved: int = 0
    refs_ambiguous: int = 0
    extensions_bound: int = 0
    extensions_unbound: int = 0


@dataclass
class ResolutionResult:
    resolutions: list[Resolution] = field(default_factory=list)
    bindings: list[ExtensionBinding] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    stats: ResolutionStats = field(default_factory=ResolutionStats)


class Resolver:
    """Resolves every reference of an analysis unit against a SymbolTable.

    Usage::

        table = SymbolTable.collect(extractions)
        result = Resolver(table, extractions, packages).resolve()
        graph = DependencyGraph.build(table, result.resolutions, result.bindings)
    """

    def __init__(
        self,
        table: SymbolTable,
        extractions: Sequence[FileExtraction],
        packages: Sequence[PackageSpec] = (),
    ) -> None:
        self._table = table
        self._extractions = list(extractions)
        self._imports: dict[str, tuple[str, ...]] = {e.path: e.imports for e in self._extractions}
        # import name -> package names, in package order
        self._modules: dict[str, list[str]] = {}
        for package in packages:
            for import_name in (package.name, *package.modules):
                owners = self._modules.setdefault(import_name, [])
                if package.name not in owners:
                    owners.append(package.name)
        self._groups: dict[ScopeKey, list[ScopeKey]] = {}

    def resolve(self) -> ResolutionResult:
        result = ResolutionResult()
        self._bind_extensions(result)

        for extraction in self._extractions:
            for ref in extraction.references:
                result.resolutions.append(self._resolve_one(extraction.path, ref, result))

        stats = result.stats
        log.debug(
            "resolution_complete",
            processed=stats.refs_processed,
            resolved=stats.refs_resolved,
            unresolved=stats.refs_unresolved,
            ambiguous=stats.refs_ambiguous,
            extensions_bound=stats.extensions_bound,
        )
        return result

    # -----------------------------------------------------------------
    # Extension binding
    # -----------------------------------------------------------------

    def _bind_extensions(self, result: ResolutionResult) -> None:
        for decl_id, decl in enumerate(self._table):
            if decl.kind is not DeclarationKind.EXTENSION or decl.is_extension_of is None:
                continue
            targets = [
                t
                for t in self._resolve_name(
                    decl.package, decl.scope_path, decl.is_extension_of, decl.file, _extendable
                )
                if self._table[t].kind is not DeclarationKind.EXTENSION
            ]
            if not targets:
                result.stats.extensions_unbound += 1
                result.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.UNRESOLVED_REFERENCE,
                        message=f"Extended type {decl.is_extension_of} not found",
                        file=decl.file,
                        span=decl.span,
                        name=decl.is_extension_of,
                    )
                )
                continue
            for target in targets:
                target_decl = self._table[target]
                self._merge(
                    (target_decl.package, target_decl.member_scope),
                    (decl.package, decl.member_scope),
                )
                result.bindings.append(ExtensionBinding(extension=decl_id, target=target))
            result.stats.extensions_bound += 1

    def _merge(self, a: ScopeKey, b: ScopeKey) -> None:
        group_a = self._groups.get(a, [a])
        group_b = self._groups.get(b, [b])
        if group_a is group_b:
            return
        merged = group_a + [s for s in group_b if s not in group_a]
        for scope in merged:
            self._groups[scope] = merged

    # -----------------------------------------------------------------
    # References
    # -----------------------------------------------------------------

    def _resolve_one(self, file: str, ref: Reference, result: ResolutionResult) -> Resolution:
        stats = result.stats
        stats.refs_processed += 1
        source = None
        if ref.owner is not None:
            source = self._table.decl_id(ref.package, file, ref.owner)
        candidates = self._resolve_name(
            ref.package, ref.scope_path, ref.name, file, _ACCEPT_BY_KIND[ref.kind]
        )

        if candidates:
            stats.refs_resolved += 1
            if len(candidates) > 1:
                stats.refs_ambiguous += 1
        else:
            stats.refs_unresolved += 1
            # Member receivers are mostly variables; not worth reporting
            if ref.kind is not ReferenceKind.MEMBER:
                result.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.UNRESOLVED_REFERENCE,
                        message=f"Cannot resolve {ref.kind.value} reference {ref.name}",
                        file=file,
                        span=ref.span,
                        name=ref.name,
                    )
                )
        return Resolution(reference=ref, source=source, candidates=candidates)

    def _resolve_name(
        self,
        package: str,
        scope_path: tuple[str, ...],
        name: str,
        file: str,
        accept: Accept,
    ) -> tuple[DeclId, ...]:
        head, *rest = name.split(".")
        current = list(self._walk(package, scope_path, head, file, _type_level if rest else accept))

        for position, part in enumerate(rest):
            wanted = accept if position == len(rest) - 1 else _type_level
            members: list[DeclId] = []
            for candidate in current:
                owner = self._table[candidate]
                for hit in self._lookup_level(owner.package, owner.member_scope, part, wanted):
                    if hit not in members:
                        members.append(hit)
            current = members
            if not current:
                break

        if not current and rest:
            # Extensions of nested types from outside the analyzed set
            current = list(self._walk(package, scope_path, name, file, accept))
        return tuple(current)

    def _walk(
        self,
        package: str,
        scope_path: tuple[str, ...],
        name: str,
        file: str,
        accept: Accept,
    ) -> tuple[DeclId, ...]:
        for depth in range(len(scope_path), -1, -1):
            hits = self._lookup_level(package, scope_path[:depth], name, accept)
            if hits:
                return hits
        for imported in self._imported_packages(file, package):
            hits = self._lookup_level(imported, (), name, accept)
            if hits:
                return hits
        return ()

    def _lookup_level(
        self, package: str, scope_path: tuple[str, ...], name: str, accept: Accept
    ) -> tuple[DeclId, ...]:
        key = (package, scope_path)
        hits: list[DeclId] = []
        for scope_package, scope in self._groups.get(key, [key]):
            for decl_id in self._table.lookup(scope_package, scope, name):
                if decl_id not in hits and accept(self._table[decl_id]):
                    hits.append(decl_id)
        primary = [i for i in hits if self._table[i].kind is not DeclarationKind.EXTENSION]
        return tuple(primary or hits)

    def _imported_packages(self, file: str, own: str) -> Iterator[str]:
        seen = {own}
        for module in self._imports.get(file, ()):
            for package in self._modules.get(module, ()):
                if package not in seen:
                    seen.add(package)
                    yield package
