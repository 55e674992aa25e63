"""Declaration and dependency analysis engine.

Public API is in `declgraph.index.ops` and `declgraph.index.query`:
- AnalysisCoordinator: runs the pipeline
- AnalysisResult: everything a run produced
- QueryEngine: find_by_name / deps

Internal implementations are in `declgraph.index._internal/`.
"""

from declgraph.index._internal.indexing import DependencyGraph, Resolver, SymbolTable
from declgraph.index.models import (
    Declaration,
    DeclarationKind,
    DeclId,
    Diagnostic,
    DiagnosticKind,
    Edge,
    EdgeKind,
    FileExtraction,
    PackageSpec,
    Reference,
    ReferenceKind,
    Resolution,
    Span,
    SyntaxNode,
)
from declgraph.index.ops import AnalysisCoordinator, AnalysisResult
from declgraph.index.query import QueryEngine

__all__ = [
    "AnalysisCoordinator",
    "AnalysisResult",
    "Declaration",
    "DeclarationKind",
    "DeclId",
    "DependencyGraph",
    "Diagnostic",
    "DiagnosticKind",
    "Edge",
    "EdgeKind",
    "FileExtraction",
    "PackageSpec",
    "QueryEngine",
    "Reference",
    "ReferenceKind",
    "Resolution",
    "Resolver",
    "Span",
    "SyntaxNode",
]
