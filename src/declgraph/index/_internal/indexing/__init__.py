"""Collection, resolution and graph construction."""

from declgraph.index._internal.indexing.graph import DependencyGraph
from declgraph.index._internal.indexing.resolver import (
    ResolutionResult,
    ResolutionStats,
    Resolver,
)
from declgraph.index._internal.indexing.structural import StructuralExtractor
from declgraph.index._internal.indexing.symbols import SymbolTable

__all__ = [
    "DependencyGraph",
    "ResolutionResult",
    "ResolutionStats",
    "Resolver",
    "StructuralExtractor",
    "SymbolTable",
]
