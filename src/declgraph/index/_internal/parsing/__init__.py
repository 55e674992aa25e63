"""Tree-sitter parsing and syntax tree adaptation."""

from declgraph.index._internal.parsing.packs import (
    PACKS,
    SWIFT_PACK,
    LanguagePack,
    get_pack,
    get_pack_for_ext,
)
from declgraph.index._internal.parsing.tree import (
    adapt_tree,
    error_root,
    format_tree,
    iter_nodes,
)
from declgraph.index._internal.parsing.treesitter import ParseResult, TreeSitterParser

__all__ = [
    "PACKS",
    "SWIFT_PACK",
    "LanguagePack",
    "ParseResult",
    "TreeSitterParser",
    "adapt_tree",
    "error_root",
    "format_tree",
    "get_pack",
    "get_pack_for_ext",
    "iter_nodes",
]
