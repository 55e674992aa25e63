"""Tree-sitter parsing.

Parses one file with the grammar of its LanguagePack and adapts the
result into a ``SyntaxNode`` tree. Trees with ``ERROR`` nodes are
returned as-is, even when the error spans the whole file, as long as the
parser recovered some declaration or import inside it. Only a file with no
recognizable syntax at all raises ``ParseError``.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tree_sitter

from declgraph.core.errors import ParseError
from declgraph.index._internal.parsing.packs import LanguagePack, get_pack_for_ext
from declgraph.index._internal.parsing.tree import adapt_tree, error_root, iter_nodes
from declgraph.index.models import SyntaxNode


@dataclass
class ParseResult:
    """Result of parsing a file."""

    root: SyntaxNode
    language: str
    pack: LanguagePack


@dataclass
class TreeSitterParser:
    """
    Tree-sitter parser with grammar caching.

    Usage::

        parser = TreeSitterParser()
        result = parser.parse(Path("Sources/App/Foo.swift"), content)
        result.root  # SyntaxNode
    """

    _parser: Any = field(default=None, repr=False)
    _languages: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()
        self._languages = {}

    def _get_language(self, pack: LanguagePack, path: Path) -> Any:
        """Get or load the tree-sitter language for a pack."""
        if pack.grammar_name in self._languages:
            return self._languages[pack.grammar_name]

        try:
            mod = importlib.import_module(pack.grammar_module)
            lang_fn = getattr(mod, pack.language_func or "language")
            lang = tree_sitter.Language(lang_fn())
        except (ImportError, AttributeError) as err:
            raise ParseError.language_unavailable(
                str(path), pack.name, pack.grammar_package
            ) from err

        self._languages[pack.grammar_name] = lang
        return lang

    def parse(self, path: Path, content: bytes | None = None) -> ParseResult:
        """
        Parse a file with Tree-sitter.

        Args:
            path: Path to file (used for language detection)
            content: File content as bytes. If None, reads from path.

        Returns:
            ParseResult with the adapted tree.

        Raises:
            ParseError: No grammar for the file, no tree produced, or the
                whole file is one error node with nothing recovered inside.
        """
        if content is None:
            content = path.read_bytes()

        ext = path.suffix.lower().lstrip(".")
        pack = get_pack_for_ext(ext)
        if pack is None:
            raise ParseError.failed(str(path), f"unsupported file extension: {ext or path.name}")

        self._parser.language = self._get_language(pack, path)
        tree = self._parser.parse(content)
        if tree is None:
            raise ParseError.failed(str(path), "parser returned no tree")

        root = adapt_tree(tree, content)
        recovery = error_root(root, pack.error_node)
        if content.strip() and recovery is not None and not _recovered_any(recovery, pack):
            raise ParseError.failed(str(path), "no recognizable syntax")

        return ParseResult(root=root, language=pack.name, pack=pack)


def _recovered_any(node: SyntaxNode, pack: LanguagePack) -> bool:
    return any(
        inner.kind in pack.declarations or inner.kind == pack.import_node
        for inner in iter_nodes(node)
    )

