"""Parser adapter around py-tree-sitter.

Turns source text into a :class:`SyntaxTree` and exposes the few node
helpers the extractors need. Each call to :meth:`SourceParser.parse`
produces a fresh tree owned by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from tree_sitter import Node, Parser, Tree

from .errors import ParseFailure
from .grammars import get_language
from .languages import normalize_language

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 400


@dataclass(frozen=True)
class SyntaxTree:
    """Result of parsing one source string with one grammar."""

    language: str
    source: str
    tree: Tree
    source_bytes: bytes = field(repr=False)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def lines(self) -> list[str]:
        return self.source.split("\n")

    def text(self, node: Node) -> str:
        return self.source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def byte_column(self, row: int, char_column: int) -> int:
        """Convert a character column on ``row`` to tree-sitter's byte column."""
        lines = self.lines
        if row >= len(lines):
            return char_column
        return len(lines[row][:char_column].encode("utf-8"))


class SourceParser:
    """Parse source text for a single language."""

    def __init__(self, language: str):
        self.language = normalize_language(language)
        # Raises GrammarUnavailable before any parsing happens
        self._grammar = get_language(self.language)

    def parse(self, source: str) -> SyntaxTree:
        """Parse ``source`` into a SyntaxTree.

        Syntactically invalid input still yields a tree containing ERROR
        nodes; only a crash inside the parser raises ParseFailure.
        """
        source_bytes = source.encode("utf-8")
        try:
            tree = Parser(self._grammar).parse(source_bytes)
        except Exception as e:
            raise ParseFailure(self.language, e) from e
        return SyntaxTree(language=self.language, source=source, tree=tree, source_bytes=source_bytes)


def parse_source(source: str, language: str) -> SyntaxTree:
    return SourceParser(language).parse(source)


def resolve_named_child(node: Node | None, field_name: str) -> Node | None:
    """Return the child stored under ``field_name``, or None.

    Never raises for a field the grammar does not define.
    """
    if node is None:
        return None
    lookup = getattr(node, "child_by_field_name", None)
    if lookup is None:
        return None
    try:
        return lookup(field_name)
    except (TypeError, ValueError):
        return None


def walk(root: Node, max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[tuple[Node, int]]:
    """Yield ``(node, tree_depth)`` in pre-order, skipping subtrees past ``max_depth``."""
    stack: list[tuple[Node, int]] = [(root, 0)]
    truncated = False
    while stack:
        node, depth = stack.pop()
        yield node, depth
        if depth >= max_depth:
            truncated = truncated or node.child_count > 0
            continue
        stack.extend((child, depth + 1) for child in reversed(node.children))
    if truncated:
        logger.warning("Syntax tree deeper than %d levels; deeper nodes were skipped", max_depth)


def error_nodes(tree: SyntaxTree, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Node]:
    """Collect ERROR and MISSING nodes in document order."""
    if not tree.root.has_error:
        return []
    return [node for node, _ in walk(tree.root, max_depth) if node.type == "ERROR" or node.is_missing]


def smallest_node_at(tree: SyntaxTree, row: int, column: int) -> Node | None:
    """Smallest node covering a zero-based ``(row, byte column)`` point."""
    point = (row, column)
    return tree.root.descendant_for_point_range(point, point)
