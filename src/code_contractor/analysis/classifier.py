"""Classification of text-search hits as definition, usage, import, comment or string."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .errors import attempt
from .fallback import fallback_classify
from .languages import KNOWN_LANGUAGES, normalize_language
from .lexical import is_comment_line, is_import_line, only_in_string_literal
from .models import Classification, ClassifiedHit, SearchHit
from .parser import SyntaxTree, parse_source, smallest_node_at

logger = logging.getLogger(__name__)

DEFINITION_NODE_KINDS = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
    "function_definition",
    "method_definition",
    "method_declaration",
    "constructor_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "class_definition",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
    "type_spec",
    "variable_declarator",
    "assignment_expression",
    "assignment",
    "arrow_function",
})

USAGE_NODE_KINDS = frozenset({
    "call_expression",
    "call",
    "method_invocation",
    "new_expression",
    "object_creation_expression",
    "arguments",
    "argument_list",
})

GROUP_KEYS = {
    Classification.DEFINITION: "definitions",
    Classification.USAGE: "usages",
    Classification.IMPORT: "imports",
    Classification.COMMENT: "comments",
    Classification.STRING: "strings",
    Classification.UNKNOWN: "unknown",
}


def _classify_node(tree: SyntaxTree, hit: SearchHit) -> Classification | None:
    row = hit.line - 1
    node = smallest_node_at(tree, row, tree.byte_column(row, hit.column))
    if node is None:
        return None
    kinds = {node.type}
    if node.parent is not None:
        kinds.add(node.parent.type)
    if kinds & DEFINITION_NODE_KINDS:
        return Classification.DEFINITION
    if kinds & USAGE_NODE_KINDS:
        return Classification.USAGE
    return None


def classify(
    hit: SearchHit,
    pattern: str,
    language: str | None,
    tree: SyntaxTree | None = None,
) -> Classification:
    """Classify one hit; the first matching rule wins.

    Order: comment, import, string literal, syntax-tree node at the hit,
    then the regex "looks like a definition" table.
    """
    if not language or normalize_language(language) not in KNOWN_LANGUAGES:
        return Classification.UNKNOWN

    line = hit.content
    if is_comment_line(line, language):
        return Classification.COMMENT
    if is_import_line(line, language):
        return Classification.IMPORT
    if only_in_string_literal(line, pattern):
        return Classification.STRING

    if tree is not None:
        result = attempt("classify", language, lambda: _classify_node(tree, hit))
        if result.ok and result.value is not None:
            return result.value

    return fallback_classify(line, language)


def try_parse(source: str, language: str | None) -> SyntaxTree | None:
    """Parse for classification; None when the AST step is unavailable."""
    if not language:
        return None
    parsed = attempt("classify", language, lambda: parse_source(source, language))
    return parsed.value if parsed.ok else None


def classify_hits(
    hits: Iterable[SearchHit],
    pattern: str,
    source: str | None,
    language: str | None,
) -> list[ClassifiedHit]:
    """Classify all hits of one file, parsing ``source`` at most once."""
    hits = list(hits)
    tree = try_parse(source, language) if hits and source is not None else None

    return [ClassifiedHit(hit=h, classification=classify(h, pattern, language, tree), language=language) for h in hits]


def group_by_classification(hits: Iterable[ClassifiedHit]) -> dict[str, list[ClassifiedHit]]:
    groups: dict[str, list[ClassifiedHit]] = {key: [] for key in GROUP_KEYS.values()}
    for hit in hits:
        groups[GROUP_KEYS[hit.classification]].append(hit)
    return groups
