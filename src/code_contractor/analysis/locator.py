"""Element lookup, extraction and byte-range replacement."""

from __future__ import annotations

import logging

from .errors import ElementNotFound, UnsupportedLanguage, attempt
from .fallback import element_results, fallback_declarations, fallback_replace, has_fallback, order_by_hint
from .grammars import has_grammar
from .models import ElementResult, kind_matches
from .outline import Declaration, collect_declarations
from .parser import DEFAULT_MAX_DEPTH, SyntaxTree, parse_source

logger = logging.getLogger(__name__)


def find_declarations(
    tree: SyntaxTree,
    name: str,
    kind: str | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[Declaration]:
    """Declarations in ``tree`` matching ``(name, kind)`` in document order."""
    declarations = collect_declarations(tree, include_variables=kind == "variable", max_depth=max_depth)
    return [d for d in declarations if d.entry.name == name and kind_matches(kind, d.entry.kind)]


def _order_declarations(declarations: list[Declaration], line_hint: int | None) -> list[Declaration]:
    by_entry = {id(d.entry): d for d in declarations}
    return [by_entry[id(e)] for e in order_by_hint([d.entry for d in declarations], line_hint)]


def extract_element(
    source: str,
    language: str | None,
    name: str,
    kind: str | None = "function",
    context_lines: int = 5,
    line_hint: int | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[ElementResult]:
    """Every declaration named ``name`` of a compatible ``kind``, with context.

    Returns an empty list when nothing matches on either path.
    """
    found = attempt(
        "extract",
        language or "",
        lambda: [d.entry for d in find_declarations(parse_source(source, language or ""), name, kind, max_depth)],
    )
    entries = found.value if found.ok else None
    if not entries:
        entries = fallback_declarations(source, language, name, kind)
    return element_results(source, order_by_hint(entries, line_hint), context_lines)


def _ast_replace(source: str, language: str, name: str, kind: str, new_text: str, line_hint, max_depth) -> str:
    tree = parse_source(source, language)
    matches = _order_declarations(find_declarations(tree, name, kind, max_depth), line_hint)
    if not matches:
        raise ElementNotFound(name, kind)
    # First match wins; duplicates elsewhere are left untouched
    target = matches[0].node
    source_bytes = tree.source_bytes
    new_bytes = new_text.encode("utf-8")
    start = target.start_byte
    line_start = source_bytes.rfind(b"\n", 0, start) + 1
    indent = source_bytes[line_start:start]
    # Text taken from extract_element starts with the declaration line's indentation
    if indent and not indent.strip() and new_bytes.startswith(indent):
        start = line_start
    replaced = source_bytes[:start] + new_bytes + source_bytes[target.end_byte :]
    return replaced.decode("utf-8")


def replace_element(
    source: str,
    language: str,
    name: str,
    kind: str,
    new_text: str,
    line_hint: int | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Return ``source`` with the first matching declaration replaced by ``new_text``.

    The AST path substitutes the declaration's exact byte range, widened
    to the start of its first line when ``new_text`` already begins with
    that line's indentation (as text from :func:`extract_element` does);
    the regex path substitutes whole lines. No formatting or validation is
    done on ``new_text``.

    Raises:
        UnsupportedLanguage: Neither a grammar nor a regex table exists.
        ElementNotFound: No declaration matched on either path.
    """
    if not has_grammar(language) and not has_fallback(language):
        raise UnsupportedLanguage(language)
    result = attempt(
        "replace",
        language,
        lambda: _ast_replace(source, language, name, kind, new_text, line_hint, max_depth),
    )
    return result.or_else(lambda: fallback_replace(source, language, name, kind, new_text, line_hint))
