"""Regex fallback layer.

A table-driven reimplementation of outline / locate / replace / classify
used when a language has no grammar or any AST operation fails. Results
have the same shapes as the AST path.

Declarations are recognised line by line on the trimmed text; the first
pattern that matches a line wins. Block ends come from brace counting
(C-like languages) or indentation (Python, Ruby); see
:func:`~code_contractor.analysis.lexical.brace_block_end` for the known
limitations of brace counting.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import NamedTuple

from .errors import ElementNotFound, UnsupportedLanguage
from .languages import language_family
from .lexical import (
    brace_block_end,
    context_slice,
    indent_block_end,
    is_comment_line,
    signature_of,
)
from .models import CONTAINER_KINDS, Classification, ElementResult, OutlineEntry, Usage, kind_matches


class FallbackPattern(NamedTuple):
    regex: re.Pattern
    kind: str
    style: str | None = None
    # Only valid inside an enclosing class-like declaration
    scoped: bool = False


def _p(pattern: str, kind: str, style: str | None = None, scoped: bool = False) -> FallbackPattern:
    return FallbackPattern(re.compile(pattern), kind, style, scoped)


_NOT_STATEMENT = r"(?!(?:return|new|throw|else|case)\b)"
_JAVA_MODIFIERS = r"(?:(?:public|private|protected|static|final|abstract|sealed|non-sealed|strictfp|synchronized|native|default)\s+)*"
_RUST_VIS = r"(?:pub(?:\([^)]*\))?\s+)?"

FALLBACK_PATTERNS = MappingProxyType({
    "js": (
        _p(r"^(?:export\s+)?(?:declare\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(?P<name>[\w$]+)\s*[(<]", "function", "default"),
        _p(r"^(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(?P<name>[\w$]+)", "class"),
        _p(r"^(?:export\s+)?(?:declare\s+)?interface\s+(?P<name>[\w$]+)", "interface"),
        _p(r"^(?:export\s+)?(?:declare\s+)?type\s+(?P<name>[\w$]+)\s*(?:<[^=]*>)?\s*=", "type"),
        _p(r"^(?:export\s+)?(?:declare\s+)?(?:const\s+)?enum\s+(?P<name>[\w$]+)", "enum"),
        _p(r"^(?:export\s+)?(?:declare\s+)?(?:namespace|module)\s+(?P<name>[\w$.]+)\s*\{", "namespace"),
        _p(
            r"^(?:export\s+)?(?:const|let|var)\s+(?P<name>[\w$]+)\s*(?::[^=]+)?=\s*(?:async\s+)?"
            r"(?:\([^)]*\)|[\w$]+)\s*(?::\s*[^=]+)?=>",
            "function",
            "arrow",
        ),
        _p(r"^(?:export\s+)?(?:const|let|var)\s+(?P<name>[\w$]+)\s*(?::[^=]+)?=\s*(?:async\s+)?function\b", "function", "default"),
        _p(
            r"^(?:(?:public|private|protected|static|readonly|async|override|abstract|get|set)\s+)*\*?"
            r"(?P<name>[\w$#]+)\s*(?:<[^>]*>)?\s*\([^;]*\)\s*(?::\s*[^{;]+)?\{",
            "method",
            scoped=True,
        ),
    ),
    "python": (
        _p(r"^(?:async\s+)?def\s+(?P<name>\w+)\s*[(\[]", "function"),
        _p(r"^class\s+(?P<name>\w+)", "class"),
        _p(r"^(?P<name>\w+)\s*(?::[^=]+)?=\s*lambda\b", "function"),
    ),
    "go": (
        _p(r"^func\s+\([^)]*\)\s*(?P<name>\w+)\s*[(\[]", "method"),
        _p(r"^func\s+(?P<name>\w+)\s*[(\[]", "function"),
        _p(r"^type\s+(?P<name>\w+)(?:\[[^\]]*\])?\s+struct\b", "struct"),
        _p(r"^type\s+(?P<name>\w+)(?:\[[^\]]*\])?\s+interface\b", "interface"),
        _p(r"^type\s+(?P<name>\w+)\b", "type"),
    ),
    "java": (
        _p(_JAVA_MODIFIERS + r"class\s+(?P<name>\w+)", "class"),
        _p(_JAVA_MODIFIERS + r"@?interface\s+(?P<name>\w+)", "interface"),
        _p(_JAVA_MODIFIERS + r"enum\s+(?P<name>\w+)", "enum"),
        _p(_JAVA_MODIFIERS + r"record\s+(?P<name>\w+)", "class"),
        _p(_NOT_STATEMENT + _JAVA_MODIFIERS + r"(?:<[^>]+>\s+)?[\w<>\[\],.?]+(?:<[^>]*>)?\s+(?P<name>\w+)\s*\([^;=]*$", "method"),
        _p(r"^(?:public|private|protected)\s+(?P<name>[A-Z]\w*)\s*\([^;]*$", "method"),
    ),
    "rust": (
        _p(_RUST_VIS + r"(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?(?:extern\s+\"[^\"]*\"\s+)?fn\s+(?P<name>\w+)", "function"),
        _p(_RUST_VIS + r"struct\s+(?P<name>\w+)", "struct"),
        _p(_RUST_VIS + r"enum\s+(?P<name>\w+)", "enum"),
        _p(_RUST_VIS + r"(?:unsafe\s+)?trait\s+(?P<name>\w+)", "trait"),
        _p(r"^(?:unsafe\s+)?impl(?:<[^>]*>)?\s+(?:[\w:<>, ]+\s+for\s+)?(?P<name>\w+)", "impl"),
        _p(_RUST_VIS + r"type\s+(?P<name>\w+)", "type"),
        _p(_RUST_VIS + r"mod\s+(?P<name>\w+)", "namespace"),
    ),
    "c": (
        _p(r"^(?:template\s*<[^>]*>\s*)?class\s+(?P<name>\w+)", "class"),
        _p(r"^(?:typedef\s+)?struct\s+(?P<name>\w+)", "struct"),
        _p(r"^(?:typedef\s+)?enum\s+(?:class\s+)?(?P<name>\w+)", "enum"),
        _p(r"^namespace\s+(?P<name>\w+)", "namespace"),
        _p(r"^" + _NOT_STATEMENT + r"(?:[\w:*&<>,]+\s+)+[*&]*(?P<name>[\w:~]+)\s*\([^;]*$", "function"),
    ),
    "php": (
        _p(r"^(?:(?:public|private|protected|static|final|abstract)\s+)*function\s+&?(?P<name>\w+)\s*\(", "function"),
        _p(r"^(?:(?:abstract|final|readonly)\s+)*class\s+(?P<name>\w+)", "class"),
        _p(r"^interface\s+(?P<name>\w+)", "interface"),
        _p(r"^trait\s+(?P<name>\w+)", "trait"),
        _p(r"^enum\s+(?P<name>\w+)", "enum"),
    ),
    "ruby": (
        _p(r"^def\s+(?:self\.)?(?P<name>[\w?!=]+)", "function"),
        _p(r"^class\s+(?P<name>[\w:]+)", "class"),
        _p(r"^module\s+(?P<name>[\w:]+)", "namespace"),
    ),
})

# Used for languages without a table of their own
GENERIC_PATTERNS = (
    _p(r"^(?:export\s+)?(?:async\s+)?function\s+(?P<name>\w+)", "function"),
    _p(r"^(?:export\s+)?class\s+(?P<name>\w+)", "class"),
    _p(r"^(?:export\s+)?const\s+(?P<name>\w+)\s*=\s*(?:async\s+)?\(", "function", "arrow"),
    _p(r"^def\s+(?P<name>\w+)", "function"),
    _p(r"^func\s+(?P<name>\w+)", "function"),
)

VARIABLE_PATTERNS = MappingProxyType({
    "js": (_p(r"^(?:export\s+)?(?:const|let|var)\s+(?P<name>[\w$]+)\b", "variable"),),
    "python": (_p(r"^(?P<name>\w+)\s*(?::[^=]+)?=(?!=)", "variable"),),
    "go": (
        _p(r"^(?:var|const)\s+(?P<name>\w+)\b", "variable"),
        _p(r"^(?P<name>\w+)\s*:=", "variable"),
    ),
    "java": (_p(_JAVA_MODIFIERS + r"[\w<>\[\],.?]+\s+(?P<name>\w+)\s*=(?!=)", "variable"),),
    "rust": (_p(_RUST_VIS + r"(?:let|const|static)\s+(?:mut\s+)?(?P<name>\w+)", "variable"),),
    "c": (_p(r"^(?:(?:static|const|extern)\s+)*[\w*]+\s+\**(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*=", "variable"),),
    "php": (_p(r"^\$(?P<name>\w+)\s*=(?!=)", "variable"),),
    "ruby": (_p(r"^(?P<name>[a-z_]\w*)\s*=(?!=)", "variable"),),
})

# "Definition looks like" patterns for classifying a trimmed search-hit line
DEFINITION_PATTERNS = MappingProxyType({
    "js": (
        re.compile(r"^(export\s+)?(default\s+)?(async\s+)?function\s+"),
        re.compile(r"^(export\s+)?(const|let|var)\s+[\w$]+\s*=\s*(async\s+)?\("),
        re.compile(r"^(export\s+)?(const|let|var)\s+[\w$]+\s*=\s*(async\s+)?function"),
        re.compile(r"^(export\s+)?(default\s+)?(abstract\s+)?class\s+"),
        re.compile(r"^(export\s+)?(interface|type|enum)\s+[\w$]+"),
    ),
    "python": (
        re.compile(r"^(async\s+)?def\s+\w+\s*\("),
        re.compile(r"^class\s+\w+"),
    ),
    "go": (
        re.compile(r"^func\s+"),
        re.compile(r"^type\s+\w+"),
    ),
    "java": (
        re.compile(r"^(public|private|protected)?\s*(static\s+)?[\w<>]+\s+\w+\s*\("),
        re.compile(_JAVA_MODIFIERS + r"(class|interface|enum|record)\s+\w+"),
    ),
    "rust": (re.compile(_RUST_VIS + r"(async\s+)?(fn|struct|enum|trait|impl|type|mod)\b"),),
    "c": (re.compile(r"^(?:[\w:*&<>,]+\s+)+[*&]*[\w:~]+\s*\([^;]*$"), re.compile(r"^(typedef\s+)?(struct|class|enum)\s+\w+")),
    "php": (re.compile(r"^(?:(?:public|private|protected|static|final|abstract)\s+)*(function|class|interface|trait)\s+"),),
    "ruby": (re.compile(r"^(def|class|module)\s+"),),
})

# Identifiers the loose declaration patterns pick up from control flow
EXCLUDED_NAMES = frozenset({
    "if", "else", "elif", "for", "foreach", "while", "do", "switch", "case", "default",
    "catch", "try", "finally", "return", "new", "delete", "throw", "typeof", "sizeof",
    "function", "await", "yield", "with", "match", "loop", "super", "this", "import", "export",
})

_BRACE_FAMILIES = frozenset({"js", "go", "java", "rust", "c", "php"})

_IMPORT_PATTERNS = MappingProxyType({
    "js": (re.compile(r"""(?:\bfrom\s+|^import\s+|\brequire\s*\(\s*)(['"`])(?P<module>[^'"`]+)\1"""),),
    "python": (
        re.compile(r"^from\s+(?P<module>[\w.]+)\s+import\b"),
        re.compile(r"^import\s+(?P<module>[\w.]+(?:\s*,\s*[\w.]+)*)"),
    ),
    "go": (re.compile(r'^(?:import\s+)?(?:[\w.]+\s+)?"(?P<module>[^"]+)"'),),
    "java": (re.compile(r"^import\s+(?:static\s+)?(?P<module>[\w.*]+)\s*;"),),
    "rust": (re.compile(r"^(?:pub\s+)?use\s+(?P<module>[\w:]+)"), re.compile(r"^extern\s+crate\s+(?P<module>\w+)")),
    "c": (re.compile(r'^#include\s*[<"](?P<module>[^>"]+)[>"]'),),
    "php": (re.compile(r"^use\s+(?P<module>[\w\\]+)"), re.compile(r"""^(?:require|include)(?:_once)?\s*\(?\s*['"](?P<module>[^'"]+)""")),
    "ruby": (re.compile(r"""^require(?:_relative)?\s*\(?\s*['"](?P<module>[^'"]+)"""),),
})


def has_fallback(language: str | None) -> bool:
    return language_family(language) in FALLBACK_PATTERNS


def _block_end(lines: list[str], idx: int, family: str | None) -> int:
    if family == "python":
        return indent_block_end(lines, idx)
    if family == "ruby":
        return indent_block_end(lines, idx, closer="end")
    if family in _BRACE_FAMILIES:
        return brace_block_end(lines, idx)
    return idx + 1


def _scan(source: str, language: str | None, patterns: tuple[FallbackPattern, ...]) -> list[OutlineEntry]:
    family = language_family(language)
    lines = source.split("\n")
    entries: list[OutlineEntry] = []
    open_scopes: list[OutlineEntry] = []

    for idx, raw in enumerate(lines):
        trimmed = raw.strip()
        if not trimmed or is_comment_line(trimmed, language):
            continue
        line_no = idx + 1
        while open_scopes and open_scopes[-1].end_line < line_no:
            open_scopes.pop()
        enclosing = open_scopes[-1] if open_scopes else None

        for fp in patterns:
            match = fp.regex.match(trimmed)
            if not match:
                continue
            if fp.scoped and (enclosing is None or enclosing.kind not in CONTAINER_KINDS):
                continue
            name = match.group("name")
            if name in EXCLUDED_NAMES:
                break

            kind = fp.kind
            if kind == "function" and enclosing is not None and enclosing.kind in CONTAINER_KINDS:
                kind = "method"
            entry = OutlineEntry(
                kind=kind,
                name=name,
                start_line=line_no,
                end_line=max(line_no, _block_end(lines, idx, family)),
                signature=signature_of(trimmed),
                depth=len(open_scopes),
                style=fp.style,
                exported=trimmed.startswith("export "),
            )
            entries.append(entry)
            open_scopes.append(entry)
            break

    return entries


def fallback_outline(source: str, language: str | None) -> list[OutlineEntry]:
    """Regex-derived outline; never raises for an unknown language."""
    patterns = FALLBACK_PATTERNS.get(language_family(language) or "", GENERIC_PATTERNS)
    return _scan(source, language, patterns)


def fallback_declarations(source: str, language: str | None, name: str, kind: str | None) -> list[OutlineEntry]:
    """Regex-located declarations matching ``(name, kind)`` in document order."""
    if kind == "variable":
        patterns = VARIABLE_PATTERNS.get(language_family(language) or "", ())
        candidates = _scan(source, language, patterns)
    else:
        candidates = fallback_outline(source, language)
    return [e for e in candidates if e.name == name and kind_matches(kind, e.kind)]


def order_by_hint(entries: list[OutlineEntry], line_hint: int | None) -> list[OutlineEntry]:
    """Order candidates for a 1-based ``line_hint``.

    Declarations containing the hint come first, innermost (smallest span)
    first; the rest follow by distance of their start line. Without a hint
    document order is kept.
    """
    if line_hint is None:
        return list(entries)

    def rank(entry: OutlineEntry) -> tuple[int, int, int]:
        if entry.start_line <= line_hint <= entry.end_line:
            return (0, entry.end_line - entry.start_line, entry.start_line)
        return (1, abs(entry.start_line - line_hint), entry.start_line)

    return sorted(entries, key=rank)


def element_results(source: str, entries: list[OutlineEntry], context_lines: int) -> list[ElementResult]:
    """Slice each declaration with context, dropping repeated spans."""
    lines = source.split("\n")
    results: list[ElementResult] = []
    seen: set[tuple[int, int]] = set()
    for entry in entries:
        first, last, content = context_slice(lines, entry.start_line, entry.end_line, context_lines)
        result = ElementResult(kind=entry.kind, name=entry.name, start_line=first, end_line=last, content=content)
        if result.span_key in seen:
            continue
        seen.add(result.span_key)
        results.append(result)
    return results


def fallback_extract(
    source: str,
    language: str | None,
    name: str,
    kind: str | None,
    context_lines: int = 5,
    line_hint: int | None = None,
) -> list[ElementResult]:
    candidates = fallback_declarations(source, language, name, kind)
    return element_results(source, order_by_hint(candidates, line_hint), context_lines)


def fallback_replace(
    source: str,
    language: str,
    name: str,
    kind: str,
    new_text: str,
    line_hint: int | None = None,
) -> str:
    """Replace the whole lines of the first matching declaration.

    Raises:
        UnsupportedLanguage: The language has no fallback table.
        ElementNotFound: No declaration matched.
    """
    if not has_fallback(language):
        raise UnsupportedLanguage(language)
    candidates = order_by_hint(fallback_declarations(source, language, name, kind), line_hint)
    if not candidates:
        raise ElementNotFound(name, kind)
    target = candidates[0]
    lines = source.split("\n")
    replaced = lines[: target.start_line - 1] + new_text.split("\n") + lines[target.end_line :]
    return "\n".join(replaced)


def fallback_classify(line: str, language: str | None) -> Classification:
    trimmed = line.strip()
    family = language_family(language)
    if family in DEFINITION_PATTERNS:
        tables = (DEFINITION_PATTERNS[family],)
    else:
        tables = tuple(DEFINITION_PATTERNS.values())
    for table in tables:
        if any(p.match(trimmed) for p in table):
            return Classification.DEFINITION
    return Classification.USAGE


def fallback_imports(source: str, language: str | None) -> list[str]:
    family = language_family(language) or ""
    patterns = _IMPORT_PATTERNS.get(family, ())
    imports: list[str] = []
    in_go_block = False

    for raw in source.split("\n"):
        trimmed = raw.strip()
        if family == "go":
            if trimmed.startswith("import ("):
                in_go_block = True
                continue
            if in_go_block and trimmed.startswith(")"):
                in_go_block = False
                continue
            if not in_go_block and not trimmed.startswith("import "):
                continue
        for pattern in patterns:
            match = pattern.search(trimmed)
            if match:
                modules = match.group("module")
                imports.extend(m.strip() for m in modules.split(",") if m.strip())
                break

    return imports


def fallback_usages(source: str, language: str | None, name: str) -> list[Usage]:
    """Whole-word text scan for ``name`` that skips comment lines."""
    word = re.compile(rf"(?<![\w$]){re.escape(name)}(?![\w$])")
    usages: list[Usage] = []
    for idx, line in enumerate(source.split("\n")):
        if word.search(line) and not is_comment_line(line, language):
            usages.append(Usage(line=idx + 1, code=line.strip()))
    return usages
