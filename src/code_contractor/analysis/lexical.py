"""Line-level lexical heuristics shared by the AST and regex paths."""

from __future__ import annotations

import re

from .languages import language_family

MAX_SIGNATURE_CHARS = 120
MAX_BLOCK_SCAN_LINES = 500

COMMENT_PREFIXES: dict[str, tuple[str, ...]] = {
    "js": ("//", "/*", "*"),
    "java": ("//", "/*", "*"),
    "go": ("//", "/*", "*"),
    "c": ("//", "/*", "*"),
    "rust": ("//", "/*", "*"),
    "php": ("//", "/*", "*", "#"),
    "python": ("#", '"""', "'''"),
    "ruby": ("#", "=begin"),
}

# Tokens that open a comment running to the end of the line
LINE_COMMENT_TOKENS: dict[str, tuple[str, ...]] = {
    "js": ("//", "/*"),
    "java": ("//", "/*"),
    "go": ("//", "/*"),
    "c": ("//", "/*"),
    "rust": ("//", "/*"),
    "php": ("//", "/*", "#"),
    "python": ("#",),
    "ruby": ("#",),
}

IMPORT_PREFIXES: dict[str, tuple[str, ...]] = {
    "js": ("import ",),
    "python": ("import ", "from "),
    "go": ("import ",),
    "java": ("import ",),
    "rust": ("use ", "pub use ", "extern crate "),
    "c": ("#include", "import "),
    "php": ("use ", "require", "include"),
    "ruby": ("require", "load "),
}

IMPORT_SUBSTRINGS: dict[str, tuple[str, ...]] = {
    "js": ("require(",),
}

_QUOTED_SPAN = re.compile(r"""(['"`]).*?\1""")


def is_comment_line(line: str, language: str | None) -> bool:
    trimmed = line.strip()
    prefixes = COMMENT_PREFIXES.get(language_family(language) or "", ())
    return bool(prefixes) and trimmed.startswith(prefixes)


def is_import_line(line: str, language: str | None) -> bool:
    trimmed = line.strip()
    family = language_family(language) or ""
    if trimmed.startswith(IMPORT_PREFIXES.get(family, ())):
        return True
    return any(s in trimmed for s in IMPORT_SUBSTRINGS.get(family, ()))


def comment_precedes(line: str, column: int, language: str | None) -> bool:
    """True when a comment token appears before 1-based ``column``, outside quoted spans."""
    before = _QUOTED_SPAN.sub("", line[: max(0, column - 1)])
    return any(token in before for token in LINE_COMMENT_TOKENS.get(language_family(language) or "", ()))


def only_in_string_literal(line: str, pattern: str) -> bool:
    """True when ``pattern`` occurs on the line but only inside quoted spans."""
    needle = pattern.lower()
    if not needle or needle not in line.lower():
        return False
    outside = _QUOTED_SPAN.sub("", line)
    return needle not in outside.lower()


def signature_of(line: str) -> str:
    """One-line signature: trimmed, trailing brace stripped, length-capped."""
    signature = line.strip()
    if signature.endswith("{"):
        signature = signature[:-1].rstrip()
    if len(signature) > MAX_SIGNATURE_CHARS:
        signature = signature[:MAX_SIGNATURE_CHARS]
    return signature


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def context_slice(lines: list[str], start_line: int, end_line: int, context_lines: int) -> tuple[int, int, str]:
    """Slice 1-based ``[start_line, end_line]`` widened by ``context_lines``.

    Returns the widened 1-based bounds and the joined content.
    """
    context_lines = max(0, context_lines)
    first = max(0, start_line - 1 - context_lines)
    last = min(len(lines) - 1, end_line - 1 + context_lines)
    return first + 1, last + 1, "\n".join(lines[first : last + 1])


_CONTINUATION_STARTS = ("{", ")", "(", ",", ".", "=>", ":", "extends", "implements", "throws", "where", "->")


def brace_block_end(lines: list[str], start_idx: int) -> int:
    """Find the 1-based end line of a brace-delimited declaration.

    Naive depth counting from the declaration line. Known limitation:
    braces inside string literals, template literals or comments are
    counted like code braces, so such code can be mis-bounded.
    """
    depth = 0
    started = False
    base_indent = indent_of(lines[start_idx])
    stop = min(len(lines), start_idx + MAX_BLOCK_SCAN_LINES)

    for i in range(start_idx, stop):
        line = lines[i]
        if i > start_idx and not started:
            trimmed = line.strip()
            # A new statement at the same indentation before any brace: no body
            if trimmed and indent_of(line) <= base_indent and not trimmed.startswith(_CONTINUATION_STARTS):
                return i

        for char in line:
            if char == "{":
                depth += 1
                started = True
            elif char == "}":
                depth -= 1

        if started and depth <= 0:
            return i + 1
        if not started and line.rstrip().endswith(";"):
            return i + 1

    return stop if started else start_idx + 1


def indent_block_end(lines: list[str], start_idx: int, closer: str | None = None) -> int:
    """Find the 1-based end line of an indentation-delimited declaration.

    ``closer`` is a keyword (Ruby's ``end``) that terminates the block at
    the declaration's own indentation and belongs to it.
    """
    base_indent = indent_of(lines[start_idx])
    end = start_idx
    for i in range(start_idx + 1, len(lines)):
        trimmed = lines[i].strip()
        if not trimmed:
            continue
        if indent_of(lines[i]) <= base_indent:
            if closer and trimmed == closer:
                end = i
            elif trimmed.startswith((")", "]", "}")):
                end = i
                continue
            break
        end = i
    return end + 1
