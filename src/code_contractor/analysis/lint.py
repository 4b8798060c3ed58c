"""Static lint checks: syntax errors, bug patterns and simple AST rules.

External linters are not run here; their findings can be passed in as
``{line, column, message, severity, rule, source}`` records and are merged
with the built-in layers.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from types import MappingProxyType
from typing import NamedTuple

from .errors import GrammarUnavailable, ParseFailure
from .languages import normalize_language
from .lexical import comment_precedes
from .models import LintIssue, LintReport
from .parser import DEFAULT_MAX_DEPTH, SyntaxTree, error_nodes, parse_source, resolve_named_child, walk

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 1_000_000

SEVERITY_ORDER = {"error": 0, "warning": 1, "info": 2}


class BugPattern(NamedTuple):
    regex: re.Pattern
    severity: str
    message: str
    rule: str
    # Report matches even after a comment token on the same line
    in_comments: bool = False


def _bug(pattern: str, severity: str, message: str, rule: str, flags: int = 0, in_comments: bool = False) -> BugPattern:
    return BugPattern(re.compile(pattern, flags), severity, message, rule, in_comments)


_JS_PATTERNS = (
    _bug(r"==\s*null(?!\s*=)", "warning", "Use === instead of == for null comparison", "eqeqeq"),
    _bug(r"==\s*undefined(?!\s*=)", "warning", "Use === instead of == for undefined comparison", "eqeqeq"),
    _bug(r"!=\s*null(?!\s*=)", "warning", "Use !== instead of != for null comparison", "eqeqeq"),
    _bug(r"console\.(log|warn|error|debug|info)\s*\(", "info", "Console statement found (remove in production)", "no-console"),
    _bug(r"\bdebugger\s*;?", "warning", "Debugger statement found", "no-debugger"),
    _bug(r"\balert\s*\(", "warning", "Alert statement found", "no-alert"),
    _bug(r"\beval\s*\(", "error", "eval() is dangerous - avoid using it", "no-eval"),
    _bug(r"new\s+Function\s*\(", "error", "new Function() is similar to eval - avoid it", "no-new-func"),
    _bug(r"setTimeout\s*\(\s*[\"'`]", "warning", "setTimeout with string is like eval", "no-implied-eval"),
    _bug(r"setInterval\s*\(\s*[\"'`]", "warning", "setInterval with string is like eval", "no-implied-eval"),
    _bug(r"\bvar\s+\w+\s*=", "info", "Consider using let/const instead of var", "no-var"),
    _bug(r"\[\s*\]\s*==\s*\[\s*\]", "error", "Array comparison with == always returns false", "no-self-compare"),
    _bug(r"\{\s*\}\s*==\s*\{\s*\}", "error", "Object comparison with == always returns false", "no-self-compare"),
    _bug(r"=\s+=\s*=|=\s*=\s+=", "error", "Triple assignment - probably a typo", "syntax-error"),
    _bug(r"catch\s*\(\s*\w+\s*\)\s*\{\s*\}", "warning", "Empty catch block - errors are silently ignored", "no-empty-catch"),
    _bug(r"throw\s+[\"'`][^\"'`]*[\"'`]", "warning", "Throw string instead of Error object", "no-throw-literal"),
    _bug(r"password\s*[:=]\s*[\"'`][^\"'`]+[\"'`]", "error", "Hardcoded password detected!", "security", re.IGNORECASE),
    _bug(r"api[_-]?key\s*[:=]\s*[\"'`][^\"'`]+[\"'`]", "error", "Hardcoded API key detected!", "security", re.IGNORECASE),
    _bug(r"secret\s*[:=]\s*[\"'`][^\"'`]+[\"'`]", "error", "Hardcoded secret detected!", "security", re.IGNORECASE),
)

_TS_PATTERNS = _JS_PATTERNS + (
    _bug(r"@ts-ignore", "warning", "@ts-ignore suppresses type checking", "ts-ignore", in_comments=True),
    _bug(r"@ts-nocheck", "warning", "@ts-nocheck disables all type checking", "ts-nocheck", in_comments=True),
    _bug(r"\bas\s+any\b", "warning", "Type assertion to any - loses type safety", "no-any"),
    _bug(r":\s*any\b", "info", "Explicit any type - consider being more specific", "no-explicit-any"),
)

BUG_PATTERNS = MappingProxyType({
    "javascript": _JS_PATTERNS,
    "typescript": _TS_PATTERNS,
    "python": (
        _bug(r"\bprint\s*\(", "info", "Print statement found (use logging in production)", "no-print"),
        _bug(r"\bexcept\s*:", "warning", "Bare except clause - catches all exceptions including KeyboardInterrupt", "bare-except"),
        _bug(r"\bexcept\s+Exception\s*:", "info", "Catching broad Exception - be more specific", "broad-except"),
        _bug(r"import\s+\*", "warning", "Wildcard import - pollutes namespace", "wildcard-import"),
        _bug(r"==\s*None\b", "warning", 'Use "is None" instead of "== None"', "none-comparison"),
        _bug(r"!=\s*None\b", "warning", 'Use "is not None" instead of "!= None"', "none-comparison"),
        _bug(r"==\s*True\b", "warning", 'Use "if x:" instead of "if x == True:"', "bool-comparison"),
        _bug(r"==\s*False\b", "warning", 'Use "if not x:" instead of "if x == False:"', "bool-comparison"),
        _bug(r"\bexec\s*\(", "error", "exec() is dangerous - avoid using it", "no-exec"),
        _bug(r"\beval\s*\(", "error", "eval() is dangerous - avoid using it", "no-eval"),
        _bug(r"password\s*=\s*[\"'][^\"']+[\"']", "error", "Hardcoded password detected!", "security", re.IGNORECASE),
        _bug(r"api[_-]?key\s*=\s*[\"'][^\"']+[\"']", "error", "Hardcoded API key detected!", "security", re.IGNORECASE),
        _bug(r"\bglobal\s+\w+", "warning", "Global variable modification", "global-variable"),
        _bug(r"\[\s*\]\s*\*\s*\d+", "warning", "List multiplication creates references, not copies", "mutable-default"),
        _bug(r"def\s+\w+\s*\([^)]*=\s*\[\s*\]", "error", "Mutable default argument (use None instead)", "mutable-default-arg"),
        _bug(r"def\s+\w+\s*\([^)]*=\s*\{\s*\}", "error", "Mutable default argument (use None instead)", "mutable-default-arg"),
    ),
    "go": (
        _bug(r"fmt\.Print", "info", "fmt.Print found (use logging in production)", "no-print"),
        _bug(r"\bpanic\s*\(", "warning", "panic() found - handle errors gracefully", "no-panic"),
        _bug(r"\b_\s*,\s*_\s*:?=", "warning", "Multiple ignored return values", "ignored-returns"),
        _bug(r"if\s+err\s*!=\s*nil\s*\{\s*\}", "error", "Empty error handling block", "empty-error-handling"),
    ),
    "java": (
        _bug(r"System\.out\.print", "info", "System.out found (use logging framework)", "no-sysout"),
        _bug(r"System\.err\.print", "info", "System.err found (use logging framework)", "no-syserr"),
        _bug(r"\.printStackTrace\s*\(\s*\)", "warning", "printStackTrace() - use proper logging", "no-printstacktrace"),
        _bug(r"catch\s*\(\s*Exception\s+\w+\s*\)\s*\{\s*\}", "error", "Empty catch block", "empty-catch"),
        _bug(r"catch\s*\(\s*Throwable\s+\w+\s*\)", "warning", "Catching Throwable is too broad", "catch-throwable"),
        _bug(r"==\s*null\b", "info", "Consider using Objects.isNull() or Optional", "null-check"),
        _bug(r"\.equals\s*\(\s*null\s*\)", "error", "equals(null) always returns false", "equals-null"),
        _bug(r"new\s+String\s*\(\s*[\"']", "warning", "Unnecessary String constructor", "unnecessary-constructor"),
        _bug(r"new\s+Integer\s*\(", "warning", "Use Integer.valueOf() instead (deprecated constructor)", "deprecated-constructor"),
    ),
})

SUPPORTED_LANGUAGES = frozenset(BUG_PATTERNS)


# ============================================================================
# Layer 1: syntax
# ============================================================================


def check_syntax(source: str, language: str, max_depth: int = DEFAULT_MAX_DEPTH) -> list[LintIssue]:
    """ERROR and MISSING nodes as issues; a parser crash becomes one issue."""
    try:
        tree = parse_source(source, language)
    except GrammarUnavailable as e:
        logger.debug("Skipping syntax check: %s", e)
        return []
    except ParseFailure as e:
        return [LintIssue(1, 1, f"Critical syntax error: {e.cause}", "error", "parse-error", "tree-sitter")]

    lines = tree.lines
    issues = []
    for node in error_nodes(tree, max_depth):
        row, col = node.start_point
        if node.is_missing:
            message = f"Missing {node.type}"
        else:
            near = lines[row].strip()[:50] if row < len(lines) else ""
            message = f'Syntax error near: "{near}"'
        issues.append(LintIssue(row + 1, col + 1, message, "error", "syntax-error", "tree-sitter"))
    return issues


# ============================================================================
# Layer 2: bug patterns
# ============================================================================


def check_patterns(source: str, language: str) -> list[LintIssue]:
    lines = source.split("\n")
    issues = []
    for bug in BUG_PATTERNS.get(language, ()):
        for match in bug.regex.finditer(source):
            line_start = source.rfind("\n", 0, match.start()) + 1
            line = source.count("\n", 0, match.start()) + 1
            column = match.start() - line_start + 1
            if not bug.in_comments and comment_precedes(lines[line - 1], column, language):
                continue
            issues.append(
                LintIssue(line, column, bug.message, bug.severity, bug.rule, "pattern-detector", match.group(0)[:50])
            )
    return issues


# ============================================================================
# Layer 3: AST rules
# ============================================================================

_JS_FUNCTIONS = frozenset({"function_declaration", "function_expression", "arrow_function"})


def _check_js(tree: SyntaxTree, max_depth: int) -> list[LintIssue]:
    issues = []
    for node, _ in walk(tree.root, max_depth):
        if node.type in _JS_FUNCTIONS:
            body = resolve_named_child(node, "body")
            if body is not None and body.type == "statement_block" and not body.named_children:
                if tree.text(body).replace(" ", "") == "{}":
                    issues.append(_ast_issue(node, "Empty function body", "warning", "no-empty-function"))

        elif node.type == "variable_declarator":
            name = resolve_named_child(node, "name")
            if name is not None and name.type == "identifier":
                var_name = tree.text(name)
                if len(re.findall(rf"\b{re.escape(var_name)}\b", tree.source)) == 1:
                    issues.append(
                        _ast_issue(node, f"Variable '{var_name}' is declared but never used", "warning", "no-unused-vars")
                    )
    return issues


def _has_docstring(body) -> bool:
    if not body.named_children:
        return False
    first = body.named_children[0]
    return first.type == "expression_statement" and bool(first.named_children) and first.named_children[0].type == "string"


def _check_python(tree: SyntaxTree, max_depth: int) -> list[LintIssue]:
    issues = []
    for node, _ in walk(tree.root, max_depth):
        if node.type == "function_definition":
            body = resolve_named_child(node, "body")
            if body is not None and body.named_children and not _has_docstring(body):
                issues.append(_ast_issue(node, "Function missing docstring", "info", "missing-docstring"))

        elif node.type == "return_statement":
            following = node.next_sibling
            if following is not None and following.type not in ("}", "comment"):
                issues.append(
                    _ast_issue(following, "Unreachable code after return statement", "warning", "unreachable-code")
                )
    return issues


def _ast_issue(node, message: str, severity: str, rule: str) -> LintIssue:
    row, col = node.start_point
    return LintIssue(row + 1, col + 1, message, severity, rule, "ast-analysis")


AST_CHECKS = MappingProxyType({
    "javascript": _check_js,
    "typescript": _check_js,
    "python": _check_python,
})


def check_ast(source: str, language: str, max_depth: int = DEFAULT_MAX_DEPTH) -> list[LintIssue]:
    check = AST_CHECKS.get(language)
    if check is None:
        return []
    try:
        tree = parse_source(source, language)
    except (GrammarUnavailable, ParseFailure) as e:
        logger.debug("Skipping AST checks: %s", e)
        return []
    return check(tree, max_depth)


# ============================================================================
# Merge
# ============================================================================


def build_report(file: str, language: str, issues: Iterable[LintIssue]) -> LintReport:
    """Deduplicate on (line, column, rule), sort by severity then line, split."""
    seen = set()
    unique = []
    for issue in issues:
        if issue.key in seen:
            continue
        seen.add(issue.key)
        unique.append(issue)

    unique.sort(key=lambda i: (SEVERITY_ORDER.get(i.severity, len(SEVERITY_ORDER)), i.line))
    return LintReport(
        file=file,
        language=language,
        errors=[i for i in unique if i.severity == "error"],
        warnings=[i for i in unique if i.severity == "warning"],
        info=[i for i in unique if i.severity == "info"],
    )


def oversized_report(file: str, language: str | None, size: int) -> LintReport:
    """Report for a file skipped because it exceeds the size limit."""
    warning = LintIssue(
        1, 1, f"File too large ({round(size / 1024)}KB) - skipped detailed analysis",
        "warning", "file-size", "code-contractor",
    )
    return LintReport(file=file, language=language, warnings=[warning])


def lint_source(
    source: str,
    language: str | None,
    *,
    file: str = "<string>",
    external: Iterable[LintIssue | dict] = (),
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> LintReport:
    """Run every lint layer over ``source`` and merge in ``external`` findings."""
    key = normalize_language(language) if language else None
    if key not in SUPPORTED_LANGUAGES:
        return LintReport(file=file, language=key, supported=False)

    if len(source) > max_file_size:
        return oversized_report(file, key, len(source))

    issues = check_syntax(source, key, max_depth)
    issues.extend(check_patterns(source, key))
    issues.extend(check_ast(source, key, max_depth))
    issues.extend(i if isinstance(i, LintIssue) else LintIssue.from_dict(i) for i in external)
    return build_report(file, key, issues)
