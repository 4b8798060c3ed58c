"""AST-based code analysis with a regex fallback for every operation."""

from .classifier import classify, classify_hits, group_by_classification
from .errors import (
    AnalysisError,
    ElementNotFound,
    GrammarUnavailable,
    ParseFailure,
    UnsupportedLanguage,
)
from .grammars import available_languages, get_language, has_grammar
from .languages import detect_language, normalize_language
from .lint import lint_source
from .locator import extract_element, replace_element
from .models import (
    Classification,
    ClassifiedHit,
    ElementResult,
    LintIssue,
    LintReport,
    OutlineEntry,
    SearchHit,
    Usage,
)
from .outline import get_outline
from .parser import SourceParser, SyntaxTree, parse_source
from .references import extract_imports, find_usages

__all__ = [
    # Operations
    "get_outline",
    "extract_element",
    "replace_element",
    "classify",
    "classify_hits",
    "group_by_classification",
    "extract_imports",
    "find_usages",
    "lint_source",
    # Parsing
    "SourceParser",
    "SyntaxTree",
    "parse_source",
    "get_language",
    "has_grammar",
    "available_languages",
    "detect_language",
    "normalize_language",
    # Models
    "Classification",
    "ClassifiedHit",
    "ElementResult",
    "LintIssue",
    "LintReport",
    "OutlineEntry",
    "SearchHit",
    "Usage",
    # Errors
    "AnalysisError",
    "ElementNotFound",
    "GrammarUnavailable",
    "ParseFailure",
    "UnsupportedLanguage",
]
