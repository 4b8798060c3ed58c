"""Grammar registry: language id -> tree-sitter Language.

Grammar packages are imported lazily so a missing wheel only disables the
AST path for that one language; callers fall back to the regex tables.
"""

from __future__ import annotations

import importlib
import logging
from functools import lru_cache
from types import MappingProxyType

from tree_sitter import Language

from .errors import GrammarUnavailable
from .languages import normalize_language

logger = logging.getLogger(__name__)

# language -> (grammar module, factory attribute)
GRAMMARS = MappingProxyType({
    "javascript": ("tree_sitter_javascript", "language"),
    # The TSX grammar is a superset of TypeScript and accepts JSX in .tsx files
    "typescript": ("tree_sitter_typescript", "language_tsx"),
    "python": ("tree_sitter_python", "language"),
    "go": ("tree_sitter_go", "language"),
    "java": ("tree_sitter_java", "language"),
})


@lru_cache(maxsize=None)
def _load(language: str) -> Language | None:
    module_name, attr = GRAMMARS[language]
    try:
        module = importlib.import_module(module_name)
        return Language(getattr(module, attr)())
    except (ImportError, AttributeError, ValueError) as e:
        logger.debug("Grammar for %s could not be loaded: %s", language, e)
        return None


def get_language(language: str) -> Language:
    """Return the tree-sitter Language for ``language``.

    Raises:
        GrammarUnavailable: No grammar is registered, or its package is
            not installed.
    """
    key = normalize_language(language)
    if key not in GRAMMARS:
        raise GrammarUnavailable(key)
    loaded = _load(key)
    if loaded is None:
        raise GrammarUnavailable(key, f"package '{GRAMMARS[key][0]}' is not installed")
    return loaded


def has_grammar(language: str | None) -> bool:
    if not language:
        return False
    key = normalize_language(language)
    return key in GRAMMARS and _load(key) is not None


def available_languages() -> list[str]:
    return sorted(lang for lang in GRAMMARS if _load(lang) is not None)
