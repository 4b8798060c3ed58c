"""Error taxonomy for the analysis core and the two-stage AST/regex strategy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnalysisError(Exception):
    """Base class for every error raised by the analysis core."""


class GrammarUnavailable(AnalysisError):
    """No tree-sitter grammar is registered or installed for a language."""

    def __init__(self, language: str, reason: str | None = None):
        self.language = language
        self.reason = reason
        message = f"No grammar available for language '{language}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ParseFailure(AnalysisError):
    """The parser crashed on an input (syntax errors alone never raise this)."""

    def __init__(self, language: str, cause: Exception):
        self.language = language
        self.cause = cause
        super().__init__(f"Failed to parse source as {language}: {cause}")


class ElementNotFound(AnalysisError):
    """No declaration matched the requested name and kind."""

    def __init__(self, name: str, kind: str):
        self.name = name
        self.kind = kind
        super().__init__(f"Element '{name}' of type '{kind}' not found.")


class UnsupportedLanguage(AnalysisError):
    """Neither a grammar nor a fallback pattern table exists for a language."""

    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Unsupported language: '{language}'")


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """Outcome of the AST stage of an operation.

    Holds either a value or the error that stopped the AST path. Callers
    compose the regex stage explicitly with :meth:`or_else`.
    """

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def or_else(self, fallback: Callable[[], T]) -> T:
        if self.error is None:
            return self.value  # type: ignore[return-value]
        return fallback()


def attempt(operation: str, language: str, func: Callable[[], T]) -> Attempt[T]:
    """Run the AST stage of ``operation``, capturing any failure.

    Every exception is captured; the caller composes the regex stage with
    :meth:`Attempt.or_else`.
    """
    try:
        return Attempt(value=func())
    except GrammarUnavailable as e:
        logger.debug("%s: %s, using regex fallback", operation, e)
        return Attempt(error=e)
    except Exception as e:
        logger.debug("%s failed for %s, falling back to regex: %s", operation, language, e)
        return Attempt(error=e)
