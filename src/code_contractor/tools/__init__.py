"""LangChain tools for code intelligence."""

from .backends import FileBackend, InMemoryFileBackend, LocalFileBackend
from .code_tools import (
    create_code_tools,
    extract_from_file,
    lint_file_content,
    lint_inline,
    outline_file,
    replace_in_file,
)
from .schemas import ExtractOutput, LintOutput, OutlineOutput, ReplaceOutput, SearchOutput
from .search import smart_search

__all__ = [
    # Backends
    "FileBackend",
    "InMemoryFileBackend",
    "LocalFileBackend",
    # Schemas
    "OutlineOutput",
    "ExtractOutput",
    "ReplaceOutput",
    "SearchOutput",
    "LintOutput",
    # Core functions
    "outline_file",
    "extract_from_file",
    "replace_in_file",
    "lint_file_content",
    "lint_inline",
    "smart_search",
    # Tool factory
    "create_code_tools",
]
