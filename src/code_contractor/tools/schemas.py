"""Pydantic schemas for the code tool outputs."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class OutlineOutput(BaseModel):
    """Output schema for get_file_outline."""

    file: str = Field(description="File path the outline was built for")
    language: Optional[str] = Field(default=None, description="Detected language id")
    count: int = Field(default=0, description="Number of outline entries")
    imports: list[str] = Field(default_factory=list, description="Imported module paths")
    outline: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Declarations as {kind, name, startLine, endLine, signature, depth}",
    )
    error: Optional[str] = Field(default=None, description="Error message if outlining failed")


class ExtractOutput(BaseModel):
    """Output schema for extract_code_element."""

    file: str = Field(description="File path that was searched")
    element: str = Field(description="Requested element name")
    type: str = Field(description="Requested element kind")
    results: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Matches as {type, name, startLine, endLine, location, content}",
    )
    message: Optional[str] = Field(default=None, description="'not found' when nothing matched")
    error: Optional[str] = Field(default=None, description="Error message if extraction failed")


class ReplaceOutput(BaseModel):
    """Output schema for replace_code_element."""

    file: str = Field(description="File path the replacement applies to")
    element: str = Field(description="Replaced element name")
    type: str = Field(description="Replaced element kind")
    content: Optional[str] = Field(
        default=None, description="Full source after the replacement (not written to disk)"
    )
    error: Optional[str] = Field(default=None, description="Error message if replacement failed")


class SearchOutput(BaseModel):
    """Output schema for search_code and find_references."""

    term: str = Field(description="The searched term or pattern")
    mode: str = Field(description="Search mode: fast, smart, definitions or usages")
    total: int = Field(default=0, description="Number of returned hits")
    files_searched: int = Field(default=0, description="Number of files read")
    results: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Hits as {file, line, column, content, classification?, language?}",
    )
    groups: Optional[dict[str, list[dict[str, Any]]]] = Field(
        default=None,
        description="Hits grouped as definitions/usages/imports/comments/strings/unknown",
    )
    truncated: bool = Field(default=False, description="True when max_results cut the search short")
    error: Optional[str] = Field(default=None, description="Error message if search failed")


class LintOutput(BaseModel):
    """Output schema for lint_code and lint_file."""

    file: str = Field(description="Linted file path or a placeholder for inline code")
    language: Optional[str] = Field(default=None, description="Language id")
    supported: bool = Field(default=True, description="False when the language has no lint rules")
    errors: list[dict[str, Any]] = Field(default_factory=list)
    warnings: list[dict[str, Any]] = Field(default_factory=list)
    info: list[dict[str, Any]] = Field(default_factory=list)
    summary: dict[str, int] = Field(
        default_factory=lambda: {"total": 0, "errors": 0, "warnings": 0, "info": 0}
    )
    error: Optional[str] = Field(default=None, description="Error message if linting failed")
