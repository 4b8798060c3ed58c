"""Data models produced by the analysis core.

Every instance is created per call and discarded after the response is
built; nothing here is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Classification(str, Enum):
    """Inferred role of a single search-hit line."""

    DEFINITION = "definition"
    USAGE = "usage"
    IMPORT = "import"
    COMMENT = "comment"
    STRING = "string"
    UNKNOWN = "unknown"


@dataclass
class OutlineEntry:
    """A declaration found in a file (function, class, method, type, ...)."""

    kind: str
    name: str
    start_line: int  # 1-based
    end_line: int
    signature: str
    depth: int = 0
    style: str | None = None  # "arrow" | "default"
    exported: bool = False

    def to_dict(self) -> dict:
        result = {
            "kind": self.kind,
            "name": self.name,
            "startLine": self.start_line,
            "endLine": self.end_line,
            "signature": self.signature,
            "depth": self.depth,
        }
        if self.style:
            result["style"] = self.style
        if self.exported:
            result["exported"] = True
        return result


@dataclass
class ElementResult:
    """An extracted declaration together with its surrounding context."""

    kind: str
    name: str
    start_line: int
    end_line: int
    content: str

    @property
    def span_key(self) -> tuple[int, int]:
        return (self.start_line, self.end_line)

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "name": self.name,
            "startLine": self.start_line,
            "endLine": self.end_line,
            "location": f"Lines {self.start_line}-{self.end_line}",
            "content": self.content,
        }


@dataclass(frozen=True)
class SearchHit:
    """A raw line match supplied by the search collaborator."""

    file: str
    line: int  # 1-based
    column: int  # 0-based offset of the match within the line
    content: str

    def to_dict(self) -> dict:
        return {"file": self.file, "line": self.line, "column": self.column, "content": self.content}


@dataclass(frozen=True)
class ClassifiedHit:
    """A search hit with its classification attached."""

    hit: SearchHit
    classification: Classification
    language: str | None = None

    def to_dict(self) -> dict:
        result = self.hit.to_dict()
        result["classification"] = self.classification.value
        result["language"] = self.language
        return result


@dataclass
class Usage:
    """A reference to a symbol inside a single file."""

    line: int
    code: str

    def to_dict(self) -> dict:
        return {"line": self.line, "code": self.code}


@dataclass
class LintIssue:
    """A single finding, in the shape external linters are normalised to."""

    line: int
    column: int
    message: str
    severity: str  # "error" | "warning" | "info"
    rule: str
    source: str
    match: str | None = None

    @property
    def key(self) -> tuple[int, int, str]:
        return (self.line, self.column, self.rule)

    @classmethod
    def from_dict(cls, data: dict) -> LintIssue:
        return cls(
            line=int(data.get("line") or 1),
            column=int(data.get("column") or 1),
            message=str(data.get("message", "")),
            severity=str(data.get("severity", "warning")),
            rule=str(data.get("rule") or data.get("source") or "external"),
            source=str(data.get("source", "external")),
        )

    def to_dict(self) -> dict:
        result = {
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "severity": self.severity,
            "rule": self.rule,
            "source": self.source,
        }
        if self.match is not None:
            result["match"] = self.match
        return result


@dataclass
class LintReport:
    """Merged findings for one source file, split by severity."""

    file: str
    language: str | None
    supported: bool = True
    errors: list[LintIssue] = field(default_factory=list)
    warnings: list[LintIssue] = field(default_factory=list)
    info: list[LintIssue] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.errors) + len(self.warnings) + len(self.info)

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "language": self.language,
            "supported": self.supported,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
            "info": [i.to_dict() for i in self.info],
            "summary": {
                "total": self.total,
                "errors": len(self.errors),
                "warnings": len(self.warnings),
                "info": len(self.info),
            },
        }


# A request for the key kind also accepts these declaration kinds
KIND_COMPATIBILITY: dict[str, frozenset[str]] = {
    "function": frozenset({"function", "method"}),
    "type": frozenset({"type", "interface", "trait"}),
    "class": frozenset({"class", "struct"}),
}

CONTAINER_KINDS = frozenset({"class", "struct", "interface", "trait", "impl", "enum"})


def kind_matches(requested: str | None, actual: str) -> bool:
    """Looser-than-equality match between a requested and a found kind."""
    if not requested:
        return True
    requested = requested.lower()
    return actual in KIND_COMPATIBILITY.get(requested, frozenset({requested}))
