"""Configuration management for code-contractor."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


DEFAULT_IGNORED_DIRS = [
    ".git",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".tox",
    ".nox",
    "target",
    "vendor",
]


class Config(BaseModel):
    """Application configuration."""

    # Analysis limits
    max_file_size: int = Field(default=1_000_000)  # 1MB
    max_lines: int = Field(default=3000)
    max_tree_depth: int = Field(default=400)

    # Tool defaults
    default_context_lines: int = Field(default=5)
    max_search_results: int = Field(default=50)
    ignored_dirs: list[str] = Field(default_factory=lambda: DEFAULT_IGNORED_DIRS.copy())

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        def _parse_int(value: Optional[str], fallback: int) -> int:
            try:
                return int(value) if value is not None else fallback
            except ValueError:
                return fallback

        ignored_dirs = DEFAULT_IGNORED_DIRS.copy()
        extra_ignored = os.getenv("IGNORED_DIRS")
        if extra_ignored:
            ignored_dirs.extend(
                [entry.strip() for entry in extra_ignored.split(",") if entry.strip()]
            )

        return cls(
            max_file_size=_parse_int(os.getenv("MAX_FILE_SIZE"), 1_000_000),
            max_lines=_parse_int(os.getenv("MAX_LINES"), 3000),
            max_tree_depth=_parse_int(os.getenv("MAX_TREE_DEPTH"), 400),
            default_context_lines=_parse_int(os.getenv("CONTEXT_LINES"), 5),
            max_search_results=_parse_int(os.getenv("MAX_SEARCH_RESULTS"), 50),
            ignored_dirs=ignored_dirs,
        )
