"""Local filesystem backend."""

import os
from pathlib import Path
from typing import Iterator

from ...config import DEFAULT_IGNORED_DIRS


class LocalFileBackend:
    """Local filesystem backend with path traversal protection.

    All paths are relative to the root directory. The backend ensures
    that file access cannot escape it, including through symlinks.
    """

    def __init__(self, repo_path: str | Path, ignored_dirs: set[str] | None = None):
        """Initialize backend bound to a root directory.

        Args:
            repo_path: Path to the root directory
            ignored_dirs: Directory names to skip (defaults to common ignores)
        """
        self._repo_path = Path(repo_path).resolve()
        self._ignored_dirs = set(ignored_dirs) if ignored_dirs is not None else set(DEFAULT_IGNORED_DIRS)

        if not self._repo_path.is_dir():
            raise ValueError(f"Repository path is not a directory: {repo_path}")

    @property
    def repo_path(self) -> str:
        return str(self._repo_path)

    def _resolve_safe_path(self, path: str) -> Path | None:
        """Resolve a relative path, or None if it escapes the root."""
        try:
            # resolve() follows symlinks, so a link pointing outside fails the check too
            full_path = (self._repo_path / path).resolve()
            full_path.relative_to(self._repo_path)
            return full_path
        except (OSError, ValueError):
            return None

    def read_file(self, path: str, max_size: int = 1_000_000) -> str | None:
        full_path = self._resolve_safe_path(path)
        if full_path is None:
            return None

        try:
            if not full_path.is_file() or full_path.stat().st_size > max_size:
                return None
            return full_path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None

    def file_exists(self, path: str) -> bool:
        full_path = self._resolve_safe_path(path)
        if full_path is None:
            return False
        try:
            return full_path.is_file()
        except OSError:
            return False

    def walk_files(
        self,
        root: str = "",
        ignore_dirs: set[str] | None = None,
    ) -> Iterator[str]:
        ignored = self._ignored_dirs | (ignore_dirs or set())

        start_path = self._resolve_safe_path(root) if root else self._repo_path
        if start_path is None:
            return
        if start_path.is_file():
            yield start_path.relative_to(self._repo_path).as_posix()
            return
        if not start_path.is_dir():
            return

        for dirpath, dirnames, filenames in os.walk(start_path):
            # Prune ignored directories in place; sort for a stable order
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in ignored and not d.endswith(".egg-info")
            )
            for filename in sorted(filenames):
                rel_path = (Path(dirpath) / filename).relative_to(self._repo_path)
                yield rel_path.as_posix()
