"""In-memory file backend for tests and for analysing unsaved buffers."""

from pathlib import PurePosixPath
from typing import Iterator


class InMemoryFileBackend:
    """Dict-based file store implementing the FileBackend protocol.

    Example:
        backend = InMemoryFileBackend("/fake/repo", {
            "src/math.js": "function add(a, b) { return a + b; }",
            "src/app.py": "def main(): pass",
        })
        content = backend.read_file("src/math.js")
    """

    def __init__(
        self,
        repo_path: str = "/fake/repo",
        files: dict[str, str] | None = None,
    ):
        self._repo_path = repo_path
        self._files: dict[str, str] = {}
        for path, content in (files or {}).items():
            self.add_file(path, content)

    @property
    def repo_path(self) -> str:
        return self._repo_path

    def add_file(self, path: str, content: str) -> None:
        """Add or update a file in the fake filesystem."""
        self._files[self._normalize_path(path)] = content

    def _normalize_path(self, path: str) -> str:
        return str(PurePosixPath(path))

    def _is_safe_path(self, path: str) -> bool:
        """Check the path doesn't escape the root via ``..``."""
        depth = 0
        for part in PurePosixPath(path).parts:
            if part == "..":
                depth -= 1
                if depth < 0:
                    return False
            elif part != ".":
                depth += 1
        return not PurePosixPath(path).is_absolute()

    def read_file(self, path: str, max_size: int = 1_000_000) -> str | None:
        if not self._is_safe_path(path):
            return None

        content = self._files.get(self._normalize_path(path))
        if content is not None and len(content.encode()) > max_size:
            return None
        return content

    def file_exists(self, path: str) -> bool:
        return self._is_safe_path(path) and self._normalize_path(path) in self._files

    def walk_files(
        self,
        root: str = "",
        ignore_dirs: set[str] | None = None,
    ) -> Iterator[str]:
        ignored = ignore_dirs or set()
        root_prefix = self._normalize_path(root) if root and root != "." else ""

        for path in sorted(self._files):
            if root_prefix and not path.startswith(root_prefix + "/") and path != root_prefix:
                continue

            # Only directory components are checked, not the file name
            parts = PurePosixPath(path).parts
            if any(part in ignored for part in parts[:-1]):
                continue

            yield path
