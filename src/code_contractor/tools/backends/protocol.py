"""Protocol for the file access collaborator of the code tools."""

from typing import Iterator, Protocol, runtime_checkable


@runtime_checkable
class FileBackend(Protocol):
    """Read-only access to the files of one source tree.

    All paths are relative to ``repo_path``. Implementations must refuse
    paths that escape the root and return None rather than raise for
    unreadable files. The analysis core never touches files itself; it
    only sees the text a backend returns.
    """

    @property
    def repo_path(self) -> str:
        """Root path of the source tree this backend is bound to."""
        ...

    def read_file(self, path: str, max_size: int = 1_000_000) -> str | None:
        """Read file content.

        Args:
            path: Relative path within the tree
            max_size: Maximum file size in bytes

        Returns:
            File content as string, or None if the file doesn't exist,
            escapes the root, exceeds max_size or cannot be decoded.
        """
        ...

    def file_exists(self, path: str) -> bool:
        """True if ``path`` is a regular file inside the root."""
        ...

    def walk_files(
        self,
        root: str = "",
        ignore_dirs: set[str] | None = None,
    ) -> Iterator[str]:
        """Iterate over all files below ``root``.

        Args:
            root: Subdirectory (or single file) to start from
            ignore_dirs: Directory names to skip

        Yields:
            Relative file paths in a stable order
        """
        ...
