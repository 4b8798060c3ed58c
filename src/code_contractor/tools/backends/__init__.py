"""File access backends for the code tools."""

from .protocol import FileBackend
from .local import LocalFileBackend, DEFAULT_IGNORED_DIRS
from .memory import InMemoryFileBackend

__all__ = [
    "FileBackend",
    "LocalFileBackend",
    "InMemoryFileBackend",
    "DEFAULT_IGNORED_DIRS",
]
