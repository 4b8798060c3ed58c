"""Language identifiers, aliases and the file extension table."""

from __future__ import annotations

from pathlib import PurePosixPath

# Extension to language mapping
EXTENSION_LANGUAGE_MAP: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".pyi": "python",
    ".go": "go",
    ".java": "java",
    # Regex fallback only
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".php": "php",
    ".rb": "ruby",
}

LANGUAGE_ALIASES: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "node": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "python3": "python",
    "golang": "go",
    "rs": "rust",
    "c++": "cpp",
    "rb": "ruby",
}

LANGUAGE_DEFAULT_EXTENSIONS: dict[str, str] = {
    "javascript": ".js",
    "typescript": ".ts",
    "python": ".py",
    "go": ".go",
    "java": ".java",
    "rust": ".rs",
    "c": ".c",
    "cpp": ".cpp",
    "php": ".php",
    "ruby": ".rb",
}

KNOWN_LANGUAGES = frozenset(LANGUAGE_DEFAULT_EXTENSIONS)

# Languages sharing comment, import and declaration syntax
LANGUAGE_FAMILIES: dict[str, str] = {
    "javascript": "js",
    "typescript": "js",
    "python": "python",
    "go": "go",
    "java": "java",
    "rust": "rust",
    "c": "c",
    "cpp": "c",
    "php": "php",
    "ruby": "ruby",
}


def normalize_language(language: str) -> str:
    """Lower-case a language name and resolve aliases ("ts" -> "typescript")."""
    normalized = language.strip().lower()
    return LANGUAGE_ALIASES.get(normalized, normalized)


def detect_language(file_path: str) -> str | None:
    """Map a file path to a language id by extension, or None if unknown."""
    suffix = PurePosixPath(file_path).suffix.lower()
    return EXTENSION_LANGUAGE_MAP.get(suffix)


def language_family(language: str | None) -> str | None:
    if language is None:
        return None
    return LANGUAGE_FAMILIES.get(normalize_language(language))


def default_extension(language: str) -> str:
    return LANGUAGE_DEFAULT_EXTENSIONS.get(normalize_language(language), ".txt")
