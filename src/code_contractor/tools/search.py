"""Line search over a FileBackend with per-hit classification.

Provides the search collaborator of the analysis core: raw line hits
``{file, line, column, content}`` which are then classified per file.
"""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath

from ..analysis.classifier import classify, group_by_classification, try_parse
from ..analysis.languages import EXTENSION_LANGUAGE_MAP, detect_language
from ..analysis.models import Classification, ClassifiedHit, SearchHit
from .backends import DEFAULT_IGNORED_DIRS, FileBackend
from .schemas import SearchOutput

logger = logging.getLogger(__name__)

SEARCH_MODES = ("fast", "smart", "definitions", "usages")

# Mode -> classification the hits are filtered to
MODE_FILTERS = {
    "definitions": Classification.DEFINITION,
    "usages": Classification.USAGE,
}

SEARCHABLE_EXTENSIONS: set[str] = set(EXTENSION_LANGUAGE_MAP) | {
    ".md", ".txt", ".json", ".yaml", ".yml", ".toml", ".cfg", ".ini",
}


def compile_search_pattern(
    term: str,
    *,
    regex: bool = False,
    case_sensitive: bool = False,
    whole_word: bool = False,
) -> re.Pattern:
    """Compile a search term; raises re.error for an invalid regex."""
    pattern = term if regex else re.escape(term)
    if whole_word:
        pattern = rf"(?<![\w$])(?:{pattern})(?![\w$])"
    return re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)


def search_lines(file_path: str, content: str, compiled: re.Pattern) -> list[tuple[SearchHit, str]]:
    """One hit per matching line, paired with the matched text."""
    hits = []
    for i, line in enumerate(content.split("\n")):
        line = line.rstrip("\r")
        match = compiled.search(line)
        if match:
            hit = SearchHit(file=file_path, line=i + 1, column=match.start(), content=line)
            hits.append((hit, match.group(0)))
    return hits


def _files_to_search(backend: FileBackend, path: str | None, ignored_dirs: set[str]) -> list[str]:
    if path and backend.file_exists(path):
        return [path]
    return [
        f for f in backend.walk_files(path or "", ignore_dirs=ignored_dirs)
        if PurePosixPath(f).suffix.lower() in SEARCHABLE_EXTENSIONS
    ]


def smart_search(
    backend: FileBackend,
    term: str,
    *,
    path: str | None = None,
    mode: str = "smart",
    filter_type: str | None = None,
    group: bool = False,
    case_sensitive: bool = False,
    whole_word: bool = False,
    regex: bool = False,
    max_results: int = 50,
    ignored_dirs: set[str] | None = None,
) -> SearchOutput:
    """Search files for ``term`` and classify each hit.

    Modes:
        fast: raw hits, no classification
        smart: classified hits, optionally filtered by ``filter_type``
        definitions / usages: whole-word search filtered to that class

    Files are parsed at most once each. Hits in files of an unknown
    language are classified ``unknown``.
    """
    if mode not in SEARCH_MODES:
        return SearchOutput(term=term, mode=mode, error=f"Unknown search mode: {mode}")

    wanted = MODE_FILTERS.get(mode)
    if wanted is None and filter_type:
        try:
            wanted = Classification(filter_type)
        except ValueError:
            return SearchOutput(term=term, mode=mode, error=f"Unknown classification: {filter_type}")

    try:
        compiled = compile_search_pattern(
            term,
            regex=regex,
            case_sensitive=case_sensitive,
            whole_word=whole_word or mode in MODE_FILTERS,
        )
    except re.error as e:
        return SearchOutput(term=term, mode=mode, error=f"Invalid regex pattern: {e}")

    ignored = set(DEFAULT_IGNORED_DIRS) | (ignored_dirs or set())
    classify_hits = mode != "fast"
    collected: list[SearchHit | ClassifiedHit] = []
    files_searched = 0
    truncated = False

    for file_path in _files_to_search(backend, path, ignored):
        if len(collected) >= max_results:
            truncated = True
            break

        content = backend.read_file(file_path)
        if content is None:
            continue
        files_searched += 1

        hits = search_lines(file_path, content, compiled)
        if not hits:
            continue

        if classify_hits:
            language = detect_language(file_path)
            tree = try_parse(content, language)
            file_hits = [
                ClassifiedHit(hit=hit, classification=classify(hit, matched, language, tree), language=language)
                for hit, matched in hits
            ]
            if wanted is not None:
                file_hits = [h for h in file_hits if h.classification == wanted]
        else:
            file_hits = [hit for hit, _ in hits]

        room = max_results - len(collected)
        if len(file_hits) > room:
            truncated = True
        collected.extend(file_hits[:room])

    logger.debug("Search for %r (%s) read %d files, %d hits", term, mode, files_searched, len(collected))

    groups = None
    if group and classify_hits:
        groups = {
            key: [h.to_dict() for h in hits]
            for key, hits in group_by_classification(collected).items()
        }

    return SearchOutput(
        term=term,
        mode=mode,
        total=len(collected),
        files_searched=files_searched,
        results=[h.to_dict() for h in collected],
        groups=groups,
        truncated=truncated,
    )
