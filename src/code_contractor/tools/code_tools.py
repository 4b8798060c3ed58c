"""Code intelligence tools using the FileBackend abstraction.

Outline, element extraction/replacement, classified search and linting,
exposed as plain backend-aware functions and as LangChain tools.
"""

import logging

from langchain_core.tools import BaseTool, tool

from ..analysis import (
    ElementNotFound,
    UnsupportedLanguage,
    detect_language,
    extract_element,
    extract_imports,
    get_outline,
    lint_source,
    normalize_language,
    replace_element,
)
from ..analysis.lint import oversized_report
from ..config import Config
from .backends import FileBackend
from .schemas import ExtractOutput, LintOutput, OutlineOutput, ReplaceOutput, SearchOutput
from .search import smart_search

logger = logging.getLogger(__name__)

NOT_FOUND = "not found"


# =============================================================================
# Core Functions (Backend-aware)
# =============================================================================


def _read(backend: FileBackend, file_path: str, config: Config) -> tuple[str | None, str | None]:
    """Return ``(content, error)`` for a file."""
    content = backend.read_file(file_path, max_size=config.max_file_size)
    if content is None:
        return None, f"File not found, unreadable or larger than {config.max_file_size} bytes: {file_path}"
    return content, None


def outline_file(backend: FileBackend, file_path: str, config: Config) -> OutlineOutput:
    """Outline and imports of one file."""
    content, error = _read(backend, file_path, config)
    language = detect_language(file_path)
    if error:
        return OutlineOutput(file=file_path, language=language, error=error)

    line_count = content.count("\n") + 1
    if line_count > config.max_lines:
        return OutlineOutput(
            file=file_path,
            language=language,
            error=(
                f"TRUNCATED: file has {line_count} lines (limit {config.max_lines}); "
                "use search_code or extract_code_element instead"
            ),
        )

    outline = get_outline(content, language, max_depth=config.max_tree_depth)
    return OutlineOutput(
        file=file_path,
        language=language,
        count=len(outline),
        imports=extract_imports(content, language, max_depth=config.max_tree_depth),
        outline=[entry.to_dict() for entry in outline],
    )


def extract_from_file(
    backend: FileBackend,
    file_path: str,
    element_name: str,
    element_type: str,
    config: Config,
    context_lines: int | None = None,
    line_hint: int | None = None,
) -> ExtractOutput:
    """Every declaration named ``element_name`` in one file, with context."""
    output = ExtractOutput(file=file_path, element=element_name, type=element_type)
    content, error = _read(backend, file_path, config)
    if error:
        output.error = error
        return output

    results = extract_element(
        content,
        detect_language(file_path),
        element_name,
        element_type,
        context_lines=config.default_context_lines if context_lines is None else context_lines,
        line_hint=line_hint,
        max_depth=config.max_tree_depth,
    )
    if not results:
        output.message = NOT_FOUND
    output.results = [r.to_dict() for r in results]
    return output


def replace_in_file(
    backend: FileBackend,
    file_path: str,
    element_name: str,
    element_type: str,
    new_content: str,
    config: Config,
    line_hint: int | None = None,
) -> ReplaceOutput:
    """Source of ``file_path`` with one declaration replaced; nothing is written."""
    output = ReplaceOutput(file=file_path, element=element_name, type=element_type)
    content, error = _read(backend, file_path, config)
    if error:
        output.error = error
        return output

    language = detect_language(file_path)
    if language is None:
        output.error = str(UnsupportedLanguage(file_path))
        return output

    try:
        output.content = replace_element(
            content,
            language,
            element_name,
            element_type,
            new_content,
            line_hint=line_hint,
            max_depth=config.max_tree_depth,
        )
    except (ElementNotFound, UnsupportedLanguage) as e:
        output.error = str(e)
    return output


def lint_file_content(backend: FileBackend, file_path: str, config: Config) -> LintOutput:
    language = detect_language(file_path)
    content = backend.read_file(file_path, max_size=config.max_file_size)
    if content is None:
        if not backend.file_exists(file_path):
            return LintOutput(file=file_path, language=language, error=f"Cannot read file: {file_path}")
        # read_file refuses files over the size limit
        return LintOutput(**oversized_report(file_path, language, config.max_file_size + 1).to_dict())

    report = lint_source(
        content,
        language,
        file=file_path,
        max_file_size=config.max_file_size,
        max_depth=config.max_tree_depth,
    )
    return LintOutput(**report.to_dict())


def lint_inline(code: str, language: str, config: Config) -> LintOutput:
    key = normalize_language(language)
    report = lint_source(
        code,
        key,
        file=f"<inline {key}>",
        max_file_size=config.max_file_size,
        max_depth=config.max_tree_depth,
    )
    return LintOutput(**report.to_dict())


# =============================================================================
# LangChain Tool Factory
# =============================================================================


def create_code_tools(backend: FileBackend, config: Config | None = None) -> list[BaseTool]:
    """Create code intelligence tools bound to a specific backend.

    Args:
        backend: File backend to bind tools to
        config: Limits and defaults (loaded from the environment if None)

    Returns:
        List of LangChain tools ready for agent use
    """
    config = config or Config.from_env()
    ignored_dirs = set(config.ignored_dirs)

    @tool
    def get_file_outline(file_path: str) -> dict:
        """List the functions, classes, methods and types declared in a file.

        Much cheaper than reading the whole file. Use it to find what to
        extract before calling extract_code_element.

        Args:
            file_path: Path relative to the repository root

        Returns:
            Dictionary with:
            - file, language
            - count: Number of declarations
            - imports: Imported module paths
            - outline: List of {kind, name, startLine, endLine, signature, depth}
            - error: Error message if the file could not be outlined
        """
        return outline_file(backend, file_path, config).model_dump()

    @tool
    def extract_code_element(
        file_path: str,
        element_name: str,
        element_type: str = "function",
        context_lines: int | None = None,
        line_hint: int | None = None,
    ) -> dict:
        """Extract one named function, class, method, type or variable from a file.

        A request for "function" also matches methods; "type" also matches
        interfaces and traits; "class" also matches structs.

        Args:
            file_path: Path relative to the repository root
            element_name: Name of the declaration
            element_type: function, method, class, interface, type, enum or variable
            context_lines: Lines of surrounding context (default from config)
            line_hint: Prefer the declaration containing or nearest this line

        Returns:
            Dictionary with file, element, type and results (list of
            {type, name, startLine, endLine, location, content}), or
            message "not found" when nothing matched.
        """
        return extract_from_file(
            backend, file_path, element_name, element_type, config, context_lines, line_hint
        ).model_dump()

    @tool
    def replace_code_element(
        file_path: str,
        element_name: str,
        element_type: str,
        new_content: str,
        line_hint: int | None = None,
    ) -> dict:
        """Replace a whole declaration with new code and return the new file text.

        The file is NOT written; persist the returned content yourself. The
        first matching declaration is replaced (or the one nearest
        line_hint). new_content is inserted as-is; it may include or omit
        the declaration's leading indentation, so text returned by
        extract_code_element (with context_lines=0) can be passed back.

        Args:
            file_path: Path relative to the repository root
            element_name: Name of the declaration to replace
            element_type: function, method, class, interface, type, enum or variable
            new_content: Full replacement text for the declaration
            line_hint: Prefer the declaration containing or nearest this line

        Returns:
            Dictionary with file, element, type and content (the full
            mutated source) or error.
        """
        return replace_in_file(
            backend, file_path, element_name, element_type, new_content, config, line_hint
        ).model_dump()

    @tool
    def search_code(
        term: str,
        path: str | None = None,
        mode: str = "fast",
        regex: bool = False,
        case_sensitive: bool = False,
        max_results: int | None = None,
    ) -> dict:
        """Search source files line by line, optionally classifying each hit.

        Args:
            term: Text (or regex when regex=True) to search for
            path: Optional file or directory to limit the search to
            mode: fast (raw hits), smart (classified), definitions or usages
            regex: Treat term as a regular expression
            case_sensitive: Match case exactly
            max_results: Maximum hits (default from config)

        Returns:
            Dictionary with term, mode, total, files_searched, results
            (list of {file, line, column, content, classification?}),
            truncated and error.
        """
        return smart_search(
            backend,
            term,
            path=path,
            mode=mode,
            regex=regex,
            case_sensitive=case_sensitive,
            max_results=max_results or config.max_search_results,
            ignored_dirs=ignored_dirs,
        ).model_dump()

    @tool
    def find_references(element_name: str, path: str | None = None) -> dict:
        """Find where a symbol is defined, used, imported or mentioned.

        Whole-word search with every hit classified and grouped.

        Args:
            element_name: Symbol to look for
            path: Optional file or directory to limit the search to

        Returns:
            Dictionary with results plus groups: definitions, usages,
            imports, comments, strings and unknown.
        """
        result: SearchOutput = smart_search(
            backend,
            element_name,
            path=path,
            mode="smart",
            group=True,
            whole_word=True,
            case_sensitive=True,
            max_results=config.max_search_results,
            ignored_dirs=ignored_dirs,
        )
        return result.model_dump()

    @tool
    def lint_code(code: str, language: str) -> dict:
        """Check a code snippet for syntax errors and common bug patterns.

        Args:
            code: Source text to check
            language: javascript, typescript, python, go or java

        Returns:
            Dictionary with errors, warnings, info (lists of {line, column,
            message, severity, rule, source}) and summary counts.
        """
        return lint_inline(code, language, config).model_dump()

    @tool
    def lint_file(file_path: str) -> dict:
        """Check a file for syntax errors and common bug patterns.

        Args:
            file_path: Path relative to the repository root

        Returns:
            Dictionary with errors, warnings, info and summary counts;
            supported is false for languages without lint rules.
        """
        return lint_file_content(backend, file_path, config).model_dump()

    return [
        get_file_outline,
        extract_code_element,
        replace_code_element,
        search_code,
        find_references,
        lint_code,
        lint_file,
    ]
