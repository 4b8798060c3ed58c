"""code-contractor - token-efficient code intelligence for coding agents."""

__version__ = "0.1.0"

from .config import Config
from .analysis import (
    extract_element,
    extract_imports,
    find_usages,
    get_outline,
    lint_source,
    replace_element,
)

__all__ = [
    "Config",
    "get_outline",
    "extract_element",
    "replace_element",
    "extract_imports",
    "find_usages",
    "lint_source",
]
