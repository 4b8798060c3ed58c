"""Imports and in-file usages of a symbol."""

from __future__ import annotations

from tree_sitter import Node

from .errors import attempt
from .fallback import fallback_imports, fallback_usages
from .models import Usage
from .outline import DECLARATION_KINDS
from .parser import DEFAULT_MAX_DEPTH, SyntaxTree, parse_source, resolve_named_child, walk

IDENTIFIER_TYPES = frozenset({
    "identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "type_identifier",
    "field_identifier",
})

DECLARING_PARENTS = frozenset(DECLARATION_KINDS) | {"variable_declarator"}

_QUOTES = "'\"`"


def _import_paths(tree: SyntaxTree, node: Node) -> list[str]:
    if node.type in ("import_statement", "export_statement"):
        source = resolve_named_child(node, "source")
        if source is not None:
            return [tree.text(source).strip(_QUOTES)]
        # Python: import a, b as c
        return [tree.text(n) if n.type == "dotted_name" else tree.text(resolve_named_child(n, "name") or n)
                for n in node.children_by_field_name("name")]

    if node.type == "import_from_statement":
        module = resolve_named_child(node, "module_name")
        return [tree.text(module)] if module is not None else []

    if node.type == "call_expression":
        callee = resolve_named_child(node, "function")
        arguments = resolve_named_child(node, "arguments")
        if callee is not None and tree.text(callee) == "require" and arguments is not None:
            strings = [c for c in arguments.named_children if c.type in ("string", "template_string")]
            return [tree.text(strings[0]).strip(_QUOTES)] if strings else []
        return []

    if node.type == "import_spec":
        path = resolve_named_child(node, "path")
        return [tree.text(path).strip(_QUOTES)] if path is not None else []

    # Go also has import_declaration, but its paths come from import_spec
    if node.type == "import_declaration" and tree.language == "java" and node.named_children:
        return [".".join(tree.text(c) for c in node.named_children)]

    return []


def _ast_imports(source: str, language: str, max_depth: int) -> list[str]:
    tree = parse_source(source, language)
    imports: list[str] = []
    for node, _ in walk(tree.root, max_depth):
        imports.extend(_import_paths(tree, node))
    return imports


def extract_imports(source: str, language: str | None, max_depth: int = DEFAULT_MAX_DEPTH) -> list[str]:
    """Module paths imported by ``source``, quotes stripped, in document order."""
    result = attempt("imports", language or "", lambda: _ast_imports(source, language or "", max_depth))
    return result.or_else(lambda: fallback_imports(source, language))


def _is_declared_name(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.type not in DECLARING_PARENTS:
        return False
    name = resolve_named_child(parent, "name")
    return name is not None and name.start_byte == node.start_byte


def _ast_usages(source: str, language: str, name: str, max_depth: int) -> list[Usage]:
    tree = parse_source(source, language)
    lines = tree.lines
    usages: list[Usage] = []
    for node, _ in walk(tree.root, max_depth):
        if node.type not in IDENTIFIER_TYPES or tree.text(node) != name or _is_declared_name(node):
            continue
        row = node.start_point[0]
        usages.append(Usage(line=row + 1, code=lines[row].strip()))
    return usages


def find_usages(source: str, language: str | None, name: str, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Usage]:
    """References to ``name`` in one file, excluding the declaring identifiers."""
    result = attempt("usages", language or "", lambda: _ast_usages(source, language or "", name, max_depth))
    return result.or_else(lambda: fallback_usages(source, language, name))
