"""Outline extraction from tree-sitter syntax trees."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType

from tree_sitter import Node

from .errors import attempt
from .fallback import fallback_outline
from .lexical import signature_of
from .models import CONTAINER_KINDS, OutlineEntry
from .parser import DEFAULT_MAX_DEPTH, SyntaxTree, parse_source, resolve_named_child

logger = logging.getLogger(__name__)

# Grammar node kind -> outline kind, for JS/TS, Python, Go and Java
DECLARATION_KINDS = MappingProxyType({
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "function_signature": "function",
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "method_definition": "method",
    "interface_declaration": "interface",
    "type_alias_declaration": "type",
    "enum_declaration": "enum",
    "internal_module": "namespace",
    "module": "namespace",
    "function_definition": "function",
    "class_definition": "class",
    "method_declaration": "method",
    "type_spec": "type",
    "type_alias": "type",
    "constructor_declaration": "method",
    "record_declaration": "class",
    "annotation_type_declaration": "interface",
})

# Initializer node kind -> style of a function-valued binding
FUNCTION_VALUES = MappingProxyType({
    "arrow_function": "arrow",
    "function_expression": "default",
    "function": "default",
    "generator_function": "default",
    "lambda_expression": None,
    "lambda": None,
    "func_literal": None,
})

CLASS_VALUES = frozenset({"class", "class_expression"})

# Statements that hold variable declarators
BINDING_STATEMENTS = frozenset({
    "lexical_declaration",
    "variable_declaration",
    "field_declaration",
    "local_variable_declaration",
    "var_declaration",
    "const_declaration",
    "expression_statement",
})

FIELD_DEFINITIONS = frozenset({"field_definition", "public_field_definition"})

GO_TYPE_REFINEMENTS = MappingProxyType({
    "struct_type": "struct",
    "interface_type": "interface",
})


@dataclass
class Declaration:
    """An outline entry plus the node whose byte range covers it.

    ``node`` is the outermost statement of the declaration (export
    wrapper, decorators, ``const`` statement) and is what a replacement
    substitutes.
    """

    entry: OutlineEntry
    node: Node


class OutlineVisitor:
    """Pre-order declaration collector with an explicit depth guard.

    Subtrees nested deeper than ``max_depth`` are skipped and the visitor
    returns whatever it collected up to that point.
    """

    def __init__(self, tree: SyntaxTree, include_variables: bool = False, max_depth: int = DEFAULT_MAX_DEPTH):
        self.tree = tree
        self.lines = tree.lines
        self.include_variables = include_variables
        self.max_depth = max_depth
        self.truncated = False

    def collect(self) -> list[Declaration]:
        found: list[Declaration] = []
        self._visit(self.tree.root, 0, [], found)
        if self.truncated:
            logger.warning(
                "Outline truncated: syntax tree nested deeper than %d levels", self.max_depth
            )
        found.sort(key=lambda d: d.entry.start_line)
        return found

    def _visit(self, node: Node, tree_depth: int, scopes: list[OutlineEntry], found: list[Declaration]) -> None:
        if tree_depth > self.max_depth:
            self.truncated = True
            return

        declaration = self._declaration(node, scopes)
        if declaration is not None:
            found.append(declaration)
            scopes.append(declaration.entry)

        for child in node.children:
            self._visit(child, tree_depth + 1, scopes, found)

        if declaration is not None:
            scopes.pop()

    # ==================== Classification ====================

    def _declaration(self, node: Node, scopes: list[OutlineEntry]) -> Declaration | None:
        style = None
        if node.type in DECLARATION_KINDS:
            kind = DECLARATION_KINDS[node.type]
            name_node = resolve_named_child(node, "name")
            if node.type == "type_spec":
                refined = resolve_named_child(node, "type")
                kind = GO_TYPE_REFINEMENTS.get(refined.type, kind) if refined else kind
        elif node.type == "variable_declarator":
            name_node = resolve_named_child(node, "name")
            kind, style = self._binding_kind(resolve_named_child(node, "value"))
        elif node.type in FIELD_DEFINITIONS:
            name_node = resolve_named_child(node, "name") or resolve_named_child(node, "property")
            kind, style = self._binding_kind(resolve_named_child(node, "value"))
            if kind == "variable":
                return None
        elif node.type == "assignment":
            name_node = resolve_named_child(node, "left")
            kind, style = self._binding_kind(resolve_named_child(node, "right"))
        elif node.type in ("var_spec", "const_spec"):
            name_node = resolve_named_child(node, "name")
            kind, style = self._binding_kind(self._first_value(resolve_named_child(node, "value")))
        else:
            return None

        if kind is None or name_node is None or name_node.type not in _NAME_NODE_TYPES:
            return None
        if kind == "variable" and not self.include_variables:
            return None

        enclosing = scopes[-1] if scopes else None
        if kind == "function" and enclosing is not None and enclosing.kind in CONTAINER_KINDS:
            kind = "method"

        outer, exported = self._outer_node(node)
        row = node.start_point[0]
        entry = OutlineEntry(
            kind=kind,
            name=self.tree.text(name_node),
            start_line=outer.start_point[0] + 1,
            end_line=outer.end_point[0] + 1,
            signature=signature_of(self.lines[row]) if row < len(self.lines) else "",
            depth=len(scopes),
            style=style,
            exported=exported,
        )
        return Declaration(entry=entry, node=outer)

    def _binding_kind(self, value: Node | None) -> tuple[str | None, str | None]:
        if value is None:
            return "variable", None
        if value.type in FUNCTION_VALUES:
            return "function", FUNCTION_VALUES[value.type]
        if value.type in CLASS_VALUES:
            return "class", None
        return "variable", None

    @staticmethod
    def _first_value(values: Node | None) -> Node | None:
        if values is None or values.type != "expression_list":
            return values
        return values.named_children[0] if values.named_children else None

    @staticmethod
    def _outer_node(node: Node) -> tuple[Node, bool]:
        """Widen ``node`` to the statement that owns it."""
        outer = node
        parent = node.parent
        if node.type in ("variable_declarator", "assignment", "var_spec", "const_spec", "type_spec"):
            if parent is not None and parent.type == "var_spec_list":
                parent = parent.parent
            if parent is not None and (parent.type in BINDING_STATEMENTS or parent.type == "type_declaration"):
                if sum(1 for c in parent.named_children if c.type == node.type) == 1:
                    outer = parent
                    parent = parent.parent
        elif parent is not None and parent.type == "ambient_declaration":
            # declare function f(): void;
            outer = parent
            parent = parent.parent

        exported = False
        if parent is not None and parent.type == "export_statement":
            outer, exported = parent, True
        elif parent is not None and parent.type == "decorated_definition":
            outer = parent
        return outer, exported


_NAME_NODE_TYPES = frozenset({
    "identifier",
    "type_identifier",
    "property_identifier",
    "private_property_identifier",
    "field_identifier",
    "nested_identifier",
    "string",
})


def collect_declarations(
    tree: SyntaxTree,
    include_variables: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[Declaration]:
    """Every declaration in ``tree`` ordered by start line."""
    return OutlineVisitor(tree, include_variables=include_variables, max_depth=max_depth).collect()


def get_outline(source: str, language: str | None, max_depth: int = DEFAULT_MAX_DEPTH) -> list[OutlineEntry]:
    """Outline of ``source``: AST when a grammar is available, regex otherwise."""
    result = attempt(
        "outline",
        language or "",
        lambda: [d.entry for d in collect_declarations(parse_source(source, language or ""), max_depth=max_depth)],
    )
    return result.or_else(lambda: fallback_outline(source, language))
