"""Tests for the regex fallback layer and the lexical helpers it shares."""

import pytest

from code_contractor.analysis import ElementNotFound, UnsupportedLanguage
from code_contractor.analysis.fallback import (
    fallback_classify,
    fallback_declarations,
    fallback_extract,
    fallback_imports,
    fallback_outline,
    fallback_replace,
    has_fallback,
    order_by_hint,
)
from code_contractor.analysis.lexical import (
    brace_block_end,
    comment_precedes,
    context_slice,
    indent_block_end,
    is_comment_line,
    is_import_line,
    only_in_string_literal,
    signature_of,
)
from code_contractor.analysis.models import Classification, OutlineEntry


SAMPLE_PHP = '''<?php
class Cart {
    public function total($items) {
        return array_sum($items);
    }
}

function helper() {
    return 1;
}
'''

SAMPLE_RUBY = '''module Shop
  class Cart
    def total
      1
    end
  end
end
'''

SAMPLE_C = '''#include <stdio.h>

static int add(int a, int b) {
    return a + b;
}

int main(void) {
    return add(1, 2);
}
'''


def _kinds(entries):
    return [(e.name, e.kind) for e in entries]


class TestFallbackOutline:
    """Tests for the per-language regex tables."""

    def test_php(self):
        """Test PHP classes, methods and functions."""
        outline = fallback_outline(SAMPLE_PHP, "php")

        assert _kinds(outline) == [("Cart", "class"), ("total", "method"), ("helper", "function")]
        assert outline[0].end_line == 6

    def test_ruby_uses_end_keyword(self):
        """Test Ruby nesting closed by end."""
        outline = fallback_outline(SAMPLE_RUBY, "ruby")

        assert _kinds(outline) == [("Shop", "namespace"), ("Cart", "class"), ("total", "method")]
        assert [(e.start_line, e.end_line) for e in outline] == [(1, 7), (2, 6), (3, 5)]

    def test_c_functions(self):
        """Test C function definitions and block ends."""
        outline = fallback_outline(SAMPLE_C, "c")

        assert _kinds(outline) == [("add", "function"), ("main", "function")]
        assert outline[0].signature == "static int add(int a, int b)"
        assert (outline[1].start_line, outline[1].end_line) == (7, 9)

    def test_return_statement_is_not_a_function(self):
        """Test that statements shaped like calls are not declarations."""
        src = "int main(void) {\n    return add(1, 2);\n}\n"
        assert [e.name for e in fallback_outline(src, "c")] == ["main"]

    def test_java_constructor_and_methods(self):
        """Test the Java patterns."""
        src = "public class A {\n    public A() {\n    }\n    void run() {\n    }\n}\n"
        assert _kinds(fallback_outline(src, "java")) == [("A", "class"), ("A", "method"), ("run", "method")]

    def test_python_indentation_blocks(self):
        """Test indentation-based block ends for Python."""
        src = "class A:\n    def f(self):\n        return 1\n\n    def g(self):\n        pass\n\nx = 1\n"
        outline = fallback_outline(src, "python")

        assert _kinds(outline) == [("A", "class"), ("f", "method"), ("g", "method")]
        assert [(e.start_line, e.end_line) for e in outline] == [(1, 6), (2, 3), (5, 6)]

    def test_typescript_shapes(self):
        """Test interface, type alias and enum patterns."""
        src = "export interface User {\n  id: string;\n}\ntype Id = string;\nenum Color { Red }\n"
        assert _kinds(fallback_outline(src, "typescript")) == [
            ("User", "interface"),
            ("Id", "type"),
            ("Color", "enum"),
        ]

    def test_has_fallback(self):
        """Test which languages have regex tables."""
        assert has_fallback("rust")
        assert has_fallback("cpp")
        assert has_fallback("ts")
        assert not has_fallback("kotlin")
        assert not has_fallback(None)


class TestFallbackLocate:
    """Tests for regex-based lookup, extraction and replacement."""

    def test_declarations_filtered_by_kind(self):
        """Test kind compatibility on the regex path."""
        assert _kinds(fallback_declarations(SAMPLE_PHP, "php", "total", "function")) == [("total", "method")]
        assert fallback_declarations(SAMPLE_PHP, "php", "total", "class") == []

    def test_extract_deduplicates_spans(self):
        """Test that two entries producing the same span are emitted once."""
        entries = [
            OutlineEntry("function", "f", 2, 2, "f"),
            OutlineEntry("method", "f", 2, 2, "f"),
        ]
        from code_contractor.analysis.fallback import element_results

        results = element_results("a\nb\nc\n", entries, context_lines=0)

        assert [(r.start_line, r.end_line, r.content) for r in results] == [(2, 2, "b")]

    def test_extract_with_context(self):
        """Test regex extraction with context lines."""
        results = fallback_extract(SAMPLE_C, "c", "main", "function", context_lines=1)

        assert len(results) == 1
        assert (results[0].start_line, results[0].end_line) == (6, 10)

    def test_replace_whole_lines(self):
        """Test that replacement substitutes the declaration's lines."""
        result = fallback_replace(SAMPLE_C, "c", "add", "function", "int add(int a, int b) { return 0; }")

        lines = result.split("\n")
        assert lines[2] == "int add(int a, int b) { return 0; }"
        assert lines[3] == ""
        assert lines[4] == "int main(void) {"

    def test_replace_not_found(self):
        """Test ElementNotFound on the regex path."""
        with pytest.raises(ElementNotFound):
            fallback_replace(SAMPLE_C, "c", "missing", "function", "x")

    def test_replace_unsupported(self):
        """Test UnsupportedLanguage for languages without tables."""
        with pytest.raises(UnsupportedLanguage):
            fallback_replace("x", "kotlin", "main", "function", "y")

    def test_order_by_hint(self):
        """Test containing spans first, smallest first, then by distance."""
        outer = OutlineEntry("class", "A", 1, 20, "")
        inner = OutlineEntry("method", "A", 5, 8, "")
        far = OutlineEntry("function", "A", 40, 42, "")

        assert order_by_hint([outer, inner, far], 6) == [inner, outer, far]
        assert order_by_hint([outer, inner, far], 35) == [far, inner, outer]
        assert order_by_hint([far, outer], None) == [far, outer]


class TestFallbackImportsAndClassify:
    """Tests for regex imports and line classification."""

    def test_go_import_block(self):
        """Test Go grouped imports on the regex path."""
        src = 'package main\n\nimport (\n\t"fmt"\n\tstr "strings"\n)\n\nvar s = "not an import"\n'
        assert fallback_imports(src, "go") == ["fmt", "strings"]

    def test_js_imports(self):
        """Test import, re-export and require."""
        src = "import a from 'a';\nexport * from \"b\";\nconst c = require('c');\n"
        assert fallback_imports(src, "javascript") == ["a", "b", "c"]

    def test_php_imports(self):
        """Test PHP use and require."""
        src = "<?php\nuse App\\Models\\User;\nrequire_once 'config.php';\n"
        assert fallback_imports(src, "php") == ["App\\Models\\User", "config.php"]

    @pytest.mark.parametrize(
        "line,language,expected",
        [
            ("export async function go() {", "javascript", Classification.DEFINITION),
            ("const go = (x) => x;", "typescript", Classification.DEFINITION),
            ("go();", "javascript", Classification.USAGE),
            ("type Point struct {", "go", Classification.DEFINITION),
            ("public static void main(String[] args) {", "java", Classification.DEFINITION),
            ("impl Point {", "rust", Classification.DEFINITION),
            ("def go():", "kotlin", Classification.DEFINITION),
        ],
    )
    def test_classify(self, line, language, expected):
        """Test the definition-looks-like tables."""
        assert fallback_classify(line, language) == expected


class TestLexical:
    """Tests for line-level lexical helpers."""

    def test_comment_lines(self):
        """Test comment prefixes per family."""
        assert is_comment_line("  // note", "typescript")
        assert is_comment_line(" * continued", "java")
        assert is_comment_line("# note", "python")
        assert not is_comment_line("x = 1  # note", "python")
        assert not is_comment_line("// note", None)

    def test_import_lines(self):
        """Test import prefixes and substrings."""
        assert is_import_line("from a import b", "python")
        assert is_import_line("const x = require('x');", "javascript")
        assert is_import_line("#include <stdio.h>", "cpp")
        assert not is_import_line("important()", "javascript")

    def test_comment_precedes(self):
        """Test comment token detection before a column."""
        line = "foo(); // eval(x)"
        assert comment_precedes(line, line.index("eval") + 1, "javascript")
        assert not comment_precedes("eval(x) // later", 1, "javascript")
        assert not comment_precedes("const url = 'http://x'; eval(url)", 30, "javascript")
        assert comment_precedes("x = '#'  # eval(x)", 14, "python")

    def test_only_in_string_literal(self):
        """Test quoted-span detection."""
        assert only_in_string_literal('log("helper")', "helper")
        assert not only_in_string_literal('helper("helper")', "helper")
        assert not only_in_string_literal("nothing here", "helper")

    def test_signature_of(self):
        """Test signature trimming and length cap."""
        assert signature_of("  function f(a) {  ") == "function f(a)"
        assert len(signature_of("x" * 500)) == 120

    def test_context_slice_clamps(self):
        """Test context slicing at file boundaries."""
        lines = ["a", "b", "c", "d"]

        assert context_slice(lines, 2, 3, 0) == (2, 3, "b\nc")
        assert context_slice(lines, 1, 4, 10) == (1, 4, "a\nb\nc\nd")
        assert context_slice(lines, 2, 2, -3) == (2, 2, "b")

    def test_brace_block_end(self):
        """Test brace counting across lines."""
        lines = ["function f() {", "  if (x) {", "  }", "}", "after();"]
        assert brace_block_end(lines, 0) == 4

    def test_brace_block_end_counts_braces_in_strings(self):
        """Test the known limitation: braces in strings are counted too."""
        lines = ["function f() {", '  return "}";', "}", "after();"]
        assert brace_block_end(lines, 0) == 2

    def test_brace_block_end_declaration_without_body(self):
        """Test a declaration terminated by a semicolon."""
        assert brace_block_end(["fn area(&self) -> f64;", "}"], 0) == 1

    def test_indent_block_end(self):
        """Test indentation block ends, including trailing blank lines."""
        lines = ["def f():", "    a = 1", "", "    return a", "", "x = 1"]
        assert indent_block_end(lines, 0) == 4
