"""Tests for element extraction and replacement."""

import pytest

from code_contractor.analysis import (
    ElementNotFound,
    UnsupportedLanguage,
    extract_element,
    get_outline,
    replace_element,
)


SAMPLE_JS = '''function add(a, b) {
    return a + b;
}

class Calculator {
    add(x) {
        return x;
    }
}
'''

DUPLICATE_PY = '''class A:
    def run(self):
        return "a"


class B:
    def run(self):
        return "b"
'''

SAMPLE_GO = '''package main

type Shape interface {
	Area() float64
}

func helper() int {
	return 1
}
'''

SAMPLE_RUST = '''struct Point {
    x: i32,
}

fn area(w: u32, h: u32) -> u32 {
    w * h
}
'''


class TestExtractElement:
    """Tests for extract_element."""

    def test_extract_with_context(self):
        """Test that context lines are included and reported in the span."""
        src = "// header\n\nfunction add(a, b) {\n  return a + b;\n}\n\n// footer\n"

        results = extract_element(src, "javascript", "add", "function", context_lines=1)

        assert len(results) == 1
        result = results[0]
        assert result.name == "add"
        assert result.kind == "function"
        assert (result.start_line, result.end_line) == (2, 6)
        assert result.content.startswith("\nfunction add")
        assert result.to_dict()["location"] == "Lines 2-6"

    def test_function_request_matches_methods(self):
        """Test that kind 'function' also returns methods of the same name."""
        results = extract_element(SAMPLE_JS, "javascript", "add", "function", context_lines=0)

        assert [r.kind for r in results] == ["function", "method"]
        assert results[0].content.startswith("function add(a, b)")
        assert results[1].content.strip().startswith("add(x)")

    def test_method_request_excludes_functions(self):
        """Test that kind 'method' does not widen to functions."""
        results = extract_element(SAMPLE_JS, "javascript", "add", "method", context_lines=0)
        assert [r.kind for r in results] == ["method"]

    def test_type_request_matches_interfaces(self):
        """Test that kind 'type' also returns interfaces."""
        results = extract_element(SAMPLE_GO, "go", "Shape", "type", context_lines=0)

        assert len(results) == 1
        assert results[0].kind == "interface"

    def test_class_request_matches_structs(self):
        """Test that kind 'class' also returns structs (regex path)."""
        results = extract_element(SAMPLE_RUST, "rust", "Point", "class", context_lines=0)

        assert len(results) == 1
        assert results[0].kind == "struct"
        assert results[0].content == "struct Point {\n    x: i32,\n}"

    def test_not_found_returns_empty(self):
        """Test that a missing element yields no results rather than an error."""
        assert extract_element(SAMPLE_JS, "javascript", "missing", "function") == []

    def test_results_within_file_bounds(self):
        """Test that context never runs past the start or end of the file."""
        results = extract_element(SAMPLE_JS, "javascript", "add", "function", context_lines=50)
        line_count = len(SAMPLE_JS.split("\n"))

        for result in results:
            assert result.start_line >= 1
            assert result.end_line <= line_count

    def test_span_matches_outline_without_context(self):
        """Test that extraction with zero context matches the outline span."""
        outline = {e.name: e for e in get_outline(SAMPLE_GO, "go")}
        result = extract_element(SAMPLE_GO, "go", "helper", "function", context_lines=0)[0]

        assert (result.start_line, result.end_line) == (outline["helper"].start_line, outline["helper"].end_line)

    def test_line_hint_selects_nearest(self):
        """Test that line_hint orders duplicate names by proximity."""
        results = extract_element(DUPLICATE_PY, "python", "run", "method", context_lines=0, line_hint=7)

        assert len(results) == 2
        assert '"b"' in results[0].content

    def test_variable_lookup(self):
        """Test that variables are found only when asked for."""
        src = "const LIMIT = 10;\nfunction f() {}\n"

        assert extract_element(src, "javascript", "LIMIT", "function") == []
        results = extract_element(src, "javascript", "LIMIT", "variable", context_lines=0)
        assert [r.content for r in results] == ["const LIMIT = 10;"]

    def test_variable_lookup_regex_path(self):
        """Test variable lookup for a language without a grammar."""
        src = "fn main() {\n    let total = 3;\n}\n"

        results = extract_element(src, "rust", "total", "variable", context_lines=0)

        assert [r.start_line for r in results] == [2]

    def test_unknown_language_uses_generic_patterns(self):
        """Test that an unknown language still extracts through generic patterns."""
        results = extract_element("def main():\n    pass\n", "cobol", "main", "function", context_lines=0)
        assert [r.name for r in results] == ["main"]


class TestReplaceElement:
    """Tests for replace_element."""

    def test_scenario_replace_add(self):
        """Test replacing one function keeps the rest of the file intact."""
        src = "function add(a,b){return a+b;}\nfunction sub(a,b){return a-b;}"
        new_text = "function add(a,b){return (a+b)|0;}"

        result = replace_element(src, "javascript", "add", "function", new_text)

        assert result == "function add(a,b){return (a+b)|0;}\nfunction sub(a,b){return a-b;}"

    def test_replacement_text_is_verbatim(self):
        """Test that the new text is not reformatted."""
        new_text = "function add(a, b) {\n\treturn a + b + 0;   \n}"

        result = replace_element(SAMPLE_JS, "javascript", "add", "function", new_text)

        assert result.startswith(new_text + "\n\nclass Calculator")

    def test_first_match_wins(self):
        """Test that only the first duplicate is replaced."""
        result = replace_element(DUPLICATE_PY, "python", "run", "method", "def run(self):\n        return 1")

        assert result.count("def run(self):") == 2
        assert 'return "a"' not in result
        assert 'return "b"' in result

    def test_line_hint_targets_second_duplicate(self):
        """Test that line_hint redirects the replacement."""
        result = replace_element(
            DUPLICATE_PY, "python", "run", "method", "def run(self):\n        return 2", line_hint=7
        )

        assert 'return "a"' in result
        assert 'return "b"' not in result

    def test_exported_declaration_replaced_with_export(self):
        """Test that the export wrapper is part of the replaced range."""
        src = "export const double = (x) => x * 2;\nconsole.log(double(2));\n"

        result = replace_element(src, "javascript", "double", "function", "export function double(x) { return x * 2; }")

        assert result == "export function double(x) { return x * 2; }\nconsole.log(double(2));\n"

    def test_decorated_python_function(self):
        """Test that decorators are replaced together with the function."""
        src = "@cache\ndef load():\n    return 1\n\nx = 1\n"

        result = replace_element(src, "python", "load", "function", "def load():\n    return 2")

        assert result == "def load():\n    return 2\n\nx = 1\n"

    def test_utf8_before_element(self):
        """Test byte-range replacement after multi-byte characters."""
        src = "// héllo wörld\nfunction add() { return 1; }\n"

        result = replace_element(src, "javascript", "add", "function", "function add() { return 2; }")

        assert result == "// héllo wörld\nfunction add() { return 2; }\n"

    def test_regex_path_replaces_whole_lines(self):
        """Test replacement through the regex tables for Rust."""
        result = replace_element(SAMPLE_RUST, "rust", "area", "function", "fn area() -> u32 {\n    0\n}")

        assert result == "struct Point {\n    x: i32,\n}\n\nfn area() -> u32 {\n    0\n}\n"

    @pytest.mark.parametrize(
        "source,language,name,kind",
        [
            (SAMPLE_JS, "javascript", "add", "function"),
            (SAMPLE_JS, "javascript", "add", "method"),
            ("def top():\n    return 0\n", "python", "top", "function"),
            ("class A:\n    def m(self):\n        return 1\n", "python", "m", "method"),
            (DUPLICATE_PY, "python", "B", "class"),
            (SAMPLE_RUST, "rust", "area", "function"),
        ],
    )
    def test_extract_then_replace_is_identity(self, source, language, name, kind):
        """Test that putting extracted text back leaves the file and outline unchanged."""
        extracted = extract_element(source, language, name, kind, context_lines=0)
        target = next(r for r in extracted if r.kind == kind)

        result = replace_element(source, language, name, kind, target.content, line_hint=target.start_line)

        assert result == source
        assert get_outline(result, language) == get_outline(source, language)

    def test_indented_replacement_not_doubled(self):
        """Test that a replacement carrying the method's indentation keeps one indent."""
        src = "class A:\n    def m(self):\n        return 1\n"

        result = replace_element(src, "python", "m", "method", "    def m(self):\n        return 2")

        assert result == "class A:\n    def m(self):\n        return 2\n"

    def test_unindented_replacement_keeps_line_prefix(self):
        """Test that a replacement without indentation is spliced after it."""
        src = "class A:\n    def m(self):\n        return 1\n"

        result = replace_element(src, "python", "m", "method", "def m(self):\n        return 3")

        assert result == "class A:\n    def m(self):\n        return 3\n"

    def test_not_found_raises(self):
        """Test ElementNotFound and its message."""
        with pytest.raises(ElementNotFound) as exc_info:
            replace_element(SAMPLE_JS, "javascript", "missing", "function", "x")

        assert str(exc_info.value) == "Element 'missing' of type 'function' not found."

    def test_unsupported_language_raises(self):
        """Test that a language with no grammar and no patterns is rejected."""
        with pytest.raises(UnsupportedLanguage):
            replace_element("whatever", "cobol", "main", "function", "x")

    def test_falls_back_when_grammar_missing(self, monkeypatch):
        """Test the regex path takes over when the AST stage fails."""
        from code_contractor.analysis import locator

        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(locator, "parse_source", broken)
        src = "function add(a, b) {\n  return a + b;\n}\nfunction sub() {}\n"

        result = replace_element(src, "javascript", "add", "function", "function add() {}")

        assert result == "function add() {}\nfunction sub() {}\n"
