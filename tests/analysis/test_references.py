"""Tests for import extraction and in-file usages."""

from code_contractor.analysis import extract_imports, find_usages


class TestExtractImports:
    """Tests for extract_imports."""

    def test_javascript_imports_and_require(self):
        """Test ES imports, re-exports and require calls with quotes stripped."""
        src = (
            "import React from 'react';\n"
            "import { join } from \"path\";\n"
            "export { x } from './x';\n"
            "const fs = require('fs');\n"
        )

        assert extract_imports(src, "javascript") == ["react", "path", "./x", "fs"]

    def test_typescript_imports(self):
        """Test TypeScript type imports."""
        src = "import type { User } from './models';\nexport const a = 1;\n"
        assert extract_imports(src, "typescript") == ["./models"]

    def test_python_imports(self):
        """Test import and from-import statements."""
        src = "import os\nimport sys, json\nfrom collections import OrderedDict\n"
        assert extract_imports(src, "python") == ["os", "sys", "json", "collections"]

    def test_python_aliased_import(self):
        """Test that aliases resolve to the module name."""
        assert extract_imports("import numpy as np\n", "python") == ["numpy"]

    def test_go_import_block(self):
        """Test single and grouped Go imports."""
        src = 'package main\n\nimport "fmt"\n\nimport (\n\t"os"\n\tstr "strings"\n)\n'
        assert extract_imports(src, "go") == ["fmt", "os", "strings"]

    def test_java_imports(self):
        """Test Java import declarations."""
        src = "import java.util.List;\nimport java.io.*;\n\nclass A {}\n"
        imports = extract_imports(src, "java")

        assert imports[0] == "java.util.List"
        assert len(imports) == 2

    def test_regex_fallback_languages(self):
        """Test imports for languages without a grammar."""
        assert extract_imports("use std::fmt;\nextern crate serde;\n", "rust") == ["std::fmt", "serde"]
        assert extract_imports('#include <stdio.h>\n#include "util.h"\n', "c") == ["stdio.h", "util.h"]
        assert extract_imports("require 'json'\n", "ruby") == ["json"]

    def test_unknown_language_is_empty(self):
        """Test that unknown languages yield no imports."""
        assert extract_imports("import x\n", None) == []

    def test_ast_failure_falls_back(self, monkeypatch):
        """Test the regex stage when parsing fails."""
        from code_contractor.analysis import references

        def broken(source, language):
            raise RuntimeError("boom")

        monkeypatch.setattr(references, "parse_source", broken)
        src = "import os\nfrom typing import Any\n"

        assert extract_imports(src, "python") == ["os", "typing"]


class TestFindUsages:
    """Tests for find_usages."""

    SRC = '''function helper(x) {
    return x;
}

// helper is documented here
const value = helper(1);
const other = obj.helper;
'''

    def test_excludes_declaring_identifier(self):
        """Test that the declaration name is not reported as a usage."""
        usages = find_usages(self.SRC, "javascript", "helper")

        assert [u.line for u in usages] == [6, 7]
        assert usages[0].code == "const value = helper(1);"

    def test_comments_are_not_usages(self):
        """Test that mentions in comments are ignored on the AST path."""
        lines = {u.line for u in find_usages(self.SRC, "javascript", "helper")}
        assert 5 not in lines

    def test_parameter_usage(self):
        """Test identifier usages inside a function body."""
        usages = find_usages(self.SRC, "javascript", "x")
        assert [u.line for u in usages] == [1, 2]

    def test_regex_fallback(self):
        """Test whole-word usage scan for a language without a grammar."""
        src = "fn helper() {}\n// helper\nfn main() { helper(); helpers(); }\n"

        usages = find_usages(src, "rust", "helper")

        assert [u.line for u in usages] == [1, 3]

    def test_to_dict(self):
        """Test the serialized usage shape."""
        usage = find_usages(self.SRC, "javascript", "helper")[0]
        assert usage.to_dict() == {"line": 6, "code": "const value = helper(1);"}
