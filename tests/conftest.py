"""Pytest configuration and shared fixtures."""

import pytest
from pathlib import Path

from code_contractor.config import Config
from code_contractor.tools import InMemoryFileBackend


SAMPLE_JS = '''import { readFile } from 'fs';
const path = require('path');

function add(a, b) {
    return a + b;
}

export const multiply = (a, b) => a * b;

class Calculator {
    constructor(base) {
        this.base = base;
    }

    total(x) {
        return add(this.base, x);
    }
}

const LIMIT = 10;
'''

SAMPLE_PY = '''import os
from collections import OrderedDict


def first():
    return 1


@staticmethod
def second():
    return 2


class Box:
    def open(self):
        """Open the box."""
        return os.getcwd()


square = lambda x: x * x
'''


@pytest.fixture
def config() -> Config:
    """Provide a test configuration independent of the environment."""
    return Config()


@pytest.fixture
def backend() -> InMemoryFileBackend:
    """In-memory source tree shared by the tool tests."""
    return InMemoryFileBackend(files={
        "src/math.js": SAMPLE_JS,
        "src/app.py": SAMPLE_PY,
        "src/lib.rs": "pub fn area(w: u32, h: u32) -> u32 {\n    w * h\n}\n",
        "README.md": "Call add() to sum numbers.\n",
    })


@pytest.fixture
def temp_repo(tmp_path: Path) -> Path:
    """Create a temporary source tree on disk."""
    repo = tmp_path / "repo"
    (repo / "src").mkdir(parents=True)
    (repo / "src" / "math.js").write_text(SAMPLE_JS)
    (repo / "src" / "app.py").write_text(SAMPLE_PY)
    (repo / "node_modules" / "dep").mkdir(parents=True)
    (repo / "node_modules" / "dep" / "index.js").write_text("function add() {}\n")
    return repo
