"""Test the import layout of the package modules."""

import ast
from pathlib import Path

import pytest

PACKAGE_DIR = Path(__file__).resolve().parents[2] / "cost_engine"
MODULES = sorted(PACKAGE_DIR.rglob("*.py"))


def _top_level_imports(path):
    tree = ast.parse(path.read_text(encoding="utf-8"))
    return [node for node in tree.body if isinstance(node, (ast.Import, ast.ImportFrom))]


def test_package_modules_are_found():
    assert PACKAGE_DIR / "services" / "cost_data" / "quality.py" in MODULES


@pytest.mark.parametrize("path", MODULES, ids=lambda p: str(p.relative_to(PACKAGE_DIR)))
def test_absolute_imports_precede_relative_ones(path):
    seen_relative = False
    for node in _top_level_imports(path):
        if isinstance(node, ast.ImportFrom) and node.level > 0:
            seen_relative = True
        elif seen_relative:
            pytest.fail(f"{path.name}:{node.lineno} absolute import after a relative one")
