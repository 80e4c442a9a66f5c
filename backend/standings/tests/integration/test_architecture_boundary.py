"""Architectural boundary tests enforcing layer dependency rules.

Layer dependency direction (allowed):
  app → persistence → logic
  persistence → shared

Forbidden (runtime imports):
  logic → persistence, app, shared
  persistence → app
"""

import ast
from pathlib import Path

_STANDINGS_ROOT = Path(__file__).resolve().parents[2]


def _collect_runtime_import_targets(source_dir: Path) -> list[tuple[str, int, str]]:
    """Parse all .py files and return (filename, lineno, module) for runtime imports.

    Skip imports inside `if TYPE_CHECKING:` blocks; those are type-only
    and do not create runtime layer coupling.
    """
    results: list[tuple[str, int, str]] = []
    for py_file in source_dir.rglob("*.py"):
        tree = ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
        type_checking_ranges = _find_type_checking_ranges(tree)
        for node in ast.walk(tree):
            if not isinstance(node, (ast.Import, ast.ImportFrom)):
                continue
            if any(start <= node.lineno <= end for start, end in type_checking_ranges):
                continue
            if isinstance(node, ast.Import):
                results.extend((py_file.name, node.lineno, alias.name) for alias in node.names)
            elif node.module is not None:
                results.append((py_file.name, node.lineno, node.module))
    return results


def _find_type_checking_ranges(tree: ast.Module) -> list[tuple[int, int]]:
    """Find line ranges of `if TYPE_CHECKING:` blocks."""
    ranges: list[tuple[int, int]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.If) and isinstance(node.test, ast.Name) and node.test.id == "TYPE_CHECKING":
            start = node.lineno
            end = max(child.lineno for child in ast.walk(node) if hasattr(child, "lineno"))
            ranges.append((start, end))
    return ranges


def test_logic_is_pure():
    """standings.logic must not import persistence, app wiring or shared infrastructure."""
    forbidden = ("standings.persistence", "standings.app", "shared", "sqlite3")
    violations = [
        f"{name}:{lineno} {module}"
        for name, lineno, module in _collect_runtime_import_targets(_STANDINGS_ROOT / "logic")
        if module.startswith(forbidden)
    ]
    assert violations == [], f"standings.logic imports infrastructure: {violations}"


def test_persistence_does_not_import_app():
    """standings.persistence must not import from standings.app (one-way dependency)."""
    violations = [
        f"{name}:{lineno} {module}"
        for name, lineno, module in _collect_runtime_import_targets(_STANDINGS_ROOT / "persistence")
        if module.startswith("standings.app")
    ]
    assert violations == [], f"standings.persistence imports from standings.app: {violations}"
