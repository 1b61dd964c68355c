from __future__ import annotations

import ast
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
PACKAGE_DIR = ROOT / "src" / "installation"


def test_library_modules_have_no_print_calls() -> None:
    offenders: list[str] = []
    paths = sorted(PACKAGE_DIR.rglob("*.py")) + [ROOT / "src" / "schema.py"]
    for path in paths:
        source = path.read_text(encoding="utf-8")
        tree = ast.parse(source, filename=str(path))
        for node in ast.walk(tree):
            if not isinstance(node, ast.Call):
                continue
            if isinstance(node.func, ast.Name) and node.func.id == "print":
                rel = path.relative_to(ROOT)
                offenders.append(f"{rel}:{node.lineno}")
    assert not offenders, f"print() is forbidden in library modules: {', '.join(offenders)}"
