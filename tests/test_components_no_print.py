from __future__ import annotations

import ast
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
FACILITY_DIR = ROOT / "src" / "builders" / "facility"


def test_layout_core_has_no_print_calls() -> None:
    offenders: list[str] = []
    for path in sorted(FACILITY_DIR.rglob("*.py")):
        source = path.read_text(encoding="utf-8")
        tree = ast.parse(source, filename=str(path))
        for node in ast.walk(tree):
            if not isinstance(node, ast.Call):
                continue
            if isinstance(node.func, ast.Name) and node.func.id == "print":
                rel = path.relative_to(ROOT)
                offenders.append(f"{rel}:{node.lineno}")
    assert not offenders, f"print() is forbidden in the layout core: {', '.join(offenders)}"
