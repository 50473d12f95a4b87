"""Static checks over the swiftgo sources.

These tests enforce that:
- processes are only spawned through subprocess_utils.safe_run
- production code reports through logging or swiftgo.output, never print()
"""

import ast
from pathlib import Path

SRC_DIR = Path(__file__).parent.parent.parent / "src" / "swiftgo"

SPAWN_FUNCTIONS = {"run", "Popen", "call", "check_call", "check_output", "getoutput", "getstatusoutput"}


def _source_files():
    files = [p for p in SRC_DIR.rglob("*.py") if "__pycache__" not in p.parts]
    assert files, f"No Python files found in {SRC_DIR}"
    return files


def test_subprocess_calls_use_safe_wrapper():
    violations = []
    for file_path in _source_files():
        if file_path.name == "subprocess_utils.py":
            continue

        tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
        for node in ast.walk(tree):
            if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
                continue
            target = node.func.value
            if isinstance(target, ast.Name) and target.id == "subprocess" and node.func.attr in SPAWN_FUNCTIONS:
                violations.append(f"{file_path.name}:{node.lineno} subprocess.{node.func.attr}()")

    assert not violations, "Use subprocess_utils.safe_run instead:\n" + "\n".join(violations)


def test_no_print_statements_in_production_code():
    violations = []
    for file_path in _source_files():
        tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id == "print":
                violations.append(f"{file_path.name}:{node.lineno}")

    assert not violations, "Use logging or swiftgo.output instead of print():\n" + "\n".join(violations)
