#!/usr/bin/env python3
"""Fail when ``etcd`` is imported anywhere but the etcd property store.

CIP code reaches etcd only through the PropertyStore protocol, so
python-etcd types and exceptions never leak past ``store/etcd_store.py``.
"""

from __future__ import annotations

import ast
import sys
from collections.abc import Iterator
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent.parent / "src" / "ciao_configuration"
ETCD_MODULE = Path("store") / "etcd_store.py"


def _is_etcd(module: str | None) -> bool:
    return bool(module) and module.partition(".")[0] == "etcd"


def etcd_imports(source: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line, statement)`` for every absolute etcd import in *source*."""
    for node in ast.walk(ast.parse(source)):
        if isinstance(node, ast.Import):
            yield from (
                (node.lineno, f"import {alias.name}")
                for alias in node.names if _is_etcd(alias.name)
            )
        elif isinstance(node, ast.ImportFrom) and node.level == 0 and _is_etcd(node.module):
            yield node.lineno, f"from {node.module} import ..."


def check(package_dir: Path = PACKAGE_DIR) -> list[str]:
    violations: list[str] = []
    for py_file in sorted(package_dir.rglob("*.py")):
        rel = py_file.relative_to(package_dir)
        if rel == ETCD_MODULE:
            continue
        source = py_file.read_text(encoding="utf-8")
        violations.extend(f"{rel}:{line}: {stmt}" for line, stmt in etcd_imports(source))
    return violations


def main() -> int:
    violations = check()
    for violation in violations:
        print(violation, file=sys.stderr)
    if violations:
        print(f"{len(violations)} etcd import(s) outside {ETCD_MODULE}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
