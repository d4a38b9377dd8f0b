#!/usr/bin/env python3
"""Check that the dispatch core stays independent of the notifier plugins.

sizechecker.core, sizechecker.types and sizechecker.utils only see the
Notifier and HTTPClient protocols. Which destination flag maps to which
service, and which environment variables hold its credentials, is known to
sizechecker.plugins alone. This script parses every module in the three
packages and reports:

- any import of sizechecker.plugins or one of its subpackages
- string literals naming a plugin's credential environment variable
- string literals naming a plugin's API host

Usage:
    python3 scripts/check_provider_isolation.py [PACKAGE_DIR]

Exit codes:
    0: The core packages are plugin-agnostic
    1: At least one violation, or a module could not be parsed
"""

from __future__ import annotations

import ast
import re
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final

CORE_PACKAGES: Final[tuple[str, ...]] = ("core", "types", "utils")

PLUGIN_PACKAGE: Final[str] = "sizechecker.plugins"

# Credential variables read by plugins/pushover/config.py
CREDENTIAL_ENV_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bPUSHOVER_[A-Z]+\b")

# Service endpoints owned by plugin configuration
API_HOST_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(?:discord(?:app)?\.com|api\.pushover\.net)\b",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class Violation:
    path: Path
    line: int
    reason: str

    def render(self, root: Path) -> str:
        try:
            shown = self.path.relative_to(root)
        except ValueError:
            shown = self.path
        return f"{shown}:{self.line}: {self.reason}"


def _imported_modules(node: ast.Import | ast.ImportFrom) -> Iterator[str]:
    if isinstance(node, ast.Import):
        for alias in node.names:
            yield alias.name
        return

    if node.module is None or node.level:
        # Relative imports cannot leave the package they are written in
        return
    yield node.module
    for alias in node.names:
        yield f"{node.module}.{alias.name}"


def check_module(path: Path) -> list[Violation]:
    """Return every isolation violation in one module."""
    try:
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except (OSError, SyntaxError, UnicodeDecodeError) as exc:
        return [Violation(path, getattr(exc, "lineno", None) or 0, f"cannot parse module: {exc}")]

    violations: list[Violation] = []
    for node in ast.walk(tree):
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            for module in _imported_modules(node):
                if module == PLUGIN_PACKAGE or module.startswith(f"{PLUGIN_PACKAGE}."):
                    violations.append(Violation(path, node.lineno, f"imports {module}"))
                    break
        elif isinstance(node, ast.Constant) and isinstance(node.value, str):
            if match := CREDENTIAL_ENV_PATTERN.search(node.value):
                violations.append(Violation(path, node.lineno, f"names credential variable {match.group()}"))
            if match := API_HOST_PATTERN.search(node.value):
                violations.append(Violation(path, node.lineno, f"names service host {match.group()}"))

    return sorted(violations, key=lambda violation: violation.line)


def check_package(package_dir: Path) -> list[Violation]:
    """Check every module under the core packages of ``package_dir``."""
    violations: list[Violation] = []
    for name in CORE_PACKAGES:
        for path in sorted((package_dir / name).rglob("*.py")):
            violations.extend(check_module(path))
    return violations


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    project_root = Path(__file__).resolve().parent.parent
    package_dir = Path(args[0]) if args else project_root / "src" / "sizechecker"

    missing = [name for name in CORE_PACKAGES if not (package_dir / name).is_dir()]
    if missing:
        print(f"Error: {package_dir} has no {', '.join(missing)} package", file=sys.stderr)
        return 1

    violations = check_package(package_dir)
    if not violations:
        print(f"Plugin isolation OK: {', '.join(CORE_PACKAGES)} never reach into {PLUGIN_PACKAGE}")
        return 0

    for violation in violations:
        print(violation.render(project_root), file=sys.stderr)
    print(
        f"\n{len(violations)} isolation violation(s). "
        "Service-specific code belongs under sizechecker/plugins/.",
        file=sys.stderr,
    )
    return 1


if __name__ == "__main__":
    sys.exit(main())
