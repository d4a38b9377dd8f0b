"""Tests for the plugin isolation check in scripts/."""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[3]
SCRIPT = PROJECT_ROOT / "scripts" / "check_provider_isolation.py"


@pytest.fixture(scope="module")
def isolation() -> ModuleType:
    spec = importlib.util.spec_from_file_location("check_provider_isolation", SCRIPT)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def package_dir(tmp_path: Path) -> Path:
    root = tmp_path / "sizechecker"
    for name in ("core", "types", "utils"):
        (root / name).mkdir(parents=True)
        _ = (root / name / "__init__.py").write_text('"""Clean package."""\n')
    return root


def _reasons(isolation: ModuleType, package_dir: Path) -> list[str]:
    return [violation.reason for violation in isolation.check_package(package_dir)]  # pyright: ignore[reportAny]


def test_shipped_package_is_isolated(isolation: ModuleType) -> None:
    assert isolation.main([str(PROJECT_ROOT / "src" / "sizechecker")]) == 0


def test_clean_package_passes(isolation: ModuleType, package_dir: Path) -> None:
    assert _reasons(isolation, package_dir) == []


@pytest.mark.parametrize(
    "source",
    [
        "import sizechecker.plugins.discord\n",
        "from sizechecker.plugins import build_notifiers\n",
        "from sizechecker import plugins\n",
        "def f():\n    from sizechecker.plugins.pushover.config import API_TOKEN_ENV\n",
    ],
)
def test_plugin_imports_reported(isolation: ModuleType, package_dir: Path, source: str) -> None:
    _ = (package_dir / "core" / "leaky.py").write_text(source)

    reasons = _reasons(isolation, package_dir)

    assert len(reasons) == 1
    assert reasons[0].startswith("imports sizechecker.plugins")


def test_credential_variable_reported(isolation: ModuleType, package_dir: Path) -> None:
    _ = (package_dir / "utils" / "env.py").write_text('import os\nTOKEN = os.environ["PUSHOVER_APITOKEN"]\n')
    assert _reasons(isolation, package_dir) == ["names credential variable PUSHOVER_APITOKEN"]


def test_service_host_reported(isolation: ModuleType, package_dir: Path) -> None:
    _ = (package_dir / "types" / "urls.py").write_text('BASE = "https://discord.com/api/webhooks"\n')
    assert _reasons(isolation, package_dir) == ["names service host discord.com"]


def test_comments_and_generic_words_allowed(isolation: ModuleType, package_dir: Path) -> None:
    source = '# Providers such as pushover live in plugins\nLABEL = "webhook delivery"\n'
    _ = (package_dir / "core" / "notes.py").write_text(source)
    assert _reasons(isolation, package_dir) == []


def test_unparseable_module_reported(isolation: ModuleType, package_dir: Path) -> None:
    _ = (package_dir / "core" / "broken.py").write_text("def broken(:\n")
    reasons = _reasons(isolation, package_dir)
    assert len(reasons) == 1
    assert reasons[0].startswith("cannot parse module")


def test_missing_core_package_fails(
    isolation: ModuleType,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert isolation.main([str(tmp_path)]) == 1
    assert "has no core, types, utils package" in capsys.readouterr().err
