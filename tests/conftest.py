"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_SDB_ENV_NAMES = ("SDB_DEFAULT_COMMENT", "SDB_FAIL_ON_SKIPPED_ROWS", "SDB_LOG_LEVEL")


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _isolated_sdb_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer SDB_* settings out of config-dependent tests."""
    for name in _SDB_ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
