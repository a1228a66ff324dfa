"""
Pytest configuration and shared fixtures for temporary directory manager tests.
"""

import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import Mock

import pytest

from tmpdir_manager.config import ENSURE_REMOVED_ON_EXIT_ENV_VAR, TMP_ROOT_ENV_VARS
from tmpdir_manager.exit_hook import ExitHook
from tmpdir_manager.service import TempDirService, get_service, reset_service


@pytest.fixture(autouse=True)
def tmp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the scratch root at a per-test directory."""
    for name in TMP_ROOT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv(ENSURE_REMOVED_ON_EXIT_ENV_VAR, raising=False)

    root = tmp_path / "scratch"
    monkeypatch.setenv("TEST_TMP_DIR", str(root))
    return Path(os.path.realpath(root))


@pytest.fixture(autouse=True)
def process_hooks(monkeypatch: pytest.MonkeyPatch) -> Mock:
    """Keep tests from installing real atexit and signal handlers."""
    install = Mock()
    monkeypatch.setattr(ExitHook, "_install_process_hooks", install)
    return install


@pytest.fixture
def service() -> Generator[TempDirService, None, None]:
    """Fresh global service for each test."""
    reset_service()
    yield get_service()
    reset_service()


@pytest.fixture
def disable_exit_cleanup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENSURE_REMOVED_ON_EXIT_ENV_VAR, "false")
