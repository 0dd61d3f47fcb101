"""Pytest configuration for repository test runs."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _isolated_cdn_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CDN_* variables from the developer shell out of tests."""
    for variable_name in (
        "CDN_DATA_ROOT",
        "CDN_STORAGE_BACKEND",
        "CDN_ACCESS_POLICY",
        "CDN_MAX_KEY_BYTES",
        "CDN_MAX_VALUE_BYTES",
    ):
        monkeypatch.delenv(variable_name, raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo root handler changes made by CLI runs."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    root.handlers = saved_handlers
    root.setLevel(saved_level)
