"""Shared fixtures for knowmap_core tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from knowmap_core.settings import reset_settings

FileTree = Callable[[dict[str, str]], Path]


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop KNOWMAP_* overrides from the environment and the settings cache."""
    for key in list(os.environ):
        if key.startswith("KNOWMAP_"):
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_files(tmp_path: Path) -> FileTree:
    """Write ``{relative path: content}`` under ``tmp_path`` and return the root."""

    def _make(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def project(make_files: FileTree) -> Path:
    """A project root with a minimal ``.knowmap.yaml``."""
    return make_files({".knowmap.yaml": "project:\n  name: demo\n"})
