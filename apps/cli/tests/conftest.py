"""Shared fixtures for CLI tests."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from knowmap_core.settings import reset_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("KNOWMAP_"):
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()
