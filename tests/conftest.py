"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest

# Run Qt headless when no display is available.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from santoku_sync.core.paths import PathResolver

from tests.helpers import RecordingStore, make_resolver


@pytest.fixture
def resolver() -> PathResolver:
    return make_resolver()


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture(autouse=True)
def _isolate_santoku_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SANTOKU_WORKSPACE_ROOT",
        "SANTOKU_LOG_DIR",
        "SANTOKU_SNIPPET_INDEX",
        "SANTOKU_DEBUG_LOGGING",
        "SANTOKU_SYNC_SELECTIONS",
        "SANTOKU_SYNC_TEXT",
    ):
        monkeypatch.delenv(name, raising=False)
