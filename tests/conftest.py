"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest

from outlinelock.events import EventBus
from outlinelock.services.settings import Settings

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in (
        "OUTLINELOCK_LOCK_TAG",
        "OUTLINELOCK_OUTLINE_SYNTAX",
        "OUTLINELOCK_AUTO_REAPPLY",
        "OUTLINELOCK_DEBUG_LOGGING",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OUTLINELOCK_LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()
