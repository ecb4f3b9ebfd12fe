"""Service layer: settings persistence."""

from .settings import DEFAULT_LOCK_TAG, Settings, SettingsStore

__all__ = ["DEFAULT_LOCK_TAG", "Settings", "SettingsStore"]
