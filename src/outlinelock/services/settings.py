"""Settings dataclass and JSON persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from ..outline.model import is_valid_tag

__all__ = [
    "Settings",
    "SettingsStore",
    "DEFAULT_LOCK_TAG",
]

LOGGER = logging.getLogger(__name__)
_DEFAULT_SETTINGS_PATH = Path.home() / ".outlinelock" / "settings.json"
_SETTINGS_VERSION = 1
DEFAULT_LOCK_TAG = "locked"


def _parse_flag(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# Environment variable -> (field, parser). Applied after file and CLI values.
_ENV_OVERRIDES: Mapping[str, tuple[str, Callable[[str], Any]]] = {
    "OUTLINELOCK_LOCK_TAG": ("lock_tag", str),
    "OUTLINELOCK_OUTLINE_SYNTAX": ("outline_syntax", str),
    "OUTLINELOCK_AUTO_REAPPLY": ("auto_reapply_on_save", _parse_flag),
    "OUTLINELOCK_DEBUG_LOGGING": ("debug_logging", _parse_flag),
}


@dataclass(slots=True)
class Settings:
    """User-configurable settings persisted between sessions.

    ``lock_tag`` is read by every lock operation at call time, so changing it
    affects the next toggle or re-application. Spans locked under a previous
    tag are not migrated.
    """

    lock_tag: str = DEFAULT_LOCK_TAG
    auto_reapply_on_save: bool = True
    outline_syntax: str = "org"
    debug_logging: bool = False

    def normalized(self) -> Settings:
        """Return a copy with a usable lock tag and lower-case syntax name.

        A blank tag, or one that cannot be written into an org tag group
        (``read-only``, ``two words``), falls back to :data:`DEFAULT_LOCK_TAG`.
        """

        tag = str(self.lock_tag or "").strip()
        if not is_valid_tag(tag):
            LOGGER.warning("Unusable lock tag %r configured; using %r", tag, DEFAULT_LOCK_TAG)
            tag = DEFAULT_LOCK_TAG
        syntax = str(self.outline_syntax or "org").strip().lower()
        if (tag, syntax) == (self.lock_tag, self.outline_syntax):
            return self
        return replace(self, lock_tag=tag, outline_syntax=syntax)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(item.name for item in fields(cls))


class SettingsStore:
    """Reads and writes :class:`Settings` as a small JSON document."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Return settings from disk, then CLI ``overrides``, then the environment.

        A missing or unreadable file yields the defaults. ``None`` values in
        ``overrides`` are ignored so argparse results can be passed straight in.
        """

        settings = self._from_payload(self._read_payload())
        if overrides:
            settings = _merge(settings, overrides, source="command line")
        env_values = {
            field_name: parse(os.environ[env_name])
            for env_name, (field_name, parse) in _ENV_OVERRIDES.items()
            if env_name in os.environ
        }
        if env_values:
            settings = _merge(settings, env_values, source="environment")
        LOGGER.debug("Settings resolved from %s (lock_tag=%r)", self._path, settings.lock_tag)
        return settings

    def save(self, settings: Settings) -> Path:
        """Write ``settings`` through a temporary file so readers never see half a file."""

        payload: Dict[str, Any] = {"version": _SETTINGS_VERSION, **asdict(settings)}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        staging = self._path.with_suffix(".tmp")
        staging.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        staging.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Ignoring settings file %s: invalid JSON (%s)", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Ignoring settings file %s: expected a JSON object", self._path)
            return {}
        return payload

    @staticmethod
    def _from_payload(payload: Mapping[str, Any]) -> Settings:
        known = {key: value for key, value in payload.items() if key in Settings.field_names()}
        return Settings(**known).normalized()


def _merge(settings: Settings, values: Mapping[str, Any], *, source: str) -> Settings:
    changes = {
        key: value
        for key, value in values.items()
        if key in Settings.field_names() and value is not None
    }
    if not changes:
        return settings
    LOGGER.debug("Applying %s overrides: %s", source, sorted(changes))
    return replace(settings, **changes).normalized()
