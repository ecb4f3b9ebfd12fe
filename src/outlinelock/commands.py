"""User-facing lock commands and their action descriptors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .errors import ModelAccessFailure, NoEnclosingHeadline, OutlineLockError
from .events import EventBus, StatusMessage
from .locking.mode import LockMode
from .locking.synchronizer import LockSynchronizer

LOGGER = logging.getLogger(__name__)

TOGGLE_LOCK = "toggle-lock"
REAPPLY_LOCKS = "reapply-locks"
LOCK_MODE = "lock-mode"


@dataclass(slots=True, frozen=True)
class CommandResult:
    """Outcome of a command; ``message`` is meant for the status bar."""

    ok: bool
    message: str


@dataclass(slots=True)
class CommandAction:
    """Represents a command exposed through menus, shortcuts or the CLI."""

    name: str
    text: str
    shortcut: str | None = None
    status_tip: str | None = None
    callback: Callable[[], Any] | None = None

    def trigger(self) -> None:
        """Invoke the registered callback, if available."""

        if self.callback is not None:
            self.callback()


class LockCommands:
    """Wraps the synchronizer and mode so no failure escapes into the host."""

    def __init__(self, synchronizer: LockSynchronizer, mode: LockMode, event_bus: EventBus) -> None:
        self._sync = synchronizer
        self._mode = mode
        self._bus = event_bus

    def toggle_lock(self, cursor_position: int) -> CommandResult:
        try:
            result = self._sync.toggle_at(cursor_position)
        except NoEnclosingHeadline:
            return self._report(False, "No headline at cursor; nothing to lock")
        except ModelAccessFailure as exc:
            LOGGER.warning("toggle-lock aborted: %s", exc)
            return self._report(False, f"Cannot read outline: {exc}", level="warning")
        except OutlineLockError as exc:
            LOGGER.warning("toggle-lock refused: %s", exc)
            return self._report(False, f"Cannot toggle lock: {exc}", level="warning")
        return self._report(True, result.message)

    def reapply_locks(self) -> CommandResult:
        try:
            result = self._sync.reapply_all()
        except ModelAccessFailure as exc:
            LOGGER.warning("reapply-locks aborted: %s", exc)
            return self._report(False, f"Cannot read outline: {exc}", level="warning")
        return self._report(True, result.message)

    def set_mode(self, enabled: bool | None = None) -> CommandResult:
        """Enable, disable or (with ``None``) flip the auto re-apply mode."""

        target = (not self._mode.is_active) if enabled is None else bool(enabled)
        try:
            if target:
                self._mode.activate()
            else:
                self._mode.deactivate()
        except OutlineLockError as exc:
            LOGGER.warning("lock-mode change failed: %s", exc)
            return self._report(False, f"Lock mode unchanged: {exc}", level="warning")
        return self._report(True, "Lock mode enabled" if self._mode.is_active else "Lock mode disabled")

    def actions(self, cursor_provider: Callable[[], int]) -> tuple[CommandAction, ...]:
        """Return action descriptors bound to ``cursor_provider`` for toggling."""

        return (
            CommandAction(
                name=TOGGLE_LOCK,
                text="Toggle Lock",
                shortcut="Ctrl+L",
                status_tip="Lock or unlock the subtree under the cursor",
                callback=lambda: self.toggle_lock(cursor_provider()),
            ),
            CommandAction(
                name=REAPPLY_LOCKS,
                text="Re-apply Locks",
                shortcut="Ctrl+Shift+L",
                status_tip="Rebuild read-only regions from headline tags",
                callback=self.reapply_locks,
            ),
            CommandAction(
                name=LOCK_MODE,
                text="Lock Mode",
                status_tip="Re-apply locks automatically on save",
                callback=self.set_mode,
            ),
        )

    def _report(self, ok: bool, message: str, *, level: str = "info") -> CommandResult:
        self._bus.publish(StatusMessage(message=message, level=level, timeout_ms=3_000))
        return CommandResult(ok=ok, message=message)


__all__ = [
    "TOGGLE_LOCK",
    "REAPPLY_LOCKS",
    "LOCK_MODE",
    "CommandResult",
    "CommandAction",
    "LockCommands",
]
