"""Minimal main window hosting a :class:`ProtectedTextEdit`."""

from __future__ import annotations

import logging
from typing import Any

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QMainWindow

from ..events import StatusMessage
from ..session import DocumentSession
from .protected_edit import ProtectedTextEdit

LOGGER = logging.getLogger(__name__)


class LockEditorWindow(QMainWindow):
    """Editor window exposing the lock commands as menu actions."""

    def __init__(self, session: DocumentSession, parent: Any | None = None) -> None:
        super().__init__(parent)
        self._session = session
        self.editor = ProtectedTextEdit(session, self)
        self.setCentralWidget(self.editor)
        path = session.document.metadata.path
        self.setWindowTitle(f"outlinelock - {path.name}" if path else "outlinelock")
        session.bus.subscribe(StatusMessage, self._show_status)
        self._build_menus()

    def _build_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        save_action = QAction("&Save", self)
        save_action.setShortcut(QKeySequence(QKeySequence.StandardKey.Save))
        save_action.triggered.connect(self._save)
        file_menu.addAction(save_action)

        lock_menu = self.menuBar().addMenu("&Locks")
        for spec in self._session.commands.actions(self.editor.cursor_position):
            action = QAction(spec.text, self)
            if spec.shortcut:
                action.setShortcut(QKeySequence(spec.shortcut))
            if spec.status_tip:
                action.setStatusTip(spec.status_tip)
            action.triggered.connect(lambda _checked=False, command=spec: command.trigger())
            lock_menu.addAction(action)

    def _save(self) -> None:
        try:
            self._session.save()
        except (OSError, ValueError) as exc:
            LOGGER.warning("Save failed: %s", exc)
            self.statusBar().showMessage(f"Save failed: {exc}")

    def _show_status(self, event: StatusMessage) -> None:
        self.statusBar().showMessage(event.message, event.timeout_ms)


__all__ = ["LockEditorWindow"]
