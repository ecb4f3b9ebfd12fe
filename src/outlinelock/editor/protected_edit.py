"""PySide6 text widget that honours a document's locked overlay.

User input that would modify locked text is swallowed and reported through a
:class:`StatusMessage`. Permitted edits are mirrored into the backing
:class:`DocumentState` so locked spans move with the surrounding text until
the next full re-application.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QColor, QKeyEvent, QKeySequence, QTextCursor
from PySide6.QtWidgets import QPlainTextEdit, QTextEdit

from ..errors import ProtectedRegionError
from ..events import DocumentModified, LockModeChanged, LocksReapplied, LockToggled, StatusMessage

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..session import DocumentSession

LOGGER = logging.getLogger(__name__)

_LOCKED_BACKGROUND = "#ececec"
_BLOCKED_MESSAGE = "Text is read-only: it belongs to a locked subtree"
_TYPING_KEYS = {Qt.Key.Key_Return, Qt.Key.Key_Enter, Qt.Key.Key_Tab}


class ProtectedTextEdit(QPlainTextEdit):
    """Plain-text editor bound to a :class:`DocumentSession`."""

    def __init__(self, session: DocumentSession, parent: Any | None = None) -> None:
        super().__init__(parent)
        self._session = session
        self._syncing = False
        self._restore_pending = False
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        self._load_from_document()
        self.document().contentsChange.connect(self._on_contents_change)
        bus = session.bus
        bus.subscribe(LockToggled, self._on_lock_toggled)
        bus.subscribe(LocksReapplied, self._on_overlay_changed)
        bus.subscribe(LockModeChanged, self._on_overlay_changed)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def cursor_position(self) -> int:
        return self.textCursor().position()

    def reload(self) -> None:
        """Re-read the document text, keeping the caret where it was."""

        position = self.cursor_position()
        self._load_from_document()
        cursor = self.textCursor()
        cursor.setPosition(min(position, len(self._session.document.text)))
        self.setTextCursor(cursor)

    # ------------------------------------------------------------------
    # Input filtering
    # ------------------------------------------------------------------

    def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802 - Qt override
        span = self._pending_edit_span(event)
        if span is not None and self._blocks(*span):
            self._reject()
            event.accept()
            return
        super().keyPressEvent(event)

    def cut(self) -> None:
        cursor = self.textCursor()
        if cursor.hasSelection() and self._blocks(cursor.selectionStart(), cursor.selectionEnd()):
            self._reject()
            return
        super().cut()

    def insertFromMimeData(self, source: Any) -> None:  # noqa: N802 - Qt override
        cursor = self.textCursor()
        if self._blocks(cursor.selectionStart(), cursor.selectionEnd()):
            self._reject()
            return
        super().insertFromMimeData(source)

    def dropEvent(self, event: Any) -> None:  # noqa: N802 - Qt override
        target = self.cursorForPosition(event.position().toPoint()).position()
        cursor = self.textCursor()
        moving = event.source() is self and cursor.hasSelection()
        if self._blocks(target, target) or (moving and self._blocks(cursor.selectionStart(), cursor.selectionEnd())):
            self._reject()
            event.ignore()
            return
        super().dropEvent(event)

    def _pending_edit_span(self, event: QKeyEvent) -> tuple[int, int] | None:
        """Return the span a key press would replace, or ``None`` for non-edits."""

        cursor = self.textCursor()
        start, end = cursor.selectionStart(), cursor.selectionEnd()
        if event.matches(QKeySequence.StandardKey.Undo) or event.matches(QKeySequence.StandardKey.Redo):
            # Undo history may restore text inside a locked span.
            return (0, len(self._session.document.text)) if self._session.document.protection else None
        if event.matches(QKeySequence.StandardKey.Cut):
            return (start, end) if start != end else None
        if event.matches(QKeySequence.StandardKey.Paste):
            return (start, end)
        if event.matches(QKeySequence.StandardKey.DeleteStartOfWord):
            return self._word_span(cursor, QTextCursor.MoveOperation.PreviousWord)
        if event.matches(QKeySequence.StandardKey.DeleteEndOfWord):
            return self._word_span(cursor, QTextCursor.MoveOperation.NextWord)
        key = event.key()
        if key == Qt.Key.Key_Backspace:
            if start != end:
                return (start, end)
            return (start - 1, start) if start > 0 else None
        if key == Qt.Key.Key_Delete:
            if start != end:
                return (start, end)
            length = len(self._session.document.text)
            return (start, start + 1) if start < length else None
        text = event.text()
        if key in _TYPING_KEYS or (text and text.isprintable()):
            return (start, end)
        return None

    @staticmethod
    def _word_span(cursor: QTextCursor, operation: QTextCursor.MoveOperation) -> tuple[int, int]:
        if cursor.hasSelection():
            return (cursor.selectionStart(), cursor.selectionEnd())
        moved = QTextCursor(cursor)
        moved.movePosition(operation, QTextCursor.MoveMode.KeepAnchor)
        return (moved.selectionStart(), moved.selectionEnd())

    def _blocks(self, start: int, end: int) -> bool:
        return self._session.document.protection.blocks_edit(start, end)

    def _reject(self) -> None:
        LOGGER.debug("Blocked edit at %d", self.cursor_position())
        self._session.bus.publish(StatusMessage(message=_BLOCKED_MESSAGE, level="warning", timeout_ms=2_000))

    # ------------------------------------------------------------------
    # Document mirroring
    # ------------------------------------------------------------------

    def _load_from_document(self) -> None:
        self._syncing = True
        try:
            self.setPlainText(self._session.document.text)
        finally:
            self._syncing = False
        self._refresh_highlights()

    def _on_contents_change(self, position: int, removed: int, added: int) -> None:
        if self._syncing or self._restore_pending:
            return
        document = self._session.document
        plain = self.toPlainText()
        if plain == document.text:
            return
        # Qt may report the whole document as changed; diff against the model
        # instead, anchored at the reported position.
        start, old_end, new_end = _diff_span(document.text, plain, anchor=position)
        try:
            document.replace_range(start, old_end, plain[start:new_end])
        except ProtectedRegionError:
            # Context-menu actions and undo bypass the input filters; the model
            # refuses the edit and the view is rebuilt once Qt finishes it.
            self._restore_pending = True
            QTimer.singleShot(0, self._restore_after_rejected_edit)
            self._reject()
            return
        LOGGER.debug("Mirrored edit at %d (-%d/+%d)", start, old_end - start, new_end - start)
        self._session.bus.publish(
            DocumentModified(
                document_id=document.document_id,
                version_id=document.version_id,
                content_hash=document.content_hash,
            )
        )
        self._refresh_highlights()

    def _restore_after_rejected_edit(self) -> None:
        self._restore_pending = False
        self.reload()

    def _on_lock_toggled(self, event: LockToggled) -> None:
        if event.document_id == self._session.document.document_id:
            self.reload()

    def _on_overlay_changed(self, event: Any) -> None:
        if getattr(event, "document_id", None) == self._session.document.document_id:
            self._refresh_highlights()

    def _refresh_highlights(self) -> None:
        selections = []
        for span in self._session.document.protection.spans():
            selection = QTextEdit.ExtraSelection()
            cursor = QTextCursor(self.document())
            cursor.setPosition(span.start)
            cursor.setPosition(min(span.end, self.document().characterCount() - 1), QTextCursor.MoveMode.KeepAnchor)
            selection.cursor = cursor
            selection.format.setBackground(QColor(_LOCKED_BACKGROUND))
            selections.append(selection)
        self.setExtraSelections(selections)


def _diff_span(old: str, new: str, *, anchor: int) -> tuple[int, int, int]:
    """Return ``(start, old_end, new_end)`` of the single edit turning ``old`` into ``new``."""

    limit = min(len(old), len(new), max(0, anchor))
    start = 0
    while start < limit and old[start] == new[start]:
        start += 1
    old_end, new_end = len(old), len(new)
    while old_end > start and new_end > start and old[old_end - 1] == new[new_end - 1]:
        old_end -= 1
        new_end -= 1
    return start, old_end, new_end


__all__ = ["ProtectedTextEdit"]
