"""Headless tests for the lock-aware Qt editor."""

from __future__ import annotations

import pytest

pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QEvent, Qt  # noqa: E402
from PySide6.QtGui import QKeyEvent, QTextCursor  # noqa: E402

from outlinelock.editor.protected_edit import ProtectedTextEdit, _diff_span  # noqa: E402
from outlinelock.editor.window import LockEditorWindow  # noqa: E402
from outlinelock.events import DocumentModified, StatusMessage  # noqa: E402
from outlinelock.session import DocumentSession  # noqa: E402

from tests.helpers import SCENARIO_A  # noqa: E402


@pytest.fixture(autouse=True)
def _ensure_qapp(qapp):
    return qapp


@pytest.fixture
def session() -> DocumentSession:
    session = DocumentSession.from_text(SCENARIO_A)
    session.commands.reapply_locks()
    return session


def _press(widget: ProtectedTextEdit, key: Qt.Key, text: str = "") -> None:
    widget.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, key, Qt.KeyboardModifier.NoModifier, text))


def _place(widget: ProtectedTextEdit, position: int) -> None:
    cursor = widget.textCursor()
    cursor.setPosition(position)
    widget.setTextCursor(cursor)


def test_typing_inside_locked_subtree_is_rejected(session: DocumentSession) -> None:
    warnings: list[StatusMessage] = []
    session.bus.subscribe(StatusMessage, warnings.append)
    widget = ProtectedTextEdit(session)
    _place(widget, 25)

    _press(widget, Qt.Key.Key_X, "x")

    assert widget.toPlainText() == SCENARIO_A
    assert session.document.text == SCENARIO_A
    assert warnings and warnings[-1].level == "warning"


def test_backspace_into_locked_text_is_rejected(session: DocumentSession) -> None:
    widget = ProtectedTextEdit(session)
    _place(widget, 18)

    _press(widget, Qt.Key.Key_Backspace)

    assert session.document.text == SCENARIO_A


def _select(widget: ProtectedTextEdit, start: int, end: int) -> QTextCursor:
    cursor = widget.textCursor()
    cursor.setPosition(start)
    cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)
    widget.setTextCursor(cursor)
    return cursor


def test_cut_of_locked_selection_is_rejected(session: DocumentSession) -> None:
    warnings: list[StatusMessage] = []
    session.bus.subscribe(StatusMessage, warnings.append)
    widget = ProtectedTextEdit(session)
    _select(widget, 38, 44)

    widget.cut()

    assert session.document.text == SCENARIO_A
    assert widget.toPlainText() == SCENARIO_A
    assert warnings and warnings[-1].level == "warning"


def test_unfiltered_deletion_of_locked_text_is_rolled_back(session: DocumentSession, qapp) -> None:
    warnings: list[StatusMessage] = []
    session.bus.subscribe(StatusMessage, warnings.append)
    widget = ProtectedTextEdit(session)

    # Editing through a cursor skips the key and clipboard hooks, like the
    # context menu's Delete entry does.
    _select(widget, 38, 44).removeSelectedText()

    assert session.document.text == SCENARIO_A
    assert [span.to_tuple() for span in session.document.protection.spans()] == [(17, 45)]
    assert warnings and warnings[-1].level == "warning"

    qapp.processEvents()

    assert widget.toPlainText() == SCENARIO_A


def test_unfiltered_edit_outside_locks_is_mirrored(session: DocumentSession) -> None:
    widget = ProtectedTextEdit(session)

    _select(widget, 12, 16).insertText("text")

    assert session.document.text == "* Heading A\ntext\n* Heading B :locked:\nsecret\n"
    assert [span.to_tuple() for span in session.document.protection.spans()] == [(17, 45)]


def test_typing_outside_is_mirrored_and_shifts_locks(session: DocumentSession) -> None:
    modified: list[DocumentModified] = []
    session.bus.subscribe(DocumentModified, modified.append)
    widget = ProtectedTextEdit(session)
    _place(widget, 16)

    _press(widget, Qt.Key.Key_X, "x")

    assert session.document.text == "* Heading A\nbodyx\n* Heading B :locked:\nsecret\n"
    assert widget.toPlainText() == session.document.text
    assert [span.to_tuple() for span in session.document.protection.spans()] == [(18, 46)]
    assert len(modified) == 1


def test_toggle_reloads_widget(session: DocumentSession) -> None:
    widget = ProtectedTextEdit(session)

    session.commands.toggle_lock(20)

    assert widget.toPlainText() == "* Heading A\nbody\n* Heading B\nsecret\n"
    assert widget.extraSelections() == []


def test_locked_spans_are_highlighted(session: DocumentSession) -> None:
    widget = ProtectedTextEdit(session)

    (selection,) = widget.extraSelections()
    assert selection.cursor.selectionStart() == 17


def test_window_exposes_lock_actions(session: DocumentSession) -> None:
    window = LockEditorWindow(session)
    titles = [action.text() for action in window.menuBar().actions()]

    assert titles == ["&File", "&Locks"]
    session.bus.publish(StatusMessage(message="hello"))
    assert window.statusBar().currentMessage() == "hello"


@pytest.mark.parametrize(
    ("old", "new", "anchor", "expected"),
    [
        ("abc", "abXc", 2, (2, 2, 3)),
        ("aaa", "aaaa", 1, (1, 1, 2)),
        ("hello", "help", 3, (3, 5, 4)),
    ],
)
def test_diff_span(old: str, new: str, anchor: int, expected: tuple[int, int, int]) -> None:
    assert _diff_span(old, new, anchor=anchor) == expected
