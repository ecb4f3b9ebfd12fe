"""Tests for the lock mode lifecycle and its save hook."""

from __future__ import annotations

import pytest

from outlinelock.editor.document_model import DocumentState
from outlinelock.errors import ModelAccessFailure
from outlinelock.events import DocumentSaved, EventBus, LockModeChanged, StatusMessage
from outlinelock.locking.mode import LockMode, ModeState
from outlinelock.locking.synchronizer import LockStatus, LockSynchronizer
from outlinelock.outline.model import HeadlineOutline
from outlinelock.services.settings import Settings

from tests.helpers import SCENARIO_A


def _mode(text: str, bus: EventBus) -> LockMode:
    sync = LockSynchronizer(DocumentState(text=text), HeadlineOutline("org"), Settings(), event_bus=bus)
    return LockMode(sync, bus)


def _spans(mode: LockMode) -> list[tuple[int, int]]:
    return [span.to_tuple() for span in mode._sync.document.protection.spans()]


class TestLifecycle:
    def test_starts_inactive(self, event_bus: EventBus) -> None:
        mode = _mode(SCENARIO_A, event_bus)

        assert mode.state is ModeState.INACTIVE
        assert event_bus.handler_count(DocumentSaved) == 0

    def test_activate_reapplies_and_subscribes(self, event_bus: EventBus) -> None:
        mode = _mode(SCENARIO_A, event_bus)
        result = mode.activate()

        assert result is not None and result.status is LockStatus.REAPPLIED
        assert mode.is_active
        assert _spans(mode) == [(17, 45)]
        assert event_bus.handler_count(DocumentSaved) == 1

    def test_activate_twice_registers_one_handler(self, event_bus: EventBus) -> None:
        mode = _mode(SCENARIO_A, event_bus)
        mode.activate()

        assert mode.activate() is None
        assert event_bus.handler_count(DocumentSaved) == 1

    def test_deactivate_clears_and_unsubscribes(self, event_bus: EventBus) -> None:
        mode = _mode(SCENARIO_A, event_bus)
        mode.activate()
        result = mode.deactivate()

        assert result is not None and result.status is LockStatus.CLEARED
        assert mode.state is ModeState.INACTIVE
        assert _spans(mode) == []
        assert event_bus.handler_count(DocumentSaved) == 0

    def test_deactivate_when_inactive_is_noop(self, event_bus: EventBus) -> None:
        assert _mode(SCENARIO_A, event_bus).deactivate() is None

    def test_toggle_flips_state(self, event_bus: EventBus) -> None:
        mode = _mode(SCENARIO_A, event_bus)
        mode.toggle()
        assert mode.is_active
        mode.toggle()
        assert not mode.is_active

    def test_publishes_mode_changes(self, event_bus: EventBus) -> None:
        changes: list[bool] = []
        event_bus.subscribe(LockModeChanged, lambda event: changes.append(event.active))
        mode = _mode(SCENARIO_A, event_bus)
        mode.activate()
        mode.deactivate()

        assert changes == [True, False]

    def test_failed_activation_stays_inactive(self, event_bus: EventBus) -> None:
        mode = _mode("* A :x::y:\n", event_bus)

        with pytest.raises(ModelAccessFailure):
            mode.activate()

        assert not mode.is_active
        assert event_bus.handler_count(DocumentSaved) == 0


class TestSaveHook:
    def test_save_reapplies_new_tags(self, event_bus: EventBus) -> None:
        mode = _mode("* A\nbody\n", event_bus)
        mode.activate()
        document = mode._sync.document
        document.insert(3, " :locked:")
        assert _spans(mode) == []

        event_bus.publish(DocumentSaved(document_id=document.document_id))

        assert document.text == "* A :locked:\nbody\n"
        assert _spans(mode) == [(0, 18)]

    def test_save_of_other_document_is_ignored(self, event_bus: EventBus) -> None:
        mode = _mode("* A\nbody\n", event_bus)
        mode.activate()
        mode._sync.document.insert(3, " :locked:")

        event_bus.publish(DocumentSaved(document_id="someone-else"))

        assert _spans(mode) == []

    def test_no_reapply_after_deactivation(self, event_bus: EventBus) -> None:
        mode = _mode("* A\nbody\n", event_bus)
        mode.activate()
        mode.deactivate()
        document = mode._sync.document
        document.insert(3, " :locked:")

        event_bus.publish(DocumentSaved(document_id=document.document_id))

        assert _spans(mode) == []

    def test_save_reports_status(self, event_bus: EventBus) -> None:
        messages: list[StatusMessage] = []
        event_bus.subscribe(StatusMessage, messages.append)
        mode = _mode(SCENARIO_A, event_bus)
        mode.activate()

        event_bus.publish(DocumentSaved(document_id=mode._sync.document.document_id))

        assert [message.message for message in messages] == ["Re-applied locks: 1 headline locked"]

    def test_malformed_outline_on_save_warns_and_keeps_overlay(self, event_bus: EventBus) -> None:
        messages: list[StatusMessage] = []
        event_bus.subscribe(StatusMessage, messages.append)
        mode = _mode(SCENARIO_A, event_bus)
        mode.activate()
        document = mode._sync.document
        document.insert(len(document.text), "* Broken :a::b:\n")

        event_bus.publish(DocumentSaved(document_id=document.document_id))

        assert _spans(mode) == [(17, 45)]
        assert messages and messages[-1].level == "warning"
        assert mode.is_active
