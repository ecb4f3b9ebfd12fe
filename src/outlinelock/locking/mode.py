"""Two-state lock mode re-applying locks whenever the document is saved."""

from __future__ import annotations

import logging
from enum import Enum

from ..errors import ModelAccessFailure
from ..events import DocumentSaved, EventBus, LockModeChanged, StatusMessage
from .synchronizer import LockResult, LockSynchronizer

LOGGER = logging.getLogger(__name__)


class ModeState(Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class LockMode:
    """Activation lifecycle for a :class:`LockSynchronizer`.

    Activating re-applies every lock and subscribes to :class:`DocumentSaved`
    for the synchronizer's document; deactivating unsubscribes and clears the
    whole overlay.
    """

    def __init__(self, synchronizer: LockSynchronizer, event_bus: EventBus) -> None:
        self._sync = synchronizer
        self._bus = event_bus
        self._state = ModeState.INACTIVE

    @property
    def state(self) -> ModeState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is ModeState.ACTIVE

    def activate(self) -> LockResult | None:
        """Switch to ``ACTIVE``; returns ``None`` when already active.

        Propagates :class:`ModelAccessFailure` from the initial pass, in which
        case the mode stays inactive and no handler is registered.
        """

        if self.is_active:
            return None
        result = self._sync.reapply_all()
        self._bus.subscribe(DocumentSaved, self._on_document_saved)
        self._state = ModeState.ACTIVE
        LOGGER.info("Lock mode activated for document %s", self._sync.document.document_id)
        self._bus.publish(LockModeChanged(document_id=self._sync.document.document_id, active=True))
        return result

    def deactivate(self) -> LockResult | None:
        """Switch to ``INACTIVE``; returns ``None`` when already inactive."""

        if not self.is_active:
            return None
        self._bus.unsubscribe(DocumentSaved, self._on_document_saved)
        result = self._sync.clear_all()
        self._state = ModeState.INACTIVE
        LOGGER.info("Lock mode deactivated for document %s", self._sync.document.document_id)
        self._bus.publish(LockModeChanged(document_id=self._sync.document.document_id, active=False))
        return result

    def toggle(self) -> LockResult | None:
        if self.is_active:
            return self.deactivate()
        return self.activate()

    def _on_document_saved(self, event: DocumentSaved) -> None:
        if event.document_id != self._sync.document.document_id:
            return
        try:
            result = self._sync.reapply_all()
        except ModelAccessFailure as exc:
            LOGGER.warning("Locks not re-applied after save: %s", exc)
            self._bus.publish(StatusMessage(message=f"Locks not re-applied: {exc}", level="warning"))
            return
        self._bus.publish(StatusMessage(message=result.message, timeout_ms=3_000))


__all__ = ["ModeState", "LockMode"]
