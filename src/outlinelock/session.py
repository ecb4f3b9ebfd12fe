"""Wiring of one document with its outline model, synchronizer, mode and commands."""

from __future__ import annotations

import logging
from pathlib import Path

from .commands import LockCommands
from .editor.document_model import DocumentMetadata, DocumentState
from .events import DocumentSaved, EventBus
from .locking.mode import LockMode
from .locking.synchronizer import LockSynchronizer
from .outline.model import HeadlineOutline, OutlineModel
from .services.settings import Settings
from .utils import file_io

LOGGER = logging.getLogger(__name__)


class DocumentSession:
    """Owns the lock machinery for a single open document."""

    def __init__(
        self,
        document: DocumentState,
        settings: Settings,
        *,
        event_bus: EventBus | None = None,
        outline: OutlineModel | None = None,
    ) -> None:
        self.document = document
        self.settings = settings
        self.bus = event_bus or EventBus()
        self.outline = outline or HeadlineOutline(document.metadata.syntax)
        self.synchronizer = LockSynchronizer(document, self.outline, settings, event_bus=self.bus)
        self.mode = LockMode(self.synchronizer, self.bus)
        self.commands = LockCommands(self.synchronizer, self.mode, self.bus)

    @classmethod
    def from_text(cls, text: str, settings: Settings | None = None, **kwargs) -> "DocumentSession":
        active = settings or Settings()
        metadata = DocumentMetadata(syntax=active.outline_syntax)
        return cls(DocumentState(text=text, metadata=metadata), active, **kwargs)

    @classmethod
    def open(
        cls,
        path: Path,
        settings: Settings | None = None,
        *,
        syntax: str | None = None,
        **kwargs,
    ) -> "DocumentSession":
        active = settings or Settings()
        text = file_io.read_text(path)
        metadata = DocumentMetadata(
            path=path,
            syntax=syntax or file_io.detect_syntax(path, active.outline_syntax),
            newline=file_io.detect_newline(path),
        )
        LOGGER.debug("Opened %s (%d chars, %s syntax)", path, len(text), metadata.syntax)
        return cls(DocumentState(text=text, metadata=metadata), active, **kwargs)

    def start(self) -> None:
        """Activate lock mode when the settings ask for automatic re-application."""

        if self.settings.auto_reapply_on_save:
            self.commands.set_mode(True)
        else:
            self.commands.reapply_locks()

    def save(self, path: Path | None = None) -> Path:
        """Write the document and notify save listeners (lock mode among them)."""

        target = path or self.document.metadata.path
        if target is None:
            raise ValueError("Document has no path; pass one explicitly")
        file_io.write_text(target, self.document.text, newline=self.document.metadata.newline)
        self.document.mark_saved(target)
        LOGGER.info("Saved %s", target)
        self.bus.publish(DocumentSaved(document_id=self.document.document_id, path=str(target)))
        return target


__all__ = ["DocumentSession"]
