"""Dataclasses representing an outline document and its protection overlay."""

from __future__ import annotations

import hashlib
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.ranges import TextRange
from ..errors import ProtectedRegionError
from .protection import ProtectionOverlay

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""

    return datetime.now(timezone.utc)


def _hash_text(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class DocumentMetadata:
    """Metadata describing the currently loaded document."""

    path: Optional[Path] = None
    syntax: str = "org"
    newline: str = "\n"
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    saved_at: Optional[datetime] = None


@dataclass(slots=True)
class DocumentState:
    """Document text plus the derived overlay of locked spans."""

    text: str = ""
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    protection: ProtectionOverlay = field(default_factory=ProtectionOverlay)
    dirty: bool = False
    document_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    version_id: int = 1
    content_hash: str = field(default_factory=str)

    def __post_init__(self) -> None:
        if not self.content_hash:
            self.content_hash = _hash_text(self.text)

    def replace_range(self, start: int, end: int, replacement: str, *, force: bool = False) -> TextRange:
        """Replace ``[start, end)`` with ``replacement`` and return the new span.

        Raises :class:`ProtectedRegionError` when the edit touches locked text,
        unless ``force`` is set. Programmatic edits such as tag rewrites use
        ``force`` since the heading of a locked subtree is itself locked.
        """

        target = TextRange(start, end).clamp(upper=len(self.text))
        if not force and self.protection.blocks_edit(target.start, target.end):
            LOGGER.debug("Blocked edit of %s in document %s", target.to_tuple(), self.document_id)
            raise ProtectedRegionError(target.start, target.end)
        self.text = self.text[: target.start] + replacement + self.text[target.end :]
        self.protection.shift(target.start, target.length, len(replacement))
        self._touch()
        return TextRange(target.start, target.start + len(replacement))

    def insert(self, position: int, content: str, *, force: bool = False) -> TextRange:
        return self.replace_range(position, position, content, force=force)

    def delete(self, start: int, end: int, *, force: bool = False) -> TextRange:
        return self.replace_range(start, end, "", force=force)

    def update_text(self, new_text: str) -> None:
        """Swap the whole text; the overlay no longer matches and is dropped."""

        self.text = new_text
        self.protection.clear_all()
        self._touch()

    def mark_saved(self, path: Path | None = None) -> None:
        if path is not None:
            self.metadata.path = path
        self.dirty = False
        self.metadata.saved_at = _utcnow()

    def is_locked(self, position: int) -> bool:
        return self.protection.is_locked(position)

    def slice(self, span: Any) -> str:
        target = TextRange.from_value(span)
        return self.text[target.start : target.end]

    def snapshot(self) -> Dict[str, Any]:
        """Return a serializable snapshot of text, version and locked spans."""

        payload: Dict[str, Any] = {
            "document_id": self.document_id,
            "version_id": self.version_id,
            "content_hash": self.content_hash,
            "syntax": self.metadata.syntax,
            "dirty": self.dirty,
            "length": len(self.text),
            "locked": [span.to_dict() for span in self.protection.spans()],
        }
        if self.metadata.path:
            payload["path"] = str(self.metadata.path)
        return payload

    def _touch(self) -> None:
        self.dirty = True
        self.metadata.updated_at = _utcnow()
        self.version_id += 1
        self.content_hash = _hash_text(self.text)
