"""Keeps a document's locked overlay in step with its headline tags."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..core.ranges import TextRange
from ..editor.document_model import DocumentState
from ..errors import ModelAccessFailure, NoEnclosingHeadline
from ..events import EventBus, LocksReapplied, LockToggled
from ..outline.model import Headline, OutlineModel, iter_headlines
from ..services.settings import Settings

LOGGER = logging.getLogger(__name__)


class LockStatus(Enum):
    """Outcome of a synchronizer operation."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"
    REAPPLIED = "reapplied"
    CLEARED = "cleared"


@dataclass(slots=True, frozen=True)
class LockResult:
    """Result returned by every synchronizer operation."""

    status: LockStatus
    message: str
    span: TextRange | None = None
    locked_count: int = 0


class LockSynchronizer:
    """Derives the locked overlay of one document from its headline tags.

    A headline carrying the configured lock tag has its whole range, heading
    line and descendants included, marked locked. ``toggle_at`` flips a single
    headline; ``reapply_all`` rebuilds the overlay from scratch.
    """

    def __init__(
        self,
        document: DocumentState,
        outline: OutlineModel,
        settings: Settings,
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        self._document = document
        self._outline = outline
        self._settings = settings
        self._bus = event_bus

    @property
    def document(self) -> DocumentState:
        return self._document

    @property
    def lock_tag(self) -> str:
        return self._settings.lock_tag

    # ------------------------------------------------------------------
    # Single headline
    # ------------------------------------------------------------------

    def toggle_at(self, position: int) -> LockResult:
        """Lock or unlock the headline enclosing ``position``.

        Raises :class:`NoEnclosingHeadline` when ``position`` precedes the
        first heading, and :class:`ModelAccessFailure` when the outline cannot
        be parsed. Neither case modifies the document.
        """

        tag = self.lock_tag
        headline = self._resolve(position)
        if headline.has_tag(tag):
            span = headline.range
            # Cleared before the rewrite: removing the tag shortens the heading
            # line, so this range would spill into the following headline.
            self._document.protection.clear_locked(span)
            self._outline.remove_tag(self._document, headline, tag)
            self._relock_overlapping(headline.start, tag)
            return self._report_toggle(headline, span, locked=False)

        self._outline.add_tag(self._document, headline, tag)
        refreshed = self._resolve(headline.start)
        span = refreshed.range
        self._document.protection.mark_locked(span)
        return self._report_toggle(refreshed, span, locked=True)

    # ------------------------------------------------------------------
    # Whole document
    # ------------------------------------------------------------------

    def reapply_all(self) -> LockResult:
        """Rebuild the overlay from the tags of every headline.

        The outline is parsed before anything is cleared, so a parse failure
        leaves the previous overlay in place.
        """

        tag = self.lock_tag
        spans = [headline.range for headline in self._locked(tag)]
        protection = self._document.protection
        protection.clear_all()
        for span in spans:
            protection.mark_locked(span)
        LOGGER.info(
            "Re-applied locks in document %s: %d headline(s) tagged %r",
            self._document.document_id,
            len(spans),
            tag,
        )
        if self._bus is not None:
            self._bus.publish(LocksReapplied(document_id=self._document.document_id, locked_count=len(spans)))
        noun = "headline" if len(spans) == 1 else "headlines"
        return LockResult(
            status=LockStatus.REAPPLIED,
            message=f"Re-applied locks: {len(spans)} {noun} locked",
            locked_count=len(spans),
        )

    def clear_all(self) -> LockResult:
        self._document.protection.clear_all()
        LOGGER.info("Cleared all locks in document %s", self._document.document_id)
        return LockResult(status=LockStatus.CLEARED, message="All locks cleared")

    def locked_headlines(self) -> list[Headline]:
        """Return the headlines currently carrying the lock tag, in document order."""

        return self._locked(self.lock_tag)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _parse(self) -> list[Headline]:
        try:
            return self._outline.parse(self._document.text)
        except ModelAccessFailure:
            raise
        except Exception as exc:
            raise ModelAccessFailure(f"Outline could not be parsed: {exc}") from exc

    def _locked(self, tag: str) -> list[Headline]:
        return [headline for headline in iter_headlines(self._parse()) if headline.has_tag(tag)]

    def _resolve(self, position: int) -> Headline:
        try:
            headline = self._outline.enclosing_headline(self._document.text, position)
        except ModelAccessFailure:
            raise
        except Exception as exc:
            raise ModelAccessFailure(f"Outline could not be parsed: {exc}") from exc
        if headline is None:
            raise NoEnclosingHeadline(position)
        return headline

    def _relock_overlapping(self, start: int, tag: str) -> None:
        # Tagged ancestors and descendants of the unlocked headline stay locked.
        roots = self._parse()
        unlocked = next((node for node in iter_headlines(roots) if node.start == start), None)
        if unlocked is None:
            return
        for headline in iter_headlines(roots):
            if headline.has_tag(tag) and headline.range.overlaps(unlocked.range):
                self._document.protection.mark_locked(headline.range)

    def _report_toggle(self, headline: Headline, span: TextRange, *, locked: bool) -> LockResult:
        state = "Locked" if locked else "Unlocked"
        title = headline.title or "(untitled)"
        LOGGER.info("%s headline %r at %s", state, title, span.to_tuple())
        if self._bus is not None:
            self._bus.publish(
                LockToggled(
                    document_id=self._document.document_id,
                    title=title,
                    locked=locked,
                    start=span.start,
                    end=span.end,
                )
            )
        return LockResult(
            status=LockStatus.LOCKED if locked else LockStatus.UNLOCKED,
            message=f"{state} subtree: {title}",
            span=span,
            locked_count=1 if locked else 0,
        )


__all__ = ["LockStatus", "LockResult", "LockSynchronizer"]
