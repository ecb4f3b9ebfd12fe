"""Read-only overlay tracking which character spans of a document are locked."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from ..core.ranges import TextRange

LOGGER = logging.getLogger(__name__)


class ProtectionOverlay:
    """Set of locked ``[start, end)`` spans kept sorted and non-overlapping.

    Marking and clearing are idempotent. Adjacent or overlapping marks merge
    into a single span, so the overlay only records *which characters* are
    locked, not which headline locked them.
    """

    __slots__ = ("_spans",)

    def __init__(self, spans: Iterable[Any] = ()) -> None:
        self._spans: list[tuple[int, int]] = []
        for span in spans:
            self.mark_locked(span)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def mark_locked(self, span: Any) -> None:
        """Lock every character inside ``span``."""

        target = TextRange.from_value(span)
        if target.is_caret:
            return
        self._spans = _merge_spans(self._spans, ((target.start, target.end),))

    def clear_locked(self, span: Any) -> None:
        """Unlock every character inside ``span``."""

        target = TextRange.from_value(span)
        if target.is_caret or not self._spans:
            return
        remaining: list[tuple[int, int]] = []
        for start, end in self._spans:
            if end <= target.start or start >= target.end:
                remaining.append((start, end))
                continue
            if start < target.start:
                remaining.append((start, target.start))
            if end > target.end:
                remaining.append((target.end, end))
        self._spans = remaining

    def clear_all(self) -> None:
        """Unlock the whole document."""

        if self._spans:
            LOGGER.debug("ProtectionOverlay.clear_all: dropping %d span(s)", len(self._spans))
        self._spans = []

    def shift(self, position: int, removed: int, inserted: int) -> None:
        """Move spans across an edit replacing ``removed`` chars at ``position``.

        Insertions at a span's start push the span forward and insertions at
        its end leave it unchanged. Text inserted strictly inside a span (or
        replacing part of it) becomes part of the span.
        """

        delta = inserted - removed
        if delta == 0 and removed == 0:
            return
        removed_end = position + removed

        def map_start(offset: int) -> int:
            if offset < position:
                return offset
            if offset >= removed_end:
                return offset + delta
            return position

        def map_end(offset: int) -> int:
            if offset <= position:
                return offset
            if offset >= removed_end:
                return offset + delta
            return position + inserted

        shifted = [(map_start(start), map_end(end)) for start, end in self._spans]
        self._spans = _merge_spans([], tuple(span for span in shifted if span[0] < span[1]))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def spans(self) -> tuple[TextRange, ...]:
        return tuple(TextRange(start, end) for start, end in self._spans)

    def is_locked(self, position: int) -> bool:
        """Return ``True`` when the character at ``position`` is locked."""

        return any(start <= position < end for start, end in self._spans)

    def is_range_locked(self, span: Any) -> bool:
        """Return ``True`` when every character of ``span`` is locked."""

        target = TextRange.from_value(span)
        if target.is_caret:
            return False
        return any(start <= target.start and target.end <= end for start, end in self._spans)

    def touches(self, span: Any) -> bool:
        """Return ``True`` when any character of ``span`` is locked."""

        target = TextRange.from_value(span)
        return any(start < target.end and target.start < end for start, end in self._spans)

    def blocks_edit(self, start: int, end: int) -> bool:
        """Return ``True`` when replacing ``[start, end)`` would alter locked text.

        A pure insertion is only blocked strictly inside a locked span; typing
        right before or right after a locked region stays possible.
        """

        if start == end:
            return any(span_start < start < span_end for span_start, span_end in self._spans)
        return self.touches((start, end))

    def __bool__(self) -> bool:
        return bool(self._spans)

    def __len__(self) -> int:
        return len(self._spans)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProtectionOverlay):
            return NotImplemented
        return self._spans == other._spans

    def __repr__(self) -> str:
        return f"ProtectionOverlay({self._spans!r})"


def _merge_spans(
    existing: list[tuple[int, int]],
    new_spans: tuple[tuple[int, int], ...],
) -> list[tuple[int, int]]:
    ordered = sorted([*existing, *new_spans], key=lambda span: span[0])
    merged: list[list[int]] = []
    for start, end in ordered:
        if not merged or start > merged[-1][1]:
            merged.append([start, end])
        else:
            merged[-1][1] = max(merged[-1][1], end)
    return [(start, end) for start, end in merged]


__all__ = ["ProtectionOverlay"]
