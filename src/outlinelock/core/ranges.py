"""Half-open character spans used by the overlay, the outline and the editor."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class TextRange:
    """``[start, end)`` offsets into a document; reversed bounds are swapped."""

    start: int
    end: int

    def __post_init__(self) -> None:
        lo, hi = sorted((_offset(self.start, "start"), _offset(self.end, "end")))
        object.__setattr__(self, "start", lo)
        object.__setattr__(self, "end", hi)

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_caret(self) -> bool:
        """``True`` for an empty span, i.e. an insertion point."""

        return self.start == self.end

    def contains(self, position: int) -> bool:
        return self.start <= position < self.end

    def covers(self, other: TextRange) -> bool:
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: TextRange) -> bool:
        """Return ``True`` when both spans share at least one character."""

        return self.start < other.end and other.start < self.end

    def to_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}

    def clamp(self, *, lower: int = 0, upper: int | None = None) -> TextRange:
        """Return a copy squeezed into ``[lower, upper]``."""

        start, end = max(lower, self.start), max(lower, self.end)
        if upper is not None:
            start, end = min(start, upper), min(end, upper)
        return TextRange(start, end)

    @classmethod
    def from_value(cls, value: Any) -> TextRange:
        """Accept a ``TextRange``, a ``(start, end)`` pair, a mapping or a headline.

        Anything exposing ``start`` and ``end`` attributes (such as an outline
        headline) is accepted as well.
        """

        if isinstance(value, TextRange):
            return value
        if isinstance(value, Mapping):
            if "start" not in value or "end" not in value:
                raise ValueError("Span mappings need 'start' and 'end' keys")
            return cls(value["start"], value["end"])
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if len(value) != 2:
                raise ValueError(f"Span sequences need exactly two offsets, got {len(value)}")
            return cls(value[0], value[1])
        start = getattr(value, "start", None)
        end = getattr(value, "end", None)
        if start is None or end is None:
            raise TypeError(f"Cannot read a span from {type(value).__name__}")
        return cls(start, end)


def _offset(value: Any, label: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Span {label} must be an integer, got {value!r}") from exc
    return max(0, number)


__all__ = ["TextRange"]
