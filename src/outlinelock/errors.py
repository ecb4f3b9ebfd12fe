"""Exception hierarchy shared by the outline, editor and locking layers."""

from __future__ import annotations

__all__ = [
    "OutlineLockError",
    "NoEnclosingHeadline",
    "ModelAccessFailure",
    "OutlineParseError",
    "ProtectedRegionError",
    "InvalidTagName",
]


class OutlineLockError(Exception):
    """Base class for every error raised by outlinelock."""


class NoEnclosingHeadline(OutlineLockError):
    """Raised when a position is not covered by any headline."""

    def __init__(self, position: int) -> None:
        super().__init__(f"No headline encloses position {position}")
        self.position = position


class ModelAccessFailure(OutlineLockError):
    """Raised when the outline model cannot produce headlines for a document."""


class OutlineParseError(ModelAccessFailure):
    """Raised by the default outline parser on malformed headings."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line + 1}: {message}"
        super().__init__(message)
        self.line = line


class ProtectedRegionError(OutlineLockError):
    """Raised when an edit would modify locked text."""

    def __init__(self, start: int, end: int) -> None:
        if start == end:
            detail = f"insertion at {start}"
        else:
            detail = f"edit of [{start}, {end})"
        super().__init__(f"Refusing {detail}: text is locked")
        self.start = start
        self.end = end


class InvalidTagName(OutlineLockError):
    """Raised when a lock tag cannot be written into a heading's tag group."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"Invalid tag name {tag!r}: use letters, digits, _, @, # or %")
        self.tag = tag
