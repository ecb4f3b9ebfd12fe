"""File IO helpers for loading and saving outline documents."""

from __future__ import annotations

import codecs
import locale
import os
import re
import tempfile
from pathlib import Path

__all__ = ["read_text", "write_text", "detect_syntax", "detect_newline"]

_BOM_MAP: dict[bytes, str] = {
    codecs.BOM_UTF8: "utf-8-sig",
    codecs.BOM_UTF16_LE: "utf-16-le",
    codecs.BOM_UTF16_BE: "utf-16-be",
}
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_SYNTAX_EXTENSIONS = {
    "org": {".org"},
    "markdown": {".md", ".markdown"},
}


def read_text(path: Path | str, *, encoding: str | None = None) -> str:
    """Read a text file with encoding detection and newline normalization."""

    return _normalize_newlines(_decode(path, encoding))


def detect_newline(path: Path | str, *, encoding: str | None = None) -> str:
    """Return the line ending of the first line break in the file (``"\\n"`` if none)."""

    match = _LINE_BREAK.search(_decode(path, encoding))
    return match.group(0) if match else "\n"


def write_text(path: Path | str, content: str, *, encoding: str = "utf-8", newline: str = "\n") -> Path:
    """Write text atomically, translating ``\\n`` line breaks to ``newline``."""

    if newline != "\n":
        content = content.replace("\n", newline)
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    descriptor, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(descriptor, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    finally:
        if os.path.exists(tmp_name):  # pragma: no cover - cleanup path
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
    return target


def detect_syntax(path: Path | str | None, default: str = "org") -> str:
    """Infer the heading syntax from a file suffix."""

    suffix = Path(path).suffix.lower() if path else ""
    for name, extensions in _SYNTAX_EXTENSIONS.items():
        if suffix in extensions:
            return name
    return default


def _decode(path: Path | str, encoding: str | None) -> str:
    raw = Path(path).read_bytes()
    text = raw.decode(encoding or _detect_encoding(raw))
    if text.startswith("\ufeff"):
        text = text[1:]
    return text


def _detect_encoding(raw: bytes) -> str:
    for bom, encoding in _BOM_MAP.items():
        if raw.startswith(bom):
            return encoding
    preferred = locale.getpreferredencoding(False) or "utf-8"
    for candidate in ("utf-8", preferred, "latin-1"):
        try:
            raw.decode(candidate)
            return candidate
        except (UnicodeDecodeError, LookupError):
            continue
    return "utf-8"


def _normalize_newlines(text: str) -> str:
    if "\r" not in text:
        return text
    return text.replace("\r\n", "\n").replace("\r", "\n")
