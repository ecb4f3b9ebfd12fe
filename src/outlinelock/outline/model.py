"""Headline parsing and tag mutation for outline documents.

The locking layer only talks to the :class:`OutlineModel` protocol, so any
outline library able to report headline ranges and rewrite tags can be
plugged in. :class:`HeadlineOutline` is the built-in implementation: it
understands org-style (``*``) and markdown-style (``#``) headings followed by
an optional org tag group such as ``:work:locked:``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Protocol, Sequence

from ..core.ranges import TextRange
from ..editor.document_model import DocumentState
from ..errors import InvalidTagName, OutlineParseError

__all__ = [
    "Headline",
    "OutlineModel",
    "HeadlineOutline",
    "SUPPORTED_SYNTAXES",
    "iter_headlines",
    "is_valid_tag",
]

LOGGER = logging.getLogger(__name__)

SUPPORTED_SYNTAXES: tuple[str, ...] = ("org", "markdown")
_HEADING_PATTERNS: dict[str, re.Pattern[str]] = {
    "org": re.compile(r"^(?P<marker>\*+)(?:[ \t]+(?P<body>.*))?$"),
    "markdown": re.compile(r"^(?P<marker>#{1,6})(?:[ \t]+(?P<body>.*))?$"),
}
_TAG_GROUP = re.compile(r"(?:^|(?<=[ \t]))(?P<group>:[\w@#%:]+:)$")
_TAG_NAME = re.compile(r"^[\w@#%]+$")


@dataclass(slots=True)
class Headline:
    """A heading plus every line up to the next heading of equal or higher rank."""

    level: int
    title: str
    tags: frozenset[str]
    start: int
    end: int
    line: int
    heading_end: int
    tag_order: tuple[str, ...] = ()
    tag_span: tuple[int, int] | None = None
    tag_lead: int | None = None
    children: list["Headline"] = field(default_factory=list)

    @property
    def range(self) -> TextRange:
        return TextRange(self.start, self.end)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def contains(self, position: int) -> bool:
        return self.start <= position < self.end


class OutlineModel(Protocol):
    """Capabilities the lock synchronizer needs from an outline library."""

    def parse(self, text: str) -> list[Headline]:
        """Return the top-level headlines of ``text`` in document order."""
        ...

    def enclosing_headline(self, text: str, position: int) -> Headline | None:
        """Return the innermost headline covering ``position``."""
        ...

    def add_tag(self, document: DocumentState, headline: Headline, tag: str) -> None:
        ...

    def remove_tag(self, document: DocumentState, headline: Headline, tag: str) -> None:
        ...


def iter_headlines(roots: Iterable[Headline]) -> Iterator[Headline]:
    """Yield every headline of the tree in document order."""

    for node in roots:
        yield node
        yield from iter_headlines(node.children)


class HeadlineOutline:
    """Line-based outline parser for org and markdown headings."""

    def __init__(self, syntax: str = "org") -> None:
        normalized = (syntax or "").strip().lower()
        if normalized in {"md"}:
            normalized = "markdown"
        if normalized not in _HEADING_PATTERNS:
            raise ValueError(f"Unsupported outline syntax: {syntax!r}")
        self._syntax = normalized
        self._pattern = _HEADING_PATTERNS[normalized]

    @property
    def syntax(self) -> str:
        return self._syntax

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, text: str) -> list[Headline]:
        flat = self._scan(text)
        _assign_bounds(flat, len(text))
        roots: list[Headline] = []
        stack: list[Headline] = []
        for headline in flat:
            while stack and stack[-1].level >= headline.level:
                stack.pop()
            if stack:
                stack[-1].children.append(headline)
            else:
                roots.append(headline)
            stack.append(headline)
        LOGGER.debug("Parsed %d headline(s) (%s syntax)", len(flat), self._syntax)
        return roots

    def enclosing_headline(self, text: str, position: int) -> Headline | None:
        if not text:
            return None
        # The caret after the final character still belongs to the last headline.
        position = min(max(0, position), len(text) - 1)
        found: Headline | None = None
        for headline in iter_headlines(self.parse(text)):
            if headline.start > position:
                break
            if headline.contains(position):
                found = headline
        return found

    def _scan(self, text: str) -> list[Headline]:
        headlines: list[Headline] = []
        offset = 0
        for index, line in enumerate(text.splitlines(keepends=True)):
            content = line.rstrip("\r\n")
            match = self._pattern.match(content)
            if match is not None:
                headlines.append(self._build_headline(match, content, offset, index))
            offset += len(line)
        return headlines

    def _build_headline(self, match: re.Match[str], content: str, offset: int, index: int) -> Headline:
        level = len(match.group("marker"))
        body = (match.group("body") or "").rstrip()
        body_start = offset + (match.start("body") if match.group("body") is not None else len(content))
        heading_end = offset + len(content.rstrip())
        tag_order: tuple[str, ...] = ()
        tag_span: tuple[int, int] | None = None
        tag_lead: int | None = None
        title = body
        group_match = _TAG_GROUP.search(body)
        if group_match is not None:
            group = group_match.group("group")
            tag_order = _split_tags(group, index)
            group_start = body_start + group_match.start("group")
            tag_span = (group_start, group_start + len(group))
            title = body[: group_match.start("group")].rstrip()
            tag_lead = body_start + len(title)
        return Headline(
            level=level,
            title=title,
            tags=frozenset(tag_order),
            start=offset,
            end=offset,
            line=index,
            heading_end=heading_end,
            tag_order=tag_order,
            tag_span=tag_span,
            tag_lead=tag_lead,
        )

    # ------------------------------------------------------------------
    # Tag mutation
    # ------------------------------------------------------------------

    def add_tag(self, document: DocumentState, headline: Headline, tag: str) -> None:
        _validate_tag(tag)
        if tag in headline.tags:
            return
        group = _format_tags((*headline.tag_order, tag))
        if headline.tag_span is not None:
            start, end = headline.tag_span
            document.replace_range(start, end, group, force=True)
        else:
            document.insert(headline.heading_end, f" {group}", force=True)
        LOGGER.debug("Added tag %r to headline %r at line %d", tag, headline.title, headline.line + 1)

    def remove_tag(self, document: DocumentState, headline: Headline, tag: str) -> None:
        if tag not in headline.tags or headline.tag_span is None:
            return
        remaining = tuple(name for name in headline.tag_order if name != tag)
        start, end = headline.tag_span
        if remaining:
            document.replace_range(start, end, _format_tags(remaining), force=True)
        else:
            lead = headline.tag_lead if headline.tag_lead is not None else start
            document.delete(lead, end, force=True)
        LOGGER.debug("Removed tag %r from headline %r at line %d", tag, headline.title, headline.line + 1)


def _assign_bounds(headlines: Sequence[Headline], text_length: int) -> None:
    for index, headline in enumerate(headlines):
        end = text_length
        for candidate in headlines[index + 1 :]:
            if candidate.level <= headline.level:
                end = candidate.start
                break
        headline.end = max(headline.start, end)


def _split_tags(group: str, line: int) -> tuple[str, ...]:
    names = group[1:-1].split(":")
    for name in names:
        if not _TAG_NAME.match(name):
            raise OutlineParseError(f"malformed tag group {group!r}", line=line)
    return tuple(dict.fromkeys(names))


def _format_tags(tags: Sequence[str]) -> str:
    return ":" + ":".join(tags) + ":"


def is_valid_tag(tag: str) -> bool:
    """Return ``True`` when ``tag`` may appear inside a heading tag group."""

    return bool(tag) and _TAG_NAME.fullmatch(tag) is not None


def _validate_tag(tag: str) -> None:
    if not is_valid_tag(tag):
        raise InvalidTagName(tag)
