"""Event bus infrastructure connecting the editor host and the lock layer.

Saves, status messages and lock transitions travel over a small typed
publish/subscribe bus so the synchronizer never needs a direct reference to
the widget (or CLI) hosting the document.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    TypeVar,
    TYPE_CHECKING,
)
from weakref import WeakMethod

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from typing import DefaultDict

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all events published on the bus."""

    pass


# =============================================================================
# Document Events
# =============================================================================


@dataclass(slots=True)
class DocumentSaved(Event):
    """Emitted after a document has been written to disk.

    Attributes:
        document_id: The unique identifier of the saved document.
        path: The filesystem path the document was saved to, if any.
    """

    document_id: str
    path: str | None = None


@dataclass(slots=True)
class DocumentModified(Event):
    """Emitted whenever a host edit changes the document text."""

    document_id: str
    version_id: int
    content_hash: str


# =============================================================================
# Lock Events
# =============================================================================


@dataclass(slots=True)
class LockToggled(Event):
    """Emitted when a single headline is locked or unlocked.

    Attributes:
        document_id: The document containing the headline.
        title: Title of the toggled headline.
        locked: ``True`` when the headline is now locked.
        start: Start offset of the affected range.
        end: Exclusive end offset of the affected range.
    """

    document_id: str
    title: str
    locked: bool
    start: int
    end: int


@dataclass(slots=True)
class LocksReapplied(Event):
    """Emitted after a full re-derivation of the locked overlay."""

    document_id: str
    locked_count: int


@dataclass(slots=True)
class LockModeChanged(Event):
    """Emitted when automatic re-application is switched on or off."""

    document_id: str
    active: bool


# =============================================================================
# UI / Infrastructure Events
# =============================================================================


@dataclass(slots=True)
class StatusMessage(Event):
    """Emitted to show a message to the user.

    Attributes:
        message: The text to display.
        level: ``"info"`` or ``"warning"``.
        timeout_ms: Duration in milliseconds; 0 keeps the message visible.
    """

    message: str
    level: str = "info"
    timeout_ms: int = 0


class EventBus(Generic[E]):
    """Synchronous publish/subscribe keyed on the exact event class.

    Bound methods are held through :class:`weakref.WeakMethod`, so a widget
    or mode that is garbage collected drops out of the bus on the next
    publish. Plain functions and lambdas are held strongly. Not thread-safe:
    use it from the host's event loop thread only.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Register ``handler``; subscribing twice means two invocations."""
        self._handlers[event_type].append(_HandlerRef(handler))
        logger.debug("%s subscribed to %s", _handler_name(handler), event_type.__name__)

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Drop the oldest registration of ``handler``; unknown handlers are ignored."""
        refs = self._handlers.get(event_type, [])
        for index, handler_ref in enumerate(refs):
            if handler_ref.matches(handler):
                del refs[index]
                logger.debug("%s unsubscribed from %s", _handler_name(handler), event_type.__name__)
                return

    def publish(self, event: E) -> None:
        """Deliver ``event`` to its subscribers in registration order.

        A failing handler is logged and the remaining handlers still run.
        """
        event_type = type(event)
        refs = self._handlers.get(event_type)
        if not refs:
            return
        logger.debug("Publishing %s to %d handler(s)", event_type.__name__, len(refs))
        # Iterate a snapshot: handlers may (un)subscribe while running.
        for handler_ref in tuple(refs):
            handler = handler_ref.resolve()
            if handler is None:
                continue
            try:
                handler(event)
            except Exception:
                logger.exception("%s failed while handling %s", _handler_name(handler), event_type.__name__)
        refs[:] = [handler_ref for handler_ref in refs if handler_ref.resolve() is not None]

    def clear(self) -> None:
        self._handlers.clear()

    def handler_count(self, event_type: type[E] | None = None) -> int:
        """Return the number of registrations for ``event_type``, or in total."""
        if event_type is not None:
            return len(self._handlers.get(event_type, ()))
        return sum(len(refs) for refs in self._handlers.values())


class _HandlerRef:
    __slots__ = ("_target", "_weak")

    def __init__(self, handler: Handler) -> None:
        self._weak = inspect.ismethod(handler)
        self._target: Any = WeakMethod(handler) if self._weak else handler

    def resolve(self) -> Handler | None:
        return self._target() if self._weak else self._target

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        return resolved is not None and resolved == handler


def _handler_name(handler: Handler) -> str:
    if inspect.ismethod(handler):
        return f"{type(handler.__self__).__name__}.{handler.__func__.__name__}"
    return getattr(handler, "__qualname__", None) or repr(handler)


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "DocumentSaved",
    "DocumentModified",
    "LockToggled",
    "LocksReapplied",
    "LockModeChanged",
    "StatusMessage",
]
