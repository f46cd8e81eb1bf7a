"""Typed signals and a synchronous per-kind callback registry."""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentCreated:
    """A segment reached its final location."""
    location: str
    ordinal: int


@dataclass(frozen=True)
class IndexCreated:
    """The index document reached its final location."""
    location: str


@dataclass(frozen=True)
class SessionDone:
    """Every segment and the index are finalized."""
    finalized_count: int


@dataclass(frozen=True)
class StreamError:
    """An asynchronous write or compression failed."""
    cause: BaseException


@dataclass(frozen=True)
class Drain:
    """A backpressured sink flushed its buffer."""
    injected_count: int


Event = SegmentCreated | IndexCreated | SessionDone | StreamError | Drain
Handler = Callable[[Event], None]


class EventDispatcher:
    """Dispatches events to handlers registered for their exact type."""

    def __init__(self):
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def on(self, kind: type, handler: Handler) -> Handler:
        """Register handler for events of the given kind."""
        self._handlers[kind].append(handler)
        return handler

    def off(self, kind: type, handler: Handler):
        """Remove a previously registered handler."""
        handlers = self._handlers.get(kind, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: Event):
        """Call every handler for type(event) in registration order."""
        handlers = list(self._handlers.get(type(event), ()))
        logger.debug("emit %s to %d handler(s)", event, len(handlers))
        for handler in handlers:
            handler(event)
