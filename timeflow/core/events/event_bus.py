"""
Synchronous event bus with per-sink event-type routing.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from timeflow.core.events.event_sink import EventSink
    from timeflow.core.events.events import DomainEvent

LOGGER = logging.getLogger(__name__)


class EventBus:
    """Dispatches domain events to registered sinks.

    Delivery is synchronous, on the emitting thread, in registration order.
    A sink registered with event types only sees instances of those types.
    Events emitted after close() are dropped.
    """

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._routes: list[tuple[EventSink, tuple[type, ...]]] = []
        self._closed = False
        for sink in sinks or ():
            self.register(sink)

    def register(self, sink: EventSink, *event_types: type) -> None:
        """Register a sink, optionally restricted to ``event_types``."""
        self._routes.append((sink, event_types))

    def emit(self, event: DomainEvent) -> None:
        if self._closed:
            LOGGER.debug("event bus closed; dropping %s", type(event).__name__)
            return

        for sink, event_types in self._routes:
            if event_types and not isinstance(event, event_types):
                continue
            sink.on_event(event)

    def close(self) -> None:
        """Close every sink exposing close(); later events are dropped."""
        if self._closed:
            return
        self._closed = True

        for sink, _ in self._routes:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()
