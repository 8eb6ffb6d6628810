from __future__ import annotations

from typing import TYPE_CHECKING

from timeflow.core.events.event_bus import EventBus

if TYPE_CHECKING:
    from timeflow.core.events.event_sink import EventSink
    from timeflow.core.events.events import DomainEvent


class NullEventBus(EventBus):
    """EventBus that accepts no sinks and drops every event (tests, scripts)."""

    def register(self, sink: EventSink, *event_types: type) -> None:
        return

    def emit(self, event: DomainEvent) -> None:
        return
