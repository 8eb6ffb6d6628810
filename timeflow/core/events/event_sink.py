"""
Event sink interface.

A sink receives activity, conflict-flag, storage and solution events in the
order the repository and applicator emit them.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from timeflow.core.events.events import DomainEvent


class EventSink(Protocol):
    def on_event(self, event: DomainEvent) -> None:
        """Consume one domain event."""
