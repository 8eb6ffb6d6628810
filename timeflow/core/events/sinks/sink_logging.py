"""
Logging event sink.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from timeflow.core.events.events import DomainEvent


class LoggingEventSink:
    """Logs each domain event by class name; the event rides in ``extra``."""

    def __init__(self, logger: logging.Logger, level: int = logging.INFO) -> None:
        self._logger = logger
        self._level = level

    def on_event(self, event: DomainEvent) -> None:
        if not self._logger.isEnabledFor(self._level):
            return
        self._logger.log(
            self._level,
            "domain_event %s",
            type(event).__name__,
            extra={"event": event},
        )
