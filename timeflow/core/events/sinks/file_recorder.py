"""
Append-only JSON-lines recorder for domain events.
"""
from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from timeflow.core.events.events import DomainEvent


class FileRecorderSink:
    """Writes each event as one JSON object per line.

    Each record carries ``event_type`` (the event class name) plus the event
    fields; datetimes are written as ISO-8601 strings.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self._path.open("a", encoding="utf-8")
        self._closed = False

    def on_event(self, event: DomainEvent) -> None:
        record = {"event_type": type(event).__name__, **asdict(event)}
        self._fh.write(json.dumps(record, default=_json_default) + "\n")
        self._fh.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._fh.close()
        self._closed = True


def _json_default(value: object) -> str:
    isoformat = getattr(value, "isoformat", None)
    if callable(isoformat):
        return isoformat()
    return str(value)
