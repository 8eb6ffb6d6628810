"""JSON file activity storage.

The whole activity set lives in one JSON document mapping id -> activity.
File IO runs in a worker thread so the event loop is never blocked.
"""

from __future__ import annotations

import asyncio
import json
import threading
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from timeflow.core.domain.types import Activity

_ACTIVITY_LIST = TypeAdapter(list[Activity])


class JsonFileActivityStorage:
    """Persists activities to a single JSON file.

    File layout::

        {
          "schema_version": "1.0",
          "activities": {"<id>": {...activity json...}, ...}
        }

    A missing file reads as an empty set.
    """

    SCHEMA_VERSION = "1.0"

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        # Guards read-modify-write cycles across worker threads.
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Sync file helpers (run via asyncio.to_thread)
    # ------------------------------------------------------------------

    def _read_records(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}

        data = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self._path}: top-level JSON value must be an object")

        records = data.get("activities", {})
        if not isinstance(records, dict):
            raise ValueError(f"{self._path}: 'activities' must be an object")
        return records

    def _write_records(self, records: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"schema_version": self.SCHEMA_VERSION, "activities": records}

        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self._path)

    def _save_sync(self, activity: Activity) -> None:
        with self._lock:
            records = self._read_records()
            records[activity.id] = activity.model_dump(mode="json")
            self._write_records(records)

    def _delete_sync(self, activity_id: str) -> None:
        with self._lock:
            records = self._read_records()
            if records.pop(activity_id, None) is not None:
                self._write_records(records)

    def _load_all_sync(self) -> list[Activity]:
        with self._lock:
            records = self._read_records()
        return _ACTIVITY_LIST.validate_python(list(records.values()))

    def _clear_sync(self) -> None:
        with self._lock:
            self._write_records({})

    # ------------------------------------------------------------------
    # ActivityStorage protocol
    # ------------------------------------------------------------------

    async def save(self, activity: Activity) -> None:
        await asyncio.to_thread(self._save_sync, activity)

    async def delete(self, activity_id: str) -> None:
        await asyncio.to_thread(self._delete_sync, activity_id)

    async def load_all(self) -> list[Activity]:
        return await asyncio.to_thread(self._load_all_sync)

    async def clear(self) -> None:
        await asyncio.to_thread(self._clear_sync)
