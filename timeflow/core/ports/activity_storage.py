"""Activity storage protocol.

This module defines the persistence boundary consumed by ActivityRepository.
Concrete implementations adapt specific backends (memory, JSON file, ...) to
this protocol. The repository treats storage as a best-effort cache: the
in-memory activity set stays authoritative for the session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from timeflow.core.domain.types import Activity


class ActivityStorage(Protocol):
    """Asynchronous persistence boundary for activities."""

    async def save(self, activity: Activity) -> None:
        """Insert or replace one activity."""

    async def delete(self, activity_id: str) -> None:
        """Remove one activity; unknown ids are ignored."""

    async def load_all(self) -> list[Activity]:
        """Return every stored activity."""

    async def clear(self) -> None:
        """Remove every stored activity."""
