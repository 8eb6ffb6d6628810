"""Dict-backed activity storage for tests and ephemeral sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from timeflow.core.domain.types import Activity


class InMemoryActivityStorage:
    """Keeps activities in a dict keyed by id, preserving insertion order."""

    def __init__(self, activities: list[Activity] | None = None) -> None:
        self._activities: dict[str, Activity] = {}
        for activity in activities or []:
            self._activities[activity.id] = activity

    async def save(self, activity: Activity) -> None:
        self._activities[activity.id] = activity

    async def delete(self, activity_id: str) -> None:
        self._activities.pop(activity_id, None)

    async def load_all(self) -> list[Activity]:
        return list(self._activities.values())

    async def clear(self) -> None:
        self._activities.clear()

    def snapshot(self) -> dict[str, Activity]:
        """Return a shallow copy of the stored mapping."""
        return dict(self._activities)
