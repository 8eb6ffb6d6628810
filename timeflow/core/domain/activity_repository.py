"""Canonical activity set and conflict-flag maintenance.

This module owns the in-memory activity set for one session. After every
mutation it rescans the whole set and rewrites ``is_conflicted`` on every
activity, so the flag always matches the current overlap graph. Persistence
is delegated to an ActivityStorage and is best-effort.
"""

# pylint: disable=too-many-instance-attributes
from __future__ import annotations

import functools
import logging
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping

from timeflow.core.domain.intervals import conflicted_ids
from timeflow.core.domain.types import Activity, ActivityDraft, ActivityPatch
from timeflow.core.events.events import (
    ActivityAddedEvent,
    ActivityDeletedEvent,
    ActivityUpdatedEvent,
    ConflictFlagsChangedEvent,
)
from timeflow.storage.storage_writer import StorageWriter

if TYPE_CHECKING:
    from timeflow.core.domain.types import ActivityCategory, ActivityStatus, Priority
    from timeflow.core.events.event_bus import EventBus
    from timeflow.core.ports.activity_storage import ActivityStorage

LOGGER = logging.getLogger(__name__)

_DUPLICATE_SHIFT = timedelta(hours=1)


def _new_activity_id() -> str:
    return uuid.uuid4().hex


def _merge(current: Activity, updates: Mapping[str, Any], now: datetime) -> Activity:
    merged = current.model_dump()
    merged.update(updates)
    merged["updated_at"] = now
    return Activity.model_validate(merged)


class ActivityRepository:
    """Owns the activity set and keeps every conflict flag consistent.

    Invariant (after every public mutation returns):
    ``a.is_conflicted`` is True exactly when another activity (different id)
    overlaps ``a`` on the half-open interval [start, end).

    The repository is not thread-safe: it assumes a single-threaded or
    event-loop driven host where each call runs to completion.
    """

    def __init__(
        self,
        *,
        event_bus: EventBus,
        storage: ActivityStorage | None = None,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = _new_activity_id,
    ) -> None:
        self._event_bus = event_bus
        self._storage = storage
        self._writer = StorageWriter(event_bus)
        self._clock = clock
        self._id_factory = id_factory

        # Insertion-ordered; updates keep an activity's position.
        self._activities: dict[str, Activity] = {}
        self._loaded = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def storage_writer(self) -> StorageWriter:
        return self._writer

    def now(self) -> datetime:
        """Current time on the repository clock."""
        return self._clock()

    def __len__(self) -> int:
        return len(self._activities)

    def __contains__(self, activity_id: object) -> bool:
        return activity_id in self._activities

    def get(self, activity_id: str) -> Activity | None:
        return self._activities.get(activity_id)

    def list_activities(self) -> list[Activity]:
        return list(self._activities.values())

    def by_category(self, category: ActivityCategory) -> list[Activity]:
        return [a for a in self._activities.values() if a.category == category]

    def in_date_range(self, start: datetime, end: datetime) -> list[Activity]:
        """Return activities fully contained in [start, end]."""
        return [a for a in self._activities.values() if a.start >= start and a.end <= end]

    def filter(
        self,
        *,
        category: ActivityCategory | None = None,
        priority: Priority | None = None,
        status: ActivityStatus | None = None,
        date_range: tuple[datetime, datetime] | None = None,
        search: str | None = None,
    ) -> list[Activity]:
        """Return activities matching every given criterion, in insertion order.

        ``date_range`` keeps activities fully contained in [start, end].
        ``search`` is a case-insensitive substring match against the title,
        the description or any tag. Criteria left as None (or an empty
        search string) do not filter.
        """
        needle = search.lower() if search else None

        def matches(activity: Activity) -> bool:
            if category is not None and activity.category != category:
                return False
            if priority is not None and activity.priority != priority:
                return False
            if status is not None and activity.status != status:
                return False
            if date_range is not None:
                range_start, range_end = date_range
                if activity.start < range_start or activity.end > range_end:
                    return False
            if needle is not None:
                haystack = [activity.title, activity.description or "", *activity.tags]
                return any(needle in text.lower() for text in haystack)
            return True

        return [a for a in self._activities.values() if matches(a)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, data: ActivityDraft | Mapping[str, Any]) -> Activity:
        """Insert a new activity, then rescan every conflict flag."""
        draft = data if isinstance(data, ActivityDraft) else ActivityDraft.model_validate(data)
        now = self._clock()

        activity = Activity(
            **draft.model_dump(),
            id=self._id_factory(),
            is_conflicted=False,
            created_at=now,
            updated_at=now,
        )
        self._activities[activity.id] = activity

        self._event_bus.emit(ActivityAddedEvent(ts=now, activity_id=activity.id, title=activity.title))
        self._rescan_conflicts(now)

        stored = self._activities[activity.id]
        self._persist_save(stored)
        return stored

    def update(self, activity_id: str, partial: ActivityPatch | Mapping[str, Any]) -> bool:
        """Merge ``partial`` into an activity, then rescan every conflict flag.

        Returns False when ``activity_id`` is unknown (logged, nothing
        changes). Raises ValueError (pydantic ValidationError) when the patch
        names an unknown field or would leave ``end <= start``; the activity
        set is left untouched in that case.
        """
        return self.update_many([activity_id], partial) == 1

    def update_many(self, activity_ids: Iterable[str], partial: ActivityPatch | Mapping[str, Any]) -> int:
        """Merge one patch into several activities with a single rescan.

        Every merge is validated before any activity is replaced, so an
        invalid result for one id leaves the whole set untouched. Unknown ids
        are logged and skipped. Returns the number of activities updated.
        """
        patch = partial if isinstance(partial, ActivityPatch) else ActivityPatch.model_validate(partial)
        updates = patch.updates()

        targets: list[Activity] = []
        for activity_id in dict.fromkeys(activity_ids):
            current = self._activities.get(activity_id)
            if current is None:
                LOGGER.warning("update ignored: unknown activity_id=%s", activity_id)
                continue
            targets.append(current)
        if not targets:
            return 0

        now = self._clock()
        merged = [_merge(current, updates, now) for current in targets]

        for updated in merged:
            self._activities[updated.id] = updated
            self._event_bus.emit(
                ActivityUpdatedEvent(ts=now, activity_id=updated.id, fields=tuple(sorted(updates)))
            )
        self._rescan_conflicts(now)

        for updated in merged:
            self._persist_save(self._activities[updated.id])
        return len(merged)

    def delete(self, activity_id: str) -> None:
        """Remove an activity, then rescan the remaining conflict flags."""
        self.delete_many([activity_id])

    def delete_many(self, activity_ids: Iterable[str]) -> int:
        """Remove several activities with a single rescan.

        Returns the number of activities that existed. A storage delete is
        submitted for every requested id, known or not.
        """
        now = self._clock()
        requested = list(dict.fromkeys(activity_ids))

        removed = 0
        for activity_id in requested:
            existed = self._activities.pop(activity_id, None) is not None
            removed += existed
            self._event_bus.emit(ActivityDeletedEvent(ts=now, activity_id=activity_id, existed=existed))
        if removed:
            self._rescan_conflicts(now)

        if self._storage is not None:
            storage = self._storage
            for activity_id in requested:
                self._writer.submit("delete", activity_id, functools.partial(storage.delete, activity_id))
        return removed

    def duplicate(self, activity_id: str) -> Activity | None:
        """Add a copy of an activity shifted one hour later."""
        original = self._activities.get(activity_id)
        if original is None:
            LOGGER.warning("duplicate ignored: unknown activity_id=%s", activity_id)
            return None

        draft = ActivityDraft(
            title=f"{original.title} (copy)",
            description=original.description,
            start=original.start + _DUPLICATE_SHIFT,
            end=original.end + _DUPLICATE_SHIFT,
            category=original.category,
            priority=original.priority,
            status=original.status,
            energy_required=original.energy_required,
            estimated_duration=original.estimated_duration,
            is_market_protected=original.is_market_protected,
            flexibility_score=original.flexibility_score,
            tags=list(original.tags),
        )
        return self.add(draft)

    def remove_duplicates(self) -> int:
        """Collapse activities sharing (title, start, end); keep the newest.

        Returns the number of activities removed. Storage is cleared and
        re-populated best-effort when anything was removed.
        """
        unique: dict[tuple[str, datetime, datetime], Activity] = {}
        for activity in self._activities.values():
            key = (activity.title, activity.start, activity.end)
            kept = unique.get(key)
            if kept is None or activity.updated_at > kept.updated_at:
                unique[key] = activity

        keep_ids = {activity.id for activity in unique.values()}
        removed = len(self._activities) - len(keep_ids)
        if removed == 0:
            return 0

        self._activities = {k: v for k, v in self._activities.items() if k in keep_ids}
        self._rescan_conflicts(self._clock())

        if self._storage is not None:
            storage = self._storage
            snapshot = self.list_activities()

            async def _rewrite() -> None:
                await storage.clear()
                for activity in snapshot:
                    await storage.save(activity)

            self._writer.submit("rewrite", None, _rewrite)

        LOGGER.info("removed %d duplicate activities", removed)
        return removed

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Replace the activity set with the storage contents.

        A storage failure is logged and leaves an empty, loaded repository.
        """
        self._activities = {}
        if self._storage is not None:
            try:
                stored = await self._storage.load_all()
            except Exception:  # noqa: BLE001
                LOGGER.exception("Failed to load activities from storage")
                stored = []

            for activity in stored:
                self._activities[activity.id] = activity

        self._rescan_conflicts(self._clock())
        self._loaded = True

    async def clear(self) -> None:
        """Drop every activity in memory and in storage."""
        self._activities = {}
        await self._writer.drain()

        if self._storage is None:
            return
        try:
            await self._storage.clear()
        except Exception:  # noqa: BLE001
            LOGGER.exception("Failed to clear activity storage")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _rescan_conflicts(self, now: datetime) -> None:
        """Recompute ``is_conflicted`` for every activity (full rescan)."""
        flagged_ids = conflicted_ids(self._activities.values())

        newly_flagged: list[str] = []
        newly_cleared: list[str] = []

        for activity_id, activity in self._activities.items():
            flag = activity_id in flagged_ids
            if activity.is_conflicted == flag:
                continue
            self._activities[activity_id] = activity.model_copy(update={"is_conflicted": flag})
            (newly_flagged if flag else newly_cleared).append(activity_id)

        if newly_flagged or newly_cleared:
            self._event_bus.emit(
                ConflictFlagsChangedEvent(
                    ts=now,
                    flagged=tuple(newly_flagged),
                    cleared=tuple(newly_cleared),
                )
            )

    def _persist_save(self, activity: Activity) -> None:
        if self._storage is None:
            return
        storage = self._storage
        self._writer.submit("save", activity.id, functools.partial(storage.save, activity))
