"""Shared builders for the semantic test suite."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta
from typing import Any, Callable

import pytest

from timeflow.core.domain.activity_repository import ActivityRepository
from timeflow.core.domain.types import Activity, ActivityDraft
from timeflow.core.events.sinks.null_event_bus import NullEventBus

# Monday; every "HH:MM" in tests is on this day.
BASE_DAY = datetime(2025, 1, 6)


def _at(hhmm: str) -> datetime:
    hours, minutes = hhmm.split(":")
    return BASE_DAY + timedelta(hours=int(hours), minutes=int(minutes))


class RecordingSink:
    """Collects emitted domain events in order."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def on_event(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def at() -> Callable[[str], datetime]:
    return _at


@pytest.fixture
def make_activity() -> Callable[..., Activity]:
    """Build an Activity directly (bypassing the repository)."""

    def _make(activity_id: str, start: str, end: str, **overrides: Any) -> Activity:
        fields: dict[str, Any] = {
            "id": activity_id,
            "title": activity_id,
            "start": _at(start),
            "end": _at(end),
            "category": "work",
            "priority": "medium",
            "energy_required": "medium",
            "estimated_duration": int((_at(end) - _at(start)).total_seconds() // 60),
            "flexibility_score": 50,
            "created_at": BASE_DAY,
            "updated_at": BASE_DAY,
        }
        fields.update(overrides)
        return Activity(**fields)

    return _make


@pytest.fixture
def make_draft() -> Callable[..., ActivityDraft]:
    def _make(title: str, start: str, end: str, **overrides: Any) -> ActivityDraft:
        fields: dict[str, Any] = {
            "title": title,
            "start": _at(start),
            "end": _at(end),
            "category": "work",
            "priority": "medium",
            "energy_required": "medium",
        }
        fields.update(overrides)
        return ActivityDraft(**fields)

    return _make


@pytest.fixture
def id_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"act-{next(counter)}"


@pytest.fixture
def repository(id_factory: Callable[[], str]) -> ActivityRepository:
    return ActivityRepository(
        event_bus=NullEventBus(),
        clock=lambda: BASE_DAY,
        id_factory=id_factory,
    )


def assert_flags_match_overlap_graph(repo: ActivityRepository) -> None:
    """Brute-force check of the conflict-flag invariant."""
    activities = repo.list_activities()
    for activity in activities:
        expected = any(
            other.id != activity.id and activity.start < other.end and other.start < activity.end
            for other in activities
        )
        assert activity.is_conflicted == expected, activity.id


@pytest.fixture
def check_flags() -> Callable[[ActivityRepository], None]:
    return assert_flags_match_overlap_graph


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()
