"""
Domain event models.

These events represent immutable facts observed while the activity set is
mutated. They are consumed by loggers and recorders.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(slots=True)
class ActivityAddedEvent:
    ts: datetime
    activity_id: str
    title: str


@dataclass(slots=True)
class ActivityUpdatedEvent:
    ts: datetime
    activity_id: str
    fields: tuple[str, ...]


@dataclass(slots=True)
class ActivityDeletedEvent:
    ts: datetime
    activity_id: str
    existed: bool


@dataclass(slots=True)
class ConflictFlagsChangedEvent:
    ts: datetime

    flagged: tuple[str, ...]
    cleared: tuple[str, ...]


@dataclass(slots=True)
class StorageWriteFailedEvent:
    operation: str
    activity_id: str | None
    error: str


@dataclass(slots=True)
class SolutionAppliedEvent:
    ts: datetime
    solution_id: str

    actionable: bool
    applied_changes: int
    skipped_changes: int
    remaining_conflicts: int


DomainEvent = Union[
    ActivityAddedEvent,
    ActivityUpdatedEvent,
    ActivityDeletedEvent,
    ConflictFlagsChangedEvent,
    StorageWriteFailedEvent,
    SolutionAppliedEvent,
]
