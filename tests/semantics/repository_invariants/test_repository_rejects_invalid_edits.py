"""
Semantic test: malformed input is rejected before it reaches the activity set.

Invariant:
A rejected add/update leaves every activity (and every flag) unchanged.
Only user-settable fields are patchable; ``is_conflicted`` is derived.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from timeflow.core.domain.types import ActivityPatch


def test_add_rejects_empty_or_inverted_interval(repository, make_draft) -> None:
    with pytest.raises(ValidationError):
        make_draft("inverted", "10:00", "09:00")

    with pytest.raises(ValidationError):
        repository.add(
            {
                "title": "empty",
                "start": "2025-01-06T10:00:00",
                "end": "2025-01-06T10:00:00",
                "category": "work",
                "priority": "low",
                "energy_required": "low",
            }
        )

    assert len(repository) == 0


def test_update_rejects_inverted_interval_and_keeps_state(repository, make_draft, at) -> None:
    a = repository.add(make_draft("a", "09:00", "10:00"))
    b = repository.add(make_draft("b", "09:30", "10:30"))

    with pytest.raises(ValidationError):
        repository.update(b.id, {"start": at("11:00")})

    assert repository.get(b.id) == b
    assert repository.get(a.id).is_conflicted is True


def test_patch_rejects_derived_and_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        ActivityPatch.model_validate({"is_conflicted": False})

    with pytest.raises(ValidationError):
        ActivityPatch.model_validate({"colour": "#6366f1"})


def test_update_unknown_id_is_ignored(repository, at) -> None:
    assert repository.update("missing", {"start": at("09:00")}) is False
    assert len(repository) == 0


def test_update_keeps_identity_and_refreshes_updated_at(id_factory, make_draft, at) -> None:
    from timeflow.core.domain.activity_repository import ActivityRepository
    from timeflow.core.events.sinks.null_event_bus import NullEventBus

    times = iter([at("08:00"), at("08:05")])
    repo = ActivityRepository(event_bus=NullEventBus(), clock=lambda: next(times), id_factory=id_factory)

    created = repo.add(make_draft("a", "09:00", "10:00"))
    repo.update(created.id, {"title": "renamed", "priority": "high"})

    updated = repo.get(created.id)
    assert updated.id == created.id
    assert updated.title == "renamed"
    assert updated.priority == "high"
    assert updated.created_at == at("08:00")
    assert updated.updated_at == at("08:05")


def test_draft_defaults(repository, make_draft) -> None:
    created = repository.add(make_draft("a", "09:00", "10:30"))

    assert created.id == "act-1"
    assert created.is_market_protected is False
    assert created.flexibility_score == 50
    assert created.estimated_duration == 90
    assert created.status == "planned"
    assert created.is_conflicted is False
