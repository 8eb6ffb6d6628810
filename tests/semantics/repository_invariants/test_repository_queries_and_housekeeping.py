"""
Semantic test: repository helpers keep the flag invariant.

Invariant:
duplicate() and remove_duplicates() are mutations like any other and end
with a full conflict-flag rescan.
"""

from __future__ import annotations


def test_duplicate_shifts_one_hour_and_rescans(repository, make_draft, at, check_flags) -> None:
    original = repository.add(make_draft("focus", "09:00", "10:30", flexibility_score=80, tags=["deep"]))

    copy = repository.duplicate(original.id)

    assert copy is not None
    assert copy.id != original.id
    assert copy.title == "focus (copy)"
    assert (copy.start, copy.end) == (at("10:00"), at("11:30"))
    assert copy.flexibility_score == 80
    assert copy.tags == ["deep"]
    assert copy.is_conflicted is True
    check_flags(repository)


def test_duplicate_unknown_id_returns_none(repository) -> None:
    assert repository.duplicate("missing") is None


def test_remove_duplicates_keeps_most_recent(id_factory, make_draft, at, check_flags) -> None:
    from timeflow.core.domain.activity_repository import ActivityRepository
    from timeflow.core.events.sinks.null_event_bus import NullEventBus

    ticks = iter([at("07:00"), at("07:01"), at("07:02"), at("07:03"), at("07:04")])
    repo = ActivityRepository(event_bus=NullEventBus(), clock=lambda: next(ticks), id_factory=id_factory)

    older = repo.add(make_draft("standup", "09:00", "09:15"))
    newer = repo.add(make_draft("standup", "09:00", "09:15"))
    other = repo.add(make_draft("lunch", "12:00", "13:00"))

    assert repo.get(older.id).is_conflicted is True

    removed = repo.remove_duplicates()

    assert removed == 1
    assert [a.id for a in repo.list_activities()] == [newer.id, other.id]
    assert repo.get(newer.id).is_conflicted is False
    check_flags(repo)

    assert repo.remove_duplicates() == 0


def test_category_and_date_range_queries(repository, make_draft, at) -> None:
    trade = repository.add(make_draft("open", "09:00", "10:00", category="trading"))
    gym = repository.add(make_draft("gym", "18:00", "19:00", category="exercise"))

    assert repository.by_category("trading") == [trade]
    assert repository.in_date_range(at("08:00"), at("12:00")) == [trade]
    assert repository.in_date_range(at("08:00"), at("19:00")) == [trade, repository.get(gym.id)]
