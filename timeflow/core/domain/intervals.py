"""Half-open interval overlap and the conflict-flag rescan.

The flag rule: an activity is conflicted exactly when some *other* activity
(different id) overlaps its interval [start, end).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from timeflow.core.domain.types import Activity


def has_time_overlap(a: Activity, b: Activity) -> bool:
    """Return True if the half-open intervals of ``a`` and ``b`` intersect."""
    return a.start < b.end and b.start < a.end


def conflicted_ids(activities: Iterable[Activity]) -> set[str]:
    """Return the ids of all activities overlapping at least one other activity.

    Full O(N^2) scan; an interval tree or sweep line would be the upgrade path
    if activity counts ever leave personal-calendar scale.
    """
    items = list(activities)
    flagged: set[str] = set()

    for i, current in enumerate(items):
        if current.id in flagged:
            continue
        for j, other in enumerate(items):
            if i == j or other.id == current.id:
                continue
            if has_time_overlap(current, other):
                flagged.add(current.id)
                flagged.add(other.id)
                break

    return flagged
