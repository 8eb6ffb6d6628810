"""
Semantic test: energy overload detection.

Invariant:
The peak share of estimated minutes must exceed 0.85 to raise an overload;
above 0.95 it is critical. The conflict is only reported when an advisory
redistribution can be proposed.
"""

from __future__ import annotations

import pytest

from timeflow.core.conflicts.conflict_detector import ConflictDetector


def _day(make_activity, peak_minutes: int, other_minutes: int, *, peak_flex: float = 80, other_energy: str = "low"):
    # Intervals never overlap; only estimated_duration drives the load.
    return [
        make_activity("peak", "08:00", "09:00", energy_required="peak", estimated_duration=peak_minutes, flexibility_score=peak_flex),
        make_activity("other", "10:00", "11:00", energy_required=other_energy, estimated_duration=other_minutes),
    ]


def _energy_conflicts(conflicts):
    return [c for c in conflicts if c.type == "energy_overload"]


def test_ninety_percent_peak_is_high(make_activity) -> None:
    """10h planned, 9h peak -> load 0.9 -> high (not critical)."""
    conflicts = _energy_conflicts(ConflictDetector().detect(_day(make_activity, 540, 60)))

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.severity == "high"
    assert conflict.affected_ids == ["peak"]

    [solution] = conflict.solutions
    assert solution.actionable is False
    assert solution.changes == []
    assert solution.confidence == 0.8
    assert solution.impact == "moderate"
    assert solution.energy_optimization == 0.9
    assert solution.market_compatibility == 0.7
    assert conflict.recommendation == solution


def test_above_ninety_five_percent_is_critical(make_activity) -> None:
    conflicts = _energy_conflicts(ConflictDetector().detect(_day(make_activity, 960, 40)))

    assert [c.severity for c in conflicts] == ["critical"]


def test_threshold_is_exclusive(make_activity) -> None:
    assert _energy_conflicts(ConflictDetector().detect(_day(make_activity, 85, 15))) == []


def test_high_energy_activities_are_affected_too(make_activity) -> None:
    activities = _day(make_activity, 900, 100, other_energy="high")

    [conflict] = _energy_conflicts(ConflictDetector().detect(activities))

    assert conflict.affected_ids == ["peak", "other"]


def test_no_flexible_demanding_activity_means_no_conflict(make_activity) -> None:
    """Flexibility must exceed 60 for the redistribution advice."""
    activities = _day(make_activity, 540, 60, peak_flex=60)

    assert _energy_conflicts(ConflictDetector().detect(activities)) == []


def test_empty_schedule_has_no_load(make_activity) -> None:
    assert ConflictDetector().detect([]) == []


def test_energy_conflict_id_is_stable(make_activity) -> None:
    activities = _day(make_activity, 540, 60)

    first = _energy_conflicts(ConflictDetector().detect(activities))[0]
    second = _energy_conflicts(ConflictDetector().detect(list(reversed(activities))))[0]

    assert first.id == second.id
    assert first.id.startswith("energy_overload:")


@pytest.mark.parametrize(("peak", "other", "expected_load"), [(300, 100, 0.75), (0, 100, 0.0)])
def test_energy_distribution_summary(make_activity, peak, other, expected_load) -> None:
    analysis = ConflictDetector().analyze_energy_distribution(_day(make_activity, peak, other))

    assert analysis.current_load == pytest.approx(expected_load)
    assert analysis.optimal_load == 0.3
    assert analysis.peak_hours_utilization == pytest.approx(min(1.0, peak / 480))
    assert analysis.distribution_score == pytest.approx(max(0.0, 1 - abs(expected_load - 0.3)))


def test_energy_distribution_suggestions(make_activity) -> None:
    busy = ConflictDetector().analyze_energy_distribution(_day(make_activity, 300, 100))
    calm = ConflictDetector().analyze_energy_distribution(_day(make_activity, 100, 300))
    moderate = ConflictDetector().analyze_energy_distribution(_day(make_activity, 60, 40))

    assert [s.type for s in busy.suggestions] == ["redistribute", "add_break"]
    assert busy.suggestions[0].activity_ids == ["peak"]
    assert busy.suggestions[0].priority == "high"
    assert calm.suggestions == []
    assert [s.type for s in moderate.suggestions] == ["redistribute"]


def test_energy_distribution_of_empty_schedule() -> None:
    analysis = ConflictDetector().analyze_energy_distribution([])

    assert analysis.current_load == 0
    assert analysis.peak_hours_utilization == 0
    assert analysis.suggestions == []
