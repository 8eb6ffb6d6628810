"""Per-conflict solution heuristics.

Each conflict type has its own generator. Time overlaps yield a concrete
reschedule of the lower-priority activity; energy overload and market
conflicts yield advisory solutions that name an intent but carry no changes.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, Sequence

from timeflow.core.domain.types import PRIORITY_RANK, EndChange, Solution, StartChange

if TYPE_CHECKING:
    from timeflow.core.conflicts.conflict_config import ConflictConfig
    from timeflow.core.domain.types import Activity

# Reschedule scoring
_BASE_CONFIDENCE = 0.5
_FLEXIBILITY_WEIGHT = 0.3
_LOW_PRIORITY_BONUS = 0.2
_URGENT_PENALTY = 0.3

_PEAK_OFF_WINDOW_SCORE = 0.3
_NON_PEAK_ENERGY_SCORE = 0.6

_TRADING_IN_SESSION = 0.9
_TRADING_OFF_SESSION = 0.3
_OTHER_OFF_SESSION = 0.9
_OTHER_IN_SESSION = 0.5

_RESCHEDULE_REASON = "avoid time overlap"


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def lower_priority(a: Activity, b: Activity) -> Activity:
    """Return the lower-priority activity; ties resolve to ``a``."""
    return a if PRIORITY_RANK[a.priority] <= PRIORITY_RANK[b.priority] else b


def select_recommendation(
    solutions: Sequence[Solution],
    predicate: Callable[[Solution], bool],
) -> Solution | None:
    """Return the first solution passing ``predicate``, else the first, else None."""
    for solution in solutions:
        if predicate(solution):
            return solution
    return solutions[0] if solutions else None


class SolutionGenerator:
    """Produces scored solutions for detected conflicts."""

    def __init__(self, config: ConflictConfig) -> None:
        self._config = config

    # ---------------------------------------------------------------------
    # Scoring helpers
    # ---------------------------------------------------------------------

    @staticmethod
    def reschedule_confidence(activity: Activity) -> float:
        confidence = _BASE_CONFIDENCE + (activity.flexibility_score / 100) * _FLEXIBILITY_WEIGHT
        if activity.priority == "low":
            confidence += _LOW_PRIORITY_BONUS
        if activity.priority == "urgent":
            confidence -= _URGENT_PENALTY
        return _clamp01(confidence)

    def energy_optimization(self, activity: Activity, new_start: datetime) -> float:
        if activity.energy_required != "peak":
            return _NON_PEAK_ENERGY_SCORE

        hour = new_start.hour
        for window in self._config.peak_energy_windows:
            if window.contains(hour):
                return window.score
        return _PEAK_OFF_WINDOW_SCORE

    def market_compatibility(self, activity: Activity, new_start: datetime) -> float:
        in_session = self._config.in_market_session(new_start.hour)
        if activity.category == "trading":
            return _TRADING_IN_SESSION if in_session else _TRADING_OFF_SESSION
        return _OTHER_IN_SESSION if in_session else _OTHER_OFF_SESSION

    # ---------------------------------------------------------------------
    # Generators
    # ---------------------------------------------------------------------

    def for_time_overlap(self, a: Activity, b: Activity) -> list[Solution]:
        """Reschedule the lower-priority activity after the other one ends.

        Only flexible activities are moved; an inflexible pair yields [].
        The moved activity keeps its scheduled length (``end - start``), not
        its ``estimated_duration``, which stays an independent estimate.
        """
        mover = lower_priority(a, b)
        anchor = b if mover is a else a

        if mover.flexibility_score <= self._config.reschedule_min_flexibility:
            return []

        new_start = anchor.end + timedelta(minutes=self._config.reschedule_buffer_minutes)
        new_end = new_start + (mover.end - mover.start)

        # The move is always later (anchor.end > mover.start), so changing the
        # end first keeps every intermediate interval valid.
        changes = [
            EndChange(
                activity_id=mover.id,
                old_value=mover.end,
                new_value=new_end,
                reason=_RESCHEDULE_REASON,
            ),
            StartChange(
                activity_id=mover.id,
                old_value=mover.start,
                new_value=new_start,
                reason=_RESCHEDULE_REASON,
            ),
        ]

        solutions = [
            Solution(
                id=f"reschedule_{mover.id}",
                type="reschedule",
                description=f'Reschedule "{mover.title}" to {new_start:%H:%M}',
                confidence=self.reschedule_confidence(mover),
                impact="minimal" if mover.priority == "low" else "moderate",
                changes=changes,
                actionable=True,
                energy_optimization=self.energy_optimization(mover, new_start),
                market_compatibility=self.market_compatibility(mover, new_start),
            )
        ]
        return sorted(solutions, key=lambda s: s.confidence, reverse=True)

    def for_energy_overload(self, demanding: Sequence[Activity], conflict_key: str) -> list[Solution]:
        """Advisory: redistribute flexible high-energy activities."""
        movable = [a for a in demanding if a.flexibility_score > self._config.redistribute_min_flexibility]
        if not movable:
            return []

        return [
            Solution(
                id=f"redistribute_energy_{conflict_key}",
                type="reschedule",
                description=f"Redistribute {len(movable)} high-energy activities across the day",
                confidence=0.8,
                impact="moderate",
                changes=[],
                actionable=False,
                energy_optimization=0.9,
                market_compatibility=0.7,
            )
        ]

    def for_market_conflict(self, protected: Activity, intruders: Sequence[Activity]) -> list[Solution]:
        """Advisory: move flexible non-trading activities out of the protected window."""
        movable = [a for a in intruders if a.flexibility_score > self._config.market_move_min_flexibility]
        if not movable:
            return []

        return [
            Solution(
                id=f"avoid_market_{protected.id}",
                type="reschedule",
                description=f'Move {len(movable)} non-trading activities out of "{protected.title}"',
                confidence=0.85,
                impact="minimal",
                changes=[],
                actionable=False,
                energy_optimization=0.6,
                market_compatibility=0.95,
            )
        ]
