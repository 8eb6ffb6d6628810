"""Conflict detector running the three scheduling checks.

Detection is a pure read pass over a list of activities:

1. time overlap   - every overlapping unordered pair, O(N^2)
2. energy overload - share of estimated minutes tagged PEAK, O(N)
3. market conflict - non-trading work intruding on protected windows

Results are concatenated in that order and stably sorted by descending
severity, so equal severities keep pass order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from timeflow.core.conflicts.conflict_config import ConflictConfig
from timeflow.core.conflicts.solution_generator import SolutionGenerator, select_recommendation
from timeflow.core.domain.intervals import has_time_overlap
from timeflow.core.domain.keys import (
    PairKey,
    energy_overload_conflict_id,
    market_conflict_id,
    stable_group_digest,
    time_overlap_conflict_id,
)
from timeflow.core.domain.types import (
    SEVERITY_SCORE,
    Conflict,
    EnergyOptimization,
    EnergySuggestion,
)

if TYPE_CHECKING:
    from timeflow.core.domain.types import Activity, Severity

_REDISTRIBUTE_MARGIN = 0.2
_ADD_BREAK_LOAD = 0.7


def _time_overlap_severity(a: Activity, b: Activity) -> Severity:
    has_urgent = a.priority == "urgent" or b.priority == "urgent"
    has_protected = a.is_market_protected or b.is_market_protected

    if has_urgent and has_protected:
        return "critical"
    if has_urgent:
        return "high"
    if has_protected:
        return "medium"
    return "low"


class ConflictDetector:
    """Detects scheduling conflicts and attaches ranked solutions."""

    def __init__(self, config: ConflictConfig | None = None) -> None:
        self.config = config if config is not None else ConflictConfig()
        self._generator = SolutionGenerator(self.config)

    def detect(self, activities: Sequence[Activity]) -> list[Conflict]:
        """Return all conflicts, most severe first."""
        items = list(activities)

        conflicts: list[Conflict] = []
        conflicts.extend(self._detect_time_overlaps(items))
        conflicts.extend(self._detect_energy_overload(items))
        conflicts.extend(self._detect_market_conflicts(items))

        return sorted(conflicts, key=lambda c: SEVERITY_SCORE[c.severity], reverse=True)

    # ---------------------------------------------------------------------
    # Energy analysis
    # ---------------------------------------------------------------------

    @staticmethod
    def _peak_load(activities: Sequence[Activity]) -> tuple[float, int]:
        total = sum(a.estimated_duration for a in activities)
        peak = sum(a.estimated_duration for a in activities if a.energy_required == "peak")
        load = peak / total if total > 0 else 0.0
        return load, peak

    def analyze_energy_distribution(self, activities: Sequence[Activity]) -> EnergyOptimization:
        """Summarize how much of the planned time demands peak energy."""
        items = list(activities)
        current_load, peak_minutes = self._peak_load(items)
        optimal_load = self.config.optimal_peak_load

        suggestions: list[EnergySuggestion] = []
        if current_load > optimal_load + _REDISTRIBUTE_MARGIN:
            suggestions.append(
                EnergySuggestion(
                    type="redistribute",
                    description="Too many peak-energy activities; spread them across the day",
                    priority="high",
                    activity_ids=[a.id for a in items if a.energy_required == "peak"],
                    expected_improvement=0.3,
                )
            )
        if current_load > _ADD_BREAK_LOAD:
            suggestions.append(
                EnergySuggestion(
                    type="add_break",
                    description="Add breaks between high-intensity activities",
                    priority="medium",
                    activity_ids=[],
                    expected_improvement=0.2,
                )
            )

        return EnergyOptimization(
            current_load=current_load,
            optimal_load=optimal_load,
            suggestions=suggestions,
            peak_hours_utilization=min(1.0, peak_minutes / self.config.working_day_minutes),
            distribution_score=max(0.0, 1.0 - abs(current_load - optimal_load)),
        )

    # ---------------------------------------------------------------------
    # Passes
    # ---------------------------------------------------------------------

    def _detect_time_overlaps(self, activities: list[Activity]) -> list[Conflict]:
        conflicts: list[Conflict] = []
        checked: set[PairKey] = set()
        min_confidence = self.config.time_recommendation_min_confidence

        for i, first in enumerate(activities):
            for second in activities[i + 1 :]:
                if first.id == second.id:
                    continue
                pair = PairKey.of(first.id, second.id)
                if pair in checked:
                    continue
                checked.add(pair)

                if not has_time_overlap(first, second):
                    continue

                solutions = self._generator.for_time_overlap(first, second)
                conflicts.append(
                    Conflict(
                        id=time_overlap_conflict_id(pair),
                        type="time_overlap",
                        severity=_time_overlap_severity(first, second),
                        affected_activities=[first, second],
                        solutions=solutions,
                        recommendation=select_recommendation(
                            solutions, lambda s: s.confidence > min_confidence
                        ),
                    )
                )

        return conflicts

    def _detect_energy_overload(self, activities: list[Activity]) -> list[Conflict]:
        current_load, _ = self._peak_load(activities)
        if current_load <= self.config.energy_overload_threshold:
            return []

        demanding = [a for a in activities if a.energy_required in ("peak", "high")]
        affected_ids = [a.id for a in demanding]

        solutions = self._generator.for_energy_overload(
            demanding, stable_group_digest(affected_ids, "redistribute")
        )
        if not solutions:
            return []

        min_optimization = self.config.energy_recommendation_min_optimization
        return [
            Conflict(
                id=energy_overload_conflict_id(affected_ids),
                type="energy_overload",
                severity="critical" if current_load > self.config.energy_critical_threshold else "high",
                affected_activities=demanding,
                solutions=solutions,
                recommendation=select_recommendation(
                    solutions, lambda s: s.energy_optimization > min_optimization
                ),
            )
        ]

    def _detect_market_conflicts(self, activities: list[Activity]) -> list[Conflict]:
        conflicts: list[Conflict] = []
        min_compatibility = self.config.market_recommendation_min_compatibility

        for protected in (a for a in activities if a.is_market_protected):
            intruders = [
                a
                for a in activities
                if not a.is_market_protected
                and a.category != "trading"
                and a.priority != "urgent"
                and has_time_overlap(a, protected)
            ]
            if not intruders:
                continue

            solutions = self._generator.for_market_conflict(protected, intruders)
            conflicts.append(
                Conflict(
                    id=market_conflict_id(protected.id),
                    type="market_conflict",
                    severity="medium",
                    affected_activities=[protected, *intruders],
                    solutions=solutions,
                    recommendation=select_recommendation(
                        solutions, lambda s: s.market_compatibility > min_compatibility
                    ),
                )
            )

        return conflicts


def detect(activities: Sequence[Activity], config: ConflictConfig | None = None) -> list[Conflict]:
    """Detect conflicts with a fresh detector (pure function)."""
    return ConflictDetector(config).detect(activities)
