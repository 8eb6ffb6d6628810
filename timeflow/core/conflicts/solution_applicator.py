"""Applies a chosen solution through the repository."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from timeflow.core.events.events import SolutionAppliedEvent

if TYPE_CHECKING:
    from timeflow.core.conflicts.conflict_detector import ConflictDetector
    from timeflow.core.domain.activity_repository import ActivityRepository
    from timeflow.core.domain.types import Conflict, FieldChange, Solution
    from timeflow.core.events.event_bus import EventBus

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationResult:
    """Outcome of applying one solution.

    - applied_changes: number of field changes the repository accepted
    - skipped_changes: changes not applied because the activity is gone, the
      field no longer holds ``old_value``, or the edit failed validation
    - conflicts: conflicts re-detected from scratch after the last change
    """

    solution_id: str
    actionable: bool
    applied_changes: int
    conflicts: list[Conflict]
    skipped_changes: list[FieldChange] = field(default_factory=list)


class SolutionApplicator:
    """Writes a solution's field changes and re-runs detection.

    Changes are applied one at a time with no transactional grouping; each
    repository update rescans conflict flags on its own. A change whose
    ``old_value`` no longer matches the activity is stale and is skipped, as
    is one the repository rejects. apply() never raises for either case.
    """

    def __init__(
        self,
        *,
        repository: ActivityRepository,
        detector: ConflictDetector,
        event_bus: EventBus,
    ) -> None:
        self._repository = repository
        self._detector = detector
        self._event_bus = event_bus

    def apply(self, solution: Solution) -> ApplicationResult:
        if not solution.actionable:
            LOGGER.info("solution %s is advisory; no changes applied", solution.id)

        applied = 0
        skipped: list[FieldChange] = []
        for change in solution.changes:
            if self._apply_change(solution.id, change):
                applied += 1
            else:
                skipped.append(change)

        conflicts = self._detector.detect(self._repository.list_activities())

        self._event_bus.emit(
            SolutionAppliedEvent(
                ts=self._repository.now(),
                solution_id=solution.id,
                actionable=solution.actionable,
                applied_changes=applied,
                skipped_changes=len(skipped),
                remaining_conflicts=len(conflicts),
            )
        )

        return ApplicationResult(
            solution_id=solution.id,
            actionable=solution.actionable,
            applied_changes=applied,
            conflicts=conflicts,
            skipped_changes=skipped,
        )

    def _apply_change(self, solution_id: str, change: FieldChange) -> bool:
        current = self._repository.get(change.activity_id)
        if current is None:
            LOGGER.warning(
                "solution %s: activity %s no longer exists; skipping %s change",
                solution_id,
                change.activity_id,
                change.field,
            )
            return False

        if getattr(current, change.field) != change.old_value:
            LOGGER.warning(
                "solution %s: %s.%s changed since detection; skipping stale change",
                solution_id,
                change.activity_id,
                change.field,
            )
            return False

        try:
            return self._repository.update(change.activity_id, change.to_patch())
        except ValueError:
            LOGGER.warning(
                "solution %s: %s change on %s rejected",
                solution_id,
                change.field,
                change.activity_id,
                exc_info=True,
            )
            return False
