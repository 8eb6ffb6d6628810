"""Public API for the timeflow package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Conflict engine
# ----------------------------------------------------------------------
from timeflow.core.conflicts.conflict_config import ConflictConfig, HourWindow, ScoredHourWindow
from timeflow.core.conflicts.conflict_detector import ConflictDetector, detect
from timeflow.core.conflicts.solution_applicator import ApplicationResult, SolutionApplicator
from timeflow.core.conflicts.solution_generator import SolutionGenerator, select_recommendation

# ----------------------------------------------------------------------
# Repository and domain types
# ----------------------------------------------------------------------
from timeflow.core.domain.activity_repository import ActivityRepository
from timeflow.core.domain.intervals import has_time_overlap
from timeflow.core.domain.types import (
    Activity,
    ActivityDraft,
    ActivityPatch,
    Conflict,
    EnergyOptimization,
    EnergySuggestion,
    FieldChange,
    Solution,
)

# ----------------------------------------------------------------------
# Events and storage
# ----------------------------------------------------------------------
from timeflow.core.events.event_bus import EventBus
from timeflow.core.events.sinks.null_event_bus import NullEventBus
from timeflow.core.ports.activity_storage import ActivityStorage
from timeflow.storage.json_file_storage import JsonFileActivityStorage
from timeflow.storage.memory_storage import InMemoryActivityStorage

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Conflict engine
    "ConflictConfig",
    "HourWindow",
    "ScoredHourWindow",
    "ConflictDetector",
    "detect",
    "SolutionGenerator",
    "select_recommendation",
    "SolutionApplicator",
    "ApplicationResult",
    # Repository and domain types
    "ActivityRepository",
    "has_time_overlap",
    "Activity",
    "ActivityDraft",
    "ActivityPatch",
    "FieldChange",
    "Solution",
    "Conflict",
    "EnergyOptimization",
    "EnergySuggestion",
    # Events and storage
    "EventBus",
    "NullEventBus",
    "ActivityStorage",
    "InMemoryActivityStorage",
    "JsonFileActivityStorage",
    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("timeflow")
except PackageNotFoundError:
    __version__ = "0.0.0"
