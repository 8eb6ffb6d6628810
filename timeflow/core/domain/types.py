"""Core shared data models.

This module defines the canonical Pydantic models used across the system for
activities, activity edits, detected conflicts, and proposed solutions. These
types are treated as schema definitions and intentionally prioritize
structural clarity over minimal class size.
"""

# pylint: disable=line-too-long,missing-class-docstring,missing-function-docstring
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

ActivityCategory = Literal[
    "work",
    "personal",
    "meeting",
    "break",
    "exercise",
    "meal",
    "travel",
    "other",
    "trading",
    "life",
    "preparation",
]
Priority = Literal["low", "medium", "high", "urgent"]
EnergyLevel = Literal["low", "medium", "high", "peak"]
ActivityStatus = Literal["planned", "in_progress", "completed", "cancelled", "postponed"]

ConflictType = Literal["time_overlap", "energy_overload", "market_conflict"]
Severity = Literal["low", "medium", "high", "critical"]
SolutionType = Literal["reschedule", "split", "delegate", "cancel", "merge"]
Impact = Literal["minimal", "moderate", "significant"]
SuggestionType = Literal["redistribute", "add_break", "reschedule", "reduce_load"]

# Ordinal ranks used for "lower priority" and severity sorting.
PRIORITY_RANK: dict[str, int] = {"low": 1, "medium": 2, "high": 3, "urgent": 4}
SEVERITY_SCORE: dict[str, int] = {"low": 1, "medium": 2, "high": 3, "critical": 4}


def _interval_minutes(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


# ---------------------------------------------------------------------------
# Activity models
# ---------------------------------------------------------------------------


class Activity(BaseModel):
    """A time-boxed scheduling item over the half-open interval [start, end).

    ``is_conflicted`` is a derived cache owned by ActivityRepository. Instances
    are frozen: the repository replaces them instead of mutating them.
    """

    id: str = Field(..., min_length=1)
    title: str
    description: str | None = None

    start: datetime
    end: datetime

    category: ActivityCategory
    priority: Priority
    status: ActivityStatus = "planned"

    energy_required: EnergyLevel
    estimated_duration: int = Field(..., ge=0, description="Estimated duration in minutes.")
    is_market_protected: bool = False
    flexibility_score: float = Field(default=50.0, ge=0, le=100)

    is_conflicted: bool = False

    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_interval(self) -> Activity:
        if self.end <= self.start:
            raise ValueError("activity end must be strictly after start")
        return self

    @property
    def duration_minutes(self) -> int:
        return _interval_minutes(self.start, self.end)


class ActivityDraft(BaseModel):
    """User-supplied fields for a new activity (input of ActivityRepository.add)."""

    title: str
    description: str | None = None

    start: datetime
    end: datetime

    category: ActivityCategory
    priority: Priority
    status: ActivityStatus = "planned"

    energy_required: EnergyLevel
    estimated_duration: int | None = Field(
        default=None,
        ge=0,
        description="Estimated duration in minutes. Defaults to the interval length.",
    )
    is_market_protected: bool = False
    flexibility_score: float = Field(default=50.0, ge=0, le=100)

    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_interval(self) -> ActivityDraft:
        if self.end <= self.start:
            raise ValueError("activity end must be strictly after start")
        if self.estimated_duration is None:
            self.estimated_duration = _interval_minutes(self.start, self.end)
        return self


class ActivityPatch(BaseModel):
    """Partial update of user-settable activity fields.

    Derived and identity fields (id, is_conflicted, timestamps) are not part
    of this model and are rejected as unknown keys.
    """

    title: str | None = None
    description: str | None = None

    start: datetime | None = None
    end: datetime | None = None

    category: ActivityCategory | None = None
    priority: Priority | None = None
    status: ActivityStatus | None = None

    energy_required: EnergyLevel | None = None
    estimated_duration: int | None = Field(default=None, ge=0)
    is_market_protected: bool | None = None
    flexibility_score: float | None = Field(default=None, ge=0, le=100)

    tags: list[str] | None = None

    model_config = ConfigDict(extra="forbid")

    def updates(self) -> dict[str, Any]:
        """Return only the fields explicitly set on this patch."""
        return {name: getattr(self, name) for name in self.model_fields_set}


# ---------------------------------------------------------------------------
# Field changes (discriminated union)
# ---------------------------------------------------------------------------


class FieldChangeBase(BaseModel):
    """
    Base fields shared by all field changes.

    Notes:
    - Each variant fixes ``field`` to a literal and types old/new values.
    - Unknown fields cannot be expressed; the union is closed.
    """

    activity_id: str = Field(..., min_length=1)
    reason: str = ""

    model_config = ConfigDict(extra="forbid")

    def to_patch(self) -> ActivityPatch:
        field_name = getattr(self, "field")
        return ActivityPatch.model_validate({field_name: getattr(self, "new_value")})


class StartChange(FieldChangeBase):
    field: Literal["start"] = "start"
    old_value: datetime
    new_value: datetime


class EndChange(FieldChangeBase):
    field: Literal["end"] = "end"
    old_value: datetime
    new_value: datetime


class TitleChange(FieldChangeBase):
    field: Literal["title"] = "title"
    old_value: str
    new_value: str


class CategoryChange(FieldChangeBase):
    field: Literal["category"] = "category"
    old_value: ActivityCategory
    new_value: ActivityCategory


class PriorityChange(FieldChangeBase):
    field: Literal["priority"] = "priority"
    old_value: Priority
    new_value: Priority


class StatusChange(FieldChangeBase):
    field: Literal["status"] = "status"
    old_value: ActivityStatus
    new_value: ActivityStatus


class EnergyRequiredChange(FieldChangeBase):
    field: Literal["energy_required"] = "energy_required"
    old_value: EnergyLevel
    new_value: EnergyLevel


class EstimatedDurationChange(FieldChangeBase):
    field: Literal["estimated_duration"] = "estimated_duration"
    old_value: int = Field(..., ge=0)
    new_value: int = Field(..., ge=0)


class FlexibilityScoreChange(FieldChangeBase):
    field: Literal["flexibility_score"] = "flexibility_score"
    old_value: float = Field(..., ge=0, le=100)
    new_value: float = Field(..., ge=0, le=100)


class MarketProtectedChange(FieldChangeBase):
    field: Literal["is_market_protected"] = "is_market_protected"
    old_value: bool
    new_value: bool


# Discriminated union: Pydantic will select the correct model based on field.
FieldChange = Annotated[
    StartChange
    | EndChange
    | TitleChange
    | CategoryChange
    | PriorityChange
    | StatusChange
    | EnergyRequiredChange
    | EstimatedDurationChange
    | FlexibilityScoreChange
    | MarketProtectedChange,
    Field(discriminator="field"),
]


# ---------------------------------------------------------------------------
# Solutions and conflicts
# ---------------------------------------------------------------------------


class Solution(BaseModel):
    """
    A scored remediation proposal for a conflict.

    An advisory solution names an intent without concrete changes; it has
    ``actionable=False`` and an empty ``changes`` list.
    """

    id: str = Field(..., min_length=1)
    type: SolutionType
    description: str

    confidence: float = Field(..., ge=0, le=1)
    impact: Impact

    changes: list[FieldChange] = Field(default_factory=list)
    actionable: bool

    energy_optimization: float = Field(..., ge=0, le=1)
    market_compatibility: float = Field(..., ge=0, le=1)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_actionable(self) -> Solution:
        if self.actionable != bool(self.changes):
            raise ValueError("actionable must be true exactly when changes is non-empty")
        return self


class Conflict(BaseModel):
    id: str = Field(..., min_length=1)
    type: ConflictType
    severity: Severity

    affected_activities: list[Activity] = Field(..., min_length=1)
    solutions: list[Solution] = Field(default_factory=list)
    recommendation: Solution | None = None

    model_config = ConfigDict(extra="forbid")

    @property
    def severity_score(self) -> int:
        return SEVERITY_SCORE[self.severity]

    @property
    def affected_ids(self) -> list[str]:
        return [activity.id for activity in self.affected_activities]


# ---------------------------------------------------------------------------
# Energy analysis
# ---------------------------------------------------------------------------


class EnergySuggestion(BaseModel):
    type: SuggestionType
    description: str
    priority: Literal["low", "medium", "high"]
    activity_ids: list[str] = Field(default_factory=list)
    expected_improvement: float = Field(..., ge=0, le=1)

    model_config = ConfigDict(extra="forbid")


class EnergyOptimization(BaseModel):
    current_load: float = Field(..., ge=0, le=1)
    optimal_load: float = Field(..., ge=0, le=1)
    suggestions: list[EnergySuggestion] = Field(default_factory=list)
    peak_hours_utilization: float = Field(..., ge=0, le=1)
    distribution_score: float = Field(..., ge=0, le=1)

    model_config = ConfigDict(extra="forbid")
