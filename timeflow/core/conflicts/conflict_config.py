"""Conflict detection configuration.

Every threshold used by detection and solution scoring lives here as a named
setting. The default values reproduce the established behavior; none of them
has been calibrated against real calendars.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class HourWindow(BaseModel):
    """Inclusive range of clock hours, e.g. 9..15 covers 09:00-15:59."""

    start_hour: int = Field(..., ge=0, le=23)
    end_hour: int = Field(..., ge=0, le=23)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_order(self) -> HourWindow:
        if self.end_hour < self.start_hour:
            raise ValueError("end_hour must be >= start_hour")
        return self

    def contains(self, hour: int) -> bool:
        return self.start_hour <= hour <= self.end_hour


class ScoredHourWindow(HourWindow):
    score: float = Field(..., ge=0, le=1)


def _default_market_windows() -> list[HourWindow]:
    return [HourWindow(start_hour=9, end_hour=15), HourWindow(start_hour=21, end_hour=23)]


def _default_peak_energy_windows() -> list[ScoredHourWindow]:
    return [
        ScoredHourWindow(start_hour=9, end_hour=11, score=0.9),
        ScoredHourWindow(start_hour=14, end_hour=16, score=0.7),
    ]


class ConflictConfig(BaseModel):
    """Structured-only conflict detection configuration."""

    # Time-overlap rescheduling
    reschedule_buffer_minutes: int = Field(default=15, ge=0)
    reschedule_min_flexibility: float = Field(default=50.0, ge=0, le=100)

    # Energy overload
    energy_overload_threshold: float = Field(default=0.85, ge=0, le=1)
    energy_critical_threshold: float = Field(default=0.95, ge=0, le=1)
    optimal_peak_load: float = Field(default=0.3, ge=0, le=1)
    working_day_minutes: int = Field(default=480, gt=0)
    redistribute_min_flexibility: float = Field(default=60.0, ge=0, le=100)

    # Market protection
    market_move_min_flexibility: float = Field(default=70.0, ge=0, le=100)
    market_windows: list[HourWindow] = Field(default_factory=_default_market_windows)

    # Peak-energy activities score by start hour; first matching window wins.
    peak_energy_windows: list[ScoredHourWindow] = Field(default_factory=_default_peak_energy_windows)

    # Recommendation selection ("first above threshold, else first")
    time_recommendation_min_confidence: float = Field(default=0.7, ge=0, le=1)
    energy_recommendation_min_optimization: float = Field(default=0.8, ge=0, le=1)
    market_recommendation_min_compatibility: float = Field(default=0.8, ge=0, le=1)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, config_obj: dict[str, Any]) -> ConflictConfig:
        """Create a ConflictConfig instance from a JSON-compatible object."""
        return cls.model_validate(config_obj)

    @classmethod
    def from_toml_path(cls, path: str | Path) -> ConflictConfig:
        """Load a ConflictConfig from a TOML file.

        Settings may sit at the top level or under a ``[conflicts]`` table.
        """
        data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
        section = data.get("conflicts", data)
        if not isinstance(section, dict):
            raise ValueError("[conflicts] must be a table")
        return cls.model_validate(section)

    @model_validator(mode="after")
    def validate_consistency(self) -> ConflictConfig:
        """Validate internal consistency of the thresholds."""
        if self.energy_critical_threshold < self.energy_overload_threshold:
            raise ValueError("energy_critical_threshold must be >= energy_overload_threshold")
        return self

    def in_market_session(self, hour: int) -> bool:
        return any(window.contains(hour) for window in self.market_windows)
