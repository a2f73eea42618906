"""
Pydantic models for the profile, workout sessions and session reports.

Stored field names are camelCase so profiles written by earlier versions of
the app load without conversion.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .weeks import iso_week_number


class LogEntry(BaseModel):
    """One line of the activity log."""

    model_config = ConfigDict(extra="allow")

    text: str
    date: datetime | None = None
    type: str = "info"
    highlight: bool = False


class MuscleProgress(BaseModel):
    model_config = ConfigDict(extra="allow")

    xp: int = 0
    level: int = 1


class UserProfile(BaseModel):
    """Progression state for the single user of the app."""

    # Unknown stored keys survive a load/save cycle.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    fitness_points: int = 0
    fitness_level: int = 1
    prestige_currency: int = 0
    streak: int = 0
    last_workout: datetime | None = None
    grace_used: int = 0
    last_grace_week: int | None = None
    muscles: dict[str, MuscleProgress] = Field(default_factory=dict)
    prs: dict[str, float] = Field(default_factory=dict)
    system_logs: list[LogEntry] = Field(default_factory=list)
    # Owned by the profile screens; carried through untouched.
    profile_slides: list[Any] = Field(default_factory=list)
    schedule: dict[str, Any] = Field(default_factory=dict)

    @field_validator("last_workout")
    @classmethod
    def _assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def get_muscle(self, name: str) -> MuscleProgress:
        """Return the muscle entry, or a fresh level-1 entry without storing it."""
        return self.muscles.get(name) or MuscleProgress()

    def ensure_muscle(self, name: str) -> MuscleProgress:
        """Return the muscle entry, creating it at zero XP if absent."""
        if name not in self.muscles:
            self.muscles[name] = MuscleProgress()
        return self.muscles[name]

    def get_pr(self, exercise_id: str) -> float:
        return self.prs.get(exercise_id) or 0

    def muscle_levels(self) -> dict[str, int]:
        return {name: m.level for name, m in self.muscles.items()}

    def append_logs(self, entries: Iterable[LogEntry], limit: int) -> None:
        """Append entries and evict the oldest beyond ``limit``."""
        self.system_logs.extend(entries)
        if len(self.system_logs) > limit:
            self.system_logs = self.system_logs[-limit:]

    def to_store(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# Every profile field with the value it takes when missing from stored data.
PROFILE_DEFAULTS: dict[str, Callable[[date], Any]] = {
    "fitnessPoints": lambda today: 0,
    "fitnessLevel": lambda today: 1,
    "prestigeCurrency": lambda today: 0,
    "streak": lambda today: 0,
    "lastWorkout": lambda today: None,
    "graceUsed": lambda today: 0,
    "lastGraceWeek": iso_week_number,
    "muscles": lambda today: {},
    "prs": lambda today: {},
    "systemLogs": lambda today: [],
    "profileSlides": lambda today: [],
    "schedule": lambda today: {},
}


def normalize_profile(raw: dict[str, Any] | None, today: date) -> UserProfile:
    """Fill in every field absent from ``raw`` and validate it into a profile."""
    data = dict(raw or {})
    for key, default in PROFILE_DEFAULTS.items():
        if data.get(key) is None:
            data[key] = default(today)
    return UserProfile.model_validate(data)


class ExerciseDetails(BaseModel):
    target: list[str] = Field(default_factory=list)

    @field_validator("target", mode="before")
    @classmethod
    def _muscle_names(cls, v: Any) -> list[Any]:
        if not isinstance(v, list):
            return []
        return [t for t in v if isinstance(t, str)]


class ExerciseEntry(BaseModel):
    """One exercise in a session; ``sets`` holds raw [value1, value2] pairs.

    Malformed optional fields are blanked rather than rejected, so one bad
    exercise never costs the rest of the session.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    db_id: str = Field(alias="dbId")
    name: str = ""
    type: str = ""
    sets: list[Any] = Field(default_factory=list)
    details: ExerciseDetails | None = None

    @field_validator("name", "type", mode="before")
    @classmethod
    def _none_as_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("sets", mode="before")
    @classmethod
    def _sets_list(cls, v: Any) -> list[Any]:
        return v if isinstance(v, list) else []

    @field_validator("details", mode="before")
    @classmethod
    def _details_mapping(cls, v: Any) -> Any:
        return v if isinstance(v, dict | ExerciseDetails) else None

    @property
    def display_name(self) -> str:
        return self.name or self.db_id

    @property
    def targets(self) -> list[str]:
        return self.details.target if self.details else []


class WorkoutSession(BaseModel):
    exercises: list[ExerciseEntry] = Field(default_factory=list)


class SessionReport(BaseModel):
    """Outcome of scoring one session, committed into the profile afterwards."""

    model_config = ConfigDict(populate_by_name=True)

    earned_mgp: dict[str, int] = Field(default_factory=dict, alias="earnedMGP")
    total_session_mgp: int = Field(0, alias="totalSessionMGP")
    base_fp: int = Field(0, alias="baseFP")
    effort_fp: int = Field(0, alias="effortFP")
    streak_fp: int = Field(0, alias="streakFP")
    total_fp: int = Field(0, alias="totalFP")
    earned_prestige: int = Field(0, alias="earnedPrestige")
    level_ups: list[str] = Field(default_factory=list, alias="levelUps")
    new_prs: list[str] = Field(default_factory=list, alias="newPRs")
    pr_updates: dict[str, float] = Field(default_factory=dict, alias="prUpdates")
    generated_logs: list[LogEntry] = Field(default_factory=list, alias="generatedLogs")
