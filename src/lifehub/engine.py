"""
Engine context: owns the profile and legacy stores, and saves after every mutation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime
from typing import Any

from .config import SETTINGS, EngineRules
from .leveling import FITNESS_LEVELS, MUSCLE_LEVELS, LevelStatus, get_level_status
from .models import SessionReport, UserProfile, WorkoutSession, normalize_profile
from .replication import HttpReplicator, Replicator
from .services import build_session_report, commit_report, reset_grace_if_new_week, use_grace
from .stats import stats_for_date

logger = logging.getLogger(__name__)

STORAGE_KEY_LOGS = "LifeHub_Measurements"
STORAGE_KEY_GOALS = "LifeHub_Goals"
STORAGE_KEY_GALLERY = "LifeHub_Gallery"
STORAGE_KEY_USER = "LifeHub_RPG_User"
STORAGE_KEY_TEMPLATES = "lh_templates"

LoadFn = Callable[[str, Any], Any]
SaveFn = Callable[[Mapping[str, Any]], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LifeHubEngine:
    """
    Single-user progression engine.

    ``load(key, fallback)`` is used once per store at construction; ``save``
    receives every store at once after each mutation. A replicator, when
    given, is handed the full snapshot after each save without being awaited.
    """

    def __init__(
        self,
        load: LoadFn,
        save: SaveFn,
        replicator: Replicator | None = None,
        rules: EngineRules | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._save = save
        self.replicator = replicator
        self.rules = rules or SETTINGS.RULES
        self.clock = clock

        self.history_logs: list[dict[str, Any]] = load(STORAGE_KEY_LOGS, [])
        self.goals: dict[str, Any] = load(STORAGE_KEY_GOALS, {"Weight": 40})
        self.gallery: list[Any] = load(STORAGE_KEY_GALLERY, [])
        # Edited by the template screens; only read here for the backup payload.
        self.templates: list[Any] = load(STORAGE_KEY_TEMPLATES, [])
        self.profile: UserProfile = normalize_profile(
            load(STORAGE_KEY_USER, None), self.clock().date()
        )
        self.check_grace_reset()
        logger.info(
            "Engine loaded: level=%s fp=%s streak=%s",
            self.profile.fitness_level,
            self.profile.fitness_points,
            self.profile.streak,
        )

    @classmethod
    def from_settings(cls, clock: Callable[[], datetime] = _utcnow) -> LifeHubEngine:
        """Wire the engine to the SQL store and the configured backup service."""
        from .db import repo

        repo.init_db()
        return cls(
            repo.load_data,
            repo.save_data,
            replicator=HttpReplicator.from_settings(),
            clock=clock,
        )

    # --- operations ---------------------------------------------------------

    def process_session(
        self, session: WorkoutSession | dict[str, Any], is_luteal: bool, is_complete: bool
    ) -> SessionReport:
        """Score a workout, commit it and persist. The sole entry point for recording a workout."""
        if not isinstance(session, WorkoutSession):
            session = WorkoutSession.model_validate(session)
        report = build_session_report(self.profile, session, is_luteal, is_complete, self.rules)
        self.commit(report)
        return report

    def commit(self, report: SessionReport) -> None:
        """Apply an already computed report. Do not retry after it returns."""
        commit_report(self.profile, report, self.clock(), self.rules)
        self.save()

    def activate_grace(self) -> bool:
        if not use_grace(self.profile, self.clock(), self.rules):
            return False
        self.save()
        return True

    def check_grace_reset(self) -> bool:
        if not reset_grace_if_new_week(self.profile, self.clock()):
            return False
        self.save()
        return True

    # --- read helpers -------------------------------------------------------

    def fitness_status(self) -> LevelStatus:
        return get_level_status(
            self.profile.fitness_points,
            FITNESS_LEVELS,
            muscle_levels=self.profile.muscle_levels(),
            points_per_extra_level=self.rules.points_per_extra_level,
        )

    def muscle_status(self, muscle: str) -> LevelStatus:
        return get_level_status(
            self.profile.get_muscle(muscle).xp,
            MUSCLE_LEVELS,
            points_per_extra_level=self.rules.points_per_extra_level,
        )

    def stats_for_date(self, target: str | date | datetime) -> dict[str, str]:
        return stats_for_date(self.history_logs, target, self.rules.bmi_height_m)

    # --- persistence --------------------------------------------------------

    def store_entries(self) -> dict[str, Any]:
        return {
            STORAGE_KEY_LOGS: self.history_logs,
            STORAGE_KEY_GOALS: self.goals,
            STORAGE_KEY_GALLERY: self.gallery,
            STORAGE_KEY_USER: self.profile.to_store(),
        }

    def snapshot(self) -> dict[str, Any]:
        """Payload for the remote backup."""
        return {
            "userProfile": self.profile.to_store(),
            "measurements": self.history_logs,
            "goals": self.goals,
            "gallery": self.gallery,
            "templates": self.templates,
            "lastSync": self.clock().isoformat(),
        }

    def save(self) -> None:
        """Persist locally, then hand the snapshot to the replicator. Never raises."""
        try:
            self._save(self.store_entries())
            logger.debug("System saved (local)")
        except Exception as e:
            logger.warning("Local save failed: %s", e)
            return

        if self.replicator is None:
            return
        try:
            self.replicator.replicate(self.snapshot())
        except Exception as e:
            logger.warning("Cloud sync could not be scheduled: %s", e)
