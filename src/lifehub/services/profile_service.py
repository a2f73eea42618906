"""Commit of a scored session into the user profile."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..config import SETTINGS, EngineRules
from ..leveling import FITNESS_LEVELS, MUSCLE_LEVELS, get_level_status
from ..models import LogEntry, SessionReport, UserProfile

logger = logging.getLogger(__name__)


def advance_streak(profile: UserProfile, now: datetime, rules: EngineRules) -> None:
    """Continue the streak inside the buffer window, otherwise restart it at 1."""
    buffer = timedelta(hours=rules.streak_buffer_hours)
    if profile.last_workout is not None and now - profile.last_workout < buffer:
        profile.streak += 1
    else:
        profile.streak = 1
    profile.last_workout = now


def commit_report(
    profile: UserProfile,
    report: SessionReport,
    now: datetime,
    rules: EngineRules | None = None,
) -> None:
    """
    Apply ``report`` to ``profile`` in place.

    Not idempotent: committing the same report twice counts the session twice.
    Level-up lines are appended to ``report.generated_logs`` before all of the
    report's lines are written to the profile log with a shared timestamp.
    """
    rules = rules or SETTINGS.RULES

    # 1. Muscles
    for muscle, points in report.earned_mgp.items():
        progress = profile.ensure_muscle(muscle)
        old_level = progress.level
        progress.xp += points
        progress.level = get_level_status(
            progress.xp, MUSCLE_LEVELS, points_per_extra_level=rules.points_per_extra_level
        ).level
        if progress.level > old_level:
            report.level_ups.append(f"{muscle} -> Level {progress.level}")
            report.generated_logs.append(
                LogEntry(
                    text=f"[LEVEL UP] {muscle} -> Level {progress.level}",
                    type="levelup",
                    highlight=True,
                )
            )

    # 2. Records
    for exercise_id, volume in report.pr_updates.items():
        if volume > profile.get_pr(exercise_id):
            profile.prs[exercise_id] = volume

    # 3. Fitness points and prestige
    old_fit_level = profile.fitness_level
    profile.fitness_points += report.total_fp
    profile.prestige_currency += report.earned_prestige
    profile.fitness_level = get_level_status(
        profile.fitness_points,
        FITNESS_LEVELS,
        muscle_levels=profile.muscle_levels(),
        points_per_extra_level=rules.points_per_extra_level,
    ).level
    if profile.fitness_level > old_fit_level:
        report.level_ups.append(f"Fitness -> Level {profile.fitness_level}")
        report.generated_logs.append(
            LogEntry(
                text=f"[RANK UP] FITNESS LEVEL {profile.fitness_level}",
                type="levelup",
                highlight=True,
            )
        )

    # 4. Streak
    advance_streak(profile, now, rules)

    # 5. Logs
    for entry in report.generated_logs:
        entry.date = now
    profile.append_logs((entry.model_copy() for entry in report.generated_logs), rules.log_limit)

    logger.info(
        "Session committed: +%s FP, +%s prestige, streak=%s, level=%s",
        report.total_fp,
        report.earned_prestige,
        profile.streak,
        profile.fitness_level,
    )
