"""
Scoring of a whole workout session into a SessionReport.

Nothing here touches the profile; the report is committed separately by
profile_service so a failed commit never leaves half a session applied.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..config import SETTINGS, EngineRules
from ..models import LogEntry, SessionReport, UserProfile, WorkoutSession
from ..scoring import calculate_set_score, round_half_up

logger = logging.getLogger(__name__)


def _set_values(raw: Any) -> tuple[Any, Any]:
    if isinstance(raw, Sequence) and not isinstance(raw, str):
        first = raw[0] if len(raw) > 0 else None
        second = raw[1] if len(raw) > 1 else None
        return first, second
    return None, None


def streak_bonus(projected_streak: int, rules: EngineRules | None = None) -> int:
    """Milestone bonus for reaching exactly ``projected_streak`` sessions."""
    rules = rules or SETTINGS.RULES
    return rules.streak_milestones.get(projected_streak, 0)


def build_session_report(
    profile: UserProfile,
    session: WorkoutSession,
    is_luteal: bool,
    is_complete: bool,
    rules: EngineRules | None = None,
) -> SessionReport:
    """Score ``session`` against the current records and streak."""
    rules = rules or SETTINGS.RULES
    logs: list[LogEntry] = []
    earned: dict[str, float] = {}
    new_prs: list[str] = []
    pr_updates: dict[str, float] = {}
    session_mgp = 0.0
    base_fp = rules.base_complete_fp if is_complete else rules.base_partial_fp

    # 1. Per-exercise MGP
    for ex in session.exercises:
        exercise_mgp = rules.exercise_base_mgp
        max_volume = 0.0
        for raw in ex.sets:
            value1, value2 = _set_values(raw)
            result = calculate_set_score(profile.prs, ex.db_id, ex.type, value1, value2, rules)
            exercise_mgp += result.score
            if result.volume > max_volume:
                max_volume = result.volume

        # Same exercise listed twice in a session compares against the pending record.
        current_pr = max(profile.get_pr(ex.db_id), pr_updates.get(ex.db_id, 0))
        if max_volume > current_pr:
            pr_updates[ex.db_id] = max_volume
            new_prs.append(ex.display_name)
            logs.append(
                LogEntry(
                    text=f"[NEW PR] {ex.display_name}: {max_volume:g}",
                    type="pr",
                    highlight=True,
                )
            )

        for muscle in ex.targets:
            earned[muscle] = earned.get(muscle, 0) + exercise_mgp
            session_mgp += exercise_mgp

    # 2. Luteal multiplier, applied before any rounding
    if is_luteal:
        multi = rules.luteal_multiplier
        session_mgp = session_mgp * multi
        base_fp = round_half_up(base_fp * multi)
        earned = {m: pts * multi for m, pts in earned.items()}
        bonus_pct = round_half_up((multi - 1) * 100)
        logs.append(
            LogEntry(
                text=f"[LUTEAL BONUS] {bonus_pct}% Multiplier Applied",
                type="bonus",
                highlight=True,
            )
        )

    # 3. Rounding
    total_session_mgp = round_half_up(session_mgp)
    earned_mgp = {m: round_half_up(pts) for m, pts in earned.items()}

    # 4. Currency exchange
    effort_fp = round_half_up(total_session_mgp / rules.exchange_rate)

    # 5. Streak milestones
    projected_streak = profile.streak + 1
    bonus = streak_bonus(projected_streak, rules)
    if bonus > 0:
        logs.append(
            LogEntry(
                text=f"[STREAK MILESTONE] {projected_streak} Days! +{bonus} FP",
                type="milestone",
                highlight=True,
            )
        )

    # 6. Totals
    total_fp = round_half_up(base_fp + effort_fp + bonus)
    earned_prestige = round_half_up(total_fp * rules.prestige_ratio)

    # 7. Summary lines
    status = "COMPLETE" if is_complete else "PARTIAL"
    logs.append(LogEntry(text=f"[WORKOUT {status}] +{base_fp} Base FP", type="workout"))
    for muscle, points in earned_mgp.items():
        if points > 0:
            logs.append(LogEntry(text=f"[+{points} MGP] {muscle} Growth", type="mgp"))
    if earned_prestige > 0:
        logs.append(
            LogEntry(
                text=f"[+{earned_prestige} PRESTIGE] Funds Acquired",
                type="prestige",
                highlight=True,
            )
        )

    logger.debug(
        "Session scored: mgp=%s base=%s effort=%s streak=%s total=%s",
        total_session_mgp,
        base_fp,
        effort_fp,
        bonus,
        total_fp,
    )
    return SessionReport(
        earned_mgp=earned_mgp,
        total_session_mgp=total_session_mgp,
        base_fp=base_fp,
        effort_fp=effort_fp,
        streak_fp=bonus,
        total_fp=total_fp,
        earned_prestige=earned_prestige,
        new_prs=new_prs,
        pr_updates=pr_updates,
        generated_logs=logs,
    )
