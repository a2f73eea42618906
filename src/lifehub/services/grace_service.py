"""Weekly grace allowance that keeps a streak alive across a missed day."""

from __future__ import annotations

import logging
from datetime import datetime

from ..config import SETTINGS, EngineRules
from ..models import LogEntry, UserProfile
from ..weeks import iso_week_number

logger = logging.getLogger(__name__)


def reset_grace_if_new_week(profile: UserProfile, now: datetime) -> bool:
    """Zero the weekly counter when ``now`` falls in a different ISO week. Returns True on reset."""
    current_week = iso_week_number(now)
    if current_week == profile.last_grace_week:
        return False
    profile.grace_used = 0
    profile.last_grace_week = current_week
    logger.info("Weekly grace cap reset (week %s)", current_week)
    return True


def use_grace(profile: UserProfile, now: datetime, rules: EngineRules | None = None) -> bool:
    """
    Spend one grace use, refreshing the last-workout time without counting a session.

    Returns False, leaving the profile untouched, once the weekly cap is spent.
    """
    rules = rules or SETTINGS.RULES
    if profile.grace_used >= rules.grace_cap:
        logger.info("Grace refused: %s/%s used this week", profile.grace_used, rules.grace_cap)
        return False

    profile.grace_used += 1
    profile.last_workout = now
    profile.append_logs(
        [LogEntry(text="[GRACE PROTOCOL] Streak Paused", date=now, type="grace", highlight=True)],
        rules.log_limit,
    )
    return True
