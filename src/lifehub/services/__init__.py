"""
Services layer for the progression engine business logic.
"""

from .grace_service import reset_grace_if_new_week, use_grace
from .profile_service import advance_streak, commit_report
from .session_service import build_session_report, streak_bonus

__all__ = [
    "advance_streak",
    "build_session_report",
    "commit_report",
    "reset_grace_if_new_week",
    "streak_bonus",
    "use_grace",
]
