"""Relative effort scoring for individual sets."""

from __future__ import annotations

import enum
import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .config import SETTINGS, EngineRules

logger = logging.getLogger(__name__)

# Leading numeric prefix, e.g. "12.5kg" -> 12.5
_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class ScoringType(str, enum.Enum):
    """How the two raw set values combine into a volume."""

    WEIGHT_REPS = "Weight & Reps"
    REPS = "Reps"
    TIME = "Time"
    DISTANCE = "Distance"


@dataclass(frozen=True)
class SetScore:
    score: float
    volume: float
    is_pr: bool


def parse_number(value: Any) -> float:
    """Parse a raw set input leniently; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    else:
        match = _NUMBER_RE.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(1))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return math.floor(value + 0.5)


def set_volume(scoring_type: str, value1: float, value2: float) -> float:
    if scoring_type == ScoringType.WEIGHT_REPS:
        return value1 * value2
    if scoring_type == ScoringType.REPS:
        return value1
    if scoring_type == ScoringType.TIME:
        # value1 seconds, value2 minutes
        return value1 + value2 * 60
    if scoring_type == ScoringType.DISTANCE:
        return value1
    return 0.0


def calculate_set_score(
    prs: Mapping[str, float],
    exercise_id: str,
    scoring_type: str,
    value1: Any,
    value2: Any,
    rules: EngineRules | None = None,
) -> SetScore:
    """
    Score one set relative to the lifter's record for the exercise.

    Without a record the score is a neutral baseline; otherwise it is the
    volume as a tenth of the record, capped so outlier sets can't inflate
    the economy. Never mutates ``prs``.
    """
    rules = rules or SETTINGS.RULES
    volume = set_volume(scoring_type, parse_number(value1), parse_number(value2))
    pr = prs.get(exercise_id) or 0

    if pr == 0:
        score = rules.default_set_score
    else:
        score = (volume / pr) * 10

    if score > rules.max_set_score:
        score = rules.max_set_score
    elif score < 0:
        score = 0.0

    logger.debug(
        "Set score: exercise=%s type=%s volume=%s pr=%s score=%s",
        exercise_id,
        scoring_type,
        volume,
        pr,
        score,
    )
    return SetScore(score=score, volume=volume, is_pr=volume > pr)
