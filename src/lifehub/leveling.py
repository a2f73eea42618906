"""Level curves and the threshold-table evaluator."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .config import SETTINGS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelGate:
    """Minimum muscle level required before a fitness tier unlocks."""

    muscle: str
    lvl: int


@dataclass(frozen=True)
class LevelTier:
    lvl: int
    req: int
    gate: LevelGate | None = None


@dataclass(frozen=True)
class LevelStatus:
    level: int
    pct: int
    current_points: float
    next_req: float
    is_capped: bool = False


def _tiers(*pairs: tuple[int, int]) -> tuple[LevelTier, ...]:
    return tuple(LevelTier(lvl, req) for lvl, req in pairs)


# No gates are declared for the fitness curve yet; get_level_status honours
# them when a tier carries one.
FITNESS_LEVELS: tuple[LevelTier, ...] = _tiers(
    (1, 0),
    (2, 50),
    (3, 150),
    (4, 250),
    (5, 400),
    (6, 600),
    (7, 850),
    (8, 1150),
    (9, 1500),
    (10, 1900),
    (11, 2350),
    (12, 2850),
    (13, 3400),
    (14, 4000),
    (15, 4650),
    (16, 5350),
    (17, 6100),
    (18, 6900),
    (19, 7750),
    (20, 8650),
    (21, 10000),
)

MUSCLE_LEVELS: tuple[LevelTier, ...] = _tiers(
    (1, 0),
    (2, 100),
    (3, 300),
    (4, 600),
    (5, 1000),
    (6, 1500),
    (7, 2100),
    (8, 2800),
    (9, 3600),
    (10, 4500),
)


def _pct(points: float, prev_threshold: float, next_threshold: float) -> int:
    span = next_threshold - prev_threshold
    if span <= 0:
        return 100
    pct = math.floor(((points - prev_threshold) / span) * 100)
    return max(0, min(pct, 100))


def get_level_status(
    points: float,
    table: Sequence[LevelTier],
    muscle_levels: Mapping[str, int] | None = None,
    points_per_extra_level: int | None = None,
) -> LevelStatus:
    """
    Evaluate ``points`` against a level table.

    Passing ``muscle_levels`` enables gating: a tier whose gate muscle sits
    below the required level stops progression at the tier before it, and the
    result is reported as capped at 100%. Past the last tier, levels continue
    every ``points_per_extra_level`` points.
    """
    if len(table) < 2:
        raise ValueError("Level table needs at least two tiers")
    if points_per_extra_level is None:
        points_per_extra_level = SETTINGS.RULES.points_per_extra_level

    current_lvl = table[0].lvl
    prev_threshold: float = table[0].req
    next_threshold: float = table[1].req
    reached_last = False

    for i in range(len(table) - 1):
        tier = table[i + 1]
        if points < tier.req:
            next_threshold = tier.req
            break
        if tier.gate is not None and muscle_levels is not None:
            if muscle_levels.get(tier.gate.muscle, 1) < tier.gate.lvl:
                logger.debug(
                    "Level %s gated by %s < %s", tier.lvl, tier.gate.muscle, tier.gate.lvl
                )
                return LevelStatus(
                    level=table[i].lvl,
                    pct=100,
                    current_points=points,
                    next_req=tier.req,
                    is_capped=True,
                )
        current_lvl = tier.lvl
        prev_threshold = tier.req
        reached_last = i + 1 == len(table) - 1

    if reached_last:
        last = table[-1]
        extra_levels = math.floor((points - last.req) / points_per_extra_level)
        current_lvl = last.lvl + extra_levels
        prev_threshold = last.req + extra_levels * points_per_extra_level
        next_threshold = prev_threshold + points_per_extra_level

    return LevelStatus(
        level=current_lvl,
        pct=_pct(points, prev_threshold, next_threshold),
        current_points=points,
        next_req=next_threshold,
    )
