"""Measurement lookups over the legacy history log."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

from .config import SETTINGS
from .scoring import parse_number

logger = logging.getLogger(__name__)

MISSING = "--"


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def _fmt(number: float) -> str:
    return str(int(number)) if number.is_integer() else str(number)


def stats_for_date(
    history_logs: Iterable[dict[str, Any]],
    target: str | date | datetime,
    height_m: float | None = None,
) -> dict[str, str]:
    """
    Latest weight and BMI recorded at or before ``target``.

    Entries look like ``{"date": "...", "data": {"Weight": 62.5}}``; undated or
    unparsable entries are skipped. Both values are ``"--"`` when nothing matches.
    """
    height_m = height_m or SETTINGS.RULES.bmi_height_m
    target_dt = _to_datetime(target)
    found = {"Weight": MISSING, "BMI": MISSING}
    if target_dt is None:
        return found

    dated: list[tuple[datetime, dict[str, Any]]] = []
    for log in history_logs:
        logged_at = _to_datetime(log.get("date"))
        if logged_at is None:
            logger.debug("Skipping measurement without a usable date: %r", log.get("date"))
            continue
        dated.append((logged_at, log))
    dated.sort(key=lambda item: item[0])

    for logged_at, log in dated:
        if logged_at > target_dt:
            break
        weight = parse_number((log.get("data") or {}).get("Weight"))
        if weight:
            found["Weight"] = f"{_fmt(weight)}kg"
            found["BMI"] = f"{weight / height_m**2:.1f}"
    return found
