"""ISO-8601 week helpers."""

from datetime import date, datetime


def iso_week_number(d: date | datetime) -> int:
    """Week of the year, Thursday-anchored; week 1 holds the year's first Thursday."""
    if isinstance(d, datetime):
        d = d.date()
    return d.isocalendar()[1]
