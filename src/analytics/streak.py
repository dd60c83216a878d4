"""Writing streak: consecutive calendar days with at least one entry."""

from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional

from .windows import local_date


def active_days(timestamps: Iterable[datetime], tz: tzinfo = timezone.utc) -> set[date]:
    return {local_date(ts, tz) for ts in timestamps if ts is not None}


def compute_streak(
    timestamps: Iterable[datetime],
    today: Optional[date] = None,
    tz: tzinfo = timezone.utc,
) -> int:
    """Count consecutive active days walking backward from today.

    The walk starts at today even when today has no entry, so a user who
    journaled yesterday but not yet today has a streak of 0.
    """
    days = active_days(timestamps, tz)
    if not days:
        return 0
    if today is None:
        today = datetime.now(tz).date()

    earliest = min(days)
    streak = 0
    cursor = today
    while cursor >= earliest and cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak
