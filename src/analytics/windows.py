"""Time windows, calendar days and bucket keys shared by the aggregators."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from journal.models import to_utc, utcnow
from shared_types import Granularity

logger = structlog.get_logger()

DEFAULT_DAYS = 30
MAX_DAYS = 365


@dataclass(frozen=True)
class Window:
    """A span of time. `start` is inclusive; `end` inclusive unless `open_end`."""

    start: datetime
    end: datetime
    open_end: bool = False

    @property
    def days(self) -> int:
        return (self.end - self.start).days


def current_window(days: int, now: datetime | None = None) -> Window:
    now = to_utc(now) if now else utcnow()
    return Window(start=now - timedelta(days=days), end=now)


def previous_window(days: int, now: datetime | None = None) -> Window:
    """Equal-length window immediately preceding current_window."""
    cur = current_window(days, now)
    return Window(start=cur.start - timedelta(days=days), end=cur.start, open_end=True)


def parse_days(raw, default: int = DEFAULT_DAYS, max_days: int = MAX_DAYS) -> int:
    """Lenient `days` query parsing: bad input falls back to default, large input is clamped."""
    if raw is None or raw == "":
        return default
    try:
        days = int(str(raw).strip())
    except (TypeError, ValueError):
        logger.debug("windows.bad_days", raw=raw)
        return default
    if days < 1:
        return default
    return min(days, max_days)


def parse_granularity(raw) -> Granularity:
    try:
        return Granularity(str(raw).lower())
    except ValueError:
        return Granularity.DAY


def resolve_tz(name: str | None) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("windows.unknown_timezone", tz=name)
        return timezone.utc


def local_date(dt: datetime, tz: tzinfo = timezone.utc) -> date:
    """Calendar day of a stored timestamp in the reporting zone."""
    return to_utc(dt).astimezone(tz).date()


def bucket_key(dt: datetime, granularity: Granularity | str, tz: tzinfo = timezone.utc) -> str:
    """Bucket key for a timestamp.

    day -> YYYY-MM-DD, week -> ISO week YYYY-Www, month -> YYYY-MM.
    All three sort chronologically as plain strings.
    """
    day = local_date(dt, tz)
    granularity = Granularity(granularity)
    if granularity == Granularity.MONTH:
        return day.strftime("%Y-%m")
    if granularity == Granularity.WEEK:
        iso = day.isocalendar()
        return f"{iso[0]}-W{iso[1]:02d}"
    return day.isoformat()
