"""Tests for writing streak calculation."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from analytics.streak import active_days, compute_streak

TODAY = date(2026, 3, 15)


def _at(d: date, hour: int = 12) -> datetime:
    return datetime(d.year, d.month, d.day, hour, tzinfo=timezone.utc)


class TestComputeStreak:
    def test_no_entries(self):
        assert compute_streak([], today=TODAY) == 0

    def test_today_only(self):
        assert compute_streak([_at(TODAY)], today=TODAY) == 1

    def test_consecutive_days(self):
        stamps = [_at(TODAY - timedelta(days=i)) for i in range(4)]
        assert compute_streak(stamps, today=TODAY) == 4

    def test_gap_stops_streak(self):
        stamps = [_at(TODAY), _at(TODAY - timedelta(days=1)), _at(TODAY - timedelta(days=3))]
        assert compute_streak(stamps, today=TODAY) == 2

    def test_inactive_today_is_zero(self):
        stamps = [_at(TODAY - timedelta(days=1)), _at(TODAY - timedelta(days=2))]
        assert compute_streak(stamps, today=TODAY) == 0

    def test_multiple_entries_same_day_count_once(self):
        stamps = [_at(TODAY, 8), _at(TODAY, 20), _at(TODAY - timedelta(days=1), 9)]
        assert compute_streak(stamps, today=TODAY) == 2

    def test_order_of_input_does_not_matter(self):
        stamps = [_at(TODAY - timedelta(days=i)) for i in range(3)]
        assert compute_streak(list(reversed(stamps)), today=TODAY) == 3

    def test_timezone_moves_day_boundary(self):
        # 23:30 UTC on the 14th is already the 15th in Tokyo
        late = datetime(2026, 3, 14, 23, 30, tzinfo=timezone.utc)
        assert compute_streak([late], today=TODAY) == 0
        assert compute_streak([late], today=TODAY, tz=ZoneInfo("Asia/Tokyo")) == 1


class TestActiveDays:
    def test_collapses_to_dates(self):
        stamps = [_at(TODAY, 1), _at(TODAY, 23)]
        assert active_days(stamps) == {TODAY}

    def test_skips_none(self):
        assert active_days([None, _at(TODAY)]) == {TODAY}
