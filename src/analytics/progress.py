"""Period-over-period wellness indicators."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from journal.models import JournalEntry
from journal.storage import EntryStore
from shared_types import POSITIVE_MOODS, TrendLabel

from .windows import Window, current_window, previous_window


@dataclass
class WindowStats:
    total_entries: int = 0
    avg_mood_intensity: float = 0.0
    distortion_rate: float = 0.0
    resolution_rate: float = 0.0
    positivity_ratio: float = 0.0


@dataclass(frozen=True)
class Indicator:
    name: str
    stat: str
    lower_is_better: bool = False
    # Label when the value did not improve; a tie counts as not improved
    worse_label: TrendLabel = TrendLabel.STABLE


INDICATORS = (
    Indicator("journaling_consistency", "total_entries", worse_label=TrendLabel.DECLINING),
    Indicator("mood_stability", "avg_mood_intensity"),
    Indicator(
        "cognitive_health",
        "distortion_rate",
        lower_is_better=True,
        worse_label=TrendLabel.NEEDS_ATTENTION,
    ),
    Indicator("problem_resolution", "resolution_rate"),
    Indicator("positivity_ratio", "positivity_ratio"),
)


def window_stats(entries: Iterable[JournalEntry]) -> WindowStats:
    """Single pass over one window's entries."""
    total = intensity = distortions = resolved = positive = 0
    for entry in entries:
        total += 1
        intensity += entry.mood_intensity
        distortions += entry.analysis.distortion_count
        resolved += int(entry.is_resolved)
        positive += int(entry.mood in POSITIVE_MOODS)
    if not total:
        return WindowStats()
    return WindowStats(
        total_entries=total,
        avg_mood_intensity=intensity / total,
        distortion_rate=distortions / total,
        resolution_rate=resolved / total,
        positivity_ratio=positive / total,
    )


def percent_change(current: Optional[float], previous: Optional[float]) -> float:
    """Relative change in percent, 0 when there is no previous value.

    Discontinuous near zero: a previous value of 0 always reports 0.
    """
    if not previous:
        return 0.0
    return round(((current or 0) - previous) / previous * 100, 1)


def trend_label(indicator: Indicator, current: float, previous: float) -> str:
    """Strict improvement reads "improving"; anything else gets the indicator's own label."""
    improved = current < previous if indicator.lower_is_better else current > previous
    return TrendLabel.IMPROVING.value if improved else indicator.worse_label.value


def compare_windows(current: WindowStats, previous: WindowStats) -> dict:
    """{indicator: {current, previous, percent_change, trend}} for all five indicators."""
    result = {}
    for ind in INDICATORS:
        cur = getattr(current, ind.stat)
        prev = getattr(previous, ind.stat)
        result[ind.name] = {
            "current": round(cur, 3),
            "previous": round(prev, 3),
            "percent_change": percent_change(cur, prev),
            "trend": trend_label(ind, cur, prev),
        }
    return result


def stats_for(store: EntryStore, owner_id: str, window: Window) -> WindowStats:
    if window.open_end:
        entries = store.iter_entries(owner_id, since=window.start, before=window.end)
    else:
        entries = store.iter_entries(owner_id, since=window.start, until=window.end)
    return window_stats(entries)


def progress_indicators(
    store: EntryStore, owner_id: str, days: int = 30, now: Optional[datetime] = None
) -> dict:
    """Current window vs. the equal-length window just before it.

    The two windows are read with separate queries.
    """
    current = stats_for(store, owner_id, current_window(days, now))
    previous = stats_for(store, owner_id, previous_window(days, now))
    return compare_windows(current, previous)


def improvement_rate(
    store: EntryStore, owner_id: str, days: int = 30, now: Optional[datetime] = None
) -> float:
    """Mood-score-only progress: percent change of mean intensity."""
    current = stats_for(store, owner_id, current_window(days, now))
    if not current.total_entries:
        return 0.0
    previous = stats_for(store, owner_id, previous_window(days, now))
    return percent_change(current.avg_mood_intensity, previous.avg_mood_intensity)
