"""Summary views: journal stats, writing insights, dashboard."""

from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from journal.models import JournalEntry, to_utc, utcnow
from journal.storage import EntryStore

from .progress import improvement_rate
from .streak import compute_streak
from .trends import mood_distribution
from .windows import local_date

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
TOP_TAGS = 10


def _sunday_index(entry: JournalEntry, tz: tzinfo) -> int:
    # date.weekday(): Monday=0; shift so Sunday=0
    return (local_date(entry.created_at, tz).weekday() + 1) % 7


def aggregate_writing_insights(
    entries: Iterable[JournalEntry], tz: tzinfo = timezone.utc
) -> dict:
    entries = list(entries)
    total = len(entries)
    words = sum(e.word_count for e in entries)
    minutes = sum(e.reading_time for e in entries)

    weekdays = Counter(_sunday_index(e, tz) for e in entries)
    tags = Counter(t for e in entries for t in e.tags)
    sentiments = Counter(
        e.analysis.overall_sentiment
        for e in entries
        if e.analysis.processed and e.analysis.overall_sentiment
    )
    moods = mood_distribution(entries)

    return {
        "summary": {
            "total_entries": total,
            "total_words": words,
            "avg_words_per_entry": round(words / total, 1) if total else 0,
            "total_reading_time": minutes,
            "avg_reading_time": round(minutes / total, 1) if total else 0,
            "entries_with_distortions": sum(
                1 for e in entries if e.analysis.distortion_count > 0
            ),
            "important_entries": sum(1 for e in entries if e.is_important),
            "resolved_entries": sum(1 for e in entries if e.is_resolved),
        },
        "most_common_mood": moods[0]["mood"] if moods else None,
        "writing_frequency": [
            {"day_of_week": DAY_NAMES[i], "count": weekdays[i]} for i in sorted(weekdays)
        ],
        "top_tags": [
            {"tag": tag, "count": count}
            for tag, count in sorted(tags.items(), key=lambda kv: (-kv[1], kv[0]))[:TOP_TAGS]
        ],
        "sentiment_distribution": [
            {"sentiment": s, "count": c}
            for s, c in sorted(sentiments.items(), key=lambda kv: (-kv[1], kv[0]))
        ],
    }


def writing_insights(
    store: EntryStore,
    owner_id: str,
    days: int = 30,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> dict:
    now = now or utcnow()
    entries = store.iter_entries(owner_id, since=now - timedelta(days=days))
    return aggregate_writing_insights(entries, tz)


def journal_stats(
    store: EntryStore,
    owner_id: str,
    days: int = 30,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> dict:
    """{total_entries, avg_mood_score, streak_days, improvement_rate}.

    Streak is computed over the owner's whole history, not just the window.
    """
    now = to_utc(now) if now else utcnow()
    total = intensity = 0
    for entry in store.iter_entries(owner_id, since=now - timedelta(days=days)):
        total += 1
        intensity += entry.mood_intensity

    return {
        "total_entries": total,
        "avg_mood_score": round(intensity / total, 2) if total else 0,
        "streak_days": compute_streak(
            store.timestamps(owner_id), today=now.astimezone(tz).date(), tz=tz
        ),
        "improvement_rate": improvement_rate(store, owner_id, days, now),
    }


def dashboard(
    store: EntryStore,
    owner_id: str,
    days: int = 7,
    now: Optional[datetime] = None,
    recent_limit: int = 5,
) -> dict:
    now = now or utcnow()
    entries = list(store.iter_entries(owner_id, since=now - timedelta(days=days)))
    total = len(entries)
    return {
        "recent_entries": [e.summary() for e in store.recent(owner_id, limit=recent_limit)],
        "quick_stats": {
            "total_entries": total,
            "avg_mood_intensity": (
                round(sum(e.mood_intensity for e in entries) / total, 2) if total else 0
            ),
            "total_distortions": sum(e.analysis.distortion_count for e in entries),
            "processed_entries": sum(1 for e in entries if e.analysis.processed),
        },
        "mood_distribution": mood_distribution(entries),
    }
