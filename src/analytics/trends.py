"""Mood trend aggregation over time buckets."""

from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from journal.models import JournalEntry, utcnow
from journal.storage import EntryStore
from shared_types import Granularity

from .windows import bucket_key


def aggregate_mood_trends(
    entries: Iterable[JournalEntry],
    granularity: Granularity | str = Granularity.DAY,
    tz: tzinfo = timezone.utc,
) -> list[dict]:
    """Two-pass reduce: group by (bucket, mood), then regroup by bucket.

    Returns:
        [{bucket_key, per_mood: [{mood, count, avg_intensity}], total_count}]
        ascending by bucket_key. Buckets without entries are absent.
    """
    groups: dict[tuple[str, str], list[int]] = defaultdict(lambda: [0, 0])
    for entry in entries:
        key = (bucket_key(entry.created_at, granularity, tz), entry.mood)
        acc = groups[key]
        acc[0] += 1
        acc[1] += entry.mood_intensity

    buckets: dict[str, list[dict]] = defaultdict(list)
    for (bucket, mood), (count, intensity_sum) in groups.items():
        buckets[bucket].append(
            {
                "mood": mood,
                "count": count,
                "avg_intensity": round(intensity_sum / count, 2),
            }
        )

    result = []
    for bucket in sorted(buckets):
        per_mood = sorted(buckets[bucket], key=lambda m: (-m["count"], m["mood"]))
        result.append(
            {
                "bucket_key": bucket,
                "per_mood": per_mood,
                "total_count": sum(m["count"] for m in per_mood),
            }
        )
    return result


def mood_trends(
    store: EntryStore,
    owner_id: str,
    days: int = 30,
    granularity: Granularity | str = Granularity.DAY,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> list[dict]:
    """Mood trends for owner over the last `days` days."""
    now = now or utcnow()
    entries = store.iter_entries(owner_id, since=now - timedelta(days=days))
    return aggregate_mood_trends(entries, granularity, tz)


def mood_distribution(entries: Iterable[JournalEntry]) -> list[dict]:
    """[{mood, count}] most frequent first, ties by mood name."""
    counts = Counter(e.mood for e in entries)
    return [
        {"mood": mood, "count": count}
        for mood, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]
