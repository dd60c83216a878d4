"""Cognitive distortion statistics over analyzed entries."""

from collections import defaultdict
from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from journal.models import Distortion, JournalEntry, utcnow
from journal.storage import EntryStore

from .windows import local_date

DEFAULT_EXAMPLE_LIMIT = 3
EXAMPLE_ORDERS = ("confidence", "chronological")


def _instances(entries: Iterable[JournalEntry]) -> Iterator[tuple[JournalEntry, Distortion]]:
    """Flatten per-entry distortion lists. Unanalyzed entries yield nothing."""
    for entry in entries:
        if not entry.analysis.processed:
            continue
        for distortion in entry.analysis.distortions:
            yield entry, distortion


def aggregate_distortions(
    entries: Iterable[JournalEntry],
    with_examples: bool = False,
    example_limit: int = DEFAULT_EXAMPLE_LIMIT,
    example_order: str = "confidence",
) -> list[dict]:
    """Group distortion instances by type.

    Args:
        entries: entries in chronological order
        with_examples: attach up to example_limit examples per type
        example_limit: cap on examples per type
        example_order: "confidence" (highest first) or "chronological"

    Returns:
        [{type, count, avg_confidence[, examples]}] by count desc, then type.
    """
    if example_order not in EXAMPLE_ORDERS:
        raise ValueError(f"example_order must be one of {EXAMPLE_ORDERS}")

    counts: dict[str, int] = defaultdict(int)
    confidence_sums: dict[str, float] = defaultdict(float)
    examples: dict[str, list[dict]] = defaultdict(list)

    for entry, d in _instances(entries):
        counts[d.type] += 1
        confidence_sums[d.type] += d.confidence
        if with_examples:
            examples[d.type].append(
                {
                    "snippet": d.text_snippet,
                    "explanation": d.explanation,
                    "entry_title": entry.title,
                    "date": entry.created_at,
                    "_confidence": d.confidence,
                }
            )

    result = []
    for dtype in sorted(counts, key=lambda t: (-counts[t], t)):
        row = {
            "type": dtype,
            "count": counts[dtype],
            "avg_confidence": round(confidence_sums[dtype] / counts[dtype], 3),
        }
        if with_examples:
            picked = examples[dtype]
            if example_order == "confidence":
                # stable sort keeps match order among equal confidences
                picked = sorted(picked, key=lambda ex: -ex["_confidence"])
            row["examples"] = [
                {k: v for k, v in ex.items() if k != "_confidence"}
                for ex in picked[: max(0, example_limit)]
            ]
        result.append(row)
    return result


def aggregate_distortion_trends(
    entries: Iterable[JournalEntry], tz: tzinfo = timezone.utc
) -> list[dict]:
    """Per-day distortion counts: [{date, distortions: [{type, count}], total_distortions}]."""
    per_day: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for entry, d in _instances(entries):
        per_day[local_date(entry.created_at, tz).isoformat()][d.type] += 1

    result = []
    for day in sorted(per_day):
        types = per_day[day]
        result.append(
            {
                "date": day,
                "distortions": [
                    {"type": t, "count": c}
                    for t, c in sorted(types.items(), key=lambda kv: (-kv[1], kv[0]))
                ],
                "total_distortions": sum(types.values()),
            }
        )
    return result


def _window_entries(store: EntryStore, owner_id: str, days: int, now: Optional[datetime]):
    now = now or utcnow()
    return store.iter_entries(owner_id, since=now - timedelta(days=days), processed_only=True)


def distortion_summary(
    store: EntryStore, owner_id: str, days: int = 30, now: Optional[datetime] = None
) -> list[dict]:
    return aggregate_distortions(_window_entries(store, owner_id, days, now))


def distortion_patterns(
    store: EntryStore,
    owner_id: str,
    days: int = 30,
    now: Optional[datetime] = None,
    example_limit: int = DEFAULT_EXAMPLE_LIMIT,
    example_order: str = "confidence",
) -> list[dict]:
    return aggregate_distortions(
        _window_entries(store, owner_id, days, now),
        with_examples=True,
        example_limit=example_limit,
        example_order=example_order,
    )


def distortion_trends(
    store: EntryStore,
    owner_id: str,
    days: int = 30,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> list[dict]:
    return aggregate_distortion_trends(_window_entries(store, owner_id, days, now), tz)
