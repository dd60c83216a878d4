"""Apply provider analysis to stored entries."""

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog

from journal.models import EntryAnalysis, JournalEntry, to_utc, utcnow
from journal.storage import EntryNotFound, EntryStore
from observability import metrics

from .provider import AnalysisFailure, AnalysisProvider, supportive_message

logger = structlog.get_logger()


@dataclass
class AnalysisRun:
    """Outcome of analysing one entry."""

    entry: JournalEntry
    skipped: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def supportive_message(self) -> str:
        return supportive_message(self.entry.analysis)


@dataclass
class BatchResult:
    processed_count: int = 0
    success_count: int = 0
    error_count: int = 0
    results: list[dict] = field(default_factory=list)


def recently_analyzed(entry: JournalEntry, minutes: int, now: datetime | None = None) -> bool:
    analysis = entry.analysis
    if not analysis.processed or not analysis.processed_at:
        return False
    now = to_utc(now) if now else utcnow()
    return analysis.processed_at > now - timedelta(minutes=minutes)


def _apply(store: EntryStore, provider: AnalysisProvider, entry: JournalEntry) -> AnalysisRun:
    with metrics.timer("analysis.provider"):
        outcome = provider.analyze(entry.content, entry.title, entry.mood)

    if isinstance(outcome, AnalysisFailure):
        store.record_analysis_error(entry.owner_id, entry.id, outcome.message)
        metrics.counter("analysis.failed")
        entry.analysis.processing_error = outcome.message
        return AnalysisRun(entry=entry, error=outcome.message)

    store.save_analysis(entry.owner_id, entry.id, outcome)
    metrics.counter("analysis.succeeded")
    entry.analysis = outcome
    return AnalysisRun(entry=entry)


def analyze_entry(
    store: EntryStore,
    provider: AnalysisProvider,
    owner_id: str,
    entry_id: str,
    recent_minutes: int = 60,
    now: datetime | None = None,
) -> AnalysisRun:
    """Analyse one entry unless it was analysed within ``recent_minutes``.

    Raises:
        EntryNotFound: no such entry for this owner
    """
    entry = store.get(owner_id, entry_id)
    if recently_analyzed(entry, recent_minutes, now):
        logger.debug("analysis.skipped_recent", entry_id=entry_id)
        metrics.counter("analysis.skipped")
        return AnalysisRun(entry=entry, skipped=True)
    return _apply(store, provider, entry)


def reanalyze_entry(
    store: EntryStore, provider: AnalysisProvider, owner_id: str, entry_id: str
) -> AnalysisRun:
    """Discard any previous analysis and run the provider again."""
    store.reset_analysis(owner_id, entry_id)
    entry = store.get(owner_id, entry_id)
    entry.analysis = EntryAnalysis()
    return _apply(store, provider, entry)


def batch_analyze(
    store: EntryStore,
    provider: AnalysisProvider,
    owner_id: str,
    limit: int = 5,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchResult:
    """Analyse the owner's newest unprocessed entries one at a time.

    Sleeps ``delay`` seconds between provider calls.
    """
    entries = store.list_unprocessed(owner_id, limit=limit)
    result = BatchResult(processed_count=len(entries))

    for i, entry in enumerate(entries):
        if i and delay:
            sleep(delay)
        try:
            run = _apply(store, provider, entry)
        except EntryNotFound:
            # deleted while the provider call was in flight
            logger.warning("analysis.entry_gone", entry_id=entry.id)
            run = AnalysisRun(entry=entry, error="Entry no longer exists")
        if run.ok:
            result.success_count += 1
        else:
            result.error_count += 1
        result.results.append(
            {
                "entry_id": entry.id,
                "title": entry.title,
                "success": run.ok,
                "distortion_count": len(run.entry.analysis.distortions) if run.ok else 0,
                "error": run.error,
            }
        )

    logger.info(
        "analysis.batch_done",
        owner_id=owner_id,
        processed=result.processed_count,
        succeeded=result.success_count,
        failed=result.error_count,
    )
    return result
