"""Analytics routes: mood trends, distortion patterns, progress, insights."""

import asyncio
from datetime import tzinfo
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from analytics import (
    dashboard,
    distortion_patterns,
    distortion_summary,
    distortion_trends,
    journal_stats,
    mood_trends,
    progress_indicators,
    writing_insights,
)
from analytics.windows import parse_days, parse_granularity
from cli.config_models import MindJournalConfig
from journal.storage import EntryStore
from observability import metrics
from web.auth import get_current_user
from web.deps import get_config, get_entry_store, get_tz
from web.errors import server_error
from web.models import (
    DashboardOut,
    DistortionPatternsOut,
    DistortionSummaryOut,
    JournalStatsOut,
    MoodTrendsOut,
    ProgressOut,
    WritingInsightsOut,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def _days(raw: Optional[str], config: MindJournalConfig, default: Optional[int] = None) -> int:
    return parse_days(
        raw,
        default=default or config.analytics.default_days,
        max_days=config.analytics.max_days,
    )


async def _run(name: str, config: MindJournalConfig, fn, *args, **kwargs):
    """Run an aggregation off the event loop, timed; unexpected errors become 500s."""
    try:
        with metrics.timer(f"analytics.{name}"):
            return await asyncio.to_thread(fn, *args, **kwargs)
    except Exception as e:
        raise server_error(f"analytics.{name}_error", e, config)


@router.get("/mood-trends", response_model=MoodTrendsOut)
async def get_mood_trends(
    days: Optional[str] = None,
    group_by: Optional[str] = Query(None, alias="groupBy"),
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    config: MindJournalConfig = Depends(get_config),
    tz: tzinfo = Depends(get_tz),
):
    n = _days(days, config)
    granularity = parse_granularity(group_by)
    trends = await _run(
        "mood_trends", config, mood_trends, store, user["id"], n, granularity, tz=tz
    )
    return {"trends": trends, "period": f"{n} days", "group_by": granularity.value}


@router.get(
    "/cognitive-distortions",
    response_model=DistortionSummaryOut,
    response_model_exclude_none=True,
)
async def get_cognitive_distortions(
    days: Optional[str] = None,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    config: MindJournalConfig = Depends(get_config),
):
    n = _days(days, config)
    summary = await _run("distortion_summary", config, distortion_summary, store, user["id"], n)
    return {"distortions": summary, "period": f"{n} days"}


@router.get("/distortion-patterns", response_model=DistortionPatternsOut)
async def get_distortion_patterns(
    days: Optional[str] = None,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    config: MindJournalConfig = Depends(get_config),
    tz: tzinfo = Depends(get_tz),
):
    n = _days(days, config)
    patterns = await _run(
        "distortion_patterns",
        config,
        distortion_patterns,
        store,
        user["id"],
        n,
        example_limit=config.analytics.example_limit,
        example_order=config.analytics.example_order,
    )
    trends = await _run("distortion_trends", config, distortion_trends, store, user["id"], n, tz=tz)
    return {"patterns": patterns, "trends": trends, "period": f"{n} days"}


@router.get("/journal-stats", response_model=JournalStatsOut)
async def get_journal_stats(
    days: Optional[str] = None,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    config: MindJournalConfig = Depends(get_config),
    tz: tzinfo = Depends(get_tz),
):
    n = _days(days, config)
    return await _run("journal_stats", config, journal_stats, store, user["id"], n, tz=tz)


@router.get("/progress-tracking", response_model=ProgressOut)
async def get_progress_tracking(
    days: Optional[str] = None,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    config: MindJournalConfig = Depends(get_config),
):
    n = _days(days, config)
    progress = await _run("progress", config, progress_indicators, store, user["id"], n)
    return {
        "progress_indicators": progress,
        "period": f"{n} days",
        "comparison_period": f"Previous {n} days",
    }


@router.get("/writing-insights", response_model=WritingInsightsOut)
async def get_writing_insights(
    days: Optional[str] = None,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    config: MindJournalConfig = Depends(get_config),
    tz: tzinfo = Depends(get_tz),
):
    n = _days(days, config)
    insights = await _run("writing_insights", config, writing_insights, store, user["id"], n, tz=tz)
    return {**insights, "period": f"{n} days"}


@router.get("/dashboard", response_model=DashboardOut)
async def get_dashboard(
    days: Optional[str] = None,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    config: MindJournalConfig = Depends(get_config),
):
    n = _days(days, config, default=config.analytics.dashboard_days)
    data = await _run("dashboard", config, dashboard, store, user["id"], n)
    return {**data, "period": f"{n} days"}
