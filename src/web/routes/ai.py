"""AI routes: entry analysis, mood detection, chat."""

import asyncio

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status

from analysis import (
    AnalysisProvider,
    analyze_entry,
    batch_analyze,
    list_distortions,
    reanalyze_entry,
)
from cli.config_models import MindJournalConfig
from journal.models import JournalEntry
from journal.storage import EntryNotFound, EntryStore
from web.auth import get_current_user
from web.deps import get_analysis_provider, get_config, get_entry_store
from web.errors import not_found
from web.models import (
    AIStatusOut,
    AnalysisOut,
    AnalyzeOut,
    BatchAnalyzeIn,
    BatchAnalyzeOut,
    ChatIn,
    ChatOut,
    DetectMoodIn,
    DetectMoodOut,
    DistortionInfoOut,
)
from web.rate_limit import check_ai_rate_limit
from web.user_store import log_event

logger = structlog.get_logger()

router = APIRouter(prefix="/api/ai", tags=["ai"])

FEATURES = [
    "Cognitive distortion detection",
    "Thought reframing",
    "Sentiment analysis",
    "Theme identification",
]


def _rate_limited(
    response: Response,
    user: dict = Depends(get_current_user),
    config=Depends(get_config),
) -> dict:
    remaining = check_ai_rate_limit(
        user["id"],
        daily_limit=config.server.ai_daily_limit,
        burst_interval=config.server.ai_burst_interval,
    )
    response.headers["X-RateLimit-Remaining"] = str(remaining)
    return user


def _analysis_out(entry: JournalEntry) -> AnalysisOut:
    return AnalysisOut.model_validate(entry.to_dict()["analysis"])


def _upstream_failure(message: str, error: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"message": message, "error": error},
    )


@router.post("/analyze/{entry_id}", response_model=AnalyzeOut)
async def analyze(
    entry_id: str,
    user: dict = Depends(_rate_limited),
    store: EntryStore = Depends(get_entry_store),
    provider: AnalysisProvider = Depends(get_analysis_provider),
    config: MindJournalConfig = Depends(get_config),
):
    try:
        run = await asyncio.to_thread(
            analyze_entry,
            store,
            provider,
            user["id"],
            entry_id,
            recent_minutes=config.analysis.recent_minutes,
        )
    except EntryNotFound:
        raise not_found()

    if not run.ok:
        raise _upstream_failure("AI analysis failed", run.error)

    log_event("ai_analyze", user["id"], {"skipped": run.skipped})
    return AnalyzeOut(
        message=(
            "Entry already analyzed recently" if run.skipped else "Analysis completed successfully"
        ),
        analysis=_analysis_out(run.entry),
        supportive_message=run.supportive_message,
    )


@router.post("/reanalyze/{entry_id}", response_model=AnalyzeOut)
async def reanalyze(
    entry_id: str,
    user: dict = Depends(_rate_limited),
    store: EntryStore = Depends(get_entry_store),
    provider: AnalysisProvider = Depends(get_analysis_provider),
):
    try:
        run = await asyncio.to_thread(reanalyze_entry, store, provider, user["id"], entry_id)
    except EntryNotFound:
        raise not_found()

    if not run.ok:
        raise _upstream_failure("AI re-analysis failed", run.error)

    log_event("ai_reanalyze", user["id"])
    return AnalyzeOut(
        message="Re-analysis completed successfully",
        analysis=_analysis_out(run.entry),
        supportive_message=run.supportive_message,
    )


@router.post("/batch-analyze", response_model=BatchAnalyzeOut)
async def batch(
    body: BatchAnalyzeIn | None = None,
    user: dict = Depends(_rate_limited),
    store: EntryStore = Depends(get_entry_store),
    provider: AnalysisProvider = Depends(get_analysis_provider),
    config: MindJournalConfig = Depends(get_config),
):
    limit = body.limit if body else config.analysis.batch_limit
    result = await asyncio.to_thread(
        batch_analyze,
        store,
        provider,
        user["id"],
        limit=limit,
        delay=config.analysis.batch_delay,
    )
    if not result.processed_count:
        return BatchAnalyzeOut(message="No unprocessed entries found", processed_count=0)

    log_event("ai_batch_analyze", user["id"], {"count": result.processed_count})
    return BatchAnalyzeOut(
        message=(
            f"Batch analysis completed. {result.success_count} successful, "
            f"{result.error_count} errors."
        ),
        processed_count=result.processed_count,
        success_count=result.success_count,
        error_count=result.error_count,
        results=result.results,
    )


@router.get("/distortions", response_model=list[DistortionInfoOut])
async def distortion_catalog(user: dict = Depends(get_current_user)):
    return list_distortions()


@router.get("/status", response_model=AIStatusOut)
async def ai_status(
    user: dict = Depends(get_current_user),
    provider: AnalysisProvider = Depends(get_analysis_provider),
):
    connected = await asyncio.to_thread(provider.test_connection)
    return AIStatusOut(
        status="connected" if connected else "disconnected",
        service=provider.name,
        features=FEATURES,
    )


@router.post("/detect-mood", response_model=DetectMoodOut)
async def detect_mood(
    body: DetectMoodIn,
    user: dict = Depends(_rate_limited),
    provider: AnalysisProvider = Depends(get_analysis_provider),
    config: MindJournalConfig = Depends(get_config),
):
    text = body.content.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Content is required for mood detection")
    if len(text) < config.analysis.min_mood_text:
        raise HTTPException(
            status_code=400,
            detail=(
                "Content too short for reliable mood detection. "
                "Please write at least a few words."
            ),
        )

    result = await asyncio.to_thread(provider.detect_mood, text, body.title)
    return DetectMoodOut(message="Mood detected successfully", **result)


@router.post("/chat", response_model=ChatOut)
async def chat(
    body: ChatIn,
    user: dict = Depends(_rate_limited),
    store: EntryStore = Depends(get_entry_store),
    provider: AnalysisProvider = Depends(get_analysis_provider),
):
    entry_content = ""
    if body.entry_id:
        try:
            entry_content = store.get(user["id"], body.entry_id).content
        except EntryNotFound:
            raise not_found()

    reply = await asyncio.to_thread(provider.chat, body.message, entry_content)
    log_event("ai_chat", user["id"])
    return ChatOut(reply=reply)
