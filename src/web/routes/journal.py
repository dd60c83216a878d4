"""Journal CRUD routes over the per-owner entry store."""

import math
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from cli.config_models import MindJournalConfig
from journal.models import JournalEntry, parse_ts
from journal.storage import EntryNotFound, EntryStore
from web.auth import get_current_user
from web.deps import get_config, get_entry_store
from web.errors import not_found, server_error
from web.models import (
    EntryCreate,
    EntryListOut,
    EntryOut,
    EntrySummaryListOut,
    EntrySummaryOut,
    EntryUpdate,
    Pagination,
)
from web.user_store import log_event

logger = structlog.get_logger()

router = APIRouter(prefix="/api/journal", tags=["journal"])

MAX_PAGE_SIZE = 100


def _entry_out(entry: JournalEntry) -> EntryOut:
    return EntryOut.model_validate(entry.to_dict())


def _pagination(page: int, limit: int, total: int) -> Pagination:
    pages = math.ceil(total / limit) if total else 0
    return Pagination(
        current_page=page,
        total_pages=pages,
        total_entries=total,
        has_next=page < pages,
        has_prev=page > 1,
    )


def _parse_date(raw: Optional[str], name: str):
    if not raw:
        return None
    try:
        return parse_ts(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {raw}")


@router.post("", response_model=EntryOut, status_code=status.HTTP_201_CREATED)
async def create_entry(
    body: EntryCreate,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    try:
        entry = store.create(
            owner_id=user["id"],
            title=body.title,
            content=body.content,
            mood=body.mood,
            mood_intensity=body.mood_intensity,
            tags=body.tags,
            is_important=body.is_important,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    log_event("journal_entry_created", user["id"], {"words": entry.word_count})
    return _entry_out(entry)


def _list(
    store: EntryStore,
    owner_id: str,
    mood,
    distortion,
    tag,
    search,
    start_date,
    end_date,
    important,
    resolved,
    sort_by,
    sort_order,
    page,
    limit,
):
    limit = min(limit, MAX_PAGE_SIZE)
    entries, total = store.list_entries(
        owner_id,
        mood=mood,
        distortion=distortion,
        tag=tag,
        search=search,
        start=_parse_date(start_date, "startDate"),
        end=_parse_date(end_date, "endDate"),
        important=important,
        resolved=resolved,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return entries, _pagination(page, limit, total)


@router.get("", response_model=EntryListOut)
async def list_entries(
    mood: Optional[str] = None,
    distortion: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    important: Optional[bool] = None,
    resolved: Optional[bool] = None,
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    entries, pagination = _list(
        store, user["id"], mood, distortion, tag, search, start_date, end_date,
        important, resolved, sort_by, sort_order, page, limit,
    )
    return EntryListOut(entries=[_entry_out(e) for e in entries], pagination=pagination)


@router.get("/summary", response_model=EntrySummaryListOut)
async def list_summaries(
    mood: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    """Lightweight listing without content or analysis bodies."""
    entries, pagination = _list(
        store, user["id"], mood, None, tag, search, None, None,
        None, None, "created_at", "desc", page, limit,
    )
    return EntrySummaryListOut(
        entries=[EntrySummaryOut.model_validate(e.summary()) for e in entries],
        pagination=pagination,
    )


@router.get("/tags/all", response_model=list[str])
async def all_tags(
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    return store.distinct_tags(user["id"])


@router.get("/{entry_id}", response_model=EntryOut)
async def read_entry(
    entry_id: str,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    try:
        return _entry_out(store.get(user["id"], entry_id))
    except EntryNotFound:
        raise not_found()


@router.put("/{entry_id}", response_model=EntryOut)
async def update_entry(
    entry_id: str,
    body: EntryUpdate,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    try:
        entry = store.update(
            user["id"],
            entry_id,
            title=body.title,
            content=body.content,
            mood=body.mood,
            mood_intensity=body.mood_intensity,
            tags=body.tags,
            is_important=body.is_important,
            is_resolved=body.is_resolved,
        )
    except EntryNotFound:
        raise not_found()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _entry_out(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: str,
    user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    config: MindJournalConfig = Depends(get_config),
):
    try:
        deleted = store.delete(user["id"], entry_id)
    except Exception as e:
        raise server_error("journal.delete_error", e, config, entry_id=entry_id)
    if not deleted:
        raise not_found()
    log_event("journal_entry_deleted", user["id"])
