"""SQLite-backed journal entry store, scoped per owner."""

import re
import sqlite3
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Optional

import structlog

from db import dump_json, load_json, wal_connect
from shared_types import Mood

from .models import (
    DEFAULT_MOOD_INTENSITY,
    Distortion,
    EntryAnalysis,
    JournalEntry,
    Reframe,
    count_words,
    format_ts,
    parse_ts,
    reading_time,
    utcnow,
)

logger = structlog.get_logger()

ALLOWED_MOODS = tuple(Mood)
MAX_TITLE_LENGTH = 200
MAX_CONTENT_LENGTH = 10_000
MAX_TAG_LENGTH = 30
MAX_TAGS = 20

SORT_COLUMNS = {
    "created_at": "created_at",
    "updated_at": "updated_at",
    "title": "title",
    "mood": "mood",
    "mood_intensity": "mood_intensity",
}


class EntryNotFound(KeyError):
    """No entry with that id for that owner."""


def _sanitize_tag(tag: str) -> str:
    return re.sub(r"[^\w\s-]", "", tag).strip()[:MAX_TAG_LENGTH]


def _clean_tags(tags: Optional[list[str]]) -> list[str]:
    if not tags:
        return []
    cleaned = []
    for t in tags[:MAX_TAGS]:
        if not isinstance(t, str) or not t.strip():
            continue
        tag = _sanitize_tag(t)
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _validate_text(title: str, content: str) -> tuple[str, str]:
    title = (title or "").strip()
    content = (content or "").strip()
    if not title:
        raise ValueError("Entry title is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValueError(f"Title cannot exceed {MAX_TITLE_LENGTH} characters")
    if not content:
        raise ValueError("Entry content is required")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValueError(f"Content cannot exceed {MAX_CONTENT_LENGTH} characters")
    return title, content


def _validate_mood(mood: str) -> str:
    if mood not in ALLOWED_MOODS:
        raise ValueError(f"Invalid mood '{mood}'. Must be one of {[m.value for m in Mood]}")
    return str(mood)


def _validate_intensity(value: Optional[int]) -> int:
    # Missing intensity is defaulted at write time so aggregations never see NULL
    if value is None:
        return DEFAULT_MOOD_INTENSITY
    value = int(value)
    if not 1 <= value <= 10:
        raise ValueError("Mood intensity must be between 1 and 10")
    return value


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


_ANALYSIS_COLUMNS = """processed = ?, distortions_json = ?, reframes_json = ?,
    overall_sentiment = ?, key_themes_json = ?, processed_at = ?, processing_error = ?"""


def _analysis_params(analysis: EntryAnalysis) -> tuple:
    return (
        int(analysis.processed),
        dump_json([vars(d) for d in analysis.distortions]),
        dump_json([vars(r) for r in analysis.reframes]),
        analysis.overall_sentiment,
        dump_json(analysis.key_themes),
        format_ts(analysis.processed_at) if analysis.processed_at else None,
        analysis.processing_error,
    )


class EntryStore:
    """Durable collection of journal entries. Every call is owner-scoped."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        self._init_tables()

    def _connect(self) -> sqlite3.Connection:
        return wal_connect(self.db_path)

    def _init_tables(self):
        conn = self._connect()
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS journal_entries (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    mood TEXT NOT NULL,
                    mood_intensity INTEGER NOT NULL DEFAULT 5
                        CHECK(mood_intensity BETWEEN 1 AND 10),
                    tags_json TEXT NOT NULL DEFAULT '[]',
                    is_important INTEGER NOT NULL DEFAULT 0,
                    is_resolved INTEGER NOT NULL DEFAULT 0,
                    processed INTEGER NOT NULL DEFAULT 0,
                    distortions_json TEXT NOT NULL DEFAULT '[]',
                    reframes_json TEXT NOT NULL DEFAULT '[]',
                    overall_sentiment TEXT,
                    key_themes_json TEXT NOT NULL DEFAULT '[]',
                    processed_at TEXT,
                    processing_error TEXT,
                    word_count INTEGER NOT NULL DEFAULT 0,
                    reading_time INTEGER NOT NULL DEFAULT 0,
                    edit_count INTEGER NOT NULL DEFAULT 0,
                    last_edited_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                CREATE INDEX IF NOT EXISTS idx_entry_owner_created
                    ON journal_entries(owner_id, created_at DESC);
                CREATE INDEX IF NOT EXISTS idx_entry_owner_mood
                    ON journal_entries(owner_id, mood);
                CREATE INDEX IF NOT EXISTS idx_entry_owner_processed
                    ON journal_entries(owner_id, processed);
            """)
            conn.commit()
        finally:
            conn.close()

    # --- writes ---

    def create(
        self,
        owner_id: str,
        title: str,
        content: str,
        mood: str,
        mood_intensity: Optional[int] = None,
        tags: Optional[list[str]] = None,
        is_important: bool = False,
        created_at: Optional[datetime] = None,
    ) -> JournalEntry:
        """Create a new entry for owner_id.

        Raises:
            ValueError: on invalid title/content/mood/intensity
        """
        title, content = _validate_text(title, content)
        now = utcnow()
        words = count_words(content)
        entry = JournalEntry(
            owner_id=owner_id,
            title=title,
            content=content,
            mood=_validate_mood(mood),
            mood_intensity=_validate_intensity(mood_intensity),
            tags=_clean_tags(tags),
            is_important=bool(is_important),
            word_count=words,
            reading_time=reading_time(words),
            created_at=created_at or now,
            updated_at=now,
        )
        conn = self._connect()
        try:
            conn.execute(
                """INSERT INTO journal_entries
                (id, owner_id, title, content, mood, mood_intensity, tags_json,
                 is_important, is_resolved, word_count, reading_time, edit_count,
                 created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    entry.id,
                    entry.owner_id,
                    entry.title,
                    entry.content,
                    entry.mood,
                    entry.mood_intensity,
                    dump_json(entry.tags),
                    int(entry.is_important),
                    int(entry.is_resolved),
                    entry.word_count,
                    entry.reading_time,
                    entry.edit_count,
                    format_ts(entry.created_at),
                    format_ts(entry.updated_at),
                ),
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("entry_store.created", owner_id=owner_id, entry_id=entry.id)
        return entry

    def update(
        self,
        owner_id: str,
        entry_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        mood: Optional[str] = None,
        mood_intensity: Optional[int] = None,
        tags: Optional[list[str]] = None,
        is_important: Optional[bool] = None,
        is_resolved: Optional[bool] = None,
    ) -> JournalEntry:
        """Update mutable fields. A content change invalidates the analysis."""
        entry = self.get(owner_id, entry_id)
        new_title, new_content = _validate_text(
            title if title is not None else entry.title,
            content if content is not None else entry.content,
        )
        now = utcnow()
        content_changed = new_content != entry.content

        entry.title = new_title
        if mood is not None:
            entry.mood = _validate_mood(mood)
        if mood_intensity is not None:
            entry.mood_intensity = _validate_intensity(mood_intensity)
        if tags is not None:
            entry.tags = _clean_tags(tags)
        if is_important is not None:
            entry.is_important = bool(is_important)
        if is_resolved is not None:
            entry.is_resolved = bool(is_resolved)
        if content_changed:
            entry.content = new_content
            entry.word_count = count_words(new_content)
            entry.reading_time = reading_time(entry.word_count)
            entry.edit_count += 1
            entry.last_edited_at = now
            entry.analysis = EntryAnalysis()
        entry.updated_at = now

        columns = """title = ?, content = ?, mood = ?, mood_intensity = ?, tags_json = ?,
            is_important = ?, is_resolved = ?, word_count = ?, reading_time = ?,
            edit_count = ?, last_edited_at = ?, updated_at = ?"""
        params = [
            entry.title,
            entry.content,
            entry.mood,
            entry.mood_intensity,
            dump_json(entry.tags),
            int(entry.is_important),
            int(entry.is_resolved),
            entry.word_count,
            entry.reading_time,
            entry.edit_count,
            format_ts(entry.last_edited_at) if entry.last_edited_at else None,
            format_ts(entry.updated_at),
        ]
        # The cleared analysis goes out with the new content in one statement
        if content_changed:
            columns += ", " + _ANALYSIS_COLUMNS
            params.extend(_analysis_params(entry.analysis))

        conn = self._connect()
        try:
            conn.execute(
                f"UPDATE journal_entries SET {columns} WHERE id = ? AND owner_id = ?",
                (*params, entry_id, owner_id),
            )
            conn.commit()
        finally:
            conn.close()
        if content_changed:
            logger.info("entry_store.analysis_invalidated", entry_id=entry_id)
        return entry

    def delete(self, owner_id: str, entry_id: str) -> bool:
        conn = self._connect()
        try:
            cur = conn.execute(
                "DELETE FROM journal_entries WHERE id = ? AND owner_id = ?",
                (entry_id, owner_id),
            )
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def save_analysis(self, owner_id: str, entry_id: str, analysis: EntryAnalysis) -> None:
        """Persist a successful provider analysis."""
        analysis.processed = True
        analysis.processed_at = analysis.processed_at or utcnow()
        analysis.processing_error = None
        if not self._write_analysis(owner_id, entry_id, analysis):
            raise EntryNotFound(entry_id)

    def record_analysis_error(self, owner_id: str, entry_id: str, message: str) -> None:
        """Keep the entry unprocessed and note why."""
        conn = self._connect()
        try:
            conn.execute(
                """UPDATE journal_entries SET processing_error = ?
                WHERE id = ? AND owner_id = ?""",
                (message[:500], entry_id, owner_id),
            )
            conn.commit()
        finally:
            conn.close()

    def reset_analysis(self, owner_id: str, entry_id: str) -> None:
        if not self._write_analysis(owner_id, entry_id, EntryAnalysis()):
            raise EntryNotFound(entry_id)

    def _write_analysis(self, owner_id: str, entry_id: str, analysis: EntryAnalysis) -> bool:
        conn = self._connect()
        try:
            cur = conn.execute(
                f"UPDATE journal_entries SET {_ANALYSIS_COLUMNS} WHERE id = ? AND owner_id = ?",
                (*_analysis_params(analysis), entry_id, owner_id),
            )
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    # --- reads ---

    def get(self, owner_id: str, entry_id: str) -> JournalEntry:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT * FROM journal_entries WHERE id = ? AND owner_id = ?",
                (entry_id, owner_id),
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise EntryNotFound(entry_id)
        return self._row_to_entry(row)

    def list_entries(
        self,
        owner_id: str,
        mood: Optional[str] = None,
        distortion: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        important: Optional[bool] = None,
        resolved: Optional[bool] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[JournalEntry], int]:
        """Filtered, paginated listing.

        Returns:
            (entries on the requested page, total matching count)
        """
        clauses = ["owner_id = ?"]
        params: list = [owner_id]
        if mood:
            clauses.append("mood = ?")
            params.append(mood)
        if distortion:
            clauses.append(
                "EXISTS (SELECT 1 FROM json_each(distortions_json) "
                "WHERE json_extract(value, '$.type') = ?)"
            )
            params.append(distortion)
        if tag:
            clauses.append("EXISTS (SELECT 1 FROM json_each(tags_json) WHERE value = ?)")
            params.append(tag)
        if search:
            pattern = f"%{_escape_like(search)}%"
            clauses.append("(title LIKE ? ESCAPE '\\' OR content LIKE ? ESCAPE '\\')")
            params.extend([pattern, pattern])
        if start:
            clauses.append("created_at >= ?")
            params.append(format_ts(start))
        if end:
            clauses.append("created_at <= ?")
            params.append(format_ts(end))
        if important is not None:
            clauses.append("is_important = ?")
            params.append(int(important))
        if resolved is not None:
            clauses.append("is_resolved = ?")
            params.append(int(resolved))

        where = " AND ".join(clauses)
        column = SORT_COLUMNS.get(sort_by, "created_at")
        direction = "ASC" if sort_order == "asc" else "DESC"
        page = max(1, page)
        limit = max(1, limit)

        conn = self._connect()
        try:
            total = conn.execute(
                f"SELECT COUNT(*) FROM journal_entries WHERE {where}", params
            ).fetchone()[0]
            rows = conn.execute(
                f"SELECT * FROM journal_entries WHERE {where} "
                f"ORDER BY {column} {direction}, id {direction} LIMIT ? OFFSET ?",
                [*params, limit, (page - 1) * limit],
            ).fetchall()
        finally:
            conn.close()
        return [self._row_to_entry(r) for r in rows], total

    def iter_entries(
        self,
        owner_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        before: Optional[datetime] = None,
        processed_only: bool = False,
    ) -> Iterator[JournalEntry]:
        """Entries in created_at order (oldest first), the aggregation cursor.

        Args:
            since: inclusive lower bound
            until: inclusive upper bound
            before: exclusive upper bound
            processed_only: only entries the analysis provider has processed
        """
        clauses = ["owner_id = ?"]
        params: list = [owner_id]
        if since is not None:
            clauses.append("created_at >= ?")
            params.append(format_ts(since))
        if until is not None:
            clauses.append("created_at <= ?")
            params.append(format_ts(until))
        if before is not None:
            clauses.append("created_at < ?")
            params.append(format_ts(before))
        if processed_only:
            clauses.append("processed = 1")

        conn = self._connect()
        try:
            cursor = conn.execute(
                f"SELECT * FROM journal_entries WHERE {' AND '.join(clauses)} "
                "ORDER BY created_at ASC, id ASC",
                params,
            )
            for row in cursor:
                yield self._row_to_entry(row)
        finally:
            conn.close()

    def timestamps(self, owner_id: str) -> list[datetime]:
        """All creation timestamps for owner, newest first."""
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT created_at FROM journal_entries WHERE owner_id = ? "
                "ORDER BY created_at DESC",
                (owner_id,),
            ).fetchall()
        finally:
            conn.close()
        return [parse_ts(r["created_at"]) for r in rows]

    def recent(self, owner_id: str, limit: int = 5) -> list[JournalEntry]:
        entries, _ = self.list_entries(owner_id, limit=limit)
        return entries

    def list_unprocessed(self, owner_id: str, limit: int = 5) -> list[JournalEntry]:
        """Newest entries still waiting for analysis."""
        conn = self._connect()
        try:
            rows = conn.execute(
                """SELECT * FROM journal_entries
                WHERE owner_id = ? AND processed = 0
                ORDER BY created_at DESC LIMIT ?""",
                (owner_id, limit),
            ).fetchall()
        finally:
            conn.close()
        return [self._row_to_entry(r) for r in rows]

    def distinct_tags(self, owner_id: str) -> list[str]:
        conn = self._connect()
        try:
            rows = conn.execute(
                """SELECT DISTINCT j.value AS tag
                FROM journal_entries, json_each(journal_entries.tags_json) AS j
                WHERE owner_id = ?""",
                (owner_id,),
            ).fetchall()
        finally:
            conn.close()
        return sorted(r["tag"] for r in rows if r["tag"] and r["tag"].strip())

    def owners(self) -> list[str]:
        """Owner ids with at least one entry (CLI batch jobs)."""
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT DISTINCT owner_id FROM journal_entries ORDER BY owner_id"
            ).fetchall()
        finally:
            conn.close()
        return [r["owner_id"] for r in rows]

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> JournalEntry:
        analysis = EntryAnalysis(
            processed=bool(row["processed"]),
            distortions=[Distortion.from_dict(d) for d in load_json(row["distortions_json"])],
            reframes=[Reframe.from_dict(r) for r in load_json(row["reframes_json"])],
            overall_sentiment=row["overall_sentiment"],
            key_themes=load_json(row["key_themes_json"]),
            processed_at=parse_ts(row["processed_at"]),
            processing_error=row["processing_error"],
        )
        return JournalEntry(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            content=row["content"],
            mood=row["mood"],
            mood_intensity=row["mood_intensity"],
            tags=load_json(row["tags_json"]),
            is_important=bool(row["is_important"]),
            is_resolved=bool(row["is_resolved"]),
            analysis=analysis,
            word_count=row["word_count"],
            reading_time=row["reading_time"],
            edit_count=row["edit_count"],
            last_edited_at=parse_ts(row["last_edited_at"]),
            created_at=parse_ts(row["created_at"]),
            updated_at=parse_ts(row["updated_at"]),
        )
