"""Users table plus usage events for the web API."""

import json as _json
import os
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from db import wal_connect

logger = structlog.get_logger()

_DEFAULT_DB_PATH = (
    Path(os.environ.get("MINDJOURNAL_HOME", Path.home() / "mindjournal")) / "users.db"
)


def use_db(db_path: Path) -> None:
    """Point every default-path call at ``db_path`` (from config.paths.users_db)."""
    global _DEFAULT_DB_PATH
    _DEFAULT_DB_PATH = Path(db_path).expanduser()


def _get_conn(db_path: Path | None = None) -> sqlite3.Connection:
    return wal_connect(db_path or _DEFAULT_DB_PATH, row_factory=True, foreign_keys=True)


def init_db(db_path: Path | None = None) -> None:
    """Create tables if they don't exist."""
    conn = _get_conn(db_path)
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT,
                name TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                last_seen_at TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS usage_events (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                event      TEXT NOT NULL,
                user_id    TEXT,
                metadata   TEXT,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
            CREATE INDEX IF NOT EXISTS idx_usage_event ON usage_events(event, created_at DESC);
            CREATE INDEX IF NOT EXISTS idx_usage_user ON usage_events(user_id, created_at DESC);
        """)
        conn.commit()
    finally:
        conn.close()


def get_or_create_user(
    user_id: str,
    email: str | None = None,
    name: str | None = None,
    db_path: Path | None = None,
) -> dict[str, Any]:
    """Upsert user on every authenticated request. Returns user dict."""
    now = datetime.now(timezone.utc).isoformat()
    conn = _get_conn(db_path)
    try:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row:
            conn.execute(
                """UPDATE users SET email = COALESCE(?, email), name = COALESCE(?, name),
                last_seen_at = ? WHERE id = ?""",
                (email, name, now, user_id),
            )
            conn.commit()
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return dict(row)

        conn.execute(
            "INSERT INTO users (id, email, name, created_at, last_seen_at) VALUES (?, ?, ?, ?, ?)",
            (user_id, email, name, now, now),
        )
        conn.commit()
        logger.info("user.created", user_id=user_id)
        return {"id": user_id, "email": email, "name": name, "created_at": now, "last_seen_at": now}
    finally:
        conn.close()


def get_user(user_id: str, db_path: Path | None = None) -> dict[str, Any] | None:
    conn = _get_conn(db_path)
    try:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return dict(row) if row else None
    finally:
        conn.close()


def log_event(
    event: str,
    user_id: str | None = None,
    metadata: dict | None = None,
    db_path: Path | None = None,
) -> None:
    """Record a usage event. Failures are logged, never raised to the request."""
    try:
        conn = _get_conn(db_path)
        try:
            conn.execute(
                "INSERT INTO usage_events (event, user_id, metadata) VALUES (?, ?, ?)",
                (event, user_id, _json.dumps(metadata) if metadata else None),
            )
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.warning("usage.log_failed", event=event, error=str(e))


def get_event_counts(
    user_id: str | None = None, days: int = 30, db_path: Path | None = None
) -> dict[str, int]:
    """Event name -> count over the last ``days`` days."""
    conn = _get_conn(db_path)
    try:
        query = (
            "SELECT event, COUNT(*) AS cnt FROM usage_events "
            "WHERE created_at >= datetime('now', ?)"
        )
        params: list = [f"-{days} days"]
        if user_id:
            query += " AND user_id = ?"
            params.append(user_id)
        query += " GROUP BY event ORDER BY cnt DESC, event ASC"
        rows = conn.execute(query, params).fetchall()
        return {r["event"]: r["cnt"] for r in rows}
    finally:
        conn.close()
