"""Shared SQLite helpers: WAL mode, row factory, JSON columns."""

import json
import sqlite3
from pathlib import Path


def wal_connect(
    db_path: str | Path,
    row_factory: bool = True,
    foreign_keys: bool = False,
) -> sqlite3.Connection:
    """Open SQLite connection with WAL journal mode.

    Args:
        db_path: Path to database file. Parent dirs are created.
        row_factory: If True, rows come back as sqlite3.Row.
        foreign_keys: Enforce FK constraints on this connection.
    """
    path = Path(db_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), timeout=10)
    conn.execute("PRAGMA journal_mode=WAL")
    if foreign_keys:
        conn.execute("PRAGMA foreign_keys=ON")
    if row_factory:
        conn.row_factory = sqlite3.Row
    return conn


def dump_json(value) -> str:
    return json.dumps(value if value is not None else [], ensure_ascii=False)


def load_json(raw: str | None, default=None):
    """Decode a JSON TEXT column, tolerating NULL and garbage."""
    if not raw:
        return default if default is not None else []
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return default if default is not None else []
