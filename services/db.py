from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence

from flask import current_app, g

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "migrations" / "schema.sql"
SEED_PATH = Path(__file__).resolve().parent.parent / "seeds" / "seed.sql"


class DatabaseError(RuntimeError):
    """Raised when the SQLite layer encounters an unexpected error."""


def get_db() -> sqlite3.Connection:
    if "db" not in g:
        db_path = current_app.config["DATABASE"]
        conn = sqlite3.connect(db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        g.db = conn
    return g.db  # type: ignore[return-value]


def close_db(_: Any) -> None:
    conn = g.pop("db", None)
    if conn is not None:
        conn.close()


def executescript(script: str) -> None:
    db = get_db()
    try:
        db.executescript(script)
    except sqlite3.Error as exc:
        raise DatabaseError(str(exc)) from exc


def initialize_schema() -> None:
    script = SCHEMA_PATH.read_text(encoding="utf-8")
    executescript(script)


def seed_database() -> None:
    row = query_one("SELECT COUNT(1) FROM units")
    if row and row[0]:
        return
    script = SEED_PATH.read_text(encoding="utf-8")
    executescript(script)


def query_one(sql: str, params: Sequence[Any] | None = None) -> sqlite3.Row | None:
    db = get_db()
    try:
        cur = db.execute(sql, params or [])
    except sqlite3.Error as exc:
        raise DatabaseError(str(exc)) from exc
    try:
        return cur.fetchone()
    finally:
        cur.close()


def query_all(sql: str, params: Sequence[Any] | None = None) -> list[sqlite3.Row]:
    db = get_db()
    try:
        cur = db.execute(sql, params or [])
    except sqlite3.Error as exc:
        raise DatabaseError(str(exc)) from exc
    try:
        return cur.fetchall()
    finally:
        cur.close()


def execute(sql: str, params: Sequence[Any] | None = None) -> int:
    db = get_db()
    try:
        cur = db.execute(sql, params or [])
        db.commit()
    except sqlite3.Error as exc:
        db.rollback()
        raise DatabaseError(str(exc)) from exc
    return cur.rowcount


def insert(sql: str, params: Sequence[Any] | None = None) -> int:
    db = get_db()
    try:
        cur = db.execute(sql, params or [])
        db.commit()
    except sqlite3.Error as exc:
        db.rollback()
        raise DatabaseError(str(exc)) from exc
    return int(cur.lastrowid)


def executemany(sql: str, seq_of_params: Iterable[Sequence[Any]]) -> None:
    db = get_db()
    try:
        db.executemany(sql, seq_of_params)
        db.commit()
    except sqlite3.Error as exc:
        db.rollback()
        raise DatabaseError(str(exc)) from exc


@contextmanager
def transaction() -> Iterator[sqlite3.Connection]:
    """Hold the database write lock for the duration of the block."""
    db = get_db()
    if db.in_transaction:
        db.commit()
    try:
        db.execute("BEGIN IMMEDIATE")
    except sqlite3.Error as exc:
        raise DatabaseError(str(exc)) from exc
    try:
        yield db
    except sqlite3.Error as exc:
        db.rollback()
        raise DatabaseError(str(exc)) from exc
    except BaseException:
        db.rollback()
        raise
    else:
        db.commit()


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def upsert_setting(key: str, value: str, description: str = "") -> None:
    execute(
        "INSERT INTO settings(key, value, description, updated_at) VALUES (?, ?, ?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, description=excluded.description, "
        "updated_at=excluded.updated_at",
        (key, value, description, utcnow_iso()),
    )


def read_setting(key: str) -> str | None:
    row = query_one("SELECT value FROM settings WHERE key = ?", (key,))
    if not row:
        return None
    return row["value"]


def read_settings() -> dict[str, str]:
    rows = query_all("SELECT key, value FROM settings ORDER BY key")
    return {str(row["key"]): row["value"] for row in rows}
