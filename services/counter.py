"""Persisted round-robin offset picking each new intern's starting unit."""
from __future__ import annotations

import logging
from typing import Optional

from config import CONFIG
from services import db

logger = logging.getLogger(__name__)

KEY = CONFIG["settings_keys"]["round_robin"]
DESCRIPTION = "Round-robin offset for the first unit of new interns"


def _as_int(value: Optional[str]) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except ValueError:
        logger.warning("round-robin offset %r is not an integer; treating it as 0", value)
        return 0


def get() -> int:
    return _as_int(db.read_setting(KEY))


def set(value: int) -> None:  # noqa: A001 - mirrors the counter contract
    db.upsert_setting(KEY, str(int(value)), DESCRIPTION)


def get_and_increment() -> int:
    """Return the current offset and persist offset + 1 in one write transaction."""
    with db.transaction() as conn:
        row = conn.execute("SELECT value FROM settings WHERE key = ?", (KEY,)).fetchone()
        current = _as_int(row["value"] if row else None)
        conn.execute(
            "INSERT INTO settings(key, value, description, updated_at) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
            (KEY, str(current + 1), DESCRIPTION, db.utcnow_iso()),
        )
    return current
