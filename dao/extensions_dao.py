from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from domain.models import ExtensionReason
from services import db


def record(intern_id: int, days: int, reason: str, notes: Optional[str]) -> int:
    return db.insert(
        "INSERT INTO extension_reasons(intern_id, extension_days, reason, notes, created_at) VALUES (?, ?, ?, ?, ?)",
        (intern_id, days, reason, notes, db.utcnow_iso()),
    )


def list_for_intern(intern_id: int) -> List[ExtensionReason]:
    rows = db.query_all(
        "SELECT id, intern_id, extension_days, reason, notes, created_at FROM extension_reasons "
        "WHERE intern_id = ? ORDER BY id",
        (intern_id,),
    )
    return [
        ExtensionReason(
            id=int(row["id"]),
            intern_id=int(row["intern_id"]),
            extension_days=int(row["extension_days"]),
            reason=row["reason"],
            notes=row["notes"],
            created_at=_parse_timestamp(row["created_at"]),
        )
        for row in rows
    ]


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
