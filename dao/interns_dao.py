from __future__ import annotations

from typing import Any, Dict, List, Optional

from domain.models import Intern
from services import clock, db

_COLUMNS = "id, name, batch, start_date, phone_number, status, extension_days"


def _to_intern(row) -> Intern:
    return Intern(
        id=int(row["id"]),
        name=row["name"],
        batch=row["batch"],
        start_date=clock.parse_date(row["start_date"], field="start_date"),
        phone_number=row["phone_number"],
        status=row["status"],
        extension_days=int(row["extension_days"] or 0),
    )


def list_interns(batch: Optional[str] = None, status: Optional[str] = None) -> List[Intern]:
    sql = f"SELECT {_COLUMNS} FROM interns"
    conditions: List[str] = []
    params: List[Any] = []
    if batch:
        conditions.append("batch = ?")
        params.append(batch)
    if status:
        conditions.append("status = ?")
        params.append(status)
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY start_date, id"
    return [_to_intern(row) for row in db.query_all(sql, params)]


def list_schedulable_ids() -> List[int]:
    rows = db.query_all(
        "SELECT id FROM interns WHERE status IN ('Active', 'Extended') ORDER BY start_date, batch, id"
    )
    return [int(row["id"]) for row in rows]


def get_intern(intern_id: int) -> Optional[Intern]:
    row = db.query_one(f"SELECT {_COLUMNS} FROM interns WHERE id = ?", (intern_id,))
    return _to_intern(row) if row else None


def count_interns() -> int:
    row = db.query_one("SELECT COUNT(1) FROM interns")
    return int(row[0]) if row else 0


def create_intern(payload: Dict[str, Any]) -> int:
    return db.insert(
        "INSERT INTO interns(name, batch, start_date, phone_number, status, extension_days) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (
            payload["name"],
            payload["batch"],
            payload["start_date"].isoformat(),
            payload.get("phone_number"),
            payload.get("status", "Active"),
            int(payload.get("extension_days", 0)),
        ),
    )


def update_intern(intern_id: int, payload: Dict[str, Any]) -> int:
    return db.execute(
        "UPDATE interns SET name = ?, batch = ?, start_date = ?, phone_number = ?, "
        "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (
            payload["name"],
            payload["batch"],
            payload["start_date"].isoformat(),
            payload.get("phone_number"),
            intern_id,
        ),
    )


def set_status(intern_id: int, status: str) -> int:
    return db.execute(
        "UPDATE interns SET status = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (status, intern_id),
    )


def set_extension(intern_id: int, extension_days: int, status: str) -> int:
    return db.execute(
        "UPDATE interns SET extension_days = ?, status = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (extension_days, status, intern_id),
    )


def delete_intern(intern_id: int) -> int:
    return db.execute("DELETE FROM interns WHERE id = ?", (intern_id,))
