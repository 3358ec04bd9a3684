from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from domain.models import Rotation
from domain.timeline import Timeline
from services import clock, db

_SELECT = (
    "SELECT r.id, r.intern_id, r.unit_id, r.start_date, r.end_date, r.is_manual_assignment, "
    "u.name AS unit_name FROM rotations r JOIN units u ON u.id = r.unit_id"
)


def _to_rotation(row) -> Rotation:
    return Rotation(
        id=int(row["id"]),
        intern_id=int(row["intern_id"]),
        unit_id=int(row["unit_id"]),
        start_date=clock.parse_date(row["start_date"], field="start_date"),
        end_date=clock.parse_date(row["end_date"], field="end_date"),
        is_manual_assignment=bool(row["is_manual_assignment"]),
        unit_name=row["unit_name"],
    )


def timeline_for(intern_id: int) -> Timeline:
    """Raises ``ValidationError`` when a stored date cannot be parsed."""
    rows = db.query_all(_SELECT + " WHERE r.intern_id = ? ORDER BY r.start_date, r.id", (intern_id,))
    return Timeline(_to_rotation(row) for row in rows)


def get_rotation(rotation_id: int) -> Optional[Rotation]:
    row = db.query_one(_SELECT + " WHERE r.id = ?", (rotation_id,))
    return _to_rotation(row) if row else None


def list_rotations(filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    filters = filters or {}
    sql = (
        "SELECT r.id, r.intern_id, r.unit_id, r.start_date, r.end_date, r.is_manual_assignment, "
        "i.name AS intern_name, i.batch AS intern_batch, i.status AS intern_status, "
        "u.name AS unit_name, u.workload AS unit_workload "
        "FROM rotations r JOIN interns i ON i.id = r.intern_id JOIN units u ON u.id = r.unit_id"
    )
    conditions: List[str] = []
    params: List[Any] = []
    if filters.get("start_date"):
        conditions.append("r.start_date >= ?")
        params.append(filters["start_date"])
    if filters.get("end_date"):
        conditions.append("r.end_date <= ?")
        params.append(filters["end_date"])
    if filters.get("unit_id"):
        conditions.append("r.unit_id = ?")
        params.append(filters["unit_id"])
    if filters.get("intern_id"):
        conditions.append("r.intern_id = ?")
        params.append(filters["intern_id"])
    if filters.get("batch"):
        conditions.append("i.batch = ?")
        params.append(filters["batch"])
    if filters.get("covering"):
        conditions.append("r.start_date <= ? AND r.end_date >= ?")
        params.extend([filters["covering"], filters["covering"]])
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY r.start_date, u.name, r.id"
    return [
        {
            "id": int(row["id"]),
            "intern_id": int(row["intern_id"]),
            "intern_name": row["intern_name"],
            "intern_batch": row["intern_batch"],
            "intern_status": row["intern_status"],
            "unit_id": int(row["unit_id"]),
            "unit_name": row["unit_name"],
            "unit_workload": row["unit_workload"],
            "start_date": row["start_date"],
            "end_date": row["end_date"],
            "is_manual_assignment": bool(row["is_manual_assignment"]),
        }
        for row in db.query_all(sql, params)
    ]


def create_rotation(intern_id: int, unit_id: int, start: date, end: date, *, manual: bool) -> int:
    return db.insert(
        "INSERT INTO rotations(intern_id, unit_id, start_date, end_date, is_manual_assignment) "
        "VALUES (?, ?, ?, ?, ?)",
        (intern_id, unit_id, start.isoformat(), end.isoformat(), 1 if manual else 0),
    )


def update_dates(rotation_id: int, start: date, end: date, *, manual: Optional[bool] = None) -> int:
    if manual is None:
        return db.execute(
            "UPDATE rotations SET start_date = ?, end_date = ? WHERE id = ?",
            (start.isoformat(), end.isoformat(), rotation_id),
        )
    return db.execute(
        "UPDATE rotations SET start_date = ?, end_date = ?, is_manual_assignment = ? WHERE id = ?",
        (start.isoformat(), end.isoformat(), 1 if manual else 0, rotation_id),
    )


def update_unit(rotation_id: int, unit_id: int) -> int:
    return db.execute("UPDATE rotations SET unit_id = ? WHERE id = ?", (unit_id, rotation_id))


def update_rotation(rotation_id: int, unit_id: int, start: date, end: date) -> int:
    """Operator edit; the row becomes a manual assignment."""
    return db.execute(
        "UPDATE rotations SET unit_id = ?, start_date = ?, end_date = ?, is_manual_assignment = 1 WHERE id = ?",
        (unit_id, start.isoformat(), end.isoformat(), rotation_id),
    )


def delete_rotation(rotation_id: int) -> int:
    return db.execute("DELETE FROM rotations WHERE id = ?", (rotation_id,))


def delete_automatic_from(intern_id: int, start: date) -> int:
    return db.execute(
        "DELETE FROM rotations WHERE intern_id = ? AND start_date >= ? AND is_manual_assignment = 0",
        (intern_id, start.isoformat()),
    )


def count_active_for_unit(unit_id: int, today: date) -> int:
    row = db.query_one(
        "SELECT COUNT(1) FROM rotations WHERE unit_id = ? AND end_date >= ?",
        (unit_id, today.isoformat()),
    )
    return int(row[0]) if row else 0
