from __future__ import annotations

from typing import Any, Dict, List, Optional

from domain.models import Unit
from services import db

_COLUMNS = "id, name, duration_days, workload, position, description"


def _to_unit(row) -> Unit:
    return Unit(
        id=int(row["id"]),
        name=row["name"],
        duration_days=int(row["duration_days"]),
        workload=row["workload"],
        position=int(row["position"]) if row["position"] is not None else None,
        description=row["description"],
    )


def list_units() -> List[Unit]:
    rows = db.query_all(
        f"SELECT {_COLUMNS} FROM units ORDER BY position IS NULL, position, id"
    )
    return [_to_unit(row) for row in rows]


def get_unit(unit_id: int) -> Optional[Unit]:
    row = db.query_one(f"SELECT {_COLUMNS} FROM units WHERE id = ?", (unit_id,))
    return _to_unit(row) if row else None


def get_unit_by_name(name: str) -> Optional[Unit]:
    row = db.query_one(f"SELECT {_COLUMNS} FROM units WHERE name = ?", (name,))
    return _to_unit(row) if row else None


def create_unit(payload: Dict[str, Any]) -> int:
    return db.insert(
        "INSERT INTO units(name, duration_days, workload, position, description) VALUES (?, ?, ?, ?, ?)",
        (
            payload["name"],
            int(payload["duration_days"]),
            payload.get("workload", "Medium"),
            payload.get("position"),
            payload.get("description"),
        ),
    )


def update_unit(unit_id: int, payload: Dict[str, Any]) -> int:
    return db.execute(
        "UPDATE units SET name = ?, duration_days = ?, workload = ?, position = ?, description = ?, "
        "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (
            payload["name"],
            int(payload["duration_days"]),
            payload.get("workload", "Medium"),
            payload.get("position"),
            payload.get("description"),
            unit_id,
        ),
    )


def set_positions(ordered_ids: List[int]) -> None:
    db.executemany(
        "UPDATE units SET position = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        [(index, unit_id) for index, unit_id in enumerate(ordered_ids, start=1)],
    )


def delete_unit(unit_id: int) -> int:
    return db.execute("DELETE FROM units WHERE id = ?", (unit_id,))
