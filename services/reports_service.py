from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Any, Dict, Tuple

from adapters.report import xlsx_writer
from dao import rotations_dao, units_dao
from services import clock


def _coverage_status(workload: str, has_a: bool, has_b: bool) -> str:
    if not has_a and not has_b:
        return "critical"
    if workload == "High" and not (has_a and has_b):
        return "critical"
    if workload == "Medium" and not (has_a and has_b):
        return "warning"
    return "good"


def current_coverage(today: date | None = None) -> Dict[str, Any]:
    """Interns placed in each unit today, split by batch."""
    today = clock.resolve_today(today)
    coverage: Dict[int, Dict[str, Any]] = {
        unit.id: {
            "unit_id": unit.id,
            "unit_name": unit.name,
            "unit_workload": unit.workload,
            "batch_a": [],
            "batch_b": [],
        }
        for unit in units_dao.list_units()
    }
    for row in rotations_dao.list_rotations({"covering": today.isoformat()}):
        entry = coverage.get(row["unit_id"])
        if entry is None:
            continue
        key = "batch_a" if row["intern_batch"] == "A" else "batch_b"
        entry[key].append({"intern_id": row["intern_id"], "intern_name": row["intern_name"], "rotation_id": row["id"]})

    for entry in coverage.values():
        entry["coverage_status"] = _coverage_status(
            entry["unit_workload"], bool(entry["batch_a"]), bool(entry["batch_b"])
        )
    return {"date": today.isoformat(), "units": list(coverage.values())}


def export_xlsx(today: date | None = None) -> Tuple[BytesIO, str]:
    today = clock.resolve_today(today)
    stream = xlsx_writer.write_rotations(rotations_dao.list_rotations())
    return stream, f"rotations_{today.isoformat()}.xlsx"
