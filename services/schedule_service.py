from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from config import CONFIG
from dao import extensions_dao, interns_dao, rotations_dao, settings_dao, units_dao
from domain.errors import ConflictError, NotFoundError, ValidationError
from domain.models import BATCHES, Intern, Rotation
from rules import status as status_rules
from services import advance, clock
from services.locks import intern_lock

logger = logging.getLogger(__name__)


def _require_intern(intern_id: int) -> Intern:
    intern = interns_dao.get_intern(intern_id)
    if intern is None:
        raise NotFoundError(f"Intern {intern_id} not found")
    return intern


def rotation_dict(rotation: Rotation) -> Dict[str, Any]:
    return {
        "id": rotation.id,
        "intern_id": rotation.intern_id,
        "unit_id": rotation.unit_id,
        "unit_name": rotation.unit_name,
        "start_date": rotation.start_date.isoformat(),
        "end_date": rotation.end_date.isoformat(),
        "is_manual_assignment": rotation.is_manual_assignment,
    }


def intern_dict(intern: Intern) -> Dict[str, Any]:
    payload = asdict(intern)
    payload["start_date"] = intern.start_date.isoformat()
    return payload


# ----------------------------------------------------------------------------
def resolve_status(intern_id: int, today: date | None = None) -> str:
    """Status recomputed from the stored rotations; never writes."""
    intern = _require_intern(intern_id)
    timeline = rotations_dao.timeline_for(intern_id)
    return status_rules.resolve(intern, timeline, units_dao.list_units(), clock.resolve_today(today))


def build_intern_schedule(intern_id: int, today: date | None = None) -> Dict[str, Any]:
    today = clock.resolve_today(today)
    intern = _require_intern(intern_id)
    timeline = rotations_dao.timeline_for(intern_id)
    units = units_dao.list_units()

    completed = timeline.completed(today)
    current = timeline.current(today)
    completed_unit_ids = {r.unit_id for r in completed}
    current_unit_id = current.unit_id if current else None

    upcoming_by_unit: Dict[int, Rotation] = {}
    for rotation in timeline.upcoming(today):
        upcoming_by_unit.setdefault(rotation.unit_id, rotation)

    upcoming: List[Dict[str, Any]] = []
    for unit in units:
        if unit.id in completed_unit_ids or unit.id == current_unit_id:
            continue
        scheduled = upcoming_by_unit.get(unit.id)
        upcoming.append(
            {
                "id": scheduled.id if scheduled else f"upcoming-{intern_id}-{unit.id}",
                "intern_id": intern_id,
                "unit_id": unit.id,
                "unit_name": unit.name,
                "duration_days": unit.duration_days,
                "workload": unit.workload,
                "position": unit.position,
                "start_date": scheduled.start_date.isoformat() if scheduled else None,
                "end_date": scheduled.end_date.isoformat() if scheduled else None,
                "is_manual_assignment": scheduled.is_manual_assignment if scheduled else False,
                "is_dynamic_upcoming": True,
            }
        )

    return {
        "intern": intern_dict(intern),
        "status": status_rules.resolve(intern, timeline, units, today),
        "completed": [rotation_dict(r) for r in completed],
        "current": rotation_dict(current) if current else None,
        "upcoming": upcoming,
        "rotations": [rotation_dict(r) for r in timeline],
    }


# ----------------------------------------------------------------------------
def _clean_intern_payload(payload: Dict[str, Any], *, default_batch: Optional[str] = None) -> Dict[str, Any]:
    name = str(payload.get("name") or "").strip()
    if not 2 <= len(name) <= 100:
        raise ValidationError("Name must be 2-100 characters")
    batch = payload.get("batch") or default_batch
    if batch not in BATCHES:
        raise ValidationError("Batch must be A or B")
    phone = payload.get("phone_number")
    if phone is not None and not isinstance(phone, str):
        raise ValidationError("Phone number must be a string")
    return {
        "name": name,
        "batch": batch,
        "start_date": clock.parse_date(payload.get("start_date"), field="start_date"),
        "phone_number": phone,
    }


def _next_batch() -> str:
    batches = CONFIG["batches"]
    return batches[interns_dao.count_interns() % len(batches)]


def create_intern(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = _clean_intern_payload(payload, default_batch=_next_batch())
    initial_unit_id = payload.get("initial_unit_id")
    initial_unit = None
    if initial_unit_id is not None:
        try:
            initial_unit = units_dao.get_unit(int(initial_unit_id))
        except (TypeError, ValueError) as exc:
            raise ValidationError("initial_unit_id must be a unit id") from exc
        if initial_unit is None:
            raise ValidationError("Invalid unit selected")

    intern_id = interns_dao.create_intern(data)
    logger.info("created intern %s (%s, batch %s)", intern_id, data["name"], data["batch"])
    rotations: List[Rotation] = []

    with intern_lock(intern_id):
        if initial_unit is not None:
            start = data["start_date"]
            end = start + timedelta(days=initial_unit.duration_days - 1)
            rotation_id = rotations_dao.create_rotation(intern_id, initial_unit.id, start, end, manual=True)
            rotations.append(rotations_dao.get_rotation(rotation_id))
        elif settings_dao.auto_generate_on_create():
            rotations = advance.generate_for_new_intern(intern_id, data["start_date"])

    created = _require_intern(intern_id)
    return {
        **intern_dict(created),
        "rotations": [rotation_dict(r) for r in rotations],
        "auto_generated_rotations": initial_unit is None and bool(rotations),
    }


def update_intern(intern_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    current = _require_intern(intern_id)
    data = _clean_intern_payload(
        {
            "name": current.name,
            "batch": current.batch,
            "start_date": current.start_date,
            "phone_number": current.phone_number,
            **payload,
        }
    )
    interns_dao.update_intern(intern_id, data)
    return intern_dict(_require_intern(intern_id))


def delete_intern(intern_id: int) -> None:
    if not interns_dao.delete_intern(intern_id):
        raise NotFoundError(f"Intern {intern_id} not found")


def get_intern(intern_id: int) -> Dict[str, Any]:
    intern = _require_intern(intern_id)
    payload = intern_dict(intern)
    payload["rotations"] = [rotation_dict(r) for r in rotations_dao.timeline_for(intern_id)]
    payload["extensions"] = [asdict(reason) for reason in extensions_dao.list_for_intern(intern_id)]
    return payload


def list_interns(batch: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
    return [intern_dict(intern) for intern in interns_dao.list_interns(batch=batch, status=status)]


# ----------------------------------------------------------------------------
def _clean_dates(start_raw: Any, end_raw: Any):
    start = clock.parse_date(start_raw, field="start_date")
    end = clock.parse_date(end_raw, field="end_date")
    if end < start:
        raise ValidationError("end_date must be on or after start_date")
    return start, end


def create_manual_rotation(intern_id: int, unit_id: int, start_raw: Any, end_raw: Any, today: date | None = None) -> Dict[str, Any]:
    start, end = _clean_dates(start_raw, end_raw)
    intern = _require_intern(intern_id)
    if units_dao.get_unit(unit_id) is None:
        raise NotFoundError(f"Unit {unit_id} not found")

    with intern_lock(intern_id):
        timeline = rotations_dao.timeline_for(intern_id)
        clashes = timeline.overlapping(start, end)
        if clashes:
            raise ConflictError(
                f"Intern {intern_id} has conflicting rotation {clashes[0].id} during {start}..{end}"
            )
        rotation_id = rotations_dao.create_rotation(intern_id, unit_id, start, end, manual=True)
        advance.sync_status(
            intern, rotations_dao.timeline_for(intern_id), units_dao.list_units(), clock.resolve_today(today)
        )
    return rotation_dict(rotations_dao.get_rotation(rotation_id))


def update_rotation(rotation_id: int, payload: Dict[str, Any], today: date | None = None) -> Dict[str, Any]:
    rotation = rotations_dao.get_rotation(rotation_id)
    if rotation is None:
        raise NotFoundError(f"Rotation {rotation_id} not found")
    start, end = _clean_dates(
        payload.get("start_date", rotation.start_date), payload.get("end_date", rotation.end_date)
    )
    try:
        unit_id = int(payload.get("unit_id", rotation.unit_id))
    except (TypeError, ValueError) as exc:
        raise ValidationError("unit_id must be a number") from exc
    if units_dao.get_unit(unit_id) is None:
        raise NotFoundError(f"Unit {unit_id} not found")

    with intern_lock(rotation.intern_id):
        clashes = rotations_dao.timeline_for(rotation.intern_id).overlapping(start, end, exclude_id=rotation_id)
        if clashes:
            raise ConflictError(f"Rotation would overlap rotation {clashes[0].id}")
        rotations_dao.update_rotation(rotation_id, unit_id, start, end)
        intern = _require_intern(rotation.intern_id)
        advance.sync_status(
            intern, rotations_dao.timeline_for(rotation.intern_id), units_dao.list_units(), clock.resolve_today(today)
        )
    return rotation_dict(rotations_dao.get_rotation(rotation_id))


def delete_rotation(rotation_id: int) -> None:
    if not rotations_dao.delete_rotation(rotation_id):
        raise NotFoundError(f"Rotation {rotation_id} not found")
