"""Resizing an intern's schedule when the extension total changes."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from config import CONFIG
from dao import extensions_dao, interns_dao, rotations_dao, units_dao
from domain.errors import NotFoundError, ValidationError
from domain.models import ExtensionResult, Rotation
from domain.timeline import Timeline
from rules import status as status_rules
from services import clock, db
from services.locks import intern_lock

logger = logging.getLogger(__name__)


def _validate(new_extension_days, reason: str) -> int:
    try:
        days = int(new_extension_days)
    except (TypeError, ValueError) as exc:
        raise ValidationError("extension_days must be an integer") from exc
    if isinstance(new_extension_days, bool) or days < 0 or days > CONFIG["max_extension_days"]:
        raise ValidationError(f"extension_days must be between 0 and {CONFIG['max_extension_days']}")
    if reason not in CONFIG["extension_reasons"]:
        raise ValidationError(f"Invalid extension reason {reason!r}")
    return days


def find_target(
    timeline: Timeline,
    today: date,
    unit_id: Optional[int] = None,
    grace_days: Optional[int] = None,
) -> Optional[Rotation]:
    """Pick the rotation an extension applies to.

    With ``unit_id``: the latest rotation of that unit that has started,
    else its latest one. Without: the rotation covering today, else the most
    recently ended one within the grace window.
    """
    if unit_id is not None:
        candidates = timeline.for_unit(unit_id)
        if not candidates:
            return None
        started = [r for r in candidates if r.start_date <= today]
        pool = started or candidates
        return max(pool, key=lambda r: (r.start_date, r.id))

    current = timeline.current(today)
    if current is not None:
        return current

    grace = CONFIG["extension_grace_days"] if grace_days is None else grace_days
    window_start = today - timedelta(days=grace)
    recent = [r for r in timeline.completed(today) if r.end_date >= window_start]
    if not recent:
        return None
    return max(recent, key=lambda r: (r.end_date, r.id))


def _shift(rotation: Rotation, delta: int) -> None:
    days = timedelta(days=delta)
    attempts = CONFIG["shift_attempts"]
    for attempt in range(1, attempts + 1):
        try:
            rotations_dao.update_dates(rotation.id, rotation.start_date + days, rotation.end_date + days)
            return
        except db.DatabaseError:
            if attempt == attempts:
                logger.exception("could not shift rotation %s by %+d days", rotation.id, delta)
                raise


def shift_following(timeline: Timeline, resized: Rotation, original_end: date, delta: int) -> int:
    """Move every rotation starting after ``original_end`` by ``delta`` days."""
    boundary = original_end + timedelta(days=1)
    shifted = 0
    for rotation in timeline:
        if rotation.id == resized.id or rotation.start_date < boundary:
            continue
        try:
            _shift(rotation, delta)
        except db.DatabaseError:
            continue
        shifted += 1
    return shifted


def apply_extension(
    intern_id: int,
    new_extension_days: int,
    reason: str = "other",
    notes: Optional[str] = None,
    unit_id: Optional[int] = None,
    today: date | None = None,
    grace_days: Optional[int] = None,
) -> ExtensionResult:
    new_days = _validate(new_extension_days, reason)
    today = clock.resolve_today(today)

    with intern_lock(intern_id):
        intern = interns_dao.get_intern(intern_id)
        if intern is None:
            raise NotFoundError(f"Intern {intern_id} not found")
        units = units_dao.list_units()
        delta = new_days - intern.extension_days
        intern.extension_days = new_days

        if delta == 0:
            timeline = rotations_dao.timeline_for(intern_id)
            status = status_rules.resolve(intern, timeline, units, today)
            interns_dao.set_extension(intern_id, new_days, status)
            return ExtensionResult(delta=0, status=status)

        timeline = rotations_dao.timeline_for(intern_id)
        target = find_target(timeline, today, unit_id=unit_id, grace_days=grace_days)
        resized: Optional[Rotation] = None
        shifted = 0
        warning: Optional[str] = None

        if target is None:
            if unit_id is not None:
                warning = f"No rotation for unit {unit_id} found for intern {intern_id}; schedule left unchanged"
            else:
                warning = f"No current or recently ended rotation for intern {intern_id}; schedule left unchanged"
            logger.warning("%s", warning)
        else:
            original_end = target.end_date
            new_end = original_end + timedelta(days=delta)
            if new_end < target.start_date:
                raise ValidationError(
                    f"Reducing by {-delta} days would end rotation {target.id} before it starts"
                )
            rotations_dao.update_dates(target.id, target.start_date, new_end, manual=True)
            shifted = shift_following(timeline, target, original_end, delta)
            resized = Rotation(
                id=target.id,
                intern_id=target.intern_id,
                unit_id=target.unit_id,
                start_date=target.start_date,
                end_date=new_end,
                is_manual_assignment=True,
                unit_name=target.unit_name,
            )
            logger.info(
                "intern %s: rotation %s resized %s -> %s, %d following rotations shifted by %+d days",
                intern_id, target.id, original_end, new_end, shifted, delta,
            )

        extensions_dao.record(intern_id, delta, reason, notes)
        status = status_rules.resolve(intern, rotations_dao.timeline_for(intern_id), units, today)
        interns_dao.set_extension(intern_id, new_days, status)
        return ExtensionResult(delta=delta, status=status, resized_rotation=resized, shifted=shifted, warning=warning)
