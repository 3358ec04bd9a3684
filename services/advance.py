"""Automatic rotation seeding and day-by-day advancement."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence

from dao import interns_dao, rotations_dao, units_dao
from domain.errors import ConflictError, NotFoundError, StateError, ValidationError
from domain.models import STATUS_COMPLETED, BatchResult, Intern, Rotation, Unit
from domain.timeline import Timeline
from rules import selector, sequence, status as status_rules
from services import clock, counter, db
from services.locks import intern_lock

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def _load_intern(intern_id: int) -> Intern:
    intern = interns_dao.get_intern(intern_id)
    if intern is None:
        raise NotFoundError(f"Intern {intern_id} not found")
    return intern


def next_unit(units: Sequence[Unit], last_rotation: Optional[Rotation], timeline: Timeline, today: date) -> Optional[Unit]:
    """Pick the next automatic unit; a brand-new intern consumes one round-robin offset."""
    if not units:
        return None
    if last_rotation is None:
        return selector.unit_for_offset(units, counter.get_and_increment())
    return selector.next_unit_after(units, last_rotation, timeline, today)


def sync_status(intern: Intern, timeline: Timeline, units: Sequence[Unit], today: date) -> str:
    resolved = status_rules.resolve(intern, timeline, units, today)
    if resolved != intern.status:
        logger.info("intern %s status %s -> %s", intern.id, intern.status, resolved)
        interns_dao.set_status(intern.id, resolved)
        intern.status = resolved
    return resolved


def _seed_first(intern: Intern, units: Sequence[Unit], timeline: Timeline, today: date) -> bool:
    start = max(intern.start_date, today + ONE_DAY)
    unit = next_unit(units, None, timeline, today)
    if unit is None:
        return False
    end = start + timedelta(days=unit.duration_days - 1)
    rotation_id = rotations_dao.create_rotation(intern.id, unit.id, start, end, manual=False)
    logger.info("seeded intern %s with %s %s..%s (rotation %s)", intern.id, unit.name, start, end, rotation_id)
    return True


def advance(intern_id: int, today: date | None = None) -> bool:
    """Create at most one upcoming automatic rotation for ``intern_id``.

    Safe to call repeatedly: once an upcoming rotation exists, or the unit
    cycle is closed, the call changes nothing and returns ``False``.
    """
    today = clock.resolve_today(today)
    intern = _load_intern(intern_id)
    units = units_dao.list_units()
    if not units:
        logger.info("no units configured; nothing to advance for intern %s", intern_id)
        return False

    try:
        timeline = rotations_dao.timeline_for(intern_id)
    except ValidationError as exc:
        logger.warning("skipping intern %s: %s", intern_id, exc)
        return False

    if intern.status == STATUS_COMPLETED:
        # a manual rotation added after completion reopens the schedule
        if sync_status(intern, timeline, units, today) == STATUS_COMPLETED:
            return False

    if not intern.is_schedulable:
        return False

    if not timeline:
        return _seed_first(intern, units, timeline, today)

    if sync_status(intern, timeline, units, today) == STATUS_COMPLETED:
        return False

    if timeline.upcoming(today):
        return False

    latest = timeline.latest_by_end()
    next_start = latest.end_date + ONE_DAY
    if next_start <= today:
        next_start = today + ONE_DAY

    unit = next_unit(units, latest, timeline, today)
    if unit is None:
        logger.debug("intern %s has no unit left to visit", intern_id)
        return False

    next_end = next_start + timedelta(days=unit.duration_days - 1)
    if timeline.overlapping(next_start, next_end):
        logger.warning(
            "not adding %s %s..%s for intern %s: overlaps an existing rotation",
            unit.name, next_start, next_end, intern_id,
        )
        return False

    rotation_id = rotations_dao.create_rotation(intern_id, unit.id, next_start, next_end, manual=False)
    logger.info("advanced intern %s to %s %s..%s (rotation %s)", intern_id, unit.name, next_start, next_end, rotation_id)
    return True


def seed_or_advance(intern_id: int, today: date | None = None) -> dict:
    with intern_lock(intern_id):
        return {"created": advance(intern_id, today)}


def advance_all(today: date | None = None) -> BatchResult:
    today = clock.resolve_today(today)
    result = BatchResult()
    for intern_id in interns_dao.list_schedulable_ids():
        try:
            with intern_lock(intern_id):
                created = advance(intern_id, today)
        except (db.DatabaseError, NotFoundError, ValidationError) as exc:
            logger.exception("advancing intern %s failed", intern_id)
            result.failed.append((intern_id, str(exc)))
            continue
        result.succeeded.append(intern_id)
        if created:
            result.created += 1
    return result


def _insert_planned(intern_id: int, planned) -> List[Rotation]:
    created: List[Rotation] = []
    for item in planned:
        rotation_id = rotations_dao.create_rotation(intern_id, item.unit.id, item.start_date, item.end_date, manual=False)
        created.append(
            Rotation(
                id=rotation_id,
                intern_id=intern_id,
                unit_id=item.unit.id,
                start_date=item.start_date,
                end_date=item.end_date,
                is_manual_assignment=False,
                unit_name=item.unit.name,
            )
        )
    return created


def generate_for_new_intern(intern_id: int, start_date: date | str | None = None) -> List[Rotation]:
    """Persist a full contiguous sequence for an intern without rotation history."""
    with intern_lock(intern_id):
        intern = _load_intern(intern_id)
        if not intern.is_schedulable:
            raise StateError(f"Intern {intern_id} is {intern.status}; no rotations are generated")
        start = clock.parse_date(start_date, field="start_date") if start_date else intern.start_date
        if rotations_dao.timeline_for(intern_id):
            raise ConflictError(f"Intern {intern_id} already has rotations")
        units = units_dao.list_units()
        if not units:
            logger.info("no units configured; intern %s gets no rotations", intern_id)
            return []
        offset = counter.get_and_increment()
        planned = sequence.generate_sequence(units, start, offset=offset, extension_days=intern.extension_days)
        created = _insert_planned(intern_id, planned)
        logger.info("generated %d rotations for intern %s from %s (offset %d)", len(created), intern_id, start, offset)
        return created


def _regenerate(intern: Intern, units: Sequence[Unit], start_date: date) -> int:
    rotations_dao.delete_automatic_from(intern.id, start_date)
    timeline = rotations_dao.timeline_for(intern.id)
    kept_auto = {r.unit_id for r in timeline if not r.is_manual_assignment}
    anchor = max(start_date, intern.start_date)
    latest = timeline.latest_by_end()
    if latest is not None and latest.end_date >= anchor:
        anchor = latest.end_date + ONE_DAY

    offset = counter.get_and_increment()
    remaining = [unit for unit in sequence.rotate_units(units, offset) if unit.id not in kept_auto]
    planned = sequence.generate_sequence(remaining, anchor, extension_days=intern.extension_days)
    return len(_insert_planned(intern.id, planned))


def generate_all(start_date: date | str, today: date | None = None) -> BatchResult:
    """Operator-triggered bulk pass replacing automatic rotations from ``start_date`` on."""
    start = clock.parse_date(start_date, field="start_date")
    units = units_dao.list_units()
    result = BatchResult()
    if not units:
        logger.info("no units configured; bulk generation skipped")
        return result
    for intern_id in interns_dao.list_schedulable_ids():
        try:
            with intern_lock(intern_id):
                intern = _load_intern(intern_id)
                result.created += _regenerate(intern, units, start)
                sync_status(intern, rotations_dao.timeline_for(intern_id), units, clock.resolve_today(today))
        except (db.DatabaseError, NotFoundError, ValidationError) as exc:
            logger.exception("bulk generation failed for intern %s", intern_id)
            result.failed.append((intern_id, str(exc)))
            continue
        result.succeeded.append(intern_id)
    return result
