"""Swapping the unit of a rotation without touching any dates."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Dict, Optional

from dao import rotations_dao, units_dao
from domain.errors import ConflictError, NotFoundError, StateError
from domain.models import Rotation
from services.locks import intern_lock

logger = logging.getLogger(__name__)


def _dedupe_future(intern_id: int, anchor: Rotation, unit_id: int) -> int:
    """Drop automatic rotations of ``unit_id`` after ``anchor`` beyond the first one."""
    timeline = rotations_dao.timeline_for(intern_id)
    anchor = timeline.get(anchor.id) or anchor
    seen = False
    removed = 0
    for rotation in timeline.after(anchor):
        if rotation.unit_id != unit_id:
            continue
        if not seen:
            seen = True
            continue
        if rotation.is_manual_assignment:
            continue
        rotations_dao.delete_rotation(rotation.id)
        removed += 1
        logger.info("removed duplicate rotation %s of unit %s for intern %s", rotation.id, unit_id, intern_id)
    return removed


def reassign_unit(rotation_id: int, new_unit_id: int) -> Dict[str, Optional[int]]:
    """Move rotation ``rotation_id`` to ``new_unit_id`` as a swap.

    A later rotation already holding the new unit takes over the old unit.
    Otherwise the first later rotation does; with no later rotation, a new
    automatic rotation of the old unit is appended after this one.
    """
    rotation = rotations_dao.get_rotation(rotation_id)
    if rotation is None:
        raise NotFoundError(f"Rotation {rotation_id} not found")
    new_unit = units_dao.get_unit(new_unit_id)
    if new_unit is None:
        raise NotFoundError(f"Unit {new_unit_id} not found")

    result: Dict[str, Optional[int]] = {"swapped_with": None, "created": None, "removed": 0}
    old_unit_id = rotation.unit_id
    if old_unit_id == new_unit_id:
        return result

    with intern_lock(rotation.intern_id):
        timeline = rotations_dao.timeline_for(rotation.intern_id)
        rotation = timeline.get(rotation_id) or rotation
        later = timeline.after(rotation)
        holder = next((r for r in later if r.unit_id == new_unit_id), None)
        partner = holder or (later[0] if later else None)

        appended = None
        if partner is None:
            old_unit = units_dao.get_unit(old_unit_id)
            if old_unit is None:
                raise StateError(
                    f"Unit {old_unit_id} no longer exists; rotation {rotation.id} has no later rotation to take it over"
                )
            start = rotation.end_date + timedelta(days=1)
            end = start + timedelta(days=old_unit.duration_days - 1)
            if timeline.overlapping(start, end, exclude_id=rotation.id):
                raise ConflictError(
                    f"Appending {old_unit.name} {start}..{end} would overlap an existing rotation"
                )
            appended = (old_unit, start, end)

        rotations_dao.update_unit(rotation.id, new_unit_id)
        if partner is not None:
            rotations_dao.update_unit(partner.id, old_unit_id)
            result["swapped_with"] = partner.id
            logger.info(
                "intern %s: rotation %s -> unit %s, rotation %s -> unit %s",
                rotation.intern_id, rotation.id, new_unit_id, partner.id, old_unit_id,
            )
        elif appended is not None:
            old_unit, start, end = appended
            result["created"] = rotations_dao.create_rotation(
                rotation.intern_id, old_unit_id, start, end, manual=False
            )
            logger.info(
                "intern %s: appended %s %s..%s after reassigning rotation %s",
                rotation.intern_id, old_unit.name, start, end, rotation.id,
            )

        result["removed"] = _dedupe_future(rotation.intern_id, rotation, old_unit_id)
    return result
