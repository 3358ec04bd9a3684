"""Next-unit selection for the automatic rotation path."""
from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from domain.models import Rotation, Unit
from domain.timeline import Timeline


def unit_for_offset(units: Sequence[Unit], offset: int) -> Optional[Unit]:
    if not units:
        return None
    return units[offset % len(units)]


def next_unit_after(
    units: Sequence[Unit],
    last_rotation: Rotation,
    timeline: Timeline,
    today: date,
) -> Optional[Unit]:
    """Walk forward from the unit after ``last_rotation`` to the first unit not yet completed.

    Only automatic rotations that ended before ``today`` count as completed.
    Returns ``None`` once every unit is completed; the walk never cycles back.
    """
    if not units:
        return None
    completed = timeline.completed_auto_unit_ids(today)
    if all(unit.id in completed for unit in units):
        return None

    ids = [unit.id for unit in units]
    try:
        anchor = ids.index(last_rotation.unit_id)
    except ValueError:
        # unit was removed from the ordering; walk from the front
        anchor = -1

    count = len(units)
    for step in range(1, count + 1):
        candidate = units[(anchor + step) % count]
        if candidate.id in completed:
            continue
        if candidate.id == last_rotation.unit_id and not last_rotation.is_manual_assignment:
            continue
        return candidate
    return None
