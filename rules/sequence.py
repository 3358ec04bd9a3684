"""Contiguous unit sequences for a single intern."""
from __future__ import annotations

from datetime import date, timedelta
from typing import List, Sequence, TypeVar

from domain.models import PlannedRotation, Unit

T = TypeVar("T")


def rotate_units(units: Sequence[T], offset: int) -> List[T]:
    if not units:
        return list(units)
    offset = offset % len(units)
    return list(units[offset:]) + list(units[:offset])


def generate_sequence(
    units: Sequence[Unit],
    start: date,
    *,
    offset: int = 0,
    extension_days: int = 0,
) -> List[PlannedRotation]:
    """Plan one pass over ``units`` starting at ``start``, then extension cycles.

    The unit order is rotated left by ``offset``. Extension cycles walk the
    same order, each interval capped by the remaining extension budget.
    """
    ordered = rotate_units(units, offset)
    planned: List[PlannedRotation] = []
    day = start
    for unit in ordered:
        end = day + timedelta(days=unit.duration_days - 1)
        planned.append(PlannedRotation(unit=unit, start_date=day, end_date=end))
        day = end + timedelta(days=1)

    remaining = max(int(extension_days or 0), 0)
    while ordered and remaining > 0:
        for unit in ordered:
            if remaining <= 0:
                break
            length = min(unit.duration_days, remaining)
            end = day + timedelta(days=length - 1)
            planned.append(PlannedRotation(unit=unit, start_date=day, end_date=end))
            day = end + timedelta(days=1)
            remaining -= length
    return planned
