"""Lifecycle status derived from the rotation timeline."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from domain.models import STATUS_ACTIVE, STATUS_COMPLETED, STATUS_EXTENDED, Intern, Rotation, Unit
from domain.timeline import Timeline


def is_cycle_closed(timeline: Timeline, units: Sequence[Unit], today: date) -> bool:
    if not units:
        return False
    completed = timeline.completed_auto_unit_ids(today)
    if any(unit.id not in completed for unit in units):
        return False
    return not timeline.has_current_or_future(today)


def resolve(intern: Intern, rotations: Iterable[Rotation], units: Sequence[Unit], today: date) -> str:
    timeline = rotations if isinstance(rotations, Timeline) else Timeline(rotations)
    # a closed cycle wins over a positive extension total
    if is_cycle_closed(timeline, units, today):
        return STATUS_COMPLETED
    if intern.extension_days > 0:
        return STATUS_EXTENDED
    return STATUS_ACTIVE
