"""Per-intern rotation timeline used across rules and services."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Iterator, List, Optional, Sequence, Set

from domain.models import Rotation


class Timeline(Sequence[Rotation]):
    """Rotations of one intern ordered by start date, then id."""

    def __init__(self, rotations: Iterable[Rotation] | None = None) -> None:
        self._rows: List[Rotation] = sorted(rotations or (), key=lambda r: (r.start_date, r.id))

    # -- Sequence protocol -------------------------------------------------------
    def __getitem__(self, index):  # type: ignore[override]
        return self._rows[index]

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Rotation]:
        return iter(self._rows)

    # -- Views relative to a calendar day ----------------------------------------
    def completed(self, today: date) -> List[Rotation]:
        return [r for r in self._rows if r.end_date < today]

    def current(self, today: date) -> Optional[Rotation]:
        covering = [r for r in self._rows if r.covers(today)]
        if not covering:
            return None
        return max(covering, key=lambda r: (r.start_date, r.id))

    def upcoming(self, today: date) -> List[Rotation]:
        return [r for r in self._rows if r.start_date > today]

    def has_current_or_future(self, today: date) -> bool:
        return any(r.end_date >= today for r in self._rows)

    def completed_auto_unit_ids(self, today: date) -> Set[int]:
        return {r.unit_id for r in self._rows if not r.is_manual_assignment and r.end_date < today}

    def latest_by_end(self) -> Optional[Rotation]:
        if not self._rows:
            return None
        return max(self._rows, key=lambda r: (r.end_date, r.start_date, r.id))

    # -- Lookups ------------------------------------------------------------------
    def for_unit(self, unit_id: int) -> List[Rotation]:
        return [r for r in self._rows if r.unit_id == unit_id]

    def after(self, rotation: Rotation) -> List[Rotation]:
        """Rotations that start later than ``rotation`` (excluding itself)."""
        return [r for r in self._rows if r.id != rotation.id and r.start_date > rotation.start_date]

    def overlapping(self, start: date, end: date, *, exclude_id: Optional[int] = None) -> List[Rotation]:
        return [r for r in self._rows if r.id != exclude_id and r.overlaps(start, end)]

    def get(self, rotation_id: int) -> Optional[Rotation]:
        for row in self._rows:
            if row.id == rotation_id:
                return row
        return None
