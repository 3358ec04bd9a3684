"""Domain dataclasses for intern rotation scheduling."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple

STATUS_ACTIVE = "Active"
STATUS_EXTENDED = "Extended"
STATUS_COMPLETED = "Completed"

BATCHES = ("A", "B")
WORKLOADS = ("Low", "Medium", "High")


@dataclass(frozen=True)
class Unit:
    id: int
    name: str
    duration_days: int
    workload: str = "Medium"
    position: Optional[int] = None
    description: Optional[str] = None


@dataclass
class Intern:
    id: int
    name: str
    start_date: date
    batch: str = "A"
    status: str = STATUS_ACTIVE
    extension_days: int = 0
    phone_number: Optional[str] = None

    @property
    def is_schedulable(self) -> bool:
        return self.status in (STATUS_ACTIVE, STATUS_EXTENDED)


@dataclass
class Rotation:
    id: int
    intern_id: int
    unit_id: int
    start_date: date
    end_date: date
    is_manual_assignment: bool = False
    unit_name: Optional[str] = None

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and start <= self.end_date


@dataclass(frozen=True)
class PlannedRotation:
    """A rotation interval that has not been persisted yet."""

    unit: Unit
    start_date: date
    end_date: date


@dataclass
class ExtensionReason:
    id: int
    intern_id: int
    extension_days: int
    reason: str
    notes: Optional[str]
    created_at: Optional[datetime] = None


@dataclass
class ExtensionResult:
    delta: int
    status: str
    resized_rotation: Optional[Rotation] = None
    shifted: int = 0
    warning: Optional[str] = None


@dataclass
class BatchResult:
    succeeded: List[int] = field(default_factory=list)
    failed: List[Tuple[int, str]] = field(default_factory=list)
    created: int = 0

    def as_dict(self) -> dict:
        return {
            "succeeded": list(self.succeeded),
            "failed": [{"intern_id": intern_id, "error": message} for intern_id, message in self.failed],
            "created": self.created,
        }
