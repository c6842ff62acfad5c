from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum
from typing import NamedTuple, Optional


class TagType(IntEnum):
    """Per-day attendance classifications used by HRMS."""

    PRESENT = 1
    ABSENT = 3
    WEEKLY_OFF = 5
    HOLIDAY = 7
    LEAVE = 9


class MonthKey(NamedTuple):
    month: int
    year: int


@dataclass(frozen=True)
class DailyStatus:
    tag_type: Optional[int]
    tag_name: str = ""


@dataclass(frozen=True)
class DayAttendance:
    day: date
    statuses: tuple = ()


@dataclass(frozen=True)
class MonthPayload:
    """One month of the remote summary, normalised to a total shape."""

    month: int
    year: int
    days: tuple = ()
    counts: dict = field(default_factory=dict)


@dataclass(frozen=True)
class MonthlySummary:
    month: int
    year: int
    present: int = 0
    absent: int = 0
    leave: int = 0
    holiday: int = 0
    weekly_off: int = 0
    payable_days: float = 0.0
    regularization_count: int = 0


COUNT_FIELDS = (
    "present",
    "absent",
    "leave",
    "holiday",
    "weekly_off",
    "payable_days",
    "regularization_count",
)


@dataclass(frozen=True)
class AbsenceRecord:
    date: str
    status: str

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date)


@dataclass(frozen=True)
class AggregateResult:
    absent_days: tuple
    summary: tuple
    reported_totals: dict = field(default_factory=dict)

    @property
    def total_absent(self) -> int:
        return len(self.absent_days)

    @property
    def reported_absent(self):
        """Absent count as reported by HRMS, which may differ at window edges."""
        return self.reported_totals.get("absent", 0)
