from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class WeekRange:
    start: date
    end: date
    label: str


@dataclass(frozen=True)
class WeeklyAttendance:
    name: str
    start: date
    end: date
    present: int = 0
    online: int = 0
    leave: int = 0
    absent: int = 0


@dataclass(frozen=True)
class ClassAttendanceTotals:
    class_id: int
    class_name: str
    total: int = 0
    present: int = 0
    online: int = 0
    leave: int = 0
    absent: int = 0
    holiday: int = 0
    attendance_rate: float = 0.0


WEEKLY_CSV_FIELDS = ["name", "start", "end", "present", "online", "leave", "absent"]
