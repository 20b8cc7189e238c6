from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's attendance for one class session.

    ``student_name`` and ``class_name`` are read-only joins filled by the
    repository for list views.
    """

    id: int
    class_id: int
    student_id: int
    attendance_date: date
    attendance_status: AttendanceStatus
    learning_progress: Optional[str] = None
    lamrin_page: Optional[int] = None
    lamrin_line: Optional[int] = None
    created_at: Optional[datetime] = None
    student_name: Optional[str] = None
    class_name: Optional[str] = None


@dataclass(frozen=True)
class AttendanceStats:
    total: int = 0
    present: int = 0
    online: int = 0
    leave: int = 0
    absent: int = 0
    holiday: int = 0
    attendance_rate: float = 0.0
    latest_date: Optional[date] = None


ATTENDANCE_FIELDS = (
    "class_id",
    "student_id",
    "attendance_date",
    "attendance_status",
    "learning_progress",
    "lamrin_page",
    "lamrin_line",
)
