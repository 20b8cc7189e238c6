from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def list_records(
        self,
        *,
        class_ids: Optional[Sequence[int]] = None,
        student_id: Optional[int] = None,
        attendance_date: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records newest date first. ``class_ids=None`` means every class."""

        raise NotImplementedError

    def latest_date(
        self, *, class_ids: Optional[Sequence[int]] = None, student_id: Optional[int] = None
    ) -> Optional[date]:
        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_one(self, class_id: int, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> int:
        raise NotImplementedError

    def update(self, record_id: int, changes: dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, record_id: int) -> bool:
        raise NotImplementedError

    def replace_sheet(self, class_id: int, attendance_date: date, rows: Sequence[dict[str, Any]]) -> None:
        """Delete every record of the class on that date, then insert ``rows``."""

        raise NotImplementedError
