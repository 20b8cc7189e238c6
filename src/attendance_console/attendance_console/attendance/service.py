from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from ..classes.repository import ClassRepository, EnrollmentRepository
from ..common.datetime_utils import parse_date_field
from ..common.validators import optional_int, optional_str, require_int
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .model import AttendanceRecord, AttendanceStats
from .repository import AttendanceRepository
from .stats import summarize

logger = logging.getLogger(__name__)


def parse_status(value: Any) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    code = require_int(value, "Attendance status")
    try:
        return AttendanceStatus(code)
    except ValueError:
        raise ValidationError("Attendance status must be 0 (absent), 1 (present), 2 (online), 3 (leave) or 4 (holiday)")


class AttendanceService:
    """Use cases: record class attendance and compute session statistics."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        students: StudentRepository,
    ):
        self._attendance = attendance
        self._classes = classes
        self._enrollments = enrollments
        self._students = students

    def _require_class(self, class_id: int):
        cls = self._classes.get_by_id(int(class_id))
        if not cls:
            raise NotFoundError("Class not found")
        return cls

    # ---- reads ----

    def list_records(
        self, *, class_ids: Optional[Sequence[int]] = None, limit: Optional[int] = None
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.list_records(class_ids=class_ids, limit=limit)

    def list_by_class(self, class_id: int, attendance_date: Optional[date] = None) -> Sequence[AttendanceRecord]:
        self._require_class(class_id)
        return self._attendance.list_records(class_ids=[int(class_id)], attendance_date=attendance_date)

    def list_by_student(
        self, student_db_id: int, *, limit: Optional[int] = DEFAULT_HISTORY_LIMIT
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.list_records(student_id=int(student_db_id), limit=limit)

    def get(self, record_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(record_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def stats(
        self,
        *,
        class_id: Optional[int] = None,
        student_id: Optional[int] = None,
        class_ids: Optional[Sequence[int]] = None,
    ) -> AttendanceStats:
        """Counts for the latest recorded date matching the filters."""

        if class_id is not None:
            class_ids = [int(class_id)]
        latest = self._attendance.latest_date(class_ids=class_ids, student_id=student_id)
        if latest is None:
            return AttendanceStats()
        records = self._attendance.list_records(class_ids=class_ids, student_id=student_id, attendance_date=latest)
        return summarize(records)

    def roster(self, class_id: int, attendance_date: date) -> list[dict]:
        """Enrolled students merged with their record for the date."""

        self._require_class(class_id)
        student_ids = self._enrollments.student_ids_for_class(int(class_id))
        students = {s.id: s for s in self._students.get_many(student_ids)} if student_ids else {}
        records = {
            r.student_id: r
            for r in self._attendance.list_records(class_ids=[int(class_id)], attendance_date=attendance_date)
        }

        out: list[dict] = []
        for sid in student_ids:
            student = students.get(sid)
            if not student:
                continue
            record = records.get(sid)
            out.append(
                {
                    "student_db_id": student.id,
                    "student_id": student.student_id,
                    "chinese_name": student.chinese_name,
                    "english_name": student.english_name,
                    "has_attendance": record is not None,
                    "attendance_status": record.attendance_status if record else None,
                    "learning_progress": record.learning_progress if record else None,
                    "lamrin_page": record.lamrin_page if record else None,
                    "lamrin_line": record.lamrin_line if record else None,
                }
            )
        return out

    def class_summary(self, class_id: int) -> dict:
        """Latest learning progress plus the latest-session attendance rate."""

        records = self._attendance.list_records(class_ids=[int(class_id)], limit=1)
        latest = records[0] if records else None
        stats = self.stats(class_id=class_id)
        return {
            "latest_date": stats.latest_date,
            "learning_progress": latest.learning_progress if latest else None,
            "lamrin_page": latest.lamrin_page if latest else None,
            "lamrin_line": latest.lamrin_line if latest else None,
            "attendance_rate": stats.attendance_rate,
        }

    # ---- writes ----

    def _progress_fields(self, payload: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if "learning_progress" in payload:
            out["learning_progress"] = optional_str(payload["learning_progress"])
        for col, label in (("lamrin_page", "Lamrin page"), ("lamrin_line", "Lamrin line")):
            if col in payload:
                value = optional_int(payload[col], label)
                if value is not None and value < 0:
                    raise ValidationError(f"{label} must not be negative")
                out[col] = value
        return out

    def _require_enrolled(self, class_id: int, student_db_id: int) -> None:
        if not self._enrollments.is_enrolled(class_id, student_db_id):
            raise ValidationError(f"Student {student_db_id} is not enrolled in this class")

    def create_record(self, payload: dict[str, Any]) -> AttendanceRecord:
        class_id = require_int(payload.get("class_id"), "Class")
        student_db_id = require_int(payload.get("student_id"), "Student")
        attendance_date = parse_date_field(payload.get("attendance_date"), "Attendance date")
        if attendance_date is None:
            raise ValidationError("Attendance date is required")
        status = parse_status(payload.get("attendance_status"))

        self._require_class(class_id)
        self._require_enrolled(class_id, student_db_id)
        if self._attendance.find_one(class_id, student_db_id, attendance_date):
            raise ConflictError("Attendance for this student and date already exists")

        fields = {
            "class_id": class_id,
            "student_id": student_db_id,
            "attendance_date": attendance_date,
            "attendance_status": int(status),
            **self._progress_fields(payload),
        }
        new_id = self._attendance.create(fields)
        logger.info("Recorded attendance class=%s student=%s date=%s", class_id, student_db_id, attendance_date)
        return self.get(new_id)

    def update_record(self, record_id: int, payload: dict[str, Any]) -> AttendanceRecord:
        record = self.get(record_id)
        changes = self._progress_fields(payload)
        if "attendance_status" in payload:
            changes["attendance_status"] = int(parse_status(payload["attendance_status"]))
        if "attendance_date" in payload:
            new_date = parse_date_field(payload["attendance_date"], "Attendance date")
            if new_date is None:
                raise ValidationError("Attendance date is required")
            other = self._attendance.find_one(record.class_id, record.student_id, new_date)
            if other and other.id != record.id:
                raise ConflictError("Attendance for this student and date already exists")
            changes["attendance_date"] = new_date

        self._attendance.update(record.id, changes)
        logger.info("Updated attendance id=%s fields=%s", record.id, sorted(changes))
        return self.get(record.id)

    def delete_record(self, record_id: int) -> None:
        record = self.get(record_id)
        self._attendance.delete(record.id)
        logger.info("Deleted attendance id=%s", record.id)

    def save_sheet(
        self,
        class_id: int,
        attendance_date: date,
        entries: Iterable[dict[str, Any]],
        *,
        learning_progress: Optional[str] = None,
        lamrin_page: Any = None,
        lamrin_line: Any = None,
    ) -> Sequence[AttendanceRecord]:
        """Replace every record of a class on a date with the given sheet."""

        entries = list(entries or [])
        if not entries:
            return []
        if attendance_date is None:
            raise ValidationError("Attendance date is required")
        self._require_class(class_id)

        progress = self._progress_fields(
            {"learning_progress": learning_progress, "lamrin_page": lamrin_page, "lamrin_line": lamrin_line}
        )
        enrolled = set(self._enrollments.student_ids_for_class(int(class_id)))

        rows: list[dict[str, Any]] = []
        seen: set[int] = set()
        for entry in entries:
            if not isinstance(entry, dict):
                raise ValidationError("Each attendance entry must be an object")
            student_db_id = require_int(entry.get("student_id"), "Student")
            if student_db_id in seen:
                raise ValidationError(f"Student {student_db_id} appears more than once")
            if student_db_id not in enrolled:
                raise ValidationError(f"Student {student_db_id} is not enrolled in this class")
            seen.add(student_db_id)
            rows.append(
                {
                    "class_id": int(class_id),
                    "student_id": student_db_id,
                    "attendance_date": attendance_date,
                    "attendance_status": int(parse_status(entry.get("attendance_status"))),
                    **progress,
                }
            )

        self._attendance.replace_sheet(int(class_id), attendance_date, rows)
        logger.info("Saved attendance sheet class=%s date=%s students=%s", class_id, attendance_date, len(rows))
        return self._attendance.list_records(class_ids=[int(class_id)], attendance_date=attendance_date)
