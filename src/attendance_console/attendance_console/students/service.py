from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local, parse_date_field
from ..common.validators import optional_int, optional_str, require_non_empty
from ..core.constants import MIN_BIRTH_YEAR
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import STUDENT_FIELD_ALIASES, STUDENT_FIELDS, Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

REQUIRED_ON_CREATE = {
    "student_id": "Student ID",
    "chinese_name": "Chinese name",
    "english_name": "English name",
    "gender": "Gender",
    "phone": "Phone",
    "date_of_joining": "Date of joining",
    "state": "State",
    "postcode": "Postcode",
    "year_of_birth": "Year of birth",
    "emergency_contact_name": "Emergency contact name",
    "emergency_contact_number": "Emergency contact number",
}


class StudentService:
    """Use cases: maintain the student registry."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def list_students(self) -> Sequence[Student]:
        return self._students.list_all()

    def search(self, query: str) -> Sequence[Student]:
        query = (query or "").strip()
        if not query:
            return self._students.list_all()
        return self._students.search(query)

    def get(self, student_db_id: int) -> Student:
        student = self._students.get_by_id(int(student_db_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def get_by_code(self, student_code: str) -> Student:
        student = self._students.get_by_code(require_non_empty(student_code, "Student ID"))
        if not student:
            raise NotFoundError("Student not found")
        return student

    @staticmethod
    def normalize_payload(payload: dict[str, Any]) -> dict[str, Any]:
        """Map alias field names and coerce types; unknown keys are dropped."""

        data: dict[str, Any] = {}
        for key, value in payload.items():
            col = STUDENT_FIELD_ALIASES.get(key, key)
            if col not in STUDENT_FIELDS:
                continue
            # The stored column wins over an alias when both are sent.
            if col in data and key != col:
                continue
            data[col] = value

        out: dict[str, Any] = {}
        for col, value in data.items():
            if col == "date_of_joining":
                out[col] = parse_date_field(value, "Date of joining")
            elif col == "year_of_birth":
                out[col] = optional_int(value, "Year of birth")
            else:
                out[col] = optional_str(value)
        return out

    def _validate(self, data: dict[str, Any], *, current: Optional[Student] = None) -> None:
        year = data.get("year_of_birth")
        if year is not None and not (MIN_BIRTH_YEAR <= year <= now_local().year):
            raise ValidationError(f"Year of birth must be between {MIN_BIRTH_YEAR} and {now_local().year}")

        code = data.get("student_id")
        if code is not None:
            other = self._students.get_by_code(code)
            if other and (current is None or other.id != current.id):
                raise ConflictError("Student ID already exists")

        english_name = data.get("english_name", current.english_name if current else None)
        postcode = data.get("postcode", current.postcode if current else None)
        year = data.get("year_of_birth", current.year_of_birth if current else None)
        if english_name and postcode and year:
            other = self._students.find_identity(english_name=english_name, postcode=postcode, year_of_birth=year)
            if other and (current is None or other.id != current.id):
                raise ConflictError("A student with the same English name, postcode and year of birth already exists")

    def create_student(self, payload: dict[str, Any]) -> Student:
        data = self.normalize_payload(payload)
        for col, label in REQUIRED_ON_CREATE.items():
            if data.get(col) in (None, ""):
                raise ValidationError(f"{label} is required")

        self._validate(data)
        new_id = self._students.create(data)
        logger.info("Created student %s (id=%s)", data["student_id"], new_id)
        return self.get(new_id)

    def update_student(self, student_db_id: int, payload: dict[str, Any]) -> Student:
        current = self.get(student_db_id)
        data = self.normalize_payload(payload)
        if "student_id" in data and not data["student_id"]:
            raise ValidationError("Student ID is required")

        self._validate(data, current=current)
        self._students.update(current.id, data)
        logger.info("Updated student id=%s fields=%s", current.id, sorted(data))
        return self.get(current.id)

    def delete_student(self, student_db_id: int) -> None:
        student = self.get(student_db_id)
        if not self._students.delete(student.id):
            raise ValidationError("Failed to delete student")
        logger.info("Deleted student %s (id=%s)", student.student_id, student.id)
