from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..attendance.service import AttendanceService
from ..branches.repository import BranchRepository
from ..common.datetime_utils import parse_date_field, parse_time_field
from ..common.validators import int_list, optional_int, optional_str, require_int, require_non_empty
from ..core.enums import CadreRole
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import ClassCadre, ClassInfo
from .repository import CadreRepository, ClassRepository, EnrollmentRepository

logger = logging.getLogger(__name__)

# Payload keys that replace one cadre role of the class.
CADRE_PAYLOAD_KEYS = {
    "monitor_id": CadreRole.MONITOR,
    "deputy_monitors": CadreRole.DEPUTY_MONITOR,
    "care_officers": CadreRole.CARE_OFFICER,
}


def parse_cadre_role(value: Any) -> CadreRole:
    if isinstance(value, CadreRole):
        return value
    try:
        return CadreRole(str(value or "").strip())
    except ValueError:
        raise ValidationError("Cadre role must be one of " + ", ".join(r.value for r in CadreRole))


class ClassService:
    """Use cases: classes, their enrolled students and their cadres."""

    def __init__(
        self,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        cadres: CadreRepository,
        students: StudentRepository,
        branches: BranchRepository,
        attendance_service: AttendanceService,
    ):
        self._classes = classes
        self._enrollments = enrollments
        self._cadres = cadres
        self._students = students
        self._branches = branches
        self._attendance = attendance_service

    # ---- reads ----

    def list_classes(
        self, *, include_archived: bool = False, class_ids: Optional[Sequence[int]] = None
    ) -> Sequence[ClassInfo]:
        items = self._classes.list_classes(include_archived=include_archived)
        if class_ids is not None:
            allowed = set(class_ids)
            items = [c for c in items if c.id in allowed]
        return items

    def list_archived(self, *, class_ids: Optional[Sequence[int]] = None) -> Sequence[ClassInfo]:
        items = self._classes.list_archived()
        if class_ids is not None:
            allowed = set(class_ids)
            items = [c for c in items if c.id in allowed]
        return items

    def search(self, query: str, *, class_ids: Optional[Sequence[int]] = None) -> Sequence[ClassInfo]:
        query = (query or "").strip()
        if not query:
            return self.list_classes(class_ids=class_ids)
        items = self._classes.search(query)
        if class_ids is not None:
            allowed = set(class_ids)
            items = [c for c in items if c.id in allowed]
        return items

    def list_by_sub_branch(self, sub_branch_id: int) -> Sequence[ClassInfo]:
        return self._classes.list_by_sub_branch(int(sub_branch_id))

    def get(self, class_id: int) -> ClassInfo:
        cls = self._classes.get_by_id(int(class_id))
        if not cls:
            raise NotFoundError("Class not found")
        return cls

    def detail(self, class_id: int) -> dict:
        """Class plus manager names, roster, cadres and attendance summary."""

        cls = self.get(class_id)
        sub_branch = self._branches.get_sub_branch(cls.manage_by_sub_branch_id) if cls.manage_by_sub_branch_id else None
        classroom = self._branches.get_classroom(cls.manage_by_classroom_id) if cls.manage_by_classroom_id else None

        student_ids = list(self._enrollments.student_ids_for_class(cls.id))
        cadres = list(self._cadres.list_for_class(cls.id))
        wanted = set(student_ids) | {c.student_id for c in cadres}
        students = {s.id: s for s in self._students.get_many(sorted(wanted))} if wanted else {}

        def ids_for(role: CadreRole) -> list[int]:
            return [c.student_id for c in cadres if c.role == role]

        def names(ids: Sequence[int]) -> list[str]:
            return [students[i].display_name for i in ids if i in students]

        monitor_ids = ids_for(CadreRole.MONITOR)
        deputy_ids = ids_for(CadreRole.DEPUTY_MONITOR)
        care_ids = ids_for(CadreRole.CARE_OFFICER)
        monitor_names = names(monitor_ids)
        return {
            "class": cls,
            "sub_branch_name": sub_branch.name if sub_branch else None,
            "classroom_name": classroom.name if classroom else None,
            "schedule": cls.schedule_text,
            "student_count": len(student_ids),
            "student_codes": [students[i].student_id for i in student_ids if i in students],
            "monitor_id": monitor_ids[0] if monitor_ids else None,
            "monitor_name": monitor_names[0] if monitor_names else None,
            "deputy_monitors": deputy_ids,
            "deputy_monitor_names": names(deputy_ids),
            "care_officers": care_ids,
            "care_officer_names": names(care_ids),
            "attendance_summary": self._attendance.class_summary(cls.id),
        }

    # ---- create / update ----

    def _normalize(self, payload: dict[str, Any]) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if "name" in payload:
            data["name"] = require_non_empty(payload["name"], "Class name")
        for col in ("category", "level", "day_of_week"):
            if col in payload:
                data[col] = optional_str(payload[col])
        if "manage_by_sub_branch_id" in payload:
            data["manage_by_sub_branch_id"] = optional_int(payload["manage_by_sub_branch_id"], "Sub-branch")
        if "manage_by_classroom_id" in payload:
            data["manage_by_classroom_id"] = optional_int(payload["manage_by_classroom_id"], "Classroom")
        if "class_start_date" in payload:
            data["class_start_date"] = parse_date_field(payload["class_start_date"], "Start date")
        if "class_start_time" in payload:
            data["class_start_time"] = parse_time_field(payload["class_start_time"], "Start time")
        if "class_end_time" in payload:
            data["class_end_time"] = parse_time_field(payload["class_end_time"], "End time")
        return data

    def _check_manager(self, data: dict[str, Any]) -> None:
        sub_branch_id = data.get("manage_by_sub_branch_id")
        classroom_id = data.get("manage_by_classroom_id")
        if sub_branch_id is not None and classroom_id is not None:
            raise ValidationError("A class is managed by a sub-branch or a classroom, not both")
        if sub_branch_id is not None and not self._branches.get_sub_branch(sub_branch_id):
            raise ValidationError("Sub-branch does not exist")
        if classroom_id is not None and not self._branches.get_classroom(classroom_id):
            raise ValidationError("Classroom does not exist")

    @staticmethod
    def managers_after(
        payload: dict[str, Any], current: Optional[ClassInfo] = None
    ) -> tuple[Optional[int], Optional[int]]:
        """(sub-branch id, classroom id) managing the class once ``payload`` is applied."""

        sub_branch_id = current.manage_by_sub_branch_id if current else None
        classroom_id = current.manage_by_classroom_id if current else None
        if "manage_by_sub_branch_id" in payload:
            sub_branch_id = optional_int(payload["manage_by_sub_branch_id"], "Sub-branch")
            if sub_branch_id is not None and "manage_by_classroom_id" not in payload:
                classroom_id = None
        if "manage_by_classroom_id" in payload:
            classroom_id = optional_int(payload["manage_by_classroom_id"], "Classroom")
            if classroom_id is not None and "manage_by_sub_branch_id" not in payload:
                sub_branch_id = None
        return sub_branch_id, classroom_id

    @staticmethod
    def _check_times(data: dict[str, Any], current: Optional[ClassInfo] = None) -> None:
        start = data.get("class_start_time", current.class_start_time if current else None)
        end = data.get("class_end_time", current.class_end_time if current else None)
        if start is not None and end is not None and start >= end:
            raise ValidationError("Start time must be before end time")

    def _member_lists(self, payload: dict[str, Any]) -> dict[str, list[int]]:
        lists: dict[str, list[int]] = {}
        if "monitor_id" in payload:
            monitor = optional_int(payload["monitor_id"], "Monitor")
            lists["monitor_id"] = [monitor] if monitor is not None else []
        for key in ("deputy_monitors", "care_officers", "student_ids"):
            if key in payload:
                lists[key] = int_list(payload[key], key)

        self._check_students({i for ids in lists.values() for i in ids})
        return lists

    def _check_students(self, student_ids) -> None:
        wanted = sorted(set(student_ids))
        if not wanted:
            return
        found = {s.id for s in self._students.get_many(wanted)}
        missing = [i for i in wanted if i not in found]
        if missing:
            raise ValidationError(f"Unknown students: {', '.join(str(i) for i in missing)}")

    def _apply_members(self, class_id: int, lists: dict[str, list[int]]) -> None:
        if "student_ids" in lists:
            self._enrollments.replace(class_id, lists["student_ids"])
        for key, role in CADRE_PAYLOAD_KEYS.items():
            if key in lists:
                self._cadres.replace_role(class_id, role, lists[key])

    def create_class(self, payload: dict[str, Any]) -> ClassInfo:
        data = self._normalize(payload)
        if not data.get("name"):
            raise ValidationError("Class name is required")
        self._check_manager(data)
        self._check_times(data)
        lists = self._member_lists(payload)

        new_id = self._classes.create(data)
        self._apply_members(new_id, lists)
        logger.info("Created class %s (id=%s)", data["name"], new_id)
        return self.get(new_id)

    def update_class(self, class_id: int, payload: dict[str, Any]) -> ClassInfo:
        cls = self.get(class_id)
        data = self._normalize(payload)
        self._check_manager(data)

        # Setting one manager clears the other.
        if data.get("manage_by_sub_branch_id") is not None:
            data["manage_by_classroom_id"] = None
        elif data.get("manage_by_classroom_id") is not None:
            data["manage_by_sub_branch_id"] = None

        self._check_times(data, cls)
        lists = self._member_lists(payload)

        self._classes.update(cls.id, data)
        self._apply_members(cls.id, lists)
        logger.info("Updated class id=%s fields=%s lists=%s", cls.id, sorted(data), sorted(lists))
        return self.get(cls.id)

    def archive_class(self, class_id: int) -> ClassInfo:
        cls = self.get(class_id)
        self._classes.set_archived(cls.id, archived=True)
        logger.info("Archived class id=%s", cls.id)
        return self.get(cls.id)

    def unarchive_class(self, class_id: int) -> ClassInfo:
        cls = self.get(class_id)
        self._classes.set_archived(cls.id, archived=False)
        logger.info("Unarchived class id=%s", cls.id)
        return self.get(cls.id)

    def delete_class(self, class_id: int) -> None:
        cls = self.get(class_id)
        self._classes.delete(cls.id)
        logger.info("Deleted class %s (id=%s)", cls.name, cls.id)

    # ---- enrollment ----

    def list_students(self, class_id: int) -> Sequence[Student]:
        cls = self.get(class_id)
        student_ids = self._enrollments.student_ids_for_class(cls.id)
        return self._students.get_many(student_ids) if student_ids else []

    def _require_student(self, student_db_id: Any) -> Student:
        student = self._students.get_by_id(require_int(student_db_id, "Student"))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def replace_students(self, class_id: int, student_ids: Any) -> Sequence[Student]:
        cls = self.get(class_id)
        lists = self._member_lists({"student_ids": student_ids})
        self._enrollments.replace(cls.id, lists["student_ids"])
        logger.info("Replaced enrollment of class id=%s (%s students)", cls.id, len(lists["student_ids"]))
        return self.list_students(cls.id)

    def add_student(self, class_id: int, student_db_id: Any) -> None:
        cls = self.get(class_id)
        student = self._require_student(student_db_id)
        if self._enrollments.is_enrolled(cls.id, student.id):
            raise ConflictError("Student is already enrolled in this class")
        self._enrollments.add(cls.id, student.id)
        logger.info("Enrolled student id=%s in class id=%s", student.id, cls.id)

    def remove_student(self, class_id: int, student_db_id: Any) -> None:
        cls = self.get(class_id)
        student_db_id = require_int(student_db_id, "Student")
        if not self._enrollments.remove(cls.id, student_db_id):
            raise NotFoundError("Student is not enrolled in this class")
        logger.info("Removed student id=%s from class id=%s", student_db_id, cls.id)

    # ---- cadres ----

    def list_cadres(self, class_id: int) -> Sequence[ClassCadre]:
        cls = self.get(class_id)
        return self._cadres.list_for_class(cls.id)

    def add_cadre(self, class_id: int, student_db_id: Any, role: Any) -> ClassCadre:
        cls = self.get(class_id)
        student = self._require_student(student_db_id)
        role = parse_cadre_role(role)
        current = self._cadres.list_for_class(cls.id)
        if any(c.student_id == student.id and c.role == role for c in current):
            raise ConflictError("Student already holds this role in the class")
        if role == CadreRole.MONITOR and any(c.role == CadreRole.MONITOR for c in current):
            raise ConflictError("This class already has a monitor")
        self._cadres.add(cls.id, student.id, role)
        logger.info("Assigned %s to student id=%s in class id=%s", role.value, student.id, cls.id)
        return ClassCadre(class_id=cls.id, student_id=student.id, role=role)

    def remove_cadre(self, class_id: int, student_db_id: Any, role: Any) -> None:
        cls = self.get(class_id)
        student_db_id = require_int(student_db_id, "Student")
        role = parse_cadre_role(role)
        if not self._cadres.remove(cls.id, student_db_id, role):
            raise NotFoundError("Cadre role not found")
        logger.info("Removed %s from student id=%s in class id=%s", role.value, student_db_id, cls.id)

    def replace_cadres(self, class_id: int, role: Any, student_ids: Any) -> Sequence[ClassCadre]:
        cls = self.get(class_id)
        role = parse_cadre_role(role)
        ids = int_list(student_ids, "student_ids")
        if role == CadreRole.MONITOR and len(ids) > 1:
            raise ValidationError("A class has at most one monitor")
        self._check_students(ids)
        self._cadres.replace_role(cls.id, role, ids)
        logger.info("Replaced %s of class id=%s with %s", role.value, cls.id, ids)
        return self._cadres.list_for_class(cls.id)
