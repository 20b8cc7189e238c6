from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..classes.repository import ClassRepository, EnrollmentRepository
from ..common.validators import optional_int, optional_str, require_non_empty
from ..core.enums import Region
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .hierarchy import BranchTree, FilterSelection
from .model import CLASSROOM_FIELDS, MAIN_BRANCH_FIELDS, SUB_BRANCH_FIELDS, Classroom, MainBranch, SubBranch
from .repository import BranchRepository

logger = logging.getLogger(__name__)


class BranchService:
    """Use cases: maintain main branches, sub-branches and classrooms."""

    def __init__(
        self,
        branches: BranchRepository,
        students: StudentRepository,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
    ):
        self._branches = branches
        self._students = students
        self._classes = classes
        self._enrollments = enrollments

    # ---- hierarchy ----

    def tree(self) -> BranchTree:
        return BranchTree(self._branches.list_sub_branches(), self._branches.list_classrooms())

    def options(self, selection: FilterSelection) -> dict:
        tree = self.tree()
        data = tree.options(selection)
        data["main_branches"] = list(self._branches.list_main_branches())
        return data

    # ---- shared checks ----

    def _person_in_charge(self, value: Any) -> Optional[int]:
        student_db_id = optional_int(value, "Person in charge")
        if student_db_id is not None and not self._students.get_by_id(student_db_id):
            raise ValidationError("Person in charge must be an existing student")
        return student_db_id

    def _person_view(self, student_db_id: Optional[int]) -> dict:
        student = self._students.get_by_id(student_db_id) if student_db_id else None
        if not student:
            return {"person_in_charge_name": None, "person_in_charge_code": None, "person_in_charge_phone": None}
        return {
            "person_in_charge_name": student.display_name,
            "person_in_charge_code": student.student_id,
            "person_in_charge_phone": student.phone,
        }

    def _normalize(self, payload: dict[str, Any], allowed: Sequence[str], *, creating: bool) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for col in allowed:
            if col not in payload:
                continue
            value = payload[col]
            if col == "name":
                data[col] = require_non_empty(value, "Name")
            elif col == "person_in_charge":
                data[col] = self._person_in_charge(value)
            elif col == "region":
                region = optional_str(value)
                try:
                    data[col] = Region(region).value if region else None
                except ValueError:
                    raise ValidationError("Region must be one of " + ", ".join(r.value for r in Region))
            elif col in ("main_branch_id", "sub_branch_id"):
                data[col] = optional_int(value, col)
            else:
                data[col] = optional_str(value)
        if creating and not data.get("name"):
            raise ValidationError("Name is required")
        return data

    # ---- main branches ----

    def list_main_branches(self) -> Sequence[MainBranch]:
        return self._branches.list_main_branches()

    def get_main_branch(self, main_branch_id: int) -> MainBranch:
        branch = self._branches.get_main_branch(int(main_branch_id))
        if not branch:
            raise NotFoundError("Main branch not found")
        return branch

    def main_branch_detail(self, main_branch_id: int) -> dict:
        branch = self.get_main_branch(main_branch_id)
        tree = self.tree()
        sub_branches = tree.sub_branches_of(branch.id)
        classes = tree.classes_under(self._classes.list_classes(), FilterSelection(main_branch_id=branch.id))
        class_ids = [c.id for c in classes]
        return {
            "main_branch": branch,
            **self._person_view(branch.person_in_charge),
            "sub_branches": sub_branches,
            "sub_branch_count": len(sub_branches),
            "class_count": len(classes),
            "student_count": len(self._enrollments.distinct_students(class_ids)),
        }

    def create_main_branch(self, payload: dict[str, Any]) -> MainBranch:
        data = self._normalize(payload, MAIN_BRANCH_FIELDS, creating=True)
        new_id = self._branches.create_main_branch(data)
        logger.info("Created main branch %s (id=%s)", data["name"], new_id)
        return self.get_main_branch(new_id)

    def update_main_branch(self, main_branch_id: int, payload: dict[str, Any]) -> MainBranch:
        branch = self.get_main_branch(main_branch_id)
        data = self._normalize(payload, MAIN_BRANCH_FIELDS, creating=False)
        self._branches.update_main_branch(branch.id, data)
        logger.info("Updated main branch id=%s fields=%s", branch.id, sorted(data))
        return self.get_main_branch(branch.id)

    def delete_main_branch(self, main_branch_id: int) -> None:
        branch = self.get_main_branch(main_branch_id)
        if self.tree().sub_branches_of(branch.id):
            raise ConflictError("Main branch still has sub-branches")
        self._branches.delete_main_branch(branch.id)
        logger.info("Deleted main branch %s (id=%s)", branch.name, branch.id)

    # ---- sub-branches ----

    def list_sub_branches(self, query: str = "", main_branch_id: Optional[int] = None) -> Sequence[SubBranch]:
        query = (query or "").strip()
        items = self._branches.search_sub_branches(query) if query else self._branches.list_sub_branches()
        if main_branch_id is not None:
            items = [sb for sb in items if sb.main_branch_id == main_branch_id]
        return items

    def get_sub_branch(self, sub_branch_id: int) -> SubBranch:
        sub_branch = self._branches.get_sub_branch(int(sub_branch_id))
        if not sub_branch:
            raise NotFoundError("Sub-branch not found")
        return sub_branch

    def sub_branch_detail(self, sub_branch_id: int) -> dict:
        sub_branch = self.get_sub_branch(sub_branch_id)
        tree = self.tree()
        classes = tree.classes_under(self._classes.list_classes(), FilterSelection(sub_branch_id=sub_branch.id))
        class_ids = [c.id for c in classes]
        main_branch = (
            self._branches.get_main_branch(sub_branch.main_branch_id) if sub_branch.main_branch_id else None
        )
        return {
            "sub_branch": sub_branch,
            "main_branch_name": main_branch.name if main_branch else None,
            **self._person_view(sub_branch.person_in_charge),
            "classrooms": tree.classrooms_of(sub_branch.id),
            "classes": classes,
            "class_count": len(classes),
            "student_count": len(self._enrollments.distinct_students(class_ids)),
        }

    def _check_main_branch(self, main_branch_id: Optional[int]) -> None:
        if main_branch_id is not None and not self._branches.get_main_branch(main_branch_id):
            raise ValidationError("Main branch does not exist")

    def create_sub_branch(self, payload: dict[str, Any]) -> SubBranch:
        data = self._normalize(payload, SUB_BRANCH_FIELDS, creating=True)
        self._check_main_branch(data.get("main_branch_id"))
        new_id = self._branches.create_sub_branch(data)
        logger.info("Created sub-branch %s (id=%s)", data["name"], new_id)
        return self.get_sub_branch(new_id)

    def update_sub_branch(self, sub_branch_id: int, payload: dict[str, Any]) -> SubBranch:
        sub_branch = self.get_sub_branch(sub_branch_id)
        data = self._normalize(payload, SUB_BRANCH_FIELDS, creating=False)
        self._check_main_branch(data.get("main_branch_id"))
        self._branches.update_sub_branch(sub_branch.id, data)
        logger.info("Updated sub-branch id=%s fields=%s", sub_branch.id, sorted(data))
        return self.get_sub_branch(sub_branch.id)

    def delete_sub_branch(self, sub_branch_id: int) -> None:
        sub_branch = self.get_sub_branch(sub_branch_id)
        if self.tree().classrooms_of(sub_branch.id):
            raise ConflictError("Sub-branch still has classrooms")
        if self._classes.list_by_sub_branch(sub_branch.id):
            raise ConflictError("Sub-branch still manages classes")
        self._branches.delete_sub_branch(sub_branch.id)
        logger.info("Deleted sub-branch %s (id=%s)", sub_branch.name, sub_branch.id)

    # ---- classrooms ----

    def list_classrooms(self, query: str = "", sub_branch_id: Optional[int] = None) -> Sequence[Classroom]:
        query = (query or "").strip()
        items = self._branches.search_classrooms(query) if query else self._branches.list_classrooms()
        if sub_branch_id is not None:
            items = [c for c in items if c.sub_branch_id == sub_branch_id]
        return items

    def get_classroom(self, classroom_id: int) -> Classroom:
        classroom = self._branches.get_classroom(int(classroom_id))
        if not classroom:
            raise NotFoundError("Classroom not found")
        return classroom

    def find_classroom_by_name(self, name: Any) -> Optional[Classroom]:
        name = optional_str(name)
        return self._branches.get_classroom_by_name(name) if name else None

    def classroom_detail(self, classroom_id: int) -> dict:
        classroom = self.get_classroom(classroom_id)
        classes = self.tree().classes_under(self._classes.list_classes(), FilterSelection(classroom_id=classroom.id))
        sub_branch = self._branches.get_sub_branch(classroom.sub_branch_id)
        return {
            "classroom": classroom,
            "sub_branch_name": sub_branch.name if sub_branch else None,
            **self._person_view(classroom.person_in_charge),
            "classes": classes,
            "class_count": len(classes),
            "student_count": len(self._enrollments.distinct_students([c.id for c in classes])),
        }

    def _check_sub_branch(self, sub_branch_id: Optional[int]) -> None:
        if sub_branch_id is None:
            raise ValidationError("Sub-branch is required")
        if not self._branches.get_sub_branch(sub_branch_id):
            raise ValidationError("Sub-branch does not exist")

    def save_classroom(self, payload: dict[str, Any]) -> Classroom:
        """Create a classroom, or update the one that already has this name."""

        data = self._normalize(payload, CLASSROOM_FIELDS, creating=True)
        existing = self._branches.get_classroom_by_name(data["name"])
        if existing:
            if "sub_branch_id" in data:
                self._check_sub_branch(data["sub_branch_id"])
            self._branches.update_classroom(existing.id, data)
            logger.info("Updated classroom %s (id=%s) by name", existing.name, existing.id)
            return self.get_classroom(existing.id)

        self._check_sub_branch(data.get("sub_branch_id"))
        new_id = self._branches.create_classroom(data)
        logger.info("Created classroom %s (id=%s)", data["name"], new_id)
        return self.get_classroom(new_id)

    def update_classroom(self, classroom_id: int, payload: dict[str, Any]) -> Classroom:
        classroom = self.get_classroom(classroom_id)
        data = self._normalize(payload, CLASSROOM_FIELDS, creating=False)
        if "sub_branch_id" in data:
            self._check_sub_branch(data["sub_branch_id"])
        if "name" in data:
            other = self._branches.get_classroom_by_name(data["name"])
            if other and other.id != classroom.id:
                raise ConflictError("Classroom name already exists")
        self._branches.update_classroom(classroom.id, data)
        logger.info("Updated classroom id=%s fields=%s", classroom.id, sorted(data))
        return self.get_classroom(classroom.id)

    def delete_classroom(self, classroom_id: int) -> None:
        classroom = self.get_classroom(classroom_id)
        if self.tree().classes_under(self._classes.list_classes(include_archived=True), FilterSelection(classroom_id=classroom.id)):
            raise ConflictError("Classroom still manages classes")
        self._branches.delete_classroom(classroom.id)
        logger.info("Deleted classroom %s (id=%s)", classroom.name, classroom.id)


def selection_from_args(args) -> FilterSelection:
    """Build a FilterSelection from query args where "all"/blank mean no filter."""

    return FilterSelection(
        main_branch_id=optional_int(args.get("main_branch_id"), "main_branch_id"),
        sub_branch_id=optional_int(args.get("sub_branch_id"), "sub_branch_id"),
        classroom_id=optional_int(args.get("classroom_id"), "classroom_id"),
    )
