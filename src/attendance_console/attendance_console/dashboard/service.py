"""Per-role dashboard summaries.

Admins get totals within their scope, cadres get their classes, students
get their own recent attendance.
"""

from __future__ import annotations

from typing import Optional

from ..access.model import AccessScope
from ..access.resolver import ScopeResolver
from ..attendance.service import AttendanceService
from ..branches.hierarchy import BranchTree
from ..branches.repository import BranchRepository
from ..classes.repository import CadreRepository, ClassRepository, EnrollmentRepository
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role
from ..students.repository import StudentRepository


class DashboardService:
    def __init__(
        self,
        students: StudentRepository,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        cadres: CadreRepository,
        branches: BranchRepository,
        resolver: ScopeResolver,
        attendance_service: AttendanceService,
    ):
        self._students = students
        self._classes = classes
        self._enrollments = enrollments
        self._cadres = cadres
        self._branches = branches
        self._resolver = resolver
        self._attendance = attendance_service

    def summary(self, scope: AccessScope) -> dict:
        if scope.role == Role.CADRE:
            return self.cadre_summary(scope)
        if scope.role == Role.STUDENT:
            return self.student_summary(scope)
        return self.admin_summary(scope)

    def _branch_counts(self, scope: AccessScope, tree: BranchTree) -> tuple[int, int]:
        """(sub-branches, classrooms) visible to a scoped admin."""

        role, scope_id = scope.role, scope.scope_id
        if role == Role.SUPER_ADMIN:
            return len(tree.sub_branches_of(None)), len(tree.classrooms_of(None))
        if role == Role.STATE_ADMIN:
            return len(tree.sub_branches_of(scope_id)), len(tree.classrooms_of(None, main_branch_id=scope_id))
        if role == Role.BRANCH_ADMIN:
            return 1, len(tree.classrooms_of(scope_id))
        if role == Role.CLASSROOM_ADMIN:
            return 1, 1
        return 0, 0

    def admin_summary(self, scope: AccessScope) -> dict:
        class_ids = self._resolver.allowed_class_ids(scope)
        classes = self._classes.list_classes()
        if class_ids is not None:
            allowed = set(class_ids)
            classes = [c for c in classes if c.id in allowed]

        if class_ids is None:
            student_total = self._students.count()
            cadre_ids = {c.student_id for c in self._cadres.list_all()}
        else:
            student_total = len(self._enrollments.distinct_students(class_ids))
            allowed = set(class_ids)
            cadre_ids = {c.student_id for c in self._cadres.list_all() if c.class_id in allowed}

        tree = BranchTree(self._branches.list_sub_branches(), self._branches.list_classrooms())
        sub_branch_total, classroom_total = self._branch_counts(scope, tree)
        return {
            "role": scope.role,
            "students": student_total,
            "active_classes": len(classes),
            "cadres": len(cadre_ids),
            "sub_branches": sub_branch_total,
            "classrooms": classroom_total,
            "latest_stats": self._attendance.stats(class_ids=class_ids),
        }

    def cadre_summary(self, scope: AccessScope) -> dict:
        class_ids = self._resolver.allowed_class_ids(scope) or []
        classes = self._classes.get_many(class_ids) if class_ids else []
        counts = self._enrollments.counts_by_class([c.id for c in classes]) if classes else {}
        return {
            "role": scope.role,
            "classes": [
                {
                    "class": c,
                    "student_count": counts.get(c.id, 0),
                    "latest_stats": self._attendance.stats(class_id=c.id),
                }
                for c in classes
            ],
            "latest_stats": self._attendance.stats(class_ids=class_ids),
        }

    def student_summary(self, scope: AccessScope, *, limit: Optional[int] = DEFAULT_HISTORY_LIMIT) -> dict:
        if scope.student_db_id is None:
            return {"role": scope.role, "student": None, "records": [], "stats": self._attendance.stats(class_ids=[])}
        return {
            "role": scope.role,
            "student": self._students.get_by_id(scope.student_db_id),
            "records": self._attendance.list_by_student(scope.student_db_id, limit=limit),
            "stats": self._attendance.stats(student_id=scope.student_db_id),
        }
