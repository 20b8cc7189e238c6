"""Resolve an account's scope into the set of classes it may see.

Admins see classes through the branch hierarchy, cadres see the classes in
which their linked student holds a cadre role, and students see the classes
they are enrolled in. ``None`` means unrestricted.
"""

from __future__ import annotations

from typing import Optional

from ..branches.hierarchy import BranchTree, FilterSelection
from ..branches.repository import BranchRepository
from ..classes.repository import CadreRepository, ClassRepository, EnrollmentRepository
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import AccessScope


class ScopeResolver:
    def __init__(
        self,
        branches: BranchRepository,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        cadres: CadreRepository,
    ):
        self._branches = branches
        self._classes = classes
        self._enrollments = enrollments
        self._cadres = cadres

    def _tree(self) -> BranchTree:
        return BranchTree(self._branches.list_sub_branches(), self._branches.list_classrooms())

    def _under(self, selection: FilterSelection) -> list[int]:
        classes = self._classes.list_classes(include_archived=True)
        return [c.id for c in self._tree().classes_under(classes, selection)]

    @staticmethod
    def _check_scope(scope: AccessScope) -> None:
        required = scope.role.required_scope
        if required is not None and (scope.scope_id is None or scope.scope_type != required):
            raise AuthorizationError("Your account has no scope assigned; contact an administrator")

    def allowed_class_ids(self, scope: AccessScope) -> Optional[list[int]]:
        role = scope.role
        if role == Role.SUPER_ADMIN:
            return None

        self._check_scope(scope)
        if role.required_scope is not None:
            if role == Role.STATE_ADMIN:
                return self._under(FilterSelection(main_branch_id=scope.scope_id))
            if role == Role.BRANCH_ADMIN:
                return self._under(FilterSelection(sub_branch_id=scope.scope_id))
            if role == Role.CLASSROOM_ADMIN:
                return self._under(FilterSelection(classroom_id=scope.scope_id))
            return [int(scope.scope_id)]

        if scope.student_db_id is None:
            return []
        if role == Role.CADRE:
            ids: list[int] = []
            for cadre in self._cadres.list_for_student(scope.student_db_id):
                if cadre.class_id not in ids:
                    ids.append(cadre.class_id)
            return ids
        return list(self._enrollments.class_ids_for_student(scope.student_db_id))

    def can_access_class(self, scope: AccessScope, class_id: int) -> bool:
        allowed = self.allowed_class_ids(scope)
        return allowed is None or int(class_id) in allowed

    def ensure_class_access(self, scope: AccessScope, class_id: int) -> None:
        if not self.can_access_class(scope, class_id):
            raise AuthorizationError("You do not have access to this class")

    def unit_in_scope(
        self,
        scope: AccessScope,
        *,
        main_branch_id: Optional[int] = None,
        sub_branch_id: Optional[int] = None,
        classroom_id: Optional[int] = None,
    ) -> bool:
        """Whether a main branch, sub-branch or classroom lies inside an admin's scope.

        The most specific id given is resolved upwards through the hierarchy.
        Class admins, cadres and students own no branch units.
        """

        role = scope.role
        if role == Role.SUPER_ADMIN:
            return True
        if role.required_scope is None:
            return False
        self._check_scope(scope)

        tree = self._tree()
        if classroom_id is not None:
            sub_branch_id = tree.sub_branch_of_classroom(classroom_id)
        if sub_branch_id is not None:
            main_branch_id = tree.main_branch_of_sub_branch(sub_branch_id)

        scope_id = int(scope.scope_id)
        if role == Role.STATE_ADMIN:
            return main_branch_id == scope_id
        if role == Role.BRANCH_ADMIN:
            return sub_branch_id == scope_id
        if role == Role.CLASSROOM_ADMIN:
            return classroom_id == scope_id
        return False

    def ensure_unit_access(self, scope: AccessScope, **unit: Optional[int]) -> None:
        if not self.unit_in_scope(scope, **unit):
            raise AuthorizationError("This is outside your scope")

    def can_access_student(self, scope: AccessScope, student_db_id: int) -> bool:
        """Students enrolled in an allowed class, or in no class yet."""

        allowed = self.allowed_class_ids(scope)
        if allowed is None:
            return True
        enrolled = self._enrollments.class_ids_for_student(int(student_db_id))
        return not enrolled or bool(set(enrolled) & set(allowed))

    def ensure_student_access(self, scope: AccessScope, student_db_id: int) -> None:
        if not self.can_access_student(scope, student_db_id):
            raise AuthorizationError("You do not have access to this student")
