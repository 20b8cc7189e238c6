"""Who may give which role and scope to an account.

Shared by direct role assignment and by invitations.
"""

from __future__ import annotations

from typing import Any, Optional

from ..access.model import AccessScope
from ..branches.hierarchy import BranchTree
from ..branches.repository import BranchRepository
from ..classes.repository import ClassRepository
from ..common.validators import optional_int, optional_str
from ..core.enums import USER_MANAGER_ROLES, Role, ScopeType
from ..core.exceptions import AuthorizationError, ValidationError


def parse_role(value: Any) -> Role:
    try:
        return Role(optional_str(value) or "")
    except ValueError:
        raise ValidationError("Invalid role")


class RoleAssignmentPolicy:
    def __init__(self, branches: BranchRepository, classes: ClassRepository):
        self._branches = branches
        self._classes = classes

    def _main_branch_of(self, scope_type: ScopeType, scope_id: int) -> Optional[int]:
        """Resolve a scope to its main branch; raises when the scope does not exist."""

        tree = BranchTree(self._branches.list_sub_branches(), self._branches.list_classrooms())
        if scope_type == ScopeType.MAIN_BRANCH:
            if not self._branches.get_main_branch(scope_id):
                raise ValidationError("Main branch does not exist")
            return scope_id
        if scope_type == ScopeType.SUB_BRANCH:
            if not self._branches.get_sub_branch(scope_id):
                raise ValidationError("Sub-branch does not exist")
            return tree.main_branch_of_sub_branch(scope_id)
        if scope_type == ScopeType.CLASSROOM:
            if not self._branches.get_classroom(scope_id):
                raise ValidationError("Classroom does not exist")
            return tree.main_branch_of_sub_branch(tree.sub_branch_of_classroom(scope_id))
        cls = self._classes.get_by_id(scope_id)
        if not cls:
            raise ValidationError("Class does not exist")
        return tree.main_branch_of_class(cls)

    def validate(
        self, requester: AccessScope, role: Any, scope_type: Any = None, scope_id: Any = None
    ) -> tuple[Role, Optional[ScopeType], Optional[int]]:
        """Return the normalized (role, scope_type, scope_id) or raise."""

        if requester.role not in USER_MANAGER_ROLES:
            raise AuthorizationError("You do not have permission to manage accounts")

        role = parse_role(role)
        if role in (Role.SUPER_ADMIN, Role.STATE_ADMIN) and requester.role != Role.SUPER_ADMIN:
            raise AuthorizationError("Only a super admin can assign this role")

        required = role.required_scope
        if required is None:
            return role, None, None

        scope_id = optional_int(scope_id, "Scope")
        raw_type = optional_str(scope_type)
        if scope_id is None or raw_type is None:
            raise ValidationError(f"Role {role.value} requires a {required.value} scope")
        try:
            parsed_type = ScopeType(raw_type)
        except ValueError:
            raise ValidationError("Invalid scope type")
        if parsed_type != required:
            raise ValidationError(f"Role {role.value} requires a {required.value} scope")

        main_branch_id = self._main_branch_of(parsed_type, scope_id)
        if requester.role == Role.STATE_ADMIN and (
            requester.scope_id is None or main_branch_id != int(requester.scope_id)
        ):
            raise AuthorizationError("Cannot assign a scope outside your main branch")
        return role, parsed_type, scope_id
