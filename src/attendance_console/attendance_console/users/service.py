from __future__ import annotations

import logging
from typing import Any, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.model import AccessScope
from ..common.pagination import Page
from ..common.validators import optional_str, require_min_length, require_non_empty
from ..core.constants import DEFAULT_USERS_PAGE_SIZE, MIN_PASSWORD_LENGTH
from ..core.enums import Role, ScopeType
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .assignment import RoleAssignmentPolicy
from .menu import menu_for
from .model import SessionUser, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_LOGIN = "Invalid email or password"


class AuthService:
    """Use case: authenticate user (login) and manage one's own password."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError(INVALID_LOGIN)

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError(INVALID_LOGIN)

        logger.info("User %s logged in", user.user_id)
        return SessionUser.from_user(user)

    def refresh(self, user_id: int) -> Optional[SessionUser]:
        """Current session data for a logged-in account; ``None`` once it is gone or deactivated."""

        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            return None
        return SessionUser.from_user(user)

    def change_password(self, user_id: int, current_password: str, new_password: str, confirm_password: str) -> None:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if not current_password or not check_password_hash(user.password_hash, current_password):
            raise ValidationError("Current password is incorrect")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        if new_password != confirm_password:
            raise ValidationError("Password confirmation does not match")
        if new_password == current_password:
            raise ValidationError("New password must be different from the current password")

        self._users.update_password(user.user_id, generate_password_hash(new_password))
        logger.info("User %s changed password", user.user_id)

    @staticmethod
    def menu_for(role: Role) -> list[dict]:
        return menu_for(role)


class UserService:
    """Use case: manage accounts (super admin / state admin)."""

    def __init__(self, users: UserRepository, students: StudentRepository, policy: RoleAssignmentPolicy):
        self._users = users
        self._students = students
        self._policy = policy

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, requester: AccessScope, *, page: int = 1, per_page: int = DEFAULT_USERS_PAGE_SIZE) -> Page[User]:
        if requester.role != Role.SUPER_ADMIN:
            raise AuthorizationError("Only a super admin can list all users")
        per_page = max(1, int(per_page))
        total = self._users.count()
        page = max(1, int(page))
        items = list(self._users.list_page(offset=(page - 1) * per_page, limit=per_page))
        return Page(items=items, page=page, page_size=per_page, total=total)

    def find_by_email(self, requester: AccessScope, email: str) -> User:
        if requester.role not in (Role.SUPER_ADMIN, Role.STATE_ADMIN):
            raise AuthorizationError("You do not have permission to look up users")
        user = self._users.get_by_email(require_non_empty(email, "Email"))
        if not user:
            raise NotFoundError("User not found")
        return user

    def resolve_student_link(self, student_code: Any) -> Optional[int]:
        code = optional_str(student_code)
        if code is None:
            return None
        student = self._students.get_by_code(code)
        if not student:
            raise ValidationError(f"Student {code} not found")
        return student.id

    def assign_role(
        self,
        requester: AccessScope,
        user_id: int,
        role: Any,
        scope_type: Any = None,
        scope_id: Any = None,
        student_code: Any = None,
    ) -> User:
        target = self.get(user_id)
        new_role, new_scope_type, new_scope_id = self._policy.validate(requester, role, scope_type, scope_id)
        if requester.role != Role.SUPER_ADMIN and target.role in (Role.SUPER_ADMIN, Role.STATE_ADMIN):
            raise AuthorizationError("Only a super admin can change this account")
        student_db_id = self.resolve_student_link(student_code)

        self._users.update_role(
            target.user_id,
            role=new_role,
            scope_type=new_scope_type,
            scope_id=new_scope_id,
            student_db_id=student_db_id,
        )
        logger.info(
            "User %s assigned role=%s scope=%s:%s student=%s to user %s",
            requester.user_id,
            new_role.value,
            new_scope_type.value if new_scope_type else None,
            new_scope_id,
            student_db_id,
            target.user_id,
        )
        return self.get(target.user_id)

    def set_active(self, requester: AccessScope, user_id: int, *, is_active: bool) -> User:
        if requester.role != Role.SUPER_ADMIN:
            raise AuthorizationError("Only a super admin can activate or deactivate accounts")
        target = self.get(user_id)
        if target.user_id == requester.user_id and not is_active:
            raise ValidationError("You cannot deactivate your own account")
        self._users.set_active(target.user_id, is_active=is_active)
        logger.info("User %s set active=%s on user %s", requester.user_id, is_active, target.user_id)
        return self.get(target.user_id)

    def create_account(
        self,
        *,
        email: str,
        full_name: str,
        password: str,
        role: Role,
        scope_type: Optional[ScopeType] = None,
        scope_id: Optional[int] = None,
        student_db_id: Optional[int] = None,
    ) -> User:
        email = require_non_empty(email, "Email").lower()
        full_name = require_non_empty(full_name, "Full name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if self._users.get_by_email(email):
            raise ConflictError("An account with this email already exists")

        user_id = self._users.create_user(
            email=email,
            full_name=full_name,
            password_hash=generate_password_hash(password),
            role=role,
            scope_type=scope_type,
            scope_id=scope_id,
            student_db_id=student_db_id,
        )
        logger.info("Created account %s (user_id=%s role=%s)", email, user_id, role.value)
        return self.get(user_id)
