from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Sequence

from ..access.model import AccessScope
from ..common.datetime_utils import now_local
from ..common.validators import optional_str, require_non_empty
from ..core.constants import DEFAULT_INVITATION_DAYS, INVITATION_TOKEN_BYTES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.assignment import RoleAssignmentPolicy
from ..users.model import User
from ..users.repository import UserRepository
from ..users.service import UserService
from .model import Invitation
from .repository import InvitationRepository

logger = logging.getLogger(__name__)


def generate_token() -> str:
    return secrets.token_hex(INVITATION_TOKEN_BYTES)


class InvitationService:
    """Use cases: invite someone by email and let them create their account."""

    def __init__(
        self,
        invitations: InvitationRepository,
        users: UserRepository,
        user_service: UserService,
        policy: RoleAssignmentPolicy,
        *,
        expiry_days: int = DEFAULT_INVITATION_DAYS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._invitations = invitations
        self._users = users
        self._user_service = user_service
        self._policy = policy
        self._expiry_days = int(expiry_days)
        self._clock = clock

    def create(
        self,
        requester: AccessScope,
        *,
        email: Any,
        role: Any,
        scope_type: Any = None,
        scope_id: Any = None,
        student_code: Any = None,
    ) -> Invitation:
        email = require_non_empty(email, "Email").lower()
        if "@" not in email:
            raise ValidationError("Email is not valid")
        new_role, new_scope_type, new_scope_id = self._policy.validate(requester, role, scope_type, scope_id)
        if self._users.get_by_email(email):
            raise ConflictError("An account with this email already exists")

        code = optional_str(student_code)
        if code is not None:
            self._user_service.resolve_student_link(code)

        token = generate_token()
        new_id = self._invitations.create(
            {
                "email": email,
                "student_id": code,
                "role": new_role.value,
                "scope_type": new_scope_type.value if new_scope_type else None,
                "scope_id": new_scope_id,
                "invited_by": requester.user_id,
                "token": token,
                "expires_at": self._clock() + timedelta(days=self._expiry_days),
            }
        )
        logger.info("User %s invited %s as %s (invitation id=%s)", requester.user_id, email, new_role.value, new_id)
        invitation = self._invitations.get_by_id(new_id)
        if not invitation:
            raise NotFoundError("Invitation not found")
        return invitation

    def get_by_token(self, token: str) -> Invitation:
        invitation = self._invitations.get_by_token(require_non_empty(token, "Token"))
        if not invitation:
            raise NotFoundError("Invitation not found")
        return invitation

    def list_by_inviter(self, user_id: int) -> Sequence[Invitation]:
        return self._invitations.list_by_inviter(int(user_id))

    def is_valid(self, invitation: Invitation) -> bool:
        return invitation.is_valid(self._clock())

    def delete(self, requester: AccessScope, invitation_id: int) -> None:
        invitation = self._invitations.get_by_id(int(invitation_id))
        if not invitation:
            raise NotFoundError("Invitation not found")
        if requester.role != Role.SUPER_ADMIN and invitation.invited_by != requester.user_id:
            raise AuthorizationError("You can only delete your own invitations")
        self._invitations.delete(invitation.id)
        logger.info("User %s deleted invitation id=%s", requester.user_id, invitation.id)

    def accept(self, token: str, *, full_name: Any, password: Any, confirm_password: Optional[Any] = None) -> User:
        invitation = self.get_by_token(token)
        if not self.is_valid(invitation):
            raise ValidationError("Invitation has expired or was already used")
        if confirm_password is not None and password != confirm_password:
            raise ValidationError("Password confirmation does not match")

        student_db_id = self._user_service.resolve_student_link(invitation.student_id)
        user = self._user_service.create_account(
            email=invitation.email,
            full_name=full_name,
            password=password or "",
            role=invitation.role,
            scope_type=invitation.scope_type,
            scope_id=invitation.scope_id,
            student_db_id=student_db_id,
        )
        self._invitations.mark_accepted(invitation.token, self._clock())
        logger.info("Invitation id=%s accepted by user %s", invitation.id, user.user_id)
        return user
