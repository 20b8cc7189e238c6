from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role, ScopeType


@dataclass(frozen=True)
class User:
    """Domain entity: a login account.

    Note: pure data object, no database access here.
    """

    user_id: int
    email: str
    full_name: str
    password_hash: str
    role: Role
    scope_type: Optional[ScopeType] = None
    scope_id: Optional[int] = None
    student_db_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    email: str
    full_name: str
    role: Role
    scope_type: Optional[ScopeType]
    scope_id: Optional[int]
    student_db_id: Optional[int]

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(
            user_id=user.user_id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            scope_type=user.scope_type,
            scope_id=user.scope_id,
            student_db_id=user.student_db_id,
        )

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.full_name,
            "role": self.role.value,
            "scope_type": self.scope_type.value if self.scope_type else None,
            "scope_id": self.scope_id,
            "student_db_id": self.student_db_id,
        }
