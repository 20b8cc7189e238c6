from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role, ScopeType
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note: the service layer depends on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""

        raise NotImplementedError

    def list_page(self, *, offset: int, limit: int) -> Sequence[User]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create_user(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        role: Role,
        scope_type: Optional[ScopeType],
        scope_id: Optional[int],
        student_db_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_password(self, user_id: int, password_hash: str) -> None:
        raise NotImplementedError

    def update_role(
        self,
        user_id: int,
        *,
        role: Role,
        scope_type: Optional[ScopeType],
        scope_id: Optional[int],
        student_db_id: Optional[int],
    ) -> None:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError
