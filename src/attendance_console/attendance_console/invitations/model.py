from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role, ScopeType


@dataclass(frozen=True)
class Invitation:
    """An onboarding link: whoever holds the token may create the account."""

    id: int
    email: str
    role: Role
    invited_by: int
    token: str
    expires_at: datetime
    student_id: Optional[str] = None
    scope_type: Optional[ScopeType] = None
    scope_id: Optional[int] = None
    accepted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_valid(self, now: datetime) -> bool:
        """Not accepted yet and not expired."""
        return self.accepted_at is None and self.expires_at > now
