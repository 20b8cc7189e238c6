from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, ScopeType


@dataclass(frozen=True)
class AccessScope:
    """What the current account may see: its role plus scope or linked student."""

    role: Role
    scope_type: Optional[ScopeType] = None
    scope_id: Optional[int] = None
    student_db_id: Optional[int] = None
    user_id: Optional[int] = None

    @property
    def is_unrestricted(self) -> bool:
        return self.role == Role.SUPER_ADMIN
