from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import Invitation


class InvitationRepository(Protocol):
    def create(self, fields: dict[str, Any]) -> int:
        raise NotImplementedError

    def get_by_id(self, invitation_id: int) -> Optional[Invitation]:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[Invitation]:
        raise NotImplementedError

    def list_by_inviter(self, user_id: int) -> Sequence[Invitation]:
        raise NotImplementedError

    def mark_accepted(self, token: str, accepted_at: datetime) -> bool:
        raise NotImplementedError

    def delete(self, invitation_id: int) -> bool:
        raise NotImplementedError
