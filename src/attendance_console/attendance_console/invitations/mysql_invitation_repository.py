from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..core.enums import Role, ScopeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Invitation
from .repository import InvitationRepository

_FIELDS = ("email", "student_id", "role", "scope_type", "scope_id", "invited_by", "token", "expires_at")


def _to_invitation(r: dict) -> Invitation:
    return Invitation(
        id=int(r["id"]),
        email=r["email"],
        role=Role(r["role"]),
        invited_by=int(r["invited_by"]),
        token=r["token"],
        expires_at=r["expires_at"],
        student_id=r.get("student_id"),
        scope_type=ScopeType(r["scope_type"]) if r.get("scope_type") else None,
        scope_id=int(r["scope_id"]) if r.get("scope_id") is not None else None,
        accepted_at=r.get("accepted_at"),
        created_at=r.get("created_at"),
    )


class MySQLInvitationRepository(InvitationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, fields: dict[str, Any]) -> int:
        cols = [c for c in _FIELDS if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO invitations({', '.join(cols)}) VALUES({', '.join(['%s'] * len(cols))})",
                tuple(fields[c] for c in cols),
            )
            return int(cur.lastrowid)

    def get_by_id(self, invitation_id: int) -> Optional[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM invitations WHERE id=%s", (int(invitation_id),))
            r = fetchone(cur)
            return _to_invitation(r) if r else None

    def get_by_token(self, token: str) -> Optional[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM invitations WHERE token=%s", (token,))
            r = fetchone(cur)
            return _to_invitation(r) if r else None

    def list_by_inviter(self, user_id: int) -> Sequence[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT * FROM invitations WHERE invited_by=%s ORDER BY created_at DESC, id DESC",
                (int(user_id),),
            )
            return [_to_invitation(r) for r in fetchall(cur)]

    def mark_accepted(self, token: str, accepted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE invitations SET accepted_at=%s WHERE token=%s AND accepted_at IS NULL",
                (accepted_at, token),
            )
            return cur.rowcount > 0

    def delete(self, invitation_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM invitations WHERE id=%s", (int(invitation_id),))
            return cur.rowcount > 0
