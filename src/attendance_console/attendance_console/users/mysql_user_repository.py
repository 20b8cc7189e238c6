from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role, ScopeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, email, full_name, password_hash, role, scope_type, scope_id, student_db_id, is_active, created_at"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        scope_type=ScopeType(row["scope_type"]) if row.get("scope_type") else None,
        scope_id=int(row["scope_id"]) if row.get("scope_id") is not None else None,
        student_db_id=int(row["student_db_id"]) if row.get("student_db_id") is not None else None,
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE LOWER(email)=LOWER(%s)", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_page(self, *, offset: int, limit: int) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users ORDER BY created_at DESC, user_id DESC LIMIT %s OFFSET %s",
                (int(limit), int(offset)),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users")
            row = fetchone(cur)
            return int(row["n"]) if row else 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, full_name, password_hash, role, scope_type, scope_id, student_db_id, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    email,
                    full_name,
                    password_hash,
                    role.value,
                    scope_type.value if scope_type else None,
                    scope_id,
                    student_db_id,
                ),
            )
            return int(cur.lastrowid)

    def update_password(self, user_id: int, password_hash: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(user_id)))

    def update_role(
        self,
        user_id: int,
        *,
        role: Role,
        scope_type: Optional[ScopeType],
        scope_id: Optional[int],
        student_db_id: Optional[int],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET role=%s, scope_type=%s, scope_id=%s, student_db_id=%s WHERE user_id=%s",
                (role.value, scope_type.value if scope_type else None, scope_id, student_db_id, int(user_id)),
            )

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, int(user_id)))
            return cur.rowcount > 0
