from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_time, update_clause
from .model import CLASS_FIELDS, ClassInfo
from .repository import ClassRepository


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _to_class(r: dict) -> ClassInfo:
    return ClassInfo(
        id=int(r["id"]),
        name=r["name"],
        category=r.get("category"),
        level=r.get("level"),
        manage_by_sub_branch_id=_opt_int(r.get("manage_by_sub_branch_id")),
        manage_by_classroom_id=_opt_int(r.get("manage_by_classroom_id")),
        day_of_week=r.get("day_of_week"),
        class_start_date=r.get("class_start_date"),
        class_start_time=normalize_mysql_time(r.get("class_start_time")),
        class_end_time=normalize_mysql_time(r.get("class_end_time")),
        is_archived=bool(r.get("is_archived", 0)),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _query(self, sql: str, params: tuple = ()) -> list[ClassInfo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_to_class(r) for r in fetchall(cur)]

    def list_classes(self, *, include_archived: bool = False) -> Sequence[ClassInfo]:
        where = "" if include_archived else "WHERE is_archived=0"
        return self._query(f"SELECT * FROM classes {where} ORDER BY created_at DESC, id DESC")

    def list_archived(self) -> Sequence[ClassInfo]:
        return self._query("SELECT * FROM classes WHERE is_archived=1 ORDER BY updated_at DESC, id DESC")

    def get_by_id(self, class_id: int) -> Optional[ClassInfo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM classes WHERE id=%s", (int(class_id),))
            r = fetchone(cur)
            return _to_class(r) if r else None

    def get_many(self, class_ids: Sequence[int]) -> Sequence[ClassInfo]:
        if not class_ids:
            return []
        placeholders, params = in_clause([int(i) for i in class_ids])
        return self._query(f"SELECT * FROM classes WHERE id IN {placeholders} ORDER BY name", params)

    def search(self, query: str) -> Sequence[ClassInfo]:
        return self._query(
            "SELECT * FROM classes WHERE name LIKE %s ORDER BY created_at DESC, id DESC",
            (f"%{query}%",),
        )

    def list_by_sub_branch(self, sub_branch_id: int) -> Sequence[ClassInfo]:
        return self._query(
            "SELECT * FROM classes WHERE manage_by_sub_branch_id=%s ORDER BY created_at DESC, id DESC",
            (int(sub_branch_id),),
        )

    def create(self, fields: dict[str, Any]) -> int:
        cols = [c for c in CLASS_FIELDS if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO classes({', '.join(cols)}) VALUES({', '.join(['%s'] * len(cols))})",
                tuple(fields[c] for c in cols),
            )
            return int(cur.lastrowid)

    def update(self, class_id: int, changes: dict[str, Any]) -> None:
        set_sql, params = update_clause(changes, CLASS_FIELDS)
        if not set_sql:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE classes SET {set_sql}, updated_at=CURRENT_TIMESTAMP WHERE id=%s",
                (*params, int(class_id)),
            )

    def set_archived(self, class_id: int, *, archived: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE classes SET is_archived=%s, updated_at=CURRENT_TIMESTAMP WHERE id=%s",
                (1 if archived else 0, int(class_id)),
            )
            return cur.rowcount > 0

    def delete(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_enrollments WHERE class_id=%s", (int(class_id),))
            cur.execute("DELETE FROM class_cadres WHERE class_id=%s", (int(class_id),))
            cur.execute("DELETE FROM classes WHERE id=%s", (int(class_id),))
            return cur.rowcount > 0
