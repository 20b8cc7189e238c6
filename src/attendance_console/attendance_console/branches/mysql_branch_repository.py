from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import Region
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_clause
from .model import CLASSROOM_FIELDS, MAIN_BRANCH_FIELDS, SUB_BRANCH_FIELDS, Classroom, MainBranch, SubBranch
from .repository import BranchRepository


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _to_main_branch(r: dict) -> MainBranch:
    return MainBranch(
        id=int(r["id"]),
        name=r["name"],
        region=Region(r["region"]) if r.get("region") else None,
        person_in_charge=_opt_int(r.get("person_in_charge")),
        created_at=r.get("created_at"),
    )


def _to_sub_branch(r: dict) -> SubBranch:
    return SubBranch(
        id=int(r["id"]),
        name=r["name"],
        state=r.get("state"),
        address=r.get("address"),
        person_in_charge=_opt_int(r.get("person_in_charge")),
        main_branch_id=_opt_int(r.get("main_branch_id")),
        created_at=r.get("created_at"),
    )


def _to_classroom(r: dict) -> Classroom:
    return Classroom(
        id=int(r["id"]),
        name=r["name"],
        sub_branch_id=int(r["sub_branch_id"]),
        state=r.get("state"),
        address=r.get("address"),
        person_in_charge=_opt_int(r.get("person_in_charge")),
        created_at=r.get("created_at"),
    )


class MySQLBranchRepository(BranchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _insert(self, table: str, allowed: Sequence[str], fields: dict[str, Any]) -> int:
        cols = [c for c in allowed if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO {table}({', '.join(cols)}) VALUES({', '.join(['%s'] * len(cols))})",
                tuple(fields[c] for c in cols),
            )
            return int(cur.lastrowid)

    def _update(self, table: str, allowed: Sequence[str], row_id: int, changes: dict[str, Any]) -> None:
        set_sql, params = update_clause(changes, allowed)
        if not set_sql:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE {table} SET {set_sql} WHERE id=%s", (*params, int(row_id)))

    def _delete(self, table: str, row_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {table} WHERE id=%s", (int(row_id),))
            return cur.rowcount > 0

    def _select(self, sql: str, params: tuple = ()) -> list[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return fetchall(cur)

    def _select_one(self, sql: str, params: tuple = ()) -> Optional[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return fetchone(cur)

    # main branches
    def list_main_branches(self) -> Sequence[MainBranch]:
        rows = self._select("SELECT * FROM main_branches ORDER BY created_at DESC, id DESC")
        return [_to_main_branch(r) for r in rows]

    def get_main_branch(self, main_branch_id: int) -> Optional[MainBranch]:
        r = self._select_one("SELECT * FROM main_branches WHERE id=%s", (int(main_branch_id),))
        return _to_main_branch(r) if r else None

    def create_main_branch(self, fields: dict[str, Any]) -> int:
        return self._insert("main_branches", MAIN_BRANCH_FIELDS, fields)

    def update_main_branch(self, main_branch_id: int, changes: dict[str, Any]) -> None:
        self._update("main_branches", MAIN_BRANCH_FIELDS, main_branch_id, changes)

    def delete_main_branch(self, main_branch_id: int) -> bool:
        return self._delete("main_branches", main_branch_id)

    # sub-branches
    def list_sub_branches(self) -> Sequence[SubBranch]:
        rows = self._select("SELECT * FROM sub_branches ORDER BY created_at DESC, id DESC")
        return [_to_sub_branch(r) for r in rows]

    def get_sub_branch(self, sub_branch_id: int) -> Optional[SubBranch]:
        r = self._select_one("SELECT * FROM sub_branches WHERE id=%s", (int(sub_branch_id),))
        return _to_sub_branch(r) if r else None

    def search_sub_branches(self, query: str) -> Sequence[SubBranch]:
        rows = self._select(
            "SELECT * FROM sub_branches WHERE name LIKE %s ORDER BY created_at DESC, id DESC",
            (f"%{query}%",),
        )
        return [_to_sub_branch(r) for r in rows]

    def create_sub_branch(self, fields: dict[str, Any]) -> int:
        return self._insert("sub_branches", SUB_BRANCH_FIELDS, fields)

    def update_sub_branch(self, sub_branch_id: int, changes: dict[str, Any]) -> None:
        self._update("sub_branches", SUB_BRANCH_FIELDS, sub_branch_id, changes)

    def delete_sub_branch(self, sub_branch_id: int) -> bool:
        return self._delete("sub_branches", sub_branch_id)

    # classrooms
    def list_classrooms(self) -> Sequence[Classroom]:
        rows = self._select("SELECT * FROM classrooms ORDER BY created_at DESC, id DESC")
        return [_to_classroom(r) for r in rows]

    def get_classroom(self, classroom_id: int) -> Optional[Classroom]:
        r = self._select_one("SELECT * FROM classrooms WHERE id=%s", (int(classroom_id),))
        return _to_classroom(r) if r else None

    def get_classroom_by_name(self, name: str) -> Optional[Classroom]:
        r = self._select_one("SELECT * FROM classrooms WHERE name=%s", (name,))
        return _to_classroom(r) if r else None

    def search_classrooms(self, query: str) -> Sequence[Classroom]:
        rows = self._select(
            "SELECT * FROM classrooms WHERE name LIKE %s ORDER BY created_at DESC, id DESC",
            (f"%{query}%",),
        )
        return [_to_classroom(r) for r in rows]

    def create_classroom(self, fields: dict[str, Any]) -> int:
        return self._insert("classrooms", CLASSROOM_FIELDS, fields)

    def update_classroom(self, classroom_id: int, changes: dict[str, Any]) -> None:
        self._update("classrooms", CLASSROOM_FIELDS, classroom_id, changes)

    def delete_classroom(self, classroom_id: int) -> bool:
        return self._delete("classrooms", classroom_id)
