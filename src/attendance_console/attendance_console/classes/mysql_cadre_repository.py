from __future__ import annotations

from typing import Sequence

from ..core.enums import CadreRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ClassCadre
from .repository import CadreRepository


def _to_cadre(r: dict) -> ClassCadre:
    return ClassCadre(class_id=int(r["class_id"]), student_id=int(r["student_id"]), role=CadreRole(r["role"]))


class MySQLCadreRepository(CadreRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _query(self, sql: str, params: tuple = ()) -> list[ClassCadre]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_to_cadre(r) for r in fetchall(cur)]

    def list_for_class(self, class_id: int) -> Sequence[ClassCadre]:
        return self._query(
            "SELECT class_id, student_id, role FROM class_cadres WHERE class_id=%s ORDER BY id",
            (int(class_id),),
        )

    def list_all(self) -> Sequence[ClassCadre]:
        return self._query("SELECT class_id, student_id, role FROM class_cadres ORDER BY id")

    def list_for_student(self, student_db_id: int) -> Sequence[ClassCadre]:
        return self._query(
            "SELECT class_id, student_id, role FROM class_cadres WHERE student_id=%s ORDER BY id",
            (int(student_db_id),),
        )

    def add(self, class_id: int, student_db_id: int, role: CadreRole) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO class_cadres(class_id, student_id, role) VALUES(%s,%s,%s)",
                (int(class_id), int(student_db_id), role.value),
            )

    def remove(self, class_id: int, student_db_id: int, role: CadreRole) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM class_cadres WHERE class_id=%s AND student_id=%s AND role=%s",
                (int(class_id), int(student_db_id), role.value),
            )
            return cur.rowcount > 0

    def replace_role(self, class_id: int, role: CadreRole, student_db_ids: Sequence[int]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_cadres WHERE class_id=%s AND role=%s", (int(class_id), role.value))
            if student_db_ids:
                cur.executemany(
                    "INSERT INTO class_cadres(class_id, student_id, role) VALUES(%s,%s,%s)",
                    [(int(class_id), int(s), role.value) for s in student_db_ids],
                )

    def remove_all_for_student(self, student_db_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_cadres WHERE student_id=%s", (int(student_db_id),))
            return int(cur.rowcount)
