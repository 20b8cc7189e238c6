from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .repository import EnrollmentRepository


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def student_ids_for_class(self, class_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id FROM class_enrollments WHERE class_id=%s ORDER BY created_at, id",
                (int(class_id),),
            )
            return [int(r["student_id"]) for r in fetchall(cur)]

    def class_ids_for_student(self, student_db_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id FROM class_enrollments WHERE student_id=%s", (int(student_db_id),))
            return [int(r["class_id"]) for r in fetchall(cur)]

    def counts_by_class(self, class_ids: Optional[Sequence[int]] = None) -> dict[int, int]:
        sql = "SELECT class_id, COUNT(*) AS n FROM class_enrollments"
        params: tuple = ()
        if class_ids is not None:
            if not class_ids:
                return {}
            placeholders, params = in_clause([int(i) for i in class_ids])
            sql += f" WHERE class_id IN {placeholders}"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " GROUP BY class_id", params)
            return {int(r["class_id"]): int(r["n"]) for r in fetchall(cur)}

    def distinct_students(self, class_ids: Sequence[int]) -> Sequence[int]:
        if not class_ids:
            return []
        placeholders, params = in_clause([int(i) for i in class_ids])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT DISTINCT student_id FROM class_enrollments WHERE class_id IN {placeholders}", params)
            return [int(r["student_id"]) for r in fetchall(cur)]

    def is_enrolled(self, class_id: int, student_db_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM class_enrollments WHERE class_id=%s AND student_id=%s",
                (int(class_id), int(student_db_id)),
            )
            return fetchone(cur) is not None

    def add(self, class_id: int, student_db_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO class_enrollments(class_id, student_id) VALUES(%s,%s)",
                (int(class_id), int(student_db_id)),
            )

    def remove(self, class_id: int, student_db_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM class_enrollments WHERE class_id=%s AND student_id=%s",
                (int(class_id), int(student_db_id)),
            )
            return cur.rowcount > 0

    def replace(self, class_id: int, student_db_ids: Sequence[int]) -> None:
        # One transaction: the class never shows up half-enrolled.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_enrollments WHERE class_id=%s", (int(class_id),))
            if student_db_ids:
                cur.executemany(
                    "INSERT INTO class_enrollments(class_id, student_id) VALUES(%s,%s)",
                    [(int(class_id), int(s)) for s in student_db_ids],
                )
