from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, update_clause
from .model import STUDENT_FIELDS, Student
from .repository import StudentRepository

_COLUMNS = "id, " + ", ".join(STUDENT_FIELDS) + ", created_at"


def _to_student(r: dict) -> Student:
    return Student(
        id=int(r["id"]),
        student_id=r["student_id"],
        chinese_name=r.get("chinese_name"),
        english_name=r.get("english_name"),
        gender=r.get("gender"),
        date_of_joining=r.get("date_of_joining"),
        status=r.get("status"),
        email=r.get("email"),
        phone=r.get("phone"),
        state=r.get("state"),
        postcode=r.get("postcode"),
        year_of_birth=int(r["year_of_birth"]) if r.get("year_of_birth") is not None else None,
        emergency_contact_name=r.get("emergency_contact_name"),
        emergency_contact_number=r.get("emergency_contact_number"),
        emergency_contact_relationship=r.get("emergency_contact_relationship"),
        profession=r.get("profession"),
        education_level=r.get("education_level"),
        marital_status=r.get("marital_status"),
        created_at=r.get("created_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY created_at DESC, id DESC")
            return [_to_student(r) for r in fetchall(cur)]

    def get_by_id(self, student_db_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE id=%s", (int(student_db_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_code(self, student_code: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (student_code,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_many(self, student_db_ids: Sequence[int]) -> Sequence[Student]:
        if not student_db_ids:
            return []
        placeholders, params = in_clause([int(i) for i in student_db_ids])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE id IN {placeholders}", params)
            return [_to_student(r) for r in fetchall(cur)]

    def find_identity(self, *, english_name: str, postcode: str, year_of_birth: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM students
                WHERE english_name=%s AND postcode=%s AND year_of_birth=%s
                """,
                (english_name, postcode, int(year_of_birth)),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def search(self, query: str) -> Sequence[Student]:
        like = f"%{query}%"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM students
                WHERE student_id LIKE %s OR chinese_name LIKE %s OR english_name LIKE %s
                ORDER BY created_at DESC, id DESC
                """,
                (like, like, like),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def create(self, fields: dict[str, Any]) -> int:
        cols = [c for c in STUDENT_FIELDS if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO students({', '.join(cols)}) VALUES({', '.join(['%s'] * len(cols))})",
                tuple(fields[c] for c in cols),
            )
            return int(cur.lastrowid)

    def update(self, student_db_id: int, changes: dict[str, Any]) -> None:
        set_sql, params = update_clause(changes, STUDENT_FIELDS)
        if not set_sql:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE students SET {set_sql} WHERE id=%s", (*params, int(student_db_id)))

    def delete(self, student_db_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE id=%s", (int(student_db_id),))
            return cur.rowcount > 0

    def count(self, student_db_ids: Optional[Sequence[int]] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if student_db_ids is None:
                cur.execute("SELECT COUNT(*) AS n FROM students")
            elif not student_db_ids:
                return 0
            else:
                placeholders, params = in_clause([int(i) for i in student_db_ids])
                cur.execute(f"SELECT COUNT(*) AS n FROM students WHERE id IN {placeholders}", params)
            row = fetchone(cur)
            return int(row["n"]) if row else 0
