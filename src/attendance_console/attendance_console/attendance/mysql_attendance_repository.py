from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, update_clause
from .model import ATTENDANCE_FIELDS, AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
SELECT a.*, COALESCE(s.chinese_name, s.english_name) AS student_name, c.name AS class_name
FROM class_attendance a
LEFT JOIN students s ON s.id = a.student_id
LEFT JOIN classes c ON c.id = a.class_id
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=int(r["id"]),
        class_id=int(r["class_id"]),
        student_id=int(r["student_id"]),
        attendance_date=r["attendance_date"],
        attendance_status=AttendanceStatus(int(r["attendance_status"])),
        learning_progress=r.get("learning_progress"),
        lamrin_page=int(r["lamrin_page"]) if r.get("lamrin_page") is not None else None,
        lamrin_line=int(r["lamrin_line"]) if r.get("lamrin_line") is not None else None,
        created_at=r.get("created_at"),
        student_name=r.get("student_name"),
        class_name=r.get("class_name"),
    )


def _where(
    class_ids: Optional[Sequence[int]],
    student_id: Optional[int],
    attendance_date: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []
    if class_ids is not None:
        placeholders, ids = in_clause([int(i) for i in class_ids])
        clauses.append(f"a.class_id IN {placeholders}")
        params.extend(ids)
    if student_id is not None:
        clauses.append("a.student_id=%s")
        params.append(int(student_id))
    if attendance_date is not None:
        clauses.append("a.attendance_date=%s")
        params.append(attendance_date)
    if start is not None:
        clauses.append("a.attendance_date>=%s")
        params.append(start)
    if end is not None:
        clauses.append("a.attendance_date<=%s")
        params.append(end)
    return (" WHERE " + " AND ".join(clauses)) if clauses else "", params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_records(
        self,
        *,
        class_ids: Optional[Sequence[int]] = None,
        student_id: Optional[int] = None,
        attendance_date: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        if class_ids is not None and not class_ids:
            return []
        where, params = _where(class_ids, student_id, attendance_date, start, end)
        sql = _SELECT + where + " ORDER BY a.attendance_date DESC, a.id DESC"
        if limit:
            sql += " LIMIT %s"
            params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def latest_date(
        self, *, class_ids: Optional[Sequence[int]] = None, student_id: Optional[int] = None
    ) -> Optional[date]:
        if class_ids is not None and not class_ids:
            return None
        where, params = _where(class_ids, student_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MAX(a.attendance_date) AS latest FROM class_attendance a" + where, tuple(params))
            r = fetchone(cur)
            return r["latest"] if r else None

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_one(self, class_id: int, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.class_id=%s AND a.student_id=%s AND a.attendance_date=%s",
                (int(class_id), int(student_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, fields: dict[str, Any]) -> int:
        cols = [c for c in ATTENDANCE_FIELDS if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO class_attendance({', '.join(cols)}) VALUES({', '.join(['%s'] * len(cols))})",
                tuple(fields[c] for c in cols),
            )
            return int(cur.lastrowid)

    def update(self, record_id: int, changes: dict[str, Any]) -> None:
        set_sql, params = update_clause(changes, ATTENDANCE_FIELDS)
        if not set_sql:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE class_attendance SET {set_sql} WHERE id=%s", (*params, int(record_id)))

    def delete(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_attendance WHERE id=%s", (int(record_id),))
            return cur.rowcount > 0

    def replace_sheet(self, class_id: int, attendance_date: date, rows: Sequence[dict[str, Any]]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM class_attendance WHERE class_id=%s AND attendance_date=%s",
                (int(class_id), attendance_date),
            )
            if rows:
                cur.executemany(
                    "INSERT INTO class_attendance(" + ", ".join(ATTENDANCE_FIELDS) + ") "
                    "VALUES(" + ", ".join(["%s"] * len(ATTENDANCE_FIELDS)) + ")",
                    [tuple(row.get(c) for c in ATTENDANCE_FIELDS) for row in rows],
                )
