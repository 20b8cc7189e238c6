"""Counting helpers shared by attendance statistics and reports."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceStats


def attendance_rate(present: int, online: int, total: int, holiday: int) -> float:
    """(present + online) / (total - holiday) as a percentage, 2 decimals."""

    effective = total - holiday
    if effective <= 0:
        return 0.0
    return round((present + online) / effective * 100, 2)


def count_statuses(records: Iterable[AttendanceRecord]) -> Counter:
    return Counter(AttendanceStatus(r.attendance_status) for r in records)


def summarize(records: Iterable[AttendanceRecord]) -> AttendanceStats:
    """Statistics for the latest attendance date found in ``records``."""

    records = list(records)
    if not records:
        return AttendanceStats()

    latest = max(r.attendance_date for r in records)
    counts = count_statuses(r for r in records if r.attendance_date == latest)
    total = sum(counts.values())
    return AttendanceStats(
        total=total,
        present=counts[AttendanceStatus.PRESENT],
        online=counts[AttendanceStatus.ONLINE],
        leave=counts[AttendanceStatus.LEAVE],
        absent=counts[AttendanceStatus.ABSENT],
        holiday=counts[AttendanceStatus.HOLIDAY],
        attendance_rate=attendance_rate(
            counts[AttendanceStatus.PRESENT],
            counts[AttendanceStatus.ONLINE],
            total,
            counts[AttendanceStatus.HOLIDAY],
        ),
        latest_date=latest,
    )
