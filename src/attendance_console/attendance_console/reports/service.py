from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Optional

from ..access.model import AccessScope
from ..access.resolver import ScopeResolver
from ..attendance.repository import AttendanceRepository
from ..attendance.stats import attendance_rate, count_statuses
from ..classes.repository import ClassRepository
from ..common.validators import optional_int
from ..core.enums import ADMIN_ROLES, AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import ClassAttendanceTotals, WeeklyAttendance, WeekRange

REPORT_ROLES = frozenset(ADMIN_ROLES | {Role.CADRE})


def weekly_ranges(start: date, end: date) -> list[WeekRange]:
    """Monday-to-Sunday weeks covering [start, end], clipped at both ends."""

    weeks: list[WeekRange] = []
    monday = start - timedelta(days=start.weekday())
    while monday <= end:
        sunday = monday + timedelta(days=6)
        actual_start = max(monday, start)
        actual_end = min(sunday, end)
        weeks.append(
            WeekRange(
                start=actual_start,
                end=actual_end,
                label=f"{actual_start.strftime('%m/%d')}-{actual_end.strftime('%m/%d')}",
            )
        )
        monday = sunday + timedelta(days=1)
    return weeks


class ReportService:
    def __init__(self, attendance: AttendanceRepository, classes: ClassRepository, resolver: ScopeResolver):
        self._attendance = attendance
        self._classes = classes
        self._resolver = resolver

    @staticmethod
    def _check_range(start: Optional[date], end: Optional[date]) -> None:
        if start is None or end is None:
            raise ValidationError("start and end dates are required")
        if start > end:
            raise ValidationError("start date must not be after end date")

    def _class_filter(self, scope: AccessScope, class_id: Any) -> Optional[list[int]]:
        """Class ids to report on; ``None`` means every class."""

        if scope.role not in REPORT_ROLES:
            raise AuthorizationError("You do not have permission to view reports")
        allowed = self._resolver.allowed_class_ids(scope)
        wanted = optional_int(class_id, "class_id")
        if allowed is not None and not allowed:
            return []
        if wanted is not None:
            if allowed is not None and wanted not in allowed:
                raise AuthorizationError("You do not have access to this class")
            return [wanted]
        return allowed

    def weekly_attendance(
        self, scope: AccessScope, start: Optional[date], end: Optional[date], class_id: Any = None
    ) -> list[WeeklyAttendance]:
        self._check_range(start, end)
        class_ids = self._class_filter(scope, class_id)
        if class_ids is not None and not class_ids:
            return []

        records = [
            r
            for r in self._attendance.list_records(class_ids=class_ids, start=start, end=end)
            if r.attendance_status != AttendanceStatus.HOLIDAY
        ]
        out: list[WeeklyAttendance] = []
        for week in weekly_ranges(start, end):
            counts = count_statuses(r for r in records if week.start <= r.attendance_date <= week.end)
            out.append(
                WeeklyAttendance(
                    name=week.label,
                    start=week.start,
                    end=week.end,
                    present=counts[AttendanceStatus.PRESENT],
                    online=counts[AttendanceStatus.ONLINE],
                    leave=counts[AttendanceStatus.LEAVE],
                    absent=counts[AttendanceStatus.ABSENT],
                )
            )
        return out

    def class_breakdown(
        self, scope: AccessScope, start: Optional[date], end: Optional[date]
    ) -> list[ClassAttendanceTotals]:
        """Totals and attendance rate per class over the whole range."""

        self._check_range(start, end)
        class_ids = self._class_filter(scope, None)
        if class_ids is not None and not class_ids:
            return []

        by_class: dict[int, list] = {}
        for r in self._attendance.list_records(class_ids=class_ids, start=start, end=end):
            by_class.setdefault(r.class_id, []).append(r)
        if not by_class:
            return []

        names = {c.id: c.name for c in self._classes.get_many(sorted(by_class))}
        out: list[ClassAttendanceTotals] = []
        for cid in sorted(by_class, key=lambda i: names.get(i, "")):
            counts = count_statuses(by_class[cid])
            total = sum(counts.values())
            out.append(
                ClassAttendanceTotals(
                    class_id=cid,
                    class_name=names.get(cid, ""),
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
                )
            )
        return out
