from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import CadreRole


@dataclass(frozen=True)
class ClassInfo:
    """Domain entity: a class (study group).

    Managed by exactly one of a sub-branch or a classroom, never both.
    """

    id: int
    name: str
    category: Optional[str] = None
    level: Optional[str] = None
    manage_by_sub_branch_id: Optional[int] = None
    manage_by_classroom_id: Optional[int] = None
    day_of_week: Optional[str] = None
    class_start_date: Optional[date] = None
    class_start_time: Optional[time] = None
    class_end_time: Optional[time] = None
    is_archived: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def schedule_text(self) -> str:
        if not (self.day_of_week and self.class_start_time and self.class_end_time):
            return ""
        return f"{self.day_of_week} {self.class_start_time.strftime('%H:%M')}-{self.class_end_time.strftime('%H:%M')}"


@dataclass(frozen=True)
class ClassCadre:
    class_id: int
    student_id: int
    role: CadreRole


CLASS_FIELDS = (
    "name",
    "category",
    "level",
    "manage_by_sub_branch_id",
    "manage_by_classroom_id",
    "day_of_week",
    "class_start_date",
    "class_start_time",
    "class_end_time",
)
