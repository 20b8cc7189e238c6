from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import CadreRole


@dataclass(frozen=True)
class CadreAssignment:
    class_id: int
    class_name: str
    role: CadreRole


@dataclass(frozen=True)
class Cadre:
    """A student together with every cadre role they hold across classes."""

    student_db_id: int
    student_id: str
    chinese_name: str
    english_name: str
    roles: list[CadreAssignment] = field(default_factory=list)

    def matches(self, query: str) -> bool:
        """Case-insensitive match over names, code, role and class name."""

        q = query.strip().lower()
        if not q:
            return True
        haystack = [self.student_id, self.chinese_name, self.english_name]
        for r in self.roles:
            haystack.extend([r.role.value, r.class_name])
        return any(q in (h or "").lower() for h in haystack)
