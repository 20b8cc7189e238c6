from __future__ import annotations

from enum import Enum, IntEnum
from typing import Optional


class Role(str, Enum):
    """Account roles, from widest to narrowest reach."""

    SUPER_ADMIN = "super_admin"
    STATE_ADMIN = "state_admin"
    BRANCH_ADMIN = "branch_admin"
    CLASSROOM_ADMIN = "classroom_admin"
    CLASS_ADMIN = "class_admin"
    CADRE = "cadre"
    STUDENT = "student"

    @property
    def is_admin(self) -> bool:
        return self in ADMIN_ROLES

    @property
    def required_scope(self) -> Optional["ScopeType"]:
        return ROLE_SCOPE.get(self)


class ScopeType(str, Enum):
    MAIN_BRANCH = "main_branch"
    SUB_BRANCH = "sub_branch"
    CLASSROOM = "classroom"
    CLASS = "class"


class CadreRole(str, Enum):
    """Volunteer roles a student can hold inside a class."""

    MONITOR = "班长"
    DEPUTY_MONITOR = "副班长"
    CARE_OFFICER = "关怀员"


class AttendanceStatus(IntEnum):
    """Attendance codes as stored in class_attendance.attendance_status."""

    ABSENT = 0
    PRESENT = 1
    ONLINE = 2
    LEAVE = 3
    HOLIDAY = 4


class Region(str, Enum):
    NORTH = "北马"
    CENTRAL = "中马"
    SOUTH = "南马"


ADMIN_ROLES = frozenset(
    {
        Role.SUPER_ADMIN,
        Role.STATE_ADMIN,
        Role.BRANCH_ADMIN,
        Role.CLASSROOM_ADMIN,
        Role.CLASS_ADMIN,
    }
)

# Roles allowed to manage accounts, role assignments and invitations.
USER_MANAGER_ROLES = frozenset({Role.SUPER_ADMIN, Role.STATE_ADMIN})

ROLE_SCOPE = {
    Role.STATE_ADMIN: ScopeType.MAIN_BRANCH,
    Role.BRANCH_ADMIN: ScopeType.SUB_BRANCH,
    Role.CLASSROOM_ADMIN: ScopeType.CLASSROOM,
    Role.CLASS_ADMIN: ScopeType.CLASS,
}
