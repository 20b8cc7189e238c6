"""Navigation items per role, as shown in the console sidebar."""

from __future__ import annotations

from ..core.enums import Role


def _item(key: str, label: str, sublabel: str, path: str) -> dict:
    return {"key": key, "label": label, "sublabel": sublabel, "path": path}


DASHBOARD = _item("dashboard", "主页", "Dashboard", "/dashboard")
STUDENTS = _item("students", "学员管理", "Students", "/students")
CLASSES = _item("classes", "班级管理", "Classes", "/classes")
CADRES = _item("cadres", "干部管理", "Cadres", "/cadres")
CLASSROOMS = _item("classrooms", "教室管理", "Classrooms", "/classrooms")
ATTENDANCE = _item("attendance", "点名记录", "Attendance", "/attendance")
REPORTS = _item("reports", "报告统计", "Reports", "/reports")
USER_MANAGEMENT = _item("user_management", "用户管理", "User Management", "/user-management")
SETTINGS = _item("settings", "系统设置", "Settings", "/settings")
MY_CLASSES = _item("my_classes", "我的班级", "My Classes", "/my-classes")
CADRE_REPORTS = _item("reports", "点名报告", "Reports", "/reports")
MY_ATTENDANCE = _item("my_attendance", "我的点名", "My Attendance", "/my-attendance")

_MANAGER_MENU = [DASHBOARD, STUDENTS, CLASSES, CADRES, CLASSROOMS, ATTENDANCE, REPORTS, USER_MANAGEMENT, SETTINGS]
_ADMIN_MENU = [item for item in _MANAGER_MENU if item is not USER_MANAGEMENT]

MENUS = {
    Role.SUPER_ADMIN: _MANAGER_MENU,
    Role.STATE_ADMIN: _MANAGER_MENU,
    Role.BRANCH_ADMIN: _ADMIN_MENU,
    Role.CLASSROOM_ADMIN: _ADMIN_MENU,
    Role.CLASS_ADMIN: _ADMIN_MENU,
    Role.CADRE: [DASHBOARD, ATTENDANCE, MY_CLASSES, CADRE_REPORTS],
    Role.STUDENT: [DASHBOARD, MY_ATTENDANCE],
}


def menu_for(role: Role) -> list[dict]:
    return [dict(item) for item in MENUS.get(Role(role), [])]
