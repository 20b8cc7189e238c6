from __future__ import annotations

import pytest

from src.attendance_console.attendance_console.access.model import AccessScope
from src.attendance_console.attendance_console.core.enums import CadreRole, Region, Role, ScopeType

from tests.fakes import World


@pytest.fixture
def world() -> World:
    """Two main branches with one sub-branch each; three classes.

    北马总会 > 槟城分会 > (class A directly, 日落洞教室 > class B)
    中马总会 > 八打灵分会 > class Z
    """

    w = World()
    w.north = w.branches.add_main("北马总会", Region.NORTH)
    w.central = w.branches.add_main("中马总会", Region.CENTRAL)
    w.penang = w.branches.add_sub("槟城分会", w.north.id)
    w.pj = w.branches.add_sub("八打灵分会", w.central.id)
    w.room = w.branches.add_classroom("日落洞教室", w.penang.id)

    w.class_a = w.classes.add("广论一班", manage_by_sub_branch_id=w.penang.id)
    w.class_b = w.classes.add("广论二班", manage_by_classroom_id=w.room.id)
    w.class_z = w.classes.add("广论三班", manage_by_sub_branch_id=w.pj.id)

    w.s1 = w.students.add("S0001", "陈小明", "Tan Xiao Ming", postcode="11900", year_of_birth=1990, phone="0121111111")
    w.s2 = w.students.add("S0002", "李美玲", "Lee Mei Ling", postcode="11900", year_of_birth=1985)
    w.s3 = w.students.add("S0003", "王大华", "Ong Da Hua", postcode="10400", year_of_birth=1978)
    w.s4 = w.students.add("S0004", "林志强", "Lim Chee Keong", postcode="47300", year_of_birth=1992)

    w.enrollments.replace(w.class_a.id, [w.s1.id, w.s2.id])
    w.enrollments.replace(w.class_b.id, [w.s3.id])
    w.enrollments.replace(w.class_z.id, [w.s4.id])
    w.cadres.add(w.class_a.id, w.s1.id, CadreRole.MONITOR)
    return w


@pytest.fixture
def super_admin() -> AccessScope:
    return AccessScope(role=Role.SUPER_ADMIN, user_id=1)


@pytest.fixture
def north_admin(world) -> AccessScope:
    return AccessScope(role=Role.STATE_ADMIN, scope_type=ScopeType.MAIN_BRANCH, scope_id=world.north.id, user_id=2)
