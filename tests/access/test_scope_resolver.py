from __future__ import annotations

import pytest

from src.attendance_console.attendance_console.access.model import AccessScope
from src.attendance_console.attendance_console.core.enums import Role, ScopeType
from src.attendance_console.attendance_console.core.exceptions import AuthorizationError


def test_super_admin_is_unrestricted(world, super_admin):
    assert world.container.scope_resolver.allowed_class_ids(super_admin) is None


def test_admin_scopes_follow_the_hierarchy(world, north_admin):
    resolver = world.container.scope_resolver
    branch = AccessScope(role=Role.BRANCH_ADMIN, scope_type=ScopeType.SUB_BRANCH, scope_id=world.penang.id)
    room = AccessScope(role=Role.CLASSROOM_ADMIN, scope_type=ScopeType.CLASSROOM, scope_id=world.room.id)
    single = AccessScope(role=Role.CLASS_ADMIN, scope_type=ScopeType.CLASS, scope_id=world.class_z.id)

    assert set(resolver.allowed_class_ids(north_admin)) == {world.class_a.id, world.class_b.id}
    assert set(resolver.allowed_class_ids(branch)) == {world.class_a.id, world.class_b.id}
    assert resolver.allowed_class_ids(room) == [world.class_b.id]
    assert resolver.allowed_class_ids(single) == [world.class_z.id]


def test_cadre_and_student_scopes(world):
    resolver = world.container.scope_resolver

    assert resolver.allowed_class_ids(AccessScope(role=Role.CADRE, student_db_id=world.s1.id)) == [world.class_a.id]
    assert resolver.allowed_class_ids(AccessScope(role=Role.CADRE, student_db_id=world.s3.id)) == []
    assert resolver.allowed_class_ids(AccessScope(role=Role.STUDENT, student_db_id=world.s3.id)) == [world.class_b.id]


def test_scoped_admin_without_scope_is_refused(world):
    with pytest.raises(AuthorizationError):
        world.container.scope_resolver.allowed_class_ids(AccessScope(role=Role.BRANCH_ADMIN))


def test_ensure_class_access(world, north_admin):
    resolver = world.container.scope_resolver

    resolver.ensure_class_access(north_admin, world.class_b.id)
    with pytest.raises(AuthorizationError):
        resolver.ensure_class_access(north_admin, world.class_z.id)


def test_branch_units_in_scope(world, north_admin):
    resolver = world.container.scope_resolver
    branch = AccessScope(role=Role.BRANCH_ADMIN, scope_type=ScopeType.SUB_BRANCH, scope_id=world.penang.id)
    room = AccessScope(role=Role.CLASSROOM_ADMIN, scope_type=ScopeType.CLASSROOM, scope_id=world.room.id)
    single = AccessScope(role=Role.CLASS_ADMIN, scope_type=ScopeType.CLASS, scope_id=world.class_a.id)

    assert resolver.unit_in_scope(north_admin, main_branch_id=world.north.id)
    assert resolver.unit_in_scope(north_admin, classroom_id=world.room.id)
    assert not resolver.unit_in_scope(north_admin, sub_branch_id=world.pj.id)
    assert not resolver.unit_in_scope(north_admin)

    assert resolver.unit_in_scope(branch, classroom_id=world.room.id)
    assert not resolver.unit_in_scope(branch, main_branch_id=world.north.id)

    assert resolver.unit_in_scope(room, classroom_id=world.room.id)
    assert not resolver.unit_in_scope(room, sub_branch_id=world.penang.id)
    assert not resolver.unit_in_scope(single, sub_branch_id=world.penang.id)

    with pytest.raises(AuthorizationError):
        resolver.ensure_unit_access(branch, sub_branch_id=world.pj.id)


def test_student_access_follows_enrollment(world, north_admin):
    resolver = world.container.scope_resolver
    newcomer = world.students.add("S0009", "新同学")

    assert resolver.can_access_student(north_admin, world.s3.id)
    assert resolver.can_access_student(north_admin, newcomer.id)
    assert not resolver.can_access_student(north_admin, world.s4.id)
    with pytest.raises(AuthorizationError):
        resolver.ensure_student_access(north_admin, world.s4.id)
