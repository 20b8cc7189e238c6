from __future__ import annotations

import pytest

from src.attendance_console.attendance_console.access.model import AccessScope
from src.attendance_console.attendance_console.core.enums import Role, ScopeType
from src.attendance_console.attendance_console.core.exceptions import AuthorizationError, ValidationError
from src.attendance_console.attendance_console.users.assignment import RoleAssignmentPolicy


def test_super_admin_can_assign_any_scoped_role(world, super_admin):
    policy = RoleAssignmentPolicy(world.branches, world.classes)

    assert policy.validate(super_admin, "state_admin", "main_branch", str(world.central.id)) == (
        Role.STATE_ADMIN,
        ScopeType.MAIN_BRANCH,
        world.central.id,
    )
    assert policy.validate(super_admin, "student", "class", 99) == (Role.STUDENT, None, None)


def test_scope_type_must_match_role(world, super_admin):
    policy = RoleAssignmentPolicy(world.branches, world.classes)

    with pytest.raises(ValidationError):
        policy.validate(super_admin, "branch_admin", "classroom", world.room.id)
    with pytest.raises(ValidationError):
        policy.validate(super_admin, "branch_admin", None, None)
    with pytest.raises(ValidationError):
        policy.validate(super_admin, "branch_admin", "sub_branch", 999)
    with pytest.raises(ValidationError):
        policy.validate(super_admin, "wizard")


def test_state_admin_stays_inside_main_branch(world, north_admin):
    policy = RoleAssignmentPolicy(world.branches, world.classes)

    assert policy.validate(north_admin, "class_admin", "class", world.class_b.id)[0] == Role.CLASS_ADMIN
    with pytest.raises(AuthorizationError):
        policy.validate(north_admin, "class_admin", "class", world.class_z.id)
    with pytest.raises(AuthorizationError):
        policy.validate(north_admin, "state_admin", "main_branch", world.north.id)


def test_other_roles_cannot_manage_accounts(world):
    branch_admin = AccessScope(role=Role.BRANCH_ADMIN, scope_type=ScopeType.SUB_BRANCH, scope_id=world.penang.id)

    with pytest.raises(AuthorizationError):
        RoleAssignmentPolicy(world.branches, world.classes).validate(branch_admin, "student")


def test_assign_role_links_student(world, north_admin):
    target = world.users.add("cadre@example.com", Role.STUDENT)

    user = world.container.user_service.assign_role(north_admin, target.user_id, "cadre", student_code="S0001")

    assert user.role == Role.CADRE
    assert user.student_db_id == world.s1.id
    assert user.scope_type is None


def test_assign_role_rejects_unknown_student(world, super_admin):
    target = world.users.add("someone@example.com", Role.STUDENT)

    with pytest.raises(ValidationError, match="S9999"):
        world.container.user_service.assign_role(super_admin, target.user_id, "cadre", student_code="S9999")


def test_state_admin_cannot_touch_another_state_admin(world, north_admin):
    other = world.users.add(
        "central@example.com", Role.STATE_ADMIN, scope_type=ScopeType.MAIN_BRANCH, scope_id=world.central.id
    )

    with pytest.raises(AuthorizationError):
        world.container.user_service.assign_role(north_admin, other.user_id, "student")


def test_set_active(world, super_admin):
    service = world.container.user_service
    me = world.users.add("root@example.com", Role.SUPER_ADMIN)
    other = world.users.add("other@example.com", Role.STUDENT)
    requester = AccessScope(role=Role.SUPER_ADMIN, user_id=me.user_id)

    assert service.set_active(requester, other.user_id, is_active=False).is_active is False
    with pytest.raises(ValidationError):
        service.set_active(requester, me.user_id, is_active=False)


def test_list_users_is_super_admin_only(world, super_admin, north_admin):
    for i in range(5):
        world.users.add(f"u{i}@example.com", Role.STUDENT)

    page = world.container.user_service.list_users(super_admin, page=2, per_page=2)
    assert [u.email for u in page.items] == ["u2@example.com", "u3@example.com"]
    assert page.total_pages == 3

    with pytest.raises(AuthorizationError):
        world.container.user_service.list_users(north_admin)
