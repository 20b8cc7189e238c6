from __future__ import annotations

import pytest

from src.attendance_console.attendance_console.core.enums import Role, ScopeType
from src.attendance_console.attendance_console.main import create_app
from src.attendance_console.attendance_console.users.model import SessionUser


@pytest.fixture
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=world.container).test_client()


def login_as(client, world, role, **fields):
    user = world.users.add(f"{role.value}{len(world.users.rows) + 1}@example.com", role, **fields)
    with client.session_transaction() as sess:
        sess.update(SessionUser.from_user(user).to_session())
    return user


@pytest.fixture
def penang_admin(world, client):
    return login_as(client, world, Role.BRANCH_ADMIN, scope_type=ScopeType.SUB_BRANCH, scope_id=world.penang.id)


@pytest.fixture
def north_state_admin(world, client):
    return login_as(client, world, Role.STATE_ADMIN, scope_type=ScopeType.MAIN_BRANCH, scope_id=world.north.id)


# classes


def test_branch_admin_creates_classes_only_under_own_sub_branch(world, client, penang_admin):
    res = client.post("/api/classes", json={"name": "外地班", "manage_by_sub_branch_id": world.pj.id})
    assert res.status_code == 403
    assert not world.classes.search("外地班")

    res = client.post("/api/classes", json={"name": "教室班", "manage_by_classroom_id": world.room.id})
    assert res.status_code == 201
    assert res.get_json()["data"]["manage_by_classroom_id"] == world.room.id


def test_class_admin_cannot_move_class_out_of_scope(world, client):
    login_as(client, world, Role.CLASS_ADMIN, scope_type=ScopeType.CLASS, scope_id=world.class_a.id)

    res = client.put(f"/api/classes/{world.class_a.id}", json={"manage_by_sub_branch_id": world.pj.id})
    assert res.status_code == 403
    assert world.classes.get_by_id(world.class_a.id).manage_by_sub_branch_id == world.penang.id

    # resending the current manager with the rest of the form is fine
    res = client.put(
        f"/api/classes/{world.class_a.id}",
        json={"name": "广论一班(新)", "manage_by_sub_branch_id": world.penang.id},
    )
    assert res.status_code == 200
    assert world.classes.get_by_id(world.class_a.id).name == "广论一班(新)"


def test_branch_admin_moves_class_within_sub_branch(world, client, penang_admin):
    res = client.put(f"/api/classes/{world.class_a.id}", json={"manage_by_classroom_id": world.room.id})

    assert res.status_code == 200
    moved = world.classes.get_by_id(world.class_a.id)
    assert (moved.manage_by_sub_branch_id, moved.manage_by_classroom_id) == (None, world.room.id)


# branches


def test_state_admin_cannot_touch_other_main_branch(world, client, north_state_admin):
    assert client.put(f"/api/sub-branches/{world.pj.id}", json={"name": "hijacked"}).status_code == 403
    assert client.delete(f"/api/sub-branches/{world.pj.id}").status_code == 403
    assert client.post("/api/sub-branches", json={"name": "新分会", "main_branch_id": world.central.id}).status_code == 403
    assert client.put(f"/api/sub-branches/{world.penang.id}", json={"main_branch_id": world.central.id}).status_code == 403
    assert world.branches.get_sub_branch(world.pj.id).name == "八打灵分会"

    res = client.put(f"/api/sub-branches/{world.penang.id}", json={"name": "槟城分会(总)"})
    assert res.status_code == 200


def test_branch_admin_classroom_writes_stay_in_sub_branch(world, client, penang_admin):
    pj_room = world.branches.add_classroom("八打灵教室", world.pj.id)

    assert client.post("/api/classrooms", json={"name": "新教室", "sub_branch_id": world.pj.id}).status_code == 403
    assert client.put(f"/api/classrooms/{pj_room.id}", json={"state": "Selangor"}).status_code == 403
    assert client.delete(f"/api/classrooms/{pj_room.id}").status_code == 403
    assert client.put(f"/api/classrooms/{world.room.id}", json={"sub_branch_id": world.pj.id}).status_code == 403

    # reusing another branch's classroom name does not take it over
    res = client.post("/api/classrooms", json={"name": "八打灵教室", "sub_branch_id": world.penang.id})
    assert res.status_code == 403
    assert world.branches.get_classroom(pj_room.id).sub_branch_id == world.pj.id

    res = client.post("/api/classrooms", json={"name": "新教室", "sub_branch_id": world.penang.id})
    assert res.status_code == 201


def test_missing_sub_branch_is_404_not_403(client, north_state_admin):
    assert client.put("/api/sub-branches/999", json={"name": "x"}).status_code == 404


# sessions


def test_deactivated_account_loses_its_session(world, client):
    admin = login_as(client, world, Role.SUPER_ADMIN)
    assert client.get("/api/users").status_code == 200

    world.users.set_active(admin.user_id, is_active=False)

    assert client.get("/api/users").status_code == 401
    with client.session_transaction() as sess:
        assert "user_id" not in sess


def test_role_change_applies_to_open_session(world, client):
    user = login_as(client, world, Role.SUPER_ADMIN)

    world.users.update_role(
        user.user_id, role=Role.STUDENT, scope_type=None, scope_id=None, student_db_id=world.s1.id
    )

    assert client.get("/api/users").status_code == 403
    me = client.get("/api/me").get_json()
    assert me["data"]["role"] == "student"


# students


def test_student_writes_follow_class_scope(world, client):
    login_as(client, world, Role.CLASS_ADMIN, scope_type=ScopeType.CLASS, scope_id=world.class_a.id)

    assert client.put(f"/api/students/{world.s4.id}", json={"phone": "0199999999"}).status_code == 403
    assert client.put(f"/api/students/{world.s1.id}", json={"phone": "0199999999"}).status_code == 200
    assert client.delete(f"/api/students/{world.s1.id}").status_code == 403


def test_state_admin_deletes_only_reachable_students(world, client, north_state_admin):
    assert client.delete(f"/api/students/{world.s4.id}").status_code == 403
    assert client.delete(f"/api/students/{world.s3.id}").status_code == 200
    assert world.students.get_by_id(world.s3.id) is None
