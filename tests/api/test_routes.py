from __future__ import annotations

from datetime import date

import pytest
from werkzeug.security import generate_password_hash

from src.attendance_console.attendance_console.core.enums import AttendanceStatus, Role, ScopeType
from src.attendance_console.attendance_console.main import create_app
from src.attendance_console.attendance_console.users.model import SessionUser


@pytest.fixture
def app(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=world.container)


@pytest.fixture
def client(app):
    return app.test_client()


def login_as(client, world, role=Role.SUPER_ADMIN, **fields):
    user = world.users.add(f"{role.value}{len(world.users.rows) + 1}@example.com", role, **fields)
    with client.session_transaction() as sess:
        sess.update(SessionUser.from_user(user).to_session())
    return user


def test_login_sets_session_and_returns_menu(world, client):
    world.users.add("admin@example.com", Role.SUPER_ADMIN, password_hash=generate_password_hash("secret1"))

    res = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "secret1"})

    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["data"]["role"] == "super_admin"
    assert "password_hash" not in body["data"]
    assert any(item["key"] == "user_management" for item in body["menu"])

    me = client.get("/api/me").get_json()
    assert me["data"]["email"] == "admin@example.com"


def test_bad_login_is_401(client):
    res = client.post("/api/auth/login", json={"email": "x@example.com", "password": "nope"})

    assert res.status_code == 401
    assert res.get_json() == {"success": False, "message": "Invalid email or password"}


def test_guards_answer_json(world, client):
    assert client.get("/api/students").status_code == 401

    login_as(client, world, role=Role.STUDENT, student_db_id=world.s1.id)
    res = client.get("/api/students")
    assert res.status_code == 403
    assert res.get_json()["success"] is False


def test_classes_are_scoped(world, client):
    login_as(client, world, role=Role.BRANCH_ADMIN, scope_type=ScopeType.SUB_BRANCH, scope_id=world.pj.id)

    names = [c["name"] for c in client.get("/api/classes").get_json()["data"]]
    assert names == ["广论三班"]
    assert client.get(f"/api/classes/{world.class_a.id}").status_code == 403


def test_create_class_validation_errors_are_400(world, client):
    login_as(client, world)

    res = client.post(
        "/api/classes",
        json={
            "name": "广论四班",
            "manage_by_sub_branch_id": world.penang.id,
            "manage_by_classroom_id": world.room.id,
        },
    )

    assert res.status_code == 400
    assert res.get_json()["success"] is False


def test_cadre_saves_attendance_sheet(world, client):
    login_as(client, world, role=Role.CADRE, student_db_id=world.s1.id)

    res = client.post(
        f"/api/classes/{world.class_a.id}/attendance",
        json={
            "attendance_date": "2026-03-01",
            "entries": [
                {"student_id": world.s1.id, "attendance_status": 1},
                {"student_id": world.s2.id, "attendance_status": 2},
            ],
            "lamrin_page": 12,
        },
    )

    assert res.status_code == 200
    assert len(world.attendance.list_records(class_ids=[world.class_a.id])) == 2
    assert client.post(f"/api/classes/{world.class_b.id}/attendance", json={}).status_code == 403


def test_weekly_report_csv(world, client):
    world.attendance.add(world.class_a.id, world.s1.id, date(2026, 3, 3), AttendanceStatus.PRESENT)
    login_as(client, world)

    res = client.get("/api/reports/weekly.csv?start=2026-03-02&end=2026-03-08")

    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    text = res.data.decode("utf-8-sig").splitlines()
    assert text[0] == "name,start,end,present,online,leave,absent"
    assert text[1] == "03/02-03/08,2026-03-02,2026-03-08,1,0,0,0"


def test_user_management_is_for_managers(world, client):
    target = world.users.add("someone@example.com", Role.STUDENT)
    login_as(client, world, role=Role.CLASS_ADMIN, scope_type=ScopeType.CLASS, scope_id=world.class_a.id)

    assert client.put(f"/api/users/{target.user_id}/role", json={"role": "cadre"}).status_code == 403

    login_as(client, world, role=Role.STATE_ADMIN, scope_type=ScopeType.MAIN_BRANCH, scope_id=world.north.id)
    res = client.put(f"/api/users/{target.user_id}/role", json={"role": "cadre", "student_code": "S0002"})
    assert res.status_code == 200
    assert res.get_json()["data"]["student_db_id"] == world.s2.id
