from __future__ import annotations

from datetime import date, time

import pytest

from src.attendance_console.attendance_console.core.enums import AttendanceStatus, CadreRole
from src.attendance_console.attendance_console.core.exceptions import ConflictError, NotFoundError, ValidationError


def test_create_rejects_two_managers(world):
    service = world.container.class_service

    with pytest.raises(ValidationError, match="not both"):
        service.create_class(
            {"name": "新班", "manage_by_sub_branch_id": world.penang.id, "manage_by_classroom_id": world.room.id}
        )


def test_update_switching_manager_clears_the_other(world):
    service = world.container.class_service

    updated = service.update_class(world.class_a.id, {"manage_by_classroom_id": world.room.id})

    assert updated.manage_by_classroom_id == world.room.id
    assert updated.manage_by_sub_branch_id is None


def test_start_time_must_precede_end_time(world):
    service = world.container.class_service

    with pytest.raises(ValidationError, match="Start time"):
        service.create_class({"name": "晚班", "class_start_time": "21:00", "class_end_time": "19:30"})


def test_create_with_members(world):
    service = world.container.class_service

    cls = service.create_class(
        {
            "name": "广论四班",
            "manage_by_sub_branch_id": world.penang.id,
            "day_of_week": "星期三",
            "class_start_time": "19:30",
            "class_end_time": "21:30",
            "student_ids": [world.s2.id, world.s3.id, world.s2.id],
            "monitor_id": world.s2.id,
            "care_officers": [world.s3.id],
        }
    )

    assert cls.class_start_time == time(19, 30)
    assert world.enrollments.student_ids_for_class(cls.id) == [world.s2.id, world.s3.id]
    detail = service.detail(cls.id)
    assert detail["schedule"] == "星期三 19:30-21:30"
    assert detail["monitor_name"] == "李美玲"
    assert detail["care_officer_names"] == ["王大华"]
    assert detail["student_codes"] == ["S0002", "S0003"]


def test_unknown_students_are_rejected(world):
    with pytest.raises(ValidationError, match="Unknown students"):
        world.container.class_service.update_class(world.class_a.id, {"deputy_monitors": [999]})


def test_omitted_lists_are_left_alone(world):
    service = world.container.class_service

    service.update_class(world.class_a.id, {"level": "初级"})

    assert world.enrollments.student_ids_for_class(world.class_a.id) == [world.s1.id, world.s2.id]
    assert [c.role for c in world.cadres.list_for_class(world.class_a.id)] == [CadreRole.MONITOR]


def test_enrollment_add_remove(world):
    service = world.container.class_service

    service.add_student(world.class_a.id, world.s3.id)
    with pytest.raises(ConflictError):
        service.add_student(world.class_a.id, world.s3.id)

    service.remove_student(world.class_a.id, world.s3.id)
    with pytest.raises(NotFoundError):
        service.remove_student(world.class_a.id, world.s3.id)


def test_single_monitor(world):
    service = world.container.class_service

    with pytest.raises(ConflictError, match="monitor"):
        service.add_cadre(world.class_a.id, world.s2.id, "班长")
    with pytest.raises(ValidationError):
        service.replace_cadres(world.class_a.id, "班长", [world.s1.id, world.s2.id])

    service.add_cadre(world.class_a.id, world.s2.id, "副班长")
    assert {(c.student_id, c.role) for c in service.list_cadres(world.class_a.id)} == {
        (world.s1.id, CadreRole.MONITOR),
        (world.s2.id, CadreRole.DEPUTY_MONITOR),
    }


def test_archive_and_delete(world):
    service = world.container.class_service

    service.archive_class(world.class_a.id)
    assert world.class_a.id not in {c.id for c in service.list_classes()}
    assert [c.id for c in service.list_archived()] == [world.class_a.id]

    service.unarchive_class(world.class_a.id)
    service.delete_class(world.class_a.id)

    assert world.enrollments.student_ids_for_class(world.class_a.id) == []
    assert world.cadres.list_for_class(world.class_a.id) == []
    with pytest.raises(NotFoundError):
        service.get(world.class_a.id)


def test_detail_includes_attendance_summary(world):
    world.attendance.add(world.class_a.id, world.s1.id, date(2026, 3, 1), AttendanceStatus.PRESENT, lamrin_page=12)
    world.attendance.add(world.class_a.id, world.s2.id, date(2026, 3, 1), AttendanceStatus.ABSENT, lamrin_page=12)

    summary = world.container.class_service.detail(world.class_a.id)["attendance_summary"]

    assert summary["lamrin_page"] == 12
    assert summary["attendance_rate"] == 50.0


def test_managers_after_update(world):
    managers_after = world.container.class_service.managers_after
    cls = world.class_a

    assert managers_after({"name": "x"}, cls) == (world.penang.id, None)
    assert managers_after({"manage_by_classroom_id": world.room.id}, cls) == (None, world.room.id)
    assert managers_after({"manage_by_sub_branch_id": str(world.pj.id)}, world.class_b) == (world.pj.id, None)
    assert managers_after({"manage_by_sub_branch_id": world.pj.id}) == (world.pj.id, None)
    assert managers_after({}) == (None, None)
