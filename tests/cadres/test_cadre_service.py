from __future__ import annotations

import pytest

from src.attendance_console.attendance_console.branches.hierarchy import FilterSelection
from src.attendance_console.attendance_console.core.enums import CadreRole
from src.attendance_console.attendance_console.core.exceptions import NotFoundError


@pytest.fixture
def cadres(world):
    world.cadres.add(world.class_a.id, world.s2.id, CadreRole.CARE_OFFICER)
    world.cadres.add(world.class_b.id, world.s1.id, CadreRole.DEPUTY_MONITOR)
    world.cadres.add(world.class_z.id, world.s4.id, CadreRole.MONITOR)
    return world.container.cadre_service


def test_cadres_are_grouped_per_student(world, cadres):
    by_code = {c.student_id: c for c in cadres.all_cadres()}

    assert sorted(by_code) == ["S0001", "S0002", "S0004"]
    assert [(r.class_name, r.role) for r in by_code["S0001"].roles] == [
        ("广论一班", CadreRole.MONITOR),
        ("广论二班", CadreRole.DEPUTY_MONITOR),
    ]


def test_search_matches_role_and_class_name(cadres):
    assert [c.student_id for c in cadres.list_cadres(query="关怀").items] == ["S0002"]
    assert [c.student_id for c in cadres.list_cadres(query="三班").items] == ["S0004"]
    assert [c.student_id for c in cadres.list_cadres(query="lim chee").items] == ["S0004"]


def test_filter_by_hierarchy_and_scope(world, cadres):
    north = cadres.list_cadres(selection=FilterSelection(main_branch_id=world.north.id))
    assert {c.student_id for c in north.items} == {"S0001", "S0002"}

    room = cadres.list_cadres(selection=FilterSelection(classroom_id=world.room.id))
    assert [c.student_id for c in room.items] == ["S0001"]

    scoped = cadres.list_cadres(class_ids=[world.class_z.id])
    assert [c.student_id for c in scoped.items] == ["S0004"]


def test_pages_hold_nine_cadres(world, cadres):
    for i in range(10):
        student = world.students.add(f"C{i:04d}", f"干部{i}")
        world.cadres.add(world.class_z.id, student.id, CadreRole.CARE_OFFICER)

    first = cadres.list_cadres()
    last = cadres.list_cadres(page=5)

    assert len(first.items) == 9
    assert first.total == 13
    assert first.total_pages == 2
    assert last.page == 2
    assert len(last.items) == 4


def test_remove_cadre_respects_scope(world, cadres):
    assert cadres.remove_cadre(world.s1.id, class_ids=[world.class_b.id]) == 1
    assert [c.class_id for c in world.cadres.list_for_student(world.s1.id)] == [world.class_a.id]

    assert cadres.remove_cadre(world.s1.id) == 1
    assert world.cadres.list_for_student(world.s1.id) == []

    with pytest.raises(NotFoundError):
        cadres.remove_cadre(999)
