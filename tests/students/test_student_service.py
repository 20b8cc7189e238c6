from __future__ import annotations

from datetime import date

import pytest

from src.attendance_console.attendance_console.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.attendance_console.attendance_console.students.service import StudentService


def _payload(**overrides):
    data = {
        "student_id": "S0100",
        "chinese_name": "张三",
        "english_name": "Zhang San",
        "gender": "男",
        "phone": "0123456789",
        "date_of_joining": "2024-01-15",
        "state": "Penang",
        "postcode": "11000",
        "year_of_birth": 1988,
        "emergency_contact_name": "张太太",
        "emergency_contact_number": "0129876543",
    }
    data.update(overrides)
    return data


def test_create_student_maps_alias_fields(world):
    service = StudentService(world.students)

    payload = _payload(enrollment_date="2024-02-01", occupation="Engineer", postal_code="11900")
    del payload["date_of_joining"], payload["postcode"]

    student = service.create_student(payload)

    assert student.date_of_joining == date(2024, 2, 1)
    assert student.postcode == "11900"
    assert student.profession == "Engineer"
    assert student.student_id == "S0100"


def test_create_student_requires_fields(world):
    service = StudentService(world.students)

    with pytest.raises(ValidationError, match="Phone"):
        service.create_student(_payload(phone=""))


def test_duplicate_code_is_conflict(world):
    service = StudentService(world.students)

    with pytest.raises(ConflictError):
        service.create_student(_payload(student_id="S0001"))


def test_same_identity_is_conflict(world):
    service = StudentService(world.students)

    with pytest.raises(ConflictError):
        service.create_student(_payload(english_name="Tan Xiao Ming", postcode="11900", year_of_birth=1990))


def test_year_of_birth_range(world):
    service = StudentService(world.students)

    with pytest.raises(ValidationError, match="Year of birth"):
        service.create_student(_payload(year_of_birth=1800))


def test_update_student_keeps_own_identity(world):
    service = StudentService(world.students)

    updated = service.update_student(world.s1.id, {"english_name": "Tan Xiao Ming", "phone": "0199999999"})

    assert updated.phone == "0199999999"


def test_search_and_get(world):
    service = StudentService(world.students)

    assert [s.student_id for s in service.search("lee")] == ["S0002"]
    assert len(service.search("  ")) == 4
    assert service.get_by_code("S0003").chinese_name == "王大华"
    with pytest.raises(NotFoundError):
        service.get(999)


def test_delete_student(world):
    service = StudentService(world.students)

    service.delete_student(world.s4.id)

    with pytest.raises(NotFoundError):
        service.get(world.s4.id)
