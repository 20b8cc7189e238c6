from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import CadreRole
from .model import ClassCadre, ClassInfo


class ClassRepository(Protocol):
    def list_classes(self, *, include_archived: bool = False) -> Sequence[ClassInfo]:
        raise NotImplementedError

    def list_archived(self) -> Sequence[ClassInfo]:
        raise NotImplementedError

    def get_by_id(self, class_id: int) -> Optional[ClassInfo]:
        raise NotImplementedError

    def get_many(self, class_ids: Sequence[int]) -> Sequence[ClassInfo]:
        raise NotImplementedError

    def search(self, query: str) -> Sequence[ClassInfo]:
        raise NotImplementedError

    def list_by_sub_branch(self, sub_branch_id: int) -> Sequence[ClassInfo]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> int:
        raise NotImplementedError

    def update(self, class_id: int, changes: dict[str, Any]) -> None:
        raise NotImplementedError

    def set_archived(self, class_id: int, *, archived: bool) -> bool:
        raise NotImplementedError

    def delete(self, class_id: int) -> bool:
        """Hard delete; enrollments and cadre rows go with the class."""

        raise NotImplementedError


class EnrollmentRepository(Protocol):
    def student_ids_for_class(self, class_id: int) -> Sequence[int]:
        raise NotImplementedError

    def class_ids_for_student(self, student_db_id: int) -> Sequence[int]:
        raise NotImplementedError

    def counts_by_class(self, class_ids: Optional[Sequence[int]] = None) -> dict[int, int]:
        raise NotImplementedError

    def distinct_students(self, class_ids: Sequence[int]) -> Sequence[int]:
        raise NotImplementedError

    def is_enrolled(self, class_id: int, student_db_id: int) -> bool:
        raise NotImplementedError

    def add(self, class_id: int, student_db_id: int) -> None:
        raise NotImplementedError

    def remove(self, class_id: int, student_db_id: int) -> bool:
        raise NotImplementedError

    def replace(self, class_id: int, student_db_ids: Sequence[int]) -> None:
        raise NotImplementedError


class CadreRepository(Protocol):
    def list_for_class(self, class_id: int) -> Sequence[ClassCadre]:
        raise NotImplementedError

    def list_all(self) -> Sequence[ClassCadre]:
        raise NotImplementedError

    def list_for_student(self, student_db_id: int) -> Sequence[ClassCadre]:
        raise NotImplementedError

    def add(self, class_id: int, student_db_id: int, role: CadreRole) -> None:
        raise NotImplementedError

    def remove(self, class_id: int, student_db_id: int, role: CadreRole) -> bool:
        raise NotImplementedError

    def replace_role(self, class_id: int, role: CadreRole, student_db_ids: Sequence[int]) -> None:
        raise NotImplementedError

    def remove_all_for_student(self, student_db_id: int) -> int:
        raise NotImplementedError
