from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    """Repository interface for Student.

    Services depend on this protocol, never on a concrete database.
    """

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_id(self, student_db_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_code(self, student_code: str) -> Optional[Student]:
        raise NotImplementedError

    def get_many(self, student_db_ids: Sequence[int]) -> Sequence[Student]:
        raise NotImplementedError

    def find_identity(self, *, english_name: str, postcode: str, year_of_birth: int) -> Optional[Student]:
        """Lookup on the (english_name, postcode, year_of_birth) natural key."""

        raise NotImplementedError

    def search(self, query: str) -> Sequence[Student]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> int:
        raise NotImplementedError

    def update(self, student_db_id: int, changes: dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, student_db_id: int) -> bool:
        raise NotImplementedError

    def count(self, student_db_ids: Optional[Sequence[int]] = None) -> int:
        raise NotImplementedError
