from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import Classroom, MainBranch, SubBranch


class BranchRepository(Protocol):
    """Repository interface for the three branch levels."""

    # main branches
    def list_main_branches(self) -> Sequence[MainBranch]:
        raise NotImplementedError

    def get_main_branch(self, main_branch_id: int) -> Optional[MainBranch]:
        raise NotImplementedError

    def create_main_branch(self, fields: dict[str, Any]) -> int:
        raise NotImplementedError

    def update_main_branch(self, main_branch_id: int, changes: dict[str, Any]) -> None:
        raise NotImplementedError

    def delete_main_branch(self, main_branch_id: int) -> bool:
        raise NotImplementedError

    # sub-branches
    def list_sub_branches(self) -> Sequence[SubBranch]:
        raise NotImplementedError

    def get_sub_branch(self, sub_branch_id: int) -> Optional[SubBranch]:
        raise NotImplementedError

    def search_sub_branches(self, query: str) -> Sequence[SubBranch]:
        raise NotImplementedError

    def create_sub_branch(self, fields: dict[str, Any]) -> int:
        raise NotImplementedError

    def update_sub_branch(self, sub_branch_id: int, changes: dict[str, Any]) -> None:
        raise NotImplementedError

    def delete_sub_branch(self, sub_branch_id: int) -> bool:
        raise NotImplementedError

    # classrooms
    def list_classrooms(self) -> Sequence[Classroom]:
        raise NotImplementedError

    def get_classroom(self, classroom_id: int) -> Optional[Classroom]:
        raise NotImplementedError

    def get_classroom_by_name(self, name: str) -> Optional[Classroom]:
        raise NotImplementedError

    def search_classrooms(self, query: str) -> Sequence[Classroom]:
        raise NotImplementedError

    def create_classroom(self, fields: dict[str, Any]) -> int:
        raise NotImplementedError

    def update_classroom(self, classroom_id: int, changes: dict[str, Any]) -> None:
        raise NotImplementedError

    def delete_classroom(self, classroom_id: int) -> bool:
        raise NotImplementedError
