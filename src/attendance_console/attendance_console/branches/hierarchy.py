"""Cascading filters over the main branch > sub-branch > classroom > class tree.

A class is managed either directly by a sub-branch or by a classroom, and a
classroom always hangs off a sub-branch, so every class resolves to at most
one sub-branch and one main branch. Selections use ``None`` for "all".
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Protocol, Sequence, TypeVar

from .model import Classroom, SubBranch


class ManagedClass(Protocol):
    id: int
    manage_by_sub_branch_id: Optional[int]
    manage_by_classroom_id: Optional[int]


C = TypeVar("C", bound=ManagedClass)


@dataclass(frozen=True)
class FilterSelection:
    main_branch_id: Optional[int] = None
    sub_branch_id: Optional[int] = None
    classroom_id: Optional[int] = None

    def with_main_branch(self, main_branch_id: Optional[int]) -> "FilterSelection":
        """Picking a main branch resets the lower levels."""
        return FilterSelection(main_branch_id=main_branch_id)

    def with_sub_branch(self, sub_branch_id: Optional[int]) -> "FilterSelection":
        return replace(self, sub_branch_id=sub_branch_id, classroom_id=None)

    def with_classroom(self, classroom_id: Optional[int]) -> "FilterSelection":
        return replace(self, classroom_id=classroom_id)

    @property
    def is_empty(self) -> bool:
        return self.main_branch_id is None and self.sub_branch_id is None and self.classroom_id is None


class BranchTree:
    def __init__(self, sub_branches: Iterable[SubBranch], classrooms: Iterable[Classroom]):
        self._sub_branches = list(sub_branches)
        self._classrooms = list(classrooms)
        self._sub_to_main = {sb.id: sb.main_branch_id for sb in self._sub_branches}
        self._classroom_to_sub = {c.id: c.sub_branch_id for c in self._classrooms}

    def sub_branches_of(self, main_branch_id: Optional[int]) -> list[SubBranch]:
        if main_branch_id is None:
            return list(self._sub_branches)
        return [sb for sb in self._sub_branches if sb.main_branch_id == main_branch_id]

    def classrooms_of(self, sub_branch_id: Optional[int], *, main_branch_id: Optional[int] = None) -> list[Classroom]:
        out = list(self._classrooms)
        if sub_branch_id is not None:
            out = [c for c in out if c.sub_branch_id == sub_branch_id]
        if main_branch_id is not None:
            out = [c for c in out if self._sub_to_main.get(c.sub_branch_id) == main_branch_id]
        return out

    def main_branch_of_sub_branch(self, sub_branch_id: Optional[int]) -> Optional[int]:
        if sub_branch_id is None:
            return None
        return self._sub_to_main.get(sub_branch_id)

    def sub_branch_of_classroom(self, classroom_id: Optional[int]) -> Optional[int]:
        if classroom_id is None:
            return None
        return self._classroom_to_sub.get(classroom_id)

    def sub_branch_of_class(self, cls: ManagedClass) -> Optional[int]:
        if cls.manage_by_sub_branch_id is not None:
            return cls.manage_by_sub_branch_id
        return self.sub_branch_of_classroom(cls.manage_by_classroom_id)

    def main_branch_of_class(self, cls: ManagedClass) -> Optional[int]:
        return self.main_branch_of_sub_branch(self.sub_branch_of_class(cls))

    def class_matches(self, cls: ManagedClass, selection: FilterSelection) -> bool:
        if selection.main_branch_id is not None and self.main_branch_of_class(cls) != selection.main_branch_id:
            return False
        if selection.sub_branch_id is not None and self.sub_branch_of_class(cls) != selection.sub_branch_id:
            return False
        if selection.classroom_id is not None and cls.manage_by_classroom_id != selection.classroom_id:
            return False
        return True

    def classes_under(self, classes: Sequence[C], selection: FilterSelection) -> list[C]:
        if selection.is_empty:
            return list(classes)
        return [c for c in classes if self.class_matches(c, selection)]

    def options(self, selection: FilterSelection) -> dict:
        """Option lists for the three cascading selects."""

        return {
            "sub_branches": self.sub_branches_of(selection.main_branch_id),
            "classrooms": self.classrooms_of(selection.sub_branch_id, main_branch_id=selection.main_branch_id),
        }
