from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Optional, Sequence

from ..branches.hierarchy import BranchTree, FilterSelection
from ..branches.repository import BranchRepository
from ..classes.repository import CadreRepository, ClassRepository
from ..common.pagination import Page, paginate
from ..core.constants import DEFAULT_CADRE_PAGE_SIZE
from ..core.exceptions import NotFoundError
from ..students.repository import StudentRepository
from .model import Cadre, CadreAssignment

logger = logging.getLogger(__name__)


class CadreService:
    """Use cases: the cadre directory built from per-class cadre roles."""

    def __init__(
        self,
        cadres: CadreRepository,
        classes: ClassRepository,
        students: StudentRepository,
        branches: BranchRepository,
    ):
        self._cadres = cadres
        self._classes = classes
        self._students = students
        self._branches = branches

    def all_cadres(self, *, class_ids: Optional[Sequence[int]] = None) -> list[Cadre]:
        assignments = list(self._cadres.list_all())
        if class_ids is not None:
            allowed = set(class_ids)
            assignments = [a for a in assignments if a.class_id in allowed]
        if not assignments:
            return []

        classes = {c.id: c for c in self._classes.get_many(sorted({a.class_id for a in assignments}))}
        students = {s.id: s for s in self._students.get_many(sorted({a.student_id for a in assignments}))}

        grouped: "OrderedDict[int, list[CadreAssignment]]" = OrderedDict()
        for a in assignments:
            cls = classes.get(a.class_id)
            grouped.setdefault(a.student_id, []).append(
                CadreAssignment(class_id=a.class_id, class_name=cls.name if cls else "", role=a.role)
            )

        out: list[Cadre] = []
        for student_db_id, roles in grouped.items():
            student = students.get(student_db_id)
            if not student:
                continue
            out.append(
                Cadre(
                    student_db_id=student.id,
                    student_id=student.student_id,
                    chinese_name=student.chinese_name or "",
                    english_name=student.english_name or "",
                    roles=roles,
                )
            )
        return out

    def list_cadres(
        self,
        *,
        query: str = "",
        selection: FilterSelection = FilterSelection(),
        page: int = 1,
        page_size: int = DEFAULT_CADRE_PAGE_SIZE,
        class_ids: Optional[Sequence[int]] = None,
    ) -> Page[Cadre]:
        cadres = [c for c in self.all_cadres(class_ids=class_ids) if c.matches(query or "")]

        if not selection.is_empty:
            tree = BranchTree(self._branches.list_sub_branches(), self._branches.list_classrooms())
            classes = {c.id: c for c in self._classes.list_classes(include_archived=True)}
            cadres = [
                c
                for c in cadres
                if any(r.class_id in classes and tree.class_matches(classes[r.class_id], selection) for r in c.roles)
            ]

        return paginate(cadres, page=page, page_size=page_size)

    def remove_cadre(self, student_db_id: int, *, class_ids: Optional[Sequence[int]] = None) -> int:
        """Drop every cadre role the student holds, limited to ``class_ids`` when given."""

        if not self._students.get_by_id(int(student_db_id)):
            raise NotFoundError("Student not found")
        if class_ids is None:
            removed = self._cadres.remove_all_for_student(int(student_db_id))
        else:
            allowed = set(class_ids)
            removed = 0
            for a in self._cadres.list_for_student(int(student_db_id)):
                if a.class_id in allowed and self._cadres.remove(a.class_id, a.student_id, a.role):
                    removed += 1
        logger.info("Removed %s cadre roles of student id=%s", removed, student_db_id)
        return removed
