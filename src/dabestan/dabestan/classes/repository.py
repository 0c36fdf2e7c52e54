from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SchoolClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def get_by_grade_section(self, grade: int, section: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def list_active(self, *, grade: Optional[int] = None, teacher_id: Optional[int] = None) -> Sequence[SchoolClass]:
        """Active classes ordered by grade, section (with teacher name and student count)."""

        raise NotImplementedError

    def create(self, *, grade: int, section: str, teacher_id: int, capacity: int) -> int:
        raise NotImplementedError

    def update(self, class_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def count_for_teacher(self, teacher_id: int) -> int:
        """Classes (active or not) that still reference the teacher."""

        raise NotImplementedError
