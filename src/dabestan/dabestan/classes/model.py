from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.persian import class_label


@dataclass(frozen=True)
class SchoolClass:
    """Domain entity: one grade/section with its assigned teacher."""

    class_id: int
    grade: int
    section: str
    teacher_id: int
    capacity: int = 30
    is_active: bool = True
    teacher_name: Optional[str] = None
    student_count: int = 0

    @property
    def label(self) -> str:
        return class_label(self.grade, self.section)

    def to_dict(self) -> dict:
        return {
            "id": self.class_id,
            "grade": self.grade,
            "section": self.section,
            "name": self.label,
            "teacherId": self.teacher_id,
            "teacher": {"name": self.teacher_name} if self.teacher_name else None,
            "capacity": self.capacity,
            "studentCount": self.student_count,
            "isActive": self.is_active,
        }
