from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import DeletedStudent, Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list(
        self,
        *,
        grade: Optional[int] = None,
        class_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Student]:
        """Active students ordered by grade, last name, first name."""

        raise NotImplementedError

    def count_active(self, *, class_id: Optional[int] = None) -> int:
        raise NotImplementedError

    def find_duplicates(
        self,
        *,
        national_id: Optional[str] = None,
        student_code: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> set[str]:
        raise NotImplementedError

    def create(self, student: Student) -> int:
        raise NotImplementedError

    def update(self, student_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def delete_cascade(self, student_id: int) -> Optional[DeletedStudent]:
        """Hard delete with attendance, payments and service assignments."""

        raise NotImplementedError
