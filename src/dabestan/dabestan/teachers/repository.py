from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Teacher


class TeacherRepository(Protocol):
    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Teacher]:
        raise NotImplementedError

    def find_duplicates(
        self,
        *,
        national_id: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        employee_id: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> set[str]:
        """Names of the given fields already used by another teacher."""

        raise NotImplementedError

    def create(self, teacher: Teacher) -> int:
        raise NotImplementedError

    def update(self, teacher_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, teacher_id: int) -> bool:
        raise NotImplementedError
