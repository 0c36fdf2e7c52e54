from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from .model import AttendanceRecord, RosterEntry


class AttendanceRepository(Protocol):
    """Persistence of daily marks keyed by (student_id, attendance_date)."""

    def get(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> None:
        """Insert or overwrite the mark for (student_id, attendance_date)."""

        raise NotImplementedError

    def delete(self, student_id: int, attendance_date: date) -> bool:
        raise NotImplementedError

    def delete_for_students(self, student_ids: Iterable[int], attendance_date: date) -> int:
        raise NotImplementedError

    def roster(self, attendance_date: date, class_id: Optional[int] = None) -> Sequence[RosterEntry]:
        """Active students of active classes ordered by grade, section, last name, first name."""

        raise NotImplementedError

    def history(self, student_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def counts_by_status(self, attendance_date: date) -> dict[str, int]:
        raise NotImplementedError

    def absence_counts(self, since: date, until: date, *, min_count: int) -> Sequence[tuple[int, int]]:
        """(student_id, absences) for active students with at least ``min_count`` absences."""

        raise NotImplementedError
