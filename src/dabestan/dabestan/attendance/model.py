from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..common.persian import attendance_label, class_label
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one stored mark, unique per (student_id, attendance_date)."""

    student_id: int
    class_id: int
    attendance_date: date
    status: AttendanceStatus
    notes: Optional[str] = None
    attendance_id: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "studentId": self.student_id,
            "classId": self.class_id,
            "date": self.attendance_date.isoformat(),
            "status": self.status.value,
            "statusLabel": attendance_label(self.status),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class RosterEntry:
    """Read-model: an active student of a class with the day's mark, if any.

    ``status`` is None when no mark is stored for the day.
    """

    student_id: int
    student_code: str
    first_name: str
    last_name: str
    national_id: str
    class_id: int
    grade: int
    section: str
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def effective_status(self) -> AttendanceStatus:
        return self.status or AttendanceStatus.UNMARKED

    def to_dict(self) -> dict:
        return {
            "id": self.student_id,
            "studentId": self.student_code,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "name": self.full_name,
            "nationalId": self.national_id,
            "classId": self.class_id,
            "attendance_status": self.status.value if self.status else None,
            "statusLabel": attendance_label(self.status),
            "notes": self.notes,
        }


@dataclass
class RosterClass:
    """Roster entries of one class, in display order."""

    class_id: int
    grade: int
    section: str
    students: list[RosterEntry] = field(default_factory=list)

    @property
    def label(self) -> str:
        return class_label(self.grade, self.section)

    def to_dict(self) -> dict:
        return {
            "id": self.class_id,
            "grade": self.grade,
            "section": self.section,
            "name": self.label,
            "students": [s.to_dict() for s in self.students],
        }


@dataclass(frozen=True)
class MarkResult:
    """One row of a bulk manifest."""

    student_id: int
    success: bool
    status: Optional[AttendanceStatus] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict = {"studentId": self.student_id, "success": self.success}
        if self.status is not None:
            out["status"] = self.status.value
        if self.error:
            out["error"] = self.error
        return out
