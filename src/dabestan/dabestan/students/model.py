from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a student and their current class placement."""

    student_id: int
    student_code: str
    first_name: str
    last_name: str
    father_name: str
    national_id: str
    birth_date: date
    grade: int
    section: str
    class_id: Optional[int]
    enrollment_date: date
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        return {
            "id": self.student_id,
            "studentId": self.student_code,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "name": self.full_name,
            "fatherName": self.father_name,
            "nationalId": self.national_id,
            "birthDate": self.birth_date.isoformat(),
            "grade": self.grade,
            "section": self.section,
            "classId": self.class_id,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "enrollmentDate": self.enrollment_date.isoformat(),
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class DeletedStudent:
    """What a hard delete removed along with the student row."""

    student_id: int
    name: str
    attendance_records: int
    payment_records: int
