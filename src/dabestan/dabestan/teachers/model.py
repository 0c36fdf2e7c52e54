from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Teacher:
    """Domain entity: a teacher on the school's staff."""

    teacher_id: int
    employee_id: str
    first_name: str
    last_name: str
    national_id: str
    phone: str
    email: Optional[str] = None
    hire_date: Optional[date] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        return {
            "id": self.teacher_id,
            "employeeId": self.employee_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "name": self.full_name,
            "nationalId": self.national_id,
            "phone": self.phone,
            "email": self.email,
            "hireDate": self.hire_date.isoformat() if self.hire_date else None,
            "isActive": self.is_active,
        }
