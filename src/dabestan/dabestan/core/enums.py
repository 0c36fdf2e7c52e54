from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Staff roles used by the permission gate."""

    ADMIN = "ADMIN"
    VICE_PRINCIPAL = "VICE_PRINCIPAL"
    TEACHER = "TEACHER"
    FINANCE = "FINANCE"


class Resource(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    CLASS = "CLASS"
    ATTENDANCE = "ATTENDANCE"
    PAYMENT = "PAYMENT"
    MEAL = "MEAL"
    TRANSPORT = "TRANSPORT"
    ANNOUNCEMENT = "ANNOUNCEMENT"
    USER = "USER"
    SYSTEM = "SYSTEM"


class Action(str, Enum):
    VIEW = "VIEW"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AttendanceStatus(str, Enum):
    """Attendance mark for one student on one day.

    UNMARKED is never stored: writing it removes the (student, date) row.
    """

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"
    UNMARKED = "UNMARKED"

    @classmethod
    def stored(cls) -> tuple["AttendanceStatus", ...]:
        return (cls.PRESENT, cls.ABSENT, cls.LATE, cls.EXCUSED)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class PaymentType(str, Enum):
    TUITION = "TUITION"
    FEES = "FEES"
    BOOKS = "BOOKS"
    UNIFORM = "UNIFORM"
    TRANSPORT = "TRANSPORT"
    MEALS = "MEALS"
    OTHER = "OTHER"


class MealType(str, Enum):
    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    SNACK = "SNACK"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
