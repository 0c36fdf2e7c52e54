from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_row
from .model import Teacher
from .repository import TeacherRepository

_COLUMNS = "teacher_id, employee_id, first_name, last_name, national_id, phone, email, hire_date, is_active"

_UPDATABLE = {
    "employee_id",
    "first_name",
    "last_name",
    "national_id",
    "phone",
    "email",
    "hire_date",
    "is_active",
}


def _row_to_teacher(r: dict) -> Teacher:
    return Teacher(
        teacher_id=int(r["teacher_id"]),
        employee_id=r["employee_id"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        national_id=r["national_id"],
        phone=r["phone"],
        email=r.get("email"),
        hire_date=r.get("hire_date"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            r = fetchone(cur)
            return _row_to_teacher(r) if r else None

    def list_active(self) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers WHERE is_active=1 ORDER BY last_name, first_name")
            return [_row_to_teacher(r) for r in fetchall(cur)]

    def find_duplicates(
        self,
        *,
        national_id: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        employee_id: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> set[str]:
        checks = {
            "nationalId": ("national_id", national_id),
            "phone": ("phone", phone),
            "email": ("email", email),
            "employeeId": ("employee_id", employee_id),
        }
        found: set[str] = set()
        with db_cursor(self._conn_factory) as (_, cur):
            for field, (column, value) in checks.items():
                if not value:
                    continue
                cur.execute(
                    f"SELECT teacher_id FROM teachers WHERE {column}=%s AND teacher_id<>%s LIMIT 1",
                    (value, int(exclude_id or 0)),
                )
                if fetchone(cur):
                    found.add(field)
        return found

    def create(self, teacher: Teacher) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teachers(employee_id, first_name, last_name, national_id, phone, email, hire_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    teacher.employee_id,
                    teacher.first_name,
                    teacher.last_name,
                    teacher.national_id,
                    teacher.phone,
                    teacher.email,
                    teacher.hire_date,
                ),
            )
            return int(cur.lastrowid)

    def update(self, teacher_id: int, fields: dict) -> bool:
        return update_row(self._conn_factory, "teachers", "teacher_id", teacher_id, fields, _UPDATABLE)

    def delete(self, teacher_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            return cur.rowcount > 0
