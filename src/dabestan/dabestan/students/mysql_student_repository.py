from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_row
from .model import DeletedStudent, Student
from .repository import StudentRepository

_COLUMNS = """
    student_id, student_code, first_name, last_name, father_name, national_id, birth_date,
    grade, section, class_id, phone, email, address, enrollment_date, is_active
"""

_UPDATABLE = {
    "student_code",
    "first_name",
    "last_name",
    "father_name",
    "national_id",
    "birth_date",
    "grade",
    "section",
    "class_id",
    "phone",
    "email",
    "address",
    "is_active",
}


def _row_to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        student_code=r["student_code"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        father_name=r["father_name"],
        national_id=r["national_id"],
        birth_date=r["birth_date"],
        grade=int(r["grade"]),
        section=r["section"],
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
        enrollment_date=r["enrollment_date"],
        phone=r.get("phone"),
        email=r.get("email"),
        address=r.get("address"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return _row_to_student(r) if r else None

    def list(
        self,
        *,
        grade: Optional[int] = None,
        class_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Student]:
        clauses = ["is_active=1"]
        params: list[object] = []
        if grade is not None:
            clauses.append("grade=%s")
            params.append(int(grade))
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(int(class_id))
        if search:
            like = f"%{search}%"
            clauses.append("(first_name LIKE %s OR last_name LIKE %s OR student_code LIKE %s OR national_id LIKE %s)")
            params.extend([like, like, like, like])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE {' AND '.join(clauses)}
                ORDER BY grade ASC, last_name ASC, first_name ASC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [_row_to_student(r) for r in fetchall(cur)]

    def count_active(self, *, class_id: Optional[int] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if class_id is None:
                cur.execute("SELECT COUNT(*) AS n FROM students WHERE is_active=1")
            else:
                cur.execute("SELECT COUNT(*) AS n FROM students WHERE is_active=1 AND class_id=%s", (int(class_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def find_duplicates(
        self,
        *,
        national_id: Optional[str] = None,
        student_code: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> set[str]:
        found: set[str] = set()
        with db_cursor(self._conn_factory) as (_, cur):
            for field, column, value in (
                ("nationalId", "national_id", national_id),
                ("studentId", "student_code", student_code),
            ):
                if not value:
                    continue
                cur.execute(
                    f"SELECT student_id FROM students WHERE {column}=%s AND student_id<>%s LIMIT 1",
                    (value, int(exclude_id or 0)),
                )
                if fetchone(cur):
                    found.add(field)
        return found

    def create(self, student: Student) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(
                    student_code, first_name, last_name, father_name, national_id, birth_date,
                    grade, section, class_id, phone, email, address, enrollment_date, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    student.student_code,
                    student.first_name,
                    student.last_name,
                    student.father_name,
                    student.national_id,
                    student.birth_date,
                    student.grade,
                    student.section,
                    student.class_id,
                    student.phone,
                    student.email,
                    student.address,
                    student.enrollment_date,
                    int(student.is_active),
                ),
            )
            return int(cur.lastrowid)

    def update(self, student_id: int, fields: dict) -> bool:
        return update_row(self._conn_factory, "students", "student_id", student_id, fields, _UPDATABLE)

    def delete_cascade(self, student_id: int) -> Optional[DeletedStudent]:
        sid = int(student_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT first_name, last_name FROM students WHERE student_id=%s", (sid,))
            r = fetchone(cur)
            if not r:
                return None

            cur.execute("DELETE FROM attendance WHERE student_id=%s", (sid,))
            attendance_count = cur.rowcount
            cur.execute("DELETE FROM payments WHERE student_id=%s", (sid,))
            payment_count = cur.rowcount
            cur.execute("DELETE FROM meal_subscriptions WHERE student_id=%s", (sid,))
            cur.execute("DELETE FROM transport_assignments WHERE student_id=%s", (sid,))
            cur.execute("DELETE FROM students WHERE student_id=%s", (sid,))

            return DeletedStudent(
                student_id=sid,
                name=f"{r['first_name']} {r['last_name']}",
                attendance_records=attendance_count,
                payment_records=payment_count,
            )
