from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_row
from .model import SchoolClass
from .repository import ClassRepository

_SELECT = """
    SELECT
        c.class_id, c.grade, c.section, c.teacher_id, c.capacity, c.is_active,
        CONCAT(t.first_name, ' ', t.last_name) AS teacher_name,
        (SELECT COUNT(*) FROM students s WHERE s.class_id = c.class_id AND s.is_active = 1) AS student_count
    FROM classes c
    LEFT JOIN teachers t ON t.teacher_id = c.teacher_id
"""

_UPDATABLE = {"grade", "section", "teacher_id", "capacity", "is_active"}


def _row_to_class(r: dict) -> SchoolClass:
    return SchoolClass(
        class_id=int(r["class_id"]),
        grade=int(r["grade"]),
        section=r["section"],
        teacher_id=int(r["teacher_id"]),
        capacity=int(r.get("capacity") or 0),
        is_active=bool(r.get("is_active", 1)),
        teacher_name=r.get("teacher_name"),
        student_count=int(r.get("student_count") or 0),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE c.class_id=%s", (int(class_id),))
            r = fetchone(cur)
            return _row_to_class(r) if r else None

    def get_by_grade_section(self, grade: int, section: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE c.grade=%s AND c.section=%s", (int(grade), section))
            r = fetchone(cur)
            return _row_to_class(r) if r else None

    def list_active(self, *, grade: Optional[int] = None, teacher_id: Optional[int] = None) -> Sequence[SchoolClass]:
        clauses = ["c.is_active=1"]
        params: list[object] = []
        if grade is not None:
            clauses.append("c.grade=%s")
            params.append(int(grade))
        if teacher_id is not None:
            clauses.append("c.teacher_id=%s")
            params.append(int(teacher_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY c.grade ASC, c.section ASC",
                tuple(params),
            )
            return [_row_to_class(r) for r in fetchall(cur)]

    def create(self, *, grade: int, section: str, teacher_id: int, capacity: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO classes(grade, section, teacher_id, capacity) VALUES(%s,%s,%s,%s)",
                (int(grade), section, int(teacher_id), int(capacity)),
            )
            return int(cur.lastrowid)

    def update(self, class_id: int, fields: dict) -> bool:
        return update_row(self._conn_factory, "classes", "class_id", class_id, fields, _UPDATABLE)

    def count_for_teacher(self, teacher_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM classes WHERE teacher_id=%s", (int(teacher_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
