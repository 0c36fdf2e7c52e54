from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord, RosterEntry
from .repository import AttendanceRepository


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, student_id, class_id, attendance_date, status, notes
                FROM attendance
                WHERE student_id=%s AND attendance_date=%s
                """,
                (int(student_id), attendance_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def upsert(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(student_id, class_id, attendance_date, status, notes)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    class_id=VALUES(class_id),
                    status=VALUES(status),
                    notes=VALUES(notes),
                    updated_at=CURRENT_TIMESTAMP
                """,
                (
                    int(record.student_id),
                    int(record.class_id),
                    record.attendance_date,
                    record.status.value,
                    record.notes,
                ),
            )

    def delete(self, student_id: int, attendance_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance WHERE student_id=%s AND attendance_date=%s",
                (int(student_id), attendance_date),
            )
            return cur.rowcount > 0

    def delete_for_students(self, student_ids: Iterable[int], attendance_date: date) -> int:
        ids = [int(s) for s in student_ids]
        if not ids:
            return 0
        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM attendance WHERE attendance_date=%s AND student_id IN ({placeholders})",
                (attendance_date,) + params,
            )
            return int(cur.rowcount)

    def roster(self, attendance_date: date, class_id: Optional[int] = None) -> Sequence[RosterEntry]:
        sql = """
            SELECT
                s.student_id, s.student_code, s.first_name, s.last_name, s.national_id,
                c.class_id, c.grade, c.section,
                a.status, a.notes
            FROM students s
            JOIN classes c ON c.class_id = s.class_id AND c.is_active = 1
            LEFT JOIN attendance a ON a.student_id = s.student_id AND a.attendance_date = %s
            WHERE s.is_active = 1
        """
        params: list[object] = [attendance_date]
        if class_id is not None:
            sql += " AND c.class_id = %s"
            params.append(int(class_id))
        sql += " ORDER BY c.grade ASC, c.section ASC, s.last_name ASC, s.first_name ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                RosterEntry(
                    student_id=int(r["student_id"]),
                    student_code=r["student_code"],
                    first_name=r["first_name"],
                    last_name=r["last_name"],
                    national_id=r["national_id"],
                    class_id=int(r["class_id"]),
                    grade=int(r["grade"]),
                    section=r["section"],
                    status=AttendanceStatus(r["status"]) if r.get("status") else None,
                    notes=r.get("notes"),
                )
                for r in fetchall(cur)
            ]

    def history(self, student_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, student_id, class_id, attendance_date, status, notes
                FROM attendance
                WHERE student_id=%s AND attendance_date BETWEEN %s AND %s
                ORDER BY attendance_date DESC
                """,
                (int(student_id), start, end),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def counts_by_status(self, attendance_date: date) -> dict[str, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.status, COUNT(*) AS n
                FROM attendance a
                JOIN students s ON s.student_id = a.student_id AND s.is_active = 1
                WHERE a.attendance_date=%s
                GROUP BY a.status
                """,
                (attendance_date,),
            )
            return {r["status"]: int(r["n"]) for r in fetchall(cur)}

    def absence_counts(self, since: date, until: date, *, min_count: int) -> Sequence[tuple[int, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.student_id, COUNT(*) AS absences
                FROM attendance a
                JOIN students s ON s.student_id = a.student_id AND s.is_active = 1
                WHERE a.status='ABSENT' AND a.attendance_date BETWEEN %s AND %s
                GROUP BY a.student_id
                HAVING COUNT(*) >= %s
                ORDER BY absences DESC
                """,
                (since, until, int(min_count)),
            )
            return [(int(r["student_id"]), int(r["absences"])) for r in fetchall(cur)]
