from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import month_bounds, today_local
from ..common.validators import require_date, require_enum, require_int, require_max_length
from ..core.constants import FREQUENT_ABSENCE_DAYS, FREQUENT_ABSENCE_THRESHOLD, MAX_NOTE_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .export import build_workbook
from .filters import RosterFilter
from .model import AttendanceRecord, MarkResult, RosterClass, RosterEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

STORED_STATUSES = AttendanceStatus.stored()


def status_counts(statuses: Iterable[Optional[AttendanceStatus]]) -> dict[str, int]:
    counter = Counter((s or AttendanceStatus.UNMARKED).value for s in statuses)
    return {s.value: counter.get(s.value, 0) for s in AttendanceStatus}


def _rate(part: int, whole: int) -> int:
    return round(part * 100 / whole) if whole else 0


@dataclass
class BulkResult:
    """Per-row manifest of a bulk write."""

    results: list[MarkResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded

    @property
    def success(self) -> bool:
        return self.failed == 0

    def summary(self) -> dict:
        by_status = Counter(r.status.value for r in self.results if r.success and r.status)
        return {
            "total": len(self.results),
            "succeeded": self.succeeded,
            "failed": self.failed,
            "by_status": dict(by_status),
        }

    def to_dict(self) -> dict:
        return {"summary": self.summary(), "results": [r.to_dict() for r in self.results]}


class AttendanceService:
    """Daily attendance marking for students, keyed by (student, date)."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        absence_threshold: int = FREQUENT_ABSENCE_THRESHOLD,
        absence_days: int = FREQUENT_ABSENCE_DAYS,
    ):
        self._attendance = attendance
        self._students = students
        self._absence_threshold = int(absence_threshold)
        self._absence_days = int(absence_days)

    # -- reads --------------------------------------------------------------

    def roster_entries(self, attendance_date, class_id=None) -> Sequence[RosterEntry]:
        d = require_date(attendance_date)
        cid = require_int(class_id, "کلاس") if class_id not in (None, "") else None
        return self._attendance.roster(d, cid)

    def roster(self, attendance_date, class_id=None) -> list[RosterClass]:
        """Roster grouped by class, keeping the repository's ordering."""

        groups: dict[int, RosterClass] = {}
        for entry in self.roster_entries(attendance_date, class_id):
            group = groups.get(entry.class_id)
            if group is None:
                group = groups[entry.class_id] = RosterClass(entry.class_id, entry.grade, entry.section)
            group.students.append(entry)
        return list(groups.values())

    @staticmethod
    def summarize(entries: Sequence[RosterEntry]) -> dict:
        counts = status_counts(e.status for e in entries)
        unmarked = counts[AttendanceStatus.UNMARKED.value]
        return {
            "total": len(entries),
            "marked": len(entries) - unmarked,
            "unmarked": unmarked,
            "by_status": counts,
        }

    # -- writes -------------------------------------------------------------

    def _active_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(student_id)
        if not student or not student.is_active:
            raise NotFoundError("دانش‌آموز یافت نشد")
        return student

    def _write(
        self,
        student: Student,
        d: date,
        status: AttendanceStatus,
        notes: Optional[str],
    ) -> Optional[AttendanceRecord]:
        if status == AttendanceStatus.UNMARKED:
            self._attendance.delete(student.student_id, d)
            return None
        if student.class_id is None:
            raise ValidationError("دانش‌آموز به هیچ کلاسی اختصاص داده نشده است")

        record = AttendanceRecord(
            student_id=student.student_id,
            class_id=student.class_id,
            attendance_date=d,
            status=status,
            notes=require_max_length((notes or "").strip() or None, "توضیحات", MAX_NOTE_LENGTH),
        )
        self._attendance.upsert(record)
        return record

    def mark(self, student_id, attendance_date, status, notes: Optional[str] = None, class_id=None) -> Optional[AttendanceRecord]:
        """Upsert one mark. ``class_id`` from the caller is informational only:
        the stored class is the student's class at write time.

        Returns None when the mark was cleared (status UNMARKED).
        """

        if student_id in (None, "") or not attendance_date or not status:
            raise ValidationError("اطلاعات ناقص است")
        sid = require_int(student_id, "دانش‌آموز")
        d = require_date(attendance_date)
        st = require_enum(status, AttendanceStatus, "وضعیت")

        student = self._active_student(sid)
        return self._write(student, d, st, notes)

    def bulk_mark(
        self,
        attendance_date,
        updates,
        class_id=None,
        *,
        row_guard: Optional[Callable[[int], None]] = None,
    ) -> BulkResult:
        """Apply each update independently and report a per-row manifest.

        ``row_guard`` runs before each write and may raise a DomainError to
        reject that row only.
        """

        if not attendance_date or not isinstance(updates, list) or not updates:
            raise ValidationError("اطلاعات ناقص است")
        d = require_date(attendance_date)
        cid = require_int(class_id, "کلاس") if class_id not in (None, "") else None

        result = BulkResult()
        for item in updates:
            raw_id = item.get("studentId") if isinstance(item, dict) else None
            try:
                sid = require_int(raw_id, "دانش‌آموز")
            except ValidationError as e:
                result.results.append(MarkResult(student_id=0, success=False, error=str(e)))
                continue

            try:
                st = require_enum(item.get("status"), AttendanceStatus, "وضعیت")
                student = self._active_student(sid)
                if cid is not None and student.class_id != cid:
                    raise ValidationError("دانش‌آموز در این کلاس نیست")
                if row_guard is not None:
                    row_guard(sid)
                self._write(student, d, st, item.get("notes"))
                result.results.append(MarkResult(student_id=sid, success=True, status=st))
            except DomainError as e:
                result.results.append(MarkResult(student_id=sid, success=False, error=str(e)))
            except Exception:
                logger.exception("bulk attendance row failed (student=%s date=%s)", sid, d)
                result.results.append(MarkResult(student_id=sid, success=False, error="خطا در ثبت حضور و غیاب"))

        logger.info(
            "bulk attendance %s class=%s: %s ok, %s failed",
            d,
            cid,
            result.succeeded,
            result.failed,
        )
        return result

    def clear(self, class_id, attendance_date) -> int:
        """Remove every mark of the class's roster students on that date."""

        if class_id in (None, "") or not attendance_date:
            raise ValidationError("کلاس و تاریخ الزامی است")
        cid = require_int(class_id, "کلاس")
        d = require_date(attendance_date)

        student_ids = [e.student_id for e in self._attendance.roster(d, cid)]
        cleared = self._attendance.delete_for_students(student_ids, d)
        logger.info("cleared %s attendance marks for class %s on %s", cleared, cid, d)
        return cleared

    def clear_student(self, student_id, attendance_date) -> None:
        if student_id in (None, "") or not attendance_date:
            raise ValidationError("دانش‌آموز و تاریخ الزامی است")
        sid = require_int(student_id, "دانش‌آموز")
        d = require_date(attendance_date)
        if not self._attendance.delete(sid, d):
            raise NotFoundError("رکورد حضور و غیاب یافت نشد")

    # -- reports ------------------------------------------------------------

    def student_day(self, student_id: int, attendance_date) -> Optional[AttendanceRecord]:
        if not self._students.get_by_id(student_id):
            raise NotFoundError("دانش‌آموز یافت نشد")
        return self._attendance.get(student_id, require_date(attendance_date))

    def student_history(self, student_id: int, *, month=None, year=None) -> dict:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("دانش‌آموز یافت نشد")

        today = today_local()
        m = require_int(month, "ماه", min_value=1, max_value=12) if month not in (None, "") else today.month
        y = require_int(year, "سال", min_value=1900) if year not in (None, "") else today.year
        start, end = month_bounds(y, m)

        records = list(self._attendance.history(student_id, start, end))
        counts = Counter(r.status for r in records)
        total = len(records)
        return {
            "student": {"id": student.student_id, "name": student.full_name},
            "records": [r.to_dict() for r in records],
            "stats": {
                "totalDays": total,
                "presentDays": counts[AttendanceStatus.PRESENT],
                "absentDays": counts[AttendanceStatus.ABSENT],
                "lateDays": counts[AttendanceStatus.LATE],
                "excusedDays": counts[AttendanceStatus.EXCUSED],
                "attendanceRate": _rate(counts[AttendanceStatus.PRESENT], total),
            },
            "period": {"month": m, "year": y},
        }

    def today_stats(self, attendance_date=None) -> dict:
        d = require_date(attendance_date) if attendance_date else today_local()
        counts = self._attendance.counts_by_status(d)
        present = counts.get(AttendanceStatus.PRESENT.value, 0)
        total_students = self._students.count_active()
        return {
            "date": d.isoformat(),
            "presentToday": present,
            "absentToday": counts.get(AttendanceStatus.ABSENT.value, 0),
            "lateToday": counts.get(AttendanceStatus.LATE.value, 0),
            "excusedToday": counts.get(AttendanceStatus.EXCUSED.value, 0),
            "totalMarked": sum(counts.get(s.value, 0) for s in STORED_STATUSES),
            "totalStudents": total_students,
            "attendanceRate": _rate(present, total_students),
        }

    def frequent_absentees(self, today: Optional[date] = None) -> dict:
        """Students absent more than the threshold within the recent window."""

        today = today or today_local()
        since = today - timedelta(days=self._absence_days)
        rows = self._attendance.absence_counts(since, today, min_count=self._absence_threshold + 1)

        absentees = []
        for student_id, absences in rows:
            student = self._students.get_by_id(student_id)
            if not student:
                continue
            absentees.append(
                {
                    "id": student.student_id,
                    "name": student.full_name,
                    "studentId": student.student_code,
                    "grade": student.grade,
                    "section": student.section,
                    "class": f"{student.grade}{student.section}",
                    "absenceCount": absences,
                }
            )
        return {
            "frequentAbsentees": absentees,
            "count": len(absentees),
            "threshold": self._absence_threshold,
            "periodDays": self._absence_days,
        }

    def filtered_entries(self, attendance_date, class_id=None, search=None, status=None) -> list[RosterEntry]:
        roster_filter = RosterFilter.parse(search, status)
        return roster_filter.apply(self.roster_entries(attendance_date, class_id))

    def export(self, attendance_date, class_id=None, search=None, status=None) -> bytes:
        entries = self.filtered_entries(attendance_date, class_id, search, status)
        return build_workbook(entries)
