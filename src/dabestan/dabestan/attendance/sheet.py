from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from ..common.validators import require_date, require_enum
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from .client import AttendanceGateway
from .filters import RosterFilter
from .model import MarkResult

logger = logging.getLogger(__name__)


class SheetMode(str, Enum):
    IMMEDIATE = "IMMEDIATE"
    BATCHED = "BATCHED"


@dataclass
class SheetRow:
    """Editable copy of a roster entry. ``status`` None means unmarked."""

    student_id: int
    student_code: str
    first_name: str
    last_name: str
    national_id: str
    class_id: int
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    dirty: bool = False
    error: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class AttendanceSheet:
    """State of one attendance-marking screen for a date and class.

    The write mode is fixed at construction. IMMEDIATE writes each status
    change on its own; BATCHED keeps edits as dirty rows until ``flush()``
    sends them in a single bulk request. Bulk edits and ``clear()`` always go
    through the bulk request, immediately in IMMEDIATE mode.
    """

    def __init__(self, gateway: AttendanceGateway, *, mode: SheetMode = SheetMode.BATCHED):
        self._gateway = gateway
        self._mode = SheetMode(mode)
        self._rows: dict[int, SheetRow] = {}
        self._date: Optional[date] = None
        self._class_id: Optional[int] = None
        self.filter = RosterFilter()

    @property
    def mode(self) -> SheetMode:
        return self._mode

    @property
    def attendance_date(self) -> Optional[date]:
        return self._date

    @property
    def class_id(self) -> Optional[int]:
        return self._class_id

    @property
    def rows(self) -> list[SheetRow]:
        return list(self._rows.values())

    @property
    def visible_rows(self) -> list[SheetRow]:
        return self.filter.apply(self._rows.values())

    @property
    def has_unsaved_changes(self) -> bool:
        return any(row.dirty for row in self._rows.values())

    def load(self, attendance_date, class_id: Optional[int] = None, *, discard_changes: bool = False) -> list[SheetRow]:
        if self.has_unsaved_changes and not discard_changes:
            raise ValidationError("تغییرات ذخیره نشده وجود دارد")

        d = require_date(attendance_date)
        entries = self._gateway.load_roster(d, class_id)
        self._date = d
        self._class_id = class_id
        self._rows = {
            e.student_id: SheetRow(
                student_id=e.student_id,
                student_code=e.student_code,
                first_name=e.first_name,
                last_name=e.last_name,
                national_id=e.national_id,
                class_id=e.class_id,
                status=e.status,
                notes=e.notes,
            )
            for e in entries
        }
        return self.rows

    def set_filter(self, search: Optional[str] = None, status: Optional[str] = None) -> None:
        self.filter = RosterFilter.parse(search, status)

    def _row(self, student_id: int) -> SheetRow:
        if self._date is None:
            raise ValidationError("ابتدا فهرست کلاس را بارگذاری کنید")
        row = self._rows.get(int(student_id))
        if row is None:
            raise NotFoundError("دانش‌آموز در این فهرست نیست")
        return row

    @staticmethod
    def _apply(row: SheetRow, status: AttendanceStatus, notes: Optional[str]) -> None:
        row.status = None if status == AttendanceStatus.UNMARKED else status
        if status == AttendanceStatus.UNMARKED:
            row.notes = None
        elif notes is not None:
            row.notes = notes
        row.dirty = True
        row.error = None

    def set_status(self, student_id: int, status, notes: Optional[str] = None) -> SheetRow:
        row = self._row(student_id)
        st = require_enum(status, AttendanceStatus, "وضعیت")
        self._apply(row, st, notes)
        if self._mode == SheetMode.IMMEDIATE:
            self._write_one(row)
        return row

    def set_notes(self, student_id: int, notes: Optional[str]) -> SheetRow:
        row = self._row(student_id)
        if self._mode == SheetMode.IMMEDIATE and row.status is None:
            raise ValidationError("ابتدا وضعیت حضور را انتخاب کنید")
        row.notes = notes
        row.dirty = True
        row.error = None
        if self._mode == SheetMode.IMMEDIATE:
            self._write_one(row)
        return row

    def bulk_set_status(self, status) -> list[MarkResult]:
        """Set every currently visible row to ``status``."""

        st = require_enum(status, AttendanceStatus, "وضعیت")
        targets = self.visible_rows
        for row in targets:
            self._apply(row, st, None)
        if self._mode == SheetMode.IMMEDIATE:
            return self._send(targets)
        return []

    def clear(self) -> list[MarkResult]:
        """Unmark every currently visible row."""

        return self.bulk_set_status(AttendanceStatus.UNMARKED)

    def flush(self) -> list[MarkResult]:
        return self._send([row for row in self._rows.values() if row.dirty])

    def _write_one(self, row: SheetRow) -> None:
        self._gateway.mark(
            row.student_id,
            self._date,
            row.status or AttendanceStatus.UNMARKED,
            row.notes,
            row.class_id,
        )
        row.dirty = False

    def _send(self, rows: list[SheetRow]) -> list[MarkResult]:
        if not rows:
            return []
        updates = [
            {
                "studentId": row.student_id,
                "status": (row.status or AttendanceStatus.UNMARKED).value,
                "notes": row.notes,
            }
            for row in rows
        ]
        results = list(self._gateway.bulk(self._date, updates, self._class_id))

        for result in results:
            row = self._rows.get(result.student_id)
            if row is None:
                continue
            if result.success:
                row.dirty = False
                row.error = None
            else:
                row.error = result.error
        failed = sum(1 for r in results if not r.success)
        if failed:
            logger.warning("%s of %s attendance rows were not saved", failed, len(results))
        return results

    def export(self) -> bytes:
        if self._date is None:
            raise ValidationError("ابتدا فهرست کلاس را بارگذاری کنید")
        # The server filters stored marks; dirty rows would export differently than shown.
        if self.has_unsaved_changes:
            raise ValidationError("ابتدا تغییرات را ذخیره کنید")
        status = None if self.filter.status == "all" else self.filter.status
        return self._gateway.export(self._date, self._class_id, self.filter.search or None, status)
