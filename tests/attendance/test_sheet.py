from __future__ import annotations

import io
from datetime import date

import pytest
from openpyxl import load_workbook

from src.dabestan.dabestan.attendance.client import GatewayError, LocalAttendanceGateway
from src.dabestan.dabestan.attendance.model import MarkResult, RosterEntry
from src.dabestan.dabestan.attendance.service import AttendanceService
from src.dabestan.dabestan.attendance.sheet import AttendanceSheet, SheetMode
from src.dabestan.dabestan.core.enums import AttendanceStatus
from src.dabestan.dabestan.core.exceptions import NotFoundError, ValidationError
from tests.fakes import make_school

DAY = date(2024, 3, 10)


class RecordingGateway:
    """Answers like the API would and remembers every call."""

    def __init__(self, entries, *, reject=(), down=False):
        self.entries = list(entries)
        self.reject = set(reject)
        self.down = down
        self.marks: list[tuple] = []
        self.bulks: list[list[dict]] = []
        self.exports: list[tuple] = []

    def load_roster(self, attendance_date, class_id=None):
        return [e for e in self.entries if class_id is None or e.class_id == class_id]

    def mark(self, student_id, attendance_date, status, notes=None, class_id=None):
        if self.down:
            raise GatewayError("خطا در ارتباط با سرور: ConnectionError")
        self.marks.append((student_id, attendance_date, status, notes, class_id))

    def bulk(self, attendance_date, updates, class_id=None):
        if self.down:
            raise GatewayError("خطا در ارتباط با سرور: ConnectionError")
        self.bulks.append(updates)
        return [
            MarkResult(u["studentId"], False, error="شما مجوز انجام این عملیات را ندارید")
            if u["studentId"] in self.reject
            else MarkResult(u["studentId"], True, status=AttendanceStatus(u["status"]))
            for u in updates
        ]

    def export(self, attendance_date, class_id=None, search=None, status=None):
        self.exports.append((attendance_date, class_id, search, status))
        return b"xlsx"


ENTRIES = [
    RosterEntry(1, "S-1001", "Ali", "Ahmadi", "1234567890", 1, 1, "الف"),
    RosterEntry(2, "S-1002", "Sara", "Bahrami", "2345678901", 1, 1, "الف", AttendanceStatus.LATE, "ترافیک"),
    RosterEntry(3, "S-1003", "Reza", "Moradi", "3456789012", 1, 1, "الف"),
]


def _sheet(mode=SheetMode.BATCHED, **gateway_kwargs):
    gateway = RecordingGateway(ENTRIES, **gateway_kwargs)
    sheet = AttendanceSheet(gateway, mode=mode)
    sheet.load("2024-03-10", 1)
    return sheet, gateway


def test_load_copies_roster_rows():
    sheet, _ = _sheet()

    assert sheet.attendance_date == DAY
    assert sheet.class_id == 1
    assert [r.student_id for r in sheet.rows] == [1, 2, 3]
    assert sheet.rows[1].status == AttendanceStatus.LATE
    assert sheet.rows[1].notes == "ترافیک"
    assert not sheet.has_unsaved_changes


def test_batched_edits_wait_for_flush():
    sheet, gateway = _sheet()

    sheet.set_status(1, "PRESENT")
    sheet.set_status(3, "ABSENT", notes="بدون اطلاع")

    assert gateway.marks == [] and gateway.bulks == []
    assert sheet.has_unsaved_changes

    results = sheet.flush()

    assert len(gateway.bulks) == 1
    assert gateway.bulks[0] == [
        {"studentId": 1, "status": "PRESENT", "notes": None},
        {"studentId": 3, "status": "ABSENT", "notes": "بدون اطلاع"},
    ]
    assert all(r.success for r in results)
    assert not sheet.has_unsaved_changes


def test_flush_without_changes_sends_nothing():
    sheet, gateway = _sheet()

    assert sheet.flush() == []
    assert gateway.bulks == []


def test_failed_rows_stay_dirty_with_error():
    sheet, _ = _sheet(reject={3})
    sheet.set_status(1, "PRESENT")
    sheet.set_status(3, "PRESENT")

    sheet.flush()

    row_1, _, row_3 = sheet.rows
    assert not row_1.dirty and row_1.error is None
    assert row_3.dirty
    assert row_3.error == "شما مجوز انجام این عملیات را ندارید"
    assert sheet.has_unsaved_changes


def test_gateway_failure_keeps_every_edit():
    sheet, gateway = _sheet()
    sheet.set_status(1, "PRESENT")
    sheet.set_status(2, "ABSENT")
    gateway.down = True

    with pytest.raises(GatewayError):
        sheet.flush()

    assert [r.dirty for r in sheet.rows] == [True, True, False]
    assert sheet.rows[1].status == AttendanceStatus.ABSENT


def test_immediate_mode_writes_each_change():
    sheet, gateway = _sheet(SheetMode.IMMEDIATE)

    sheet.set_status(1, "present")
    sheet.set_notes(1, "با والدین")

    assert gateway.marks == [
        (1, DAY, AttendanceStatus.PRESENT, None, 1),
        (1, DAY, AttendanceStatus.PRESENT, "با والدین", 1),
    ]
    assert not sheet.has_unsaved_changes


def test_immediate_mode_failure_leaves_row_dirty():
    sheet, _ = _sheet(SheetMode.IMMEDIATE, down=True)

    with pytest.raises(GatewayError):
        sheet.set_status(1, "ABSENT")

    assert sheet.rows[0].dirty
    assert sheet.rows[0].status == AttendanceStatus.ABSENT


def test_immediate_notes_need_a_status_first():
    sheet, gateway = _sheet(SheetMode.IMMEDIATE)

    with pytest.raises(ValidationError):
        sheet.set_notes(1, "یادداشت")
    assert gateway.marks == []


def test_batched_notes_on_unmarked_row_are_kept_locally():
    sheet, _ = _sheet()

    row = sheet.set_notes(1, "یادداشت")

    assert row.dirty and row.notes == "یادداشت"


def test_unmarking_drops_notes():
    sheet, gateway = _sheet(SheetMode.IMMEDIATE)

    sheet.set_status(2, "UNMARKED")

    assert sheet.rows[1].status is None
    assert sheet.rows[1].notes is None
    assert gateway.marks == [(2, DAY, AttendanceStatus.UNMARKED, None, 1)]


def test_mode_is_fixed_at_construction():
    sheet, _ = _sheet(SheetMode.IMMEDIATE)

    assert sheet.mode == SheetMode.IMMEDIATE
    with pytest.raises(AttributeError):
        sheet.mode = SheetMode.BATCHED


def test_load_refuses_to_drop_unsaved_changes():
    sheet, _ = _sheet()
    sheet.set_status(1, "PRESENT")

    with pytest.raises(ValidationError):
        sheet.load(DAY, 1)

    sheet.load(DAY, 1, discard_changes=True)
    assert not sheet.has_unsaved_changes
    assert sheet.rows[0].status is None


def test_bulk_status_applies_to_visible_rows_only():
    sheet, gateway = _sheet(SheetMode.IMMEDIATE)
    sheet.set_filter(status="unmarked")

    results = sheet.bulk_set_status("PRESENT")

    assert [r.student_id for r in results] == [1, 3]
    assert [u["studentId"] for u in gateway.bulks[0]] == [1, 3]
    assert sheet.rows[1].status == AttendanceStatus.LATE


def test_batched_bulk_marks_rows_dirty_without_sending():
    sheet, gateway = _sheet()
    sheet.set_filter(search="ahmadi")

    assert sheet.bulk_set_status("EXCUSED") == []
    assert gateway.bulks == []
    assert [r.dirty for r in sheet.rows] == [True, False, False]


def test_clear_unmarks_visible_rows():
    sheet, gateway = _sheet(SheetMode.IMMEDIATE)

    sheet.clear()

    assert [u["status"] for u in gateway.bulks[0]] == ["UNMARKED"] * 3
    assert all(r.status is None for r in sheet.rows)


def test_edits_need_a_loaded_roster_and_known_student():
    sheet = AttendanceSheet(RecordingGateway(ENTRIES))
    with pytest.raises(ValidationError):
        sheet.set_status(1, "PRESENT")

    sheet.load(DAY)
    with pytest.raises(NotFoundError):
        sheet.set_status(99, "PRESENT")


def test_export_passes_the_current_filter():
    sheet, gateway = _sheet()
    sheet.set_filter("ali", "present")

    assert sheet.export() == b"xlsx"
    assert gateway.exports == [(DAY, 1, "ali", "PRESENT")]


def test_local_gateway_round_trip_through_the_service():
    school = make_school()
    service = AttendanceService(school.attendance, school.students)
    sheet = AttendanceSheet(LocalAttendanceGateway(service))

    sheet.load(DAY, 1)
    sheet.set_status(1, "PRESENT")
    sheet.set_status(2, "ABSENT", notes="بیمار")
    sheet.flush()

    assert school.attendance.get(1, DAY).status == AttendanceStatus.PRESENT
    assert school.attendance.get(2, DAY).notes == "بیمار"
    assert not sheet.has_unsaved_changes


def test_local_gateway_wraps_domain_errors():
    school = make_school()
    gateway = LocalAttendanceGateway(AttendanceService(school.attendance, school.students))

    with pytest.raises(GatewayError):
        gateway.mark(99, DAY, AttendanceStatus.PRESENT)
    with pytest.raises(GatewayError):
        gateway.bulk(DAY, [])


def test_export_waits_for_unsaved_edits():
    school = make_school()
    sheet = AttendanceSheet(LocalAttendanceGateway(AttendanceService(school.attendance, school.students)))
    sheet.load(DAY, 1)
    sheet.set_status(1, "PRESENT")
    sheet.set_filter(status="unmarked")

    with pytest.raises(ValidationError):
        sheet.export()

    sheet.flush()
    workbook = load_workbook(io.BytesIO(sheet.export())).active
    assert workbook.max_row - 1 == len(sheet.visible_rows) == 1
