from __future__ import annotations

import io
from datetime import date

from openpyxl import load_workbook

from src.dabestan.dabestan.attendance.export import COLUMNS, build_workbook, export_filename
from src.dabestan.dabestan.attendance.service import AttendanceService
from tests.fakes import make_school

DAY = date(2024, 3, 10)


def _sheet(content: bytes):
    return load_workbook(io.BytesIO(content)).active


def _data_rows(sheet):
    return [[None if v == "" else v for v in row] for row in sheet.iter_rows(min_row=2, values_only=True)]


def test_filename_carries_the_date():
    assert export_filename(DAY) == "attendance-2024-03-10.xlsx"


def test_workbook_has_header_and_one_row_per_student():
    service = AttendanceService(*_repos())
    service.mark(1, DAY, "PRESENT")
    service.mark(2, DAY, "EXCUSED", notes="مراجعه به پزشک")

    sheet = _sheet(service.export(DAY, class_id=1))

    assert [c.value for c in sheet[1]] == COLUMNS
    assert sheet.sheet_view.rightToLeft
    assert _data_rows(sheet) == [
        ["S-1001", "Ali Ahmadi", "1234567890", "حاضر", None],
        ["S-1002", "Sara Bahrami", "2345678901", "مرخصی", "مراجعه به پزشک"],
    ]


def test_export_rows_match_the_filtered_roster():
    service = AttendanceService(*_repos())
    service.mark(1, DAY, "ABSENT")

    for search, status in ((None, None), (None, "unmarked"), ("ahmadi", None), (None, "ABSENT"), ("zzz", None)):
        expected = service.filtered_entries(DAY, search=search, status=status)
        sheet = _sheet(service.export(DAY, search=search, status=status))
        assert sheet.max_row - 1 == len(expected)
        assert [r[0] for r in _data_rows(sheet)] == [e.student_code for e in expected]


def test_unmarked_students_are_labelled():
    service = AttendanceService(*_repos())

    rows = _data_rows(_sheet(build_workbook(service.roster_entries(DAY, 2))))

    assert rows == [["S-2001", "Reza Moradi", "3456789012", "ثبت نشده", None]]


def _repos():
    school = make_school()
    return school.attendance, school.students
