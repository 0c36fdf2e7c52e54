from __future__ import annotations

import pytest

from src.dabestan.dabestan.attendance.filters import RosterFilter
from src.dabestan.dabestan.attendance.model import RosterEntry
from src.dabestan.dabestan.core.enums import AttendanceStatus
from src.dabestan.dabestan.core.exceptions import ValidationError


def _entry(student_id, first, last, code, national_id, status=None):
    return RosterEntry(student_id, code, first, last, national_id, 1, 1, "الف", status)


ROWS = [
    _entry(1, "Ali", "Ahmadi", "S-1001", "1234567890", AttendanceStatus.PRESENT),
    _entry(2, "Sara", "Bahrami", "S-1002", "2345678901"),
    _entry(3, "زهرا", "نوری", "S-1003", "9876543210", AttendanceStatus.ABSENT),
]


def _ids(rows):
    return [r.student_id for r in rows]


def test_default_filter_keeps_everything():
    assert _ids(RosterFilter().apply(ROWS)) == [1, 2, 3]
    assert _ids(RosterFilter.parse(None, None).apply(ROWS)) == [1, 2, 3]


def test_search_is_case_insensitive_on_full_name():
    assert _ids(RosterFilter.parse("ali ahm").apply(ROWS)) == [1]
    assert _ids(RosterFilter.parse("SARA").apply(ROWS)) == [2]
    assert _ids(RosterFilter.parse("نوری").apply(ROWS)) == [3]


def test_search_matches_code_and_national_id():
    assert _ids(RosterFilter.parse("s-100").apply(ROWS)) == [1, 2, 3]
    assert _ids(RosterFilter.parse("2345678901").apply(ROWS)) == [2]


def test_search_accepts_persian_digits():
    assert _ids(RosterFilter.parse("۱۰۰۳").apply(ROWS)) == [3]


@pytest.mark.parametrize(
    "status,expected",
    [
        ("all", [1, 2, 3]),
        ("unmarked", [2]),
        ("UNMARKED", [2]),
        ("present", [1]),
        ("ABSENT", [3]),
        ("LATE", []),
    ],
)
def test_status_filter(status, expected):
    assert _ids(RosterFilter.parse(None, status).apply(ROWS)) == expected


def test_search_and_status_combine():
    assert _ids(RosterFilter.parse("s-100", "unmarked").apply(ROWS)) == [2]


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        RosterFilter.parse(None, "sick")
