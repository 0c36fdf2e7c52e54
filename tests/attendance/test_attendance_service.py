from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.dabestan.dabestan.attendance.service import AttendanceService
from src.dabestan.dabestan.core.enums import AttendanceStatus
from src.dabestan.dabestan.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from tests.fakes import make_school

DAY = date(2024, 3, 10)


@pytest.fixture
def school():
    return make_school()


@pytest.fixture
def service(school):
    return AttendanceService(school.attendance, school.students)


def _statuses(service, d=DAY, class_id=None):
    return {e.student_id: e.status for e in service.roster_entries(d, class_id)}


def test_mark_shows_up_in_roster(service):
    service.mark(1, "2024-03-10", "PRESENT")

    assert _statuses(service)[1] == AttendanceStatus.PRESENT
    assert _statuses(service)[2] is None


def test_second_mark_same_day_overwrites(service, school):
    service.mark(1, DAY, "PRESENT")
    service.mark(1, DAY, "LATE", notes="  ده دقیقه تأخیر ")

    stored = [r for (sid, d), r in school.attendance.records.items() if sid == 1 and d == DAY]
    assert len(stored) == 1
    assert stored[0].status == AttendanceStatus.LATE
    assert stored[0].notes == "ده دقیقه تأخیر"


def test_marks_on_different_days_are_independent(service):
    service.mark(1, DAY, "ABSENT")
    service.mark(1, DAY + timedelta(days=1), "PRESENT")

    assert _statuses(service, DAY)[1] == AttendanceStatus.ABSENT
    assert _statuses(service, DAY + timedelta(days=1))[1] == AttendanceStatus.PRESENT


def test_unmarked_removes_the_stored_row(service, school):
    service.mark(1, DAY, "ABSENT")

    assert service.mark(1, DAY, "UNMARKED") is None
    assert school.attendance.get(1, DAY) is None
    assert _statuses(service)[1] is None


def test_mark_stores_the_students_current_class(service, school):
    record = service.mark(1, DAY, "PRESENT", class_id=2)

    assert record.class_id == 1
    assert school.attendance.get(1, DAY).class_id == 1


def test_mark_requires_student_date_and_status(service):
    with pytest.raises(ValidationError) as e:
        service.mark(None, DAY, "PRESENT")
    assert str(e.value) == "اطلاعات ناقص است"

    with pytest.raises(ValidationError):
        service.mark(1, "", "PRESENT")
    with pytest.raises(ValidationError):
        service.mark(1, DAY, None)


def test_mark_rejects_unknown_status_and_bad_date(service):
    with pytest.raises(ValidationError):
        service.mark(1, DAY, "SICK")
    with pytest.raises(ValidationError):
        service.mark(1, "10/03/2024", "PRESENT")


def test_mark_for_inactive_student_is_not_found(service, school):
    school.students.update(2, {"is_active": 0})

    with pytest.raises(NotFoundError):
        service.mark(2, DAY, "PRESENT")
    with pytest.raises(NotFoundError):
        service.mark(99, DAY, "PRESENT")


def test_note_length_is_limited(service):
    with pytest.raises(ValidationError):
        service.mark(1, DAY, "EXCUSED", notes="x" * 201)


def test_roster_is_grouped_by_class_in_display_order(service):
    classes = service.roster(DAY)

    assert [c.class_id for c in classes] == [1, 2]
    assert [s.last_name for s in classes[0].students] == ["Ahmadi", "Bahrami"]
    assert classes[0].to_dict()["name"] == "پایه 1 - شعبه الف"
    assert classes[0].to_dict()["students"][0]["attendance_status"] is None


def test_roster_for_one_class(service):
    entries = service.roster_entries(DAY, "2")

    assert [e.student_id for e in entries] == [3]


def test_roster_skips_inactive_classes(service, school):
    school.classes.update(2, {"is_active": 0})

    assert [c.class_id for c in service.roster(DAY)] == [1]


def test_summary_counts_add_up_to_roster_size(service):
    service.mark(1, DAY, "PRESENT")
    service.mark(3, DAY, "ABSENT")
    entries = service.roster_entries(DAY)

    summary = service.summarize(entries)

    assert summary["total"] == len(entries) == 3
    assert summary["marked"] == 2
    assert summary["unmarked"] == 1
    assert sum(summary["by_status"].values()) == summary["total"]
    assert summary["by_status"]["ABSENT"] == 1


def test_bulk_reports_each_row_and_keeps_the_good_ones(service, school):
    result = service.bulk_mark(
        "2024-03-10",
        [
            {"studentId": 1, "status": "PRESENT"},
            {"studentId": 99, "status": "PRESENT"},
            {"studentId": 2, "status": "HOLIDAY"},
            {"studentId": 3, "status": "ABSENT", "notes": "بیمار"},
            {"status": "PRESENT"},
        ],
    )

    assert not result.success
    assert [r.success for r in result.results] == [True, False, False, True, False]
    assert result.results[1].error == "دانش‌آموز یافت نشد"
    assert result.summary() == {"total": 5, "succeeded": 2, "failed": 3, "by_status": {"PRESENT": 1, "ABSENT": 1}}
    assert school.attendance.get(1, DAY).status == AttendanceStatus.PRESENT
    assert school.attendance.get(3, DAY).notes == "بیمار"
    assert school.attendance.get(2, DAY) is None


def test_bulk_with_class_rejects_students_of_other_classes(service, school):
    result = service.bulk_mark(
        DAY,
        [{"studentId": 1, "status": "PRESENT"}, {"studentId": 3, "status": "PRESENT"}],
        class_id=1,
    )

    assert [r.success for r in result.results] == [True, False]
    assert result.results[1].error == "دانش‌آموز در این کلاس نیست"
    assert school.attendance.get(3, DAY) is None


def test_bulk_row_guard_rejects_only_that_row(service, school):
    def guard(student_id: int) -> None:
        if student_id == 3:
            raise AuthorizationError("شما مجوز انجام این عملیات را ندارید")

    result = service.bulk_mark(
        DAY,
        [{"studentId": 3, "status": "ABSENT"}, {"studentId": 2, "status": "LATE"}],
        row_guard=guard,
    )

    assert result.to_dict()["results"] == [
        {"studentId": 3, "success": False, "error": "شما مجوز انجام این عملیات را ندارید"},
        {"studentId": 2, "success": True, "status": "LATE"},
    ]
    assert school.attendance.get(3, DAY) is None


def test_bulk_unexpected_store_error_fails_the_row(service, school, monkeypatch):
    real_upsert = school.attendance.upsert

    def flaky(record):
        if record.student_id == 2:
            raise RuntimeError("connection reset")
        real_upsert(record)

    monkeypatch.setattr(school.attendance, "upsert", flaky)

    result = service.bulk_mark(DAY, [{"studentId": 1, "status": "PRESENT"}, {"studentId": 2, "status": "PRESENT"}])

    assert result.succeeded == 1
    assert result.results[1].error == "خطا در ثبت حضور و غیاب"


def test_bulk_unmarked_clears_rows(service, school):
    service.mark(1, DAY, "ABSENT")

    result = service.bulk_mark(DAY, [{"studentId": 1, "status": "UNMARKED"}])

    assert result.success
    assert school.attendance.get(1, DAY) is None


@pytest.mark.parametrize("updates", [[], None, "not-a-list"])
def test_bulk_requires_updates(service, updates):
    with pytest.raises(ValidationError):
        service.bulk_mark(DAY, updates)


def test_clear_removes_only_the_class_marks(service, school):
    for sid in (1, 2, 3):
        service.mark(sid, DAY, "PRESENT")
    service.mark(1, DAY + timedelta(days=1), "PRESENT")

    cleared = service.clear(1, "2024-03-10")

    assert cleared == 2
    assert school.attendance.get(1, DAY) is None
    assert school.attendance.get(3, DAY) is not None
    assert school.attendance.get(1, DAY + timedelta(days=1)) is not None


def test_clear_requires_class_and_date(service):
    with pytest.raises(ValidationError):
        service.clear(None, DAY)


def test_clear_student_without_mark_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.clear_student(1, DAY)

    service.mark(1, DAY, "LATE")
    service.clear_student(1, DAY)
    with pytest.raises(NotFoundError):
        service.clear_student(1, DAY)


def test_student_history_stats_for_month(service):
    service.mark(1, date(2024, 3, 2), "PRESENT")
    service.mark(1, date(2024, 3, 3), "PRESENT")
    service.mark(1, date(2024, 3, 4), "PRESENT")
    service.mark(1, date(2024, 3, 5), "ABSENT")
    service.mark(1, date(2024, 2, 28), "ABSENT")

    history = service.student_history(1, month="3", year="2024")

    assert history["stats"] == {
        "totalDays": 4,
        "presentDays": 3,
        "absentDays": 1,
        "lateDays": 0,
        "excusedDays": 0,
        "attendanceRate": 75,
    }
    assert [r["date"] for r in history["records"]] == ["2024-03-02", "2024-03-03", "2024-03-04", "2024-03-05"]


def test_student_history_unknown_student(service):
    with pytest.raises(NotFoundError):
        service.student_history(42)


def test_student_day_returns_none_when_unmarked(service):
    assert service.student_day(1, DAY) is None
    service.mark(1, DAY, "EXCUSED")
    assert service.student_day(1, DAY).status == AttendanceStatus.EXCUSED


def test_today_stats(service):
    service.mark(1, DAY, "PRESENT")
    service.mark(2, DAY, "PRESENT")
    service.mark(3, DAY, "LATE")

    stats = service.today_stats("2024-03-10")

    assert stats["presentToday"] == 2
    assert stats["lateToday"] == 1
    assert stats["totalMarked"] == 3
    assert stats["totalStudents"] == 3
    assert stats["attendanceRate"] == 67


def test_frequent_absentees_need_more_than_threshold(school):
    service = AttendanceService(school.attendance, school.students, absence_threshold=3, absence_days=30)
    for offset in range(4):
        service.mark(1, DAY - timedelta(days=offset + 1), "ABSENT")
    for offset in range(3):
        service.mark(2, DAY - timedelta(days=offset + 1), "ABSENT")
    # outside the window
    service.mark(2, DAY - timedelta(days=45), "ABSENT")

    report = service.frequent_absentees(today=DAY)

    assert report["count"] == 1
    assert report["threshold"] == 3
    assert report["periodDays"] == 30
    assert report["frequentAbsentees"][0]["id"] == 1
    assert report["frequentAbsentees"][0]["absenceCount"] == 4
    assert report["frequentAbsentees"][0]["class"] == "1الف"


def test_filtered_entries_match_search_and_status(service):
    service.mark(1, DAY, "PRESENT")
    service.mark(3, DAY, "ABSENT")

    assert [e.student_id for e in service.filtered_entries(DAY, status="unmarked")] == [2]
    assert [e.student_id for e in service.filtered_entries(DAY, search="moradi")] == [3]
    assert [e.student_id for e in service.filtered_entries(DAY, class_id=1, status="ABSENT")] == []


def test_bulk_over_filtered_students_leaves_one_row_each(service, school):
    targets = service.filtered_entries(DAY, class_id=1, status="unmarked")

    service.bulk_mark(DAY, [{"studentId": e.student_id, "status": "EXCUSED"} for e in targets], class_id=1)

    stored = [r for (_, d), r in school.attendance.records.items() if d == DAY]
    assert len(stored) == len(targets) == 2
    assert {r.status for r in stored} == {AttendanceStatus.EXCUSED}


def test_mark_then_bulk_then_remark_scenario(service, school):
    day = "2024-01-15"
    service.mark(1, day, "PRESENT")
    service.bulk_mark(day, [{"studentId": 2, "status": "ABSENT"}, {"studentId": 3, "status": "ABSENT"}])
    assert _statuses(service, date(2024, 1, 15)) == {
        1: AttendanceStatus.PRESENT,
        2: AttendanceStatus.ABSENT,
        3: AttendanceStatus.ABSENT,
    }

    service.mark(1, day, "LATE")

    assert _statuses(service, date(2024, 1, 15))[1] == AttendanceStatus.LATE
    assert sum(1 for (sid, d) in school.attendance.records if sid == 1 and d == date(2024, 1, 15)) == 1
