from __future__ import annotations

import io
from datetime import date

import pytest
from openpyxl import load_workbook

from src.dabestan.dabestan.attendance.export import XLSX_MIMETYPE
from src.dabestan.dabestan.common.web import GENERIC_ERROR
from src.dabestan.dabestan.main import create_app
from tests.fakes import make_school

DAY = "2024-03-10"


@pytest.fixture
def school():
    return make_school()


@pytest.fixture
def app(school, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(school.container())


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username):
    r = client.post("/api/auth/login", json={"username": username, "password": f"{username}-pass"})
    assert r.status_code == 200, r.get_json()
    return r.get_json()["data"]


# -- auth ------------------------------------------------------------------


def test_api_requires_login(client):
    r = client.get("/api/students")

    assert r.status_code == 401
    assert r.get_json() == {"success": False, "error": "لطفاً ابتدا وارد سیستم شوید"}


def test_login_failures(client):
    assert client.post("/api/auth/login", json={"username": "admin"}).status_code == 400

    r = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    assert r.status_code == 401
    assert r.get_json()["error"] == "نام کاربری یا رمز عبور اشتباه است"


def test_login_returns_user_and_permissions(client):
    data = login(client, "rezaei")

    assert data["user"] == {"id": 3, "name": "Rezaei", "role": "TEACHER", "teacherId": 1}
    assert data["permissions"]["PAYMENT"] == []
    assert data["permissions"]["ATTENDANCE"] == ["VIEW", "UPDATE"]


def test_me_and_logout(client):
    login(client, "admin")
    assert client.get("/api/auth/me").get_json()["data"]["user"]["role"] == "ADMIN"

    client.post("/api/auth/logout")

    assert client.get("/api/auth/me").status_code == 401


def test_permissions_for_one_resource(client):
    login(client, "mali")

    r = client.get("/api/auth/permissions?resource=meal")
    assert r.get_json()["data"] == {"role": "FINANCE", "resource": "MEAL", "actions": ["VIEW", "CREATE", "UPDATE"]}
    assert client.get("/api/auth/permissions?resource=library").status_code == 400


# -- attendance ------------------------------------------------------------


def test_teacher_marks_only_their_class(client, school):
    login(client, "rezaei")

    r = client.post("/api/attendance/mark", json={"studentId": 1, "date": DAY, "status": "PRESENT"})
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "PRESENT"

    r = client.post("/api/attendance/mark", json={"studentId": 3, "date": DAY, "status": "PRESENT"})
    assert r.status_code == 403
    assert school.attendance.get(3, date(2024, 3, 10)) is None


def test_finance_cannot_mark(client):
    login(client, "mali")

    r = client.post("/attendance/mark", json={"studentId": 1, "date": DAY, "status": "PRESENT"})

    assert r.status_code == 403
    assert r.get_json()["error"] == "شما مجوز انجام این عملیات را ندارید"


def test_mark_validation_and_unmark(client):
    login(client, "moaven")

    r = client.post("/api/attendance/mark", json={"studentId": 1, "status": "PRESENT"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "اطلاعات ناقص است"

    client.post("/api/attendance/mark", json={"studentId": 1, "date": DAY, "status": "ABSENT"})
    r = client.post("/api/attendance/mark", json={"studentId": 1, "date": DAY, "status": "UNMARKED"})
    assert r.get_json()["data"] == {"studentId": 1, "status": None}

    assert client.post("/api/attendance/mark", json={"studentId": 99, "date": DAY, "status": "LATE"}).status_code == 404


def test_teacher_bulk_fails_foreign_rows_only(client):
    login(client, "rezaei")

    r = client.post(
        "/api/attendance/bulk",
        json={"date": DAY, "updates": [{"studentId": 1, "status": "ABSENT"}, {"studentId": 3, "status": "ABSENT"}]},
    )

    body = r.get_json()
    assert r.status_code == 200
    assert body["success"] is False
    assert [row["success"] for row in body["data"]["results"]] == [True, False]
    assert body["data"]["summary"]["failed"] == 1


def test_teacher_bulk_for_foreign_class_is_forbidden(client):
    login(client, "rezaei")

    r = client.post("/api/attendance/bulk", json={"date": DAY, "classId": 2, "updates": [{"studentId": 3, "status": "ABSENT"}]})

    assert r.status_code == 403


def test_bulk_needs_updates(client):
    login(client, "admin")

    assert client.post("/api/attendance/bulk", json={"date": DAY, "updates": []}).status_code == 400


def test_roster_is_served_on_both_prefixes(client):
    login(client, "admin")
    client.post("/api/attendance/mark", json={"studentId": 3, "date": DAY, "status": "LATE"})

    page = client.get(f"/attendance/roster?date={DAY}").get_json()
    api = client.get(f"/api/attendance/roster?date={DAY}").get_json()

    assert page == api
    assert [c["id"] for c in api["data"]["classes"]] == [1, 2]
    assert api["data"]["summary"]["marked"] == 1
    assert api["data"]["classes"][1]["students"][0]["attendance_status"] == "LATE"


def test_teacher_non_numeric_ids_are_validation_errors(client):
    login(client, "rezaei")

    mark = client.post("/api/attendance/mark", json={"studentId": "abc", "date": DAY, "status": "PRESENT"})
    bulk = client.post(
        "/api/attendance/bulk", json={"date": DAY, "classId": "x", "updates": [{"studentId": 1, "status": "PRESENT"}]}
    )
    clear = client.post("/api/attendance/clear", json={"classId": "x", "date": DAY})

    assert [r.status_code for r in (mark, bulk, clear)] == [400, 400, 400]
    assert mark.get_json()["error"] == "دانش‌آموز باید عدد صحیح باشد"


def test_export_downloads_filtered_workbook(client):
    login(client, "rezaei")
    client.post("/api/attendance/mark", json={"studentId": 1, "date": DAY, "status": "PRESENT"})

    r = client.get(f"/api/attendance/export?date={DAY}&status=unmarked")

    assert r.status_code == 200
    assert r.mimetype == XLSX_MIMETYPE
    assert "attendance-2024-03-10.xlsx" in r.headers["Content-Disposition"]
    sheet = load_workbook(io.BytesIO(r.data)).active
    assert sheet.max_row - 1 == 2


def test_export_rejects_bad_date_and_status(client):
    login(client, "admin")

    assert client.get("/api/attendance/export?date=yesterday").status_code == 400
    assert client.get(f"/api/attendance/export?date={DAY}&status=sick").status_code == 400


def test_clear_class_and_student(client):
    login(client, "admin")
    for sid in (1, 2, 3):
        client.post("/api/attendance/mark", json={"studentId": sid, "date": DAY, "status": "PRESENT"})

    r = client.post("/api/attendance/clear", json={"classId": 1, "date": DAY})
    assert r.get_json()["data"] == {"cleared": 2}

    assert client.delete(f"/api/attendance/clear?studentId=1&date={DAY}").status_code == 404
    assert client.delete(f"/api/attendance/clear?studentId=3&date={DAY}").status_code == 200


def test_student_attendance_endpoints(client):
    login(client, "admin")
    client.post("/api/attendance/mark", json={"studentId": 1, "date": DAY, "status": "ABSENT"})

    day = client.get(f"/api/attendance/student/1?date={DAY}").get_json()
    history = client.get("/api/attendance/student/1?month=3&year=2024").get_json()

    assert day["data"]["status"] == "ABSENT"
    assert history["data"]["stats"]["absentDays"] == 1
    assert client.get("/api/attendance/student/1?date=2024-03-11").get_json().get("data") is None


def test_today_stats_and_absentees(client):
    login(client, "admin")

    stats = client.get(f"/api/attendance/stats/today?date={DAY}").get_json()["data"]
    absentees = client.get("/api/attendance/frequent-absentees").get_json()["data"]

    assert stats["totalStudents"] == 3
    assert absentees["threshold"] == 3


# -- records ---------------------------------------------------------------


def test_classes_are_listed_on_both_paths(client):
    login(client, "rezaei")

    api = client.get("/api/classes").get_json()
    page = client.get("/management/classes").get_json()

    assert api == page
    assert [c["name"] for c in api["data"]["classes"]] == ["پایه 1 - شعبه الف", "پایه 2 - شعبه ب"]


def test_class_create_and_remove(client):
    login(client, "moaven")

    r = client.post("/api/classes", json={"grade": 3})
    assert r.status_code == 400
    assert r.get_json()["error"] == "پایه، شعبه و معلم الزامی است"

    r = client.post("/management/classes", json={"grade": 3, "section": "ج", "teacherId": 2})
    assert r.status_code == 201
    class_id = r.get_json()["data"]["class"]["id"]

    assert client.delete("/api/classes/1").status_code == 400
    assert client.delete(f"/api/classes/{class_id}").status_code == 200


def test_teacher_edits_own_students_only(client):
    login(client, "rezaei")

    assert client.put("/api/students/1", json={"address": "شیراز"}).status_code == 200
    assert client.put("/api/students/3", json={"address": "شیراز"}).status_code == 403
    assert client.post("/api/students", json={}).status_code == 403


def test_teacher_cannot_move_a_student_through_update(client, school):
    login(client, "rezaei")

    r = client.put("/api/students/1", json={"classId": 2})

    assert r.status_code == 403
    assert school.students.get_by_id(1).class_id == 1
    assert client.put("/api/students/1", json={"classId": 1, "address": "قم"}).status_code == 200


def test_admin_moves_a_student_through_update(client, school):
    login(client, "admin")

    assert client.put("/api/students/1", json={"classId": 2}).status_code == 200
    assert school.students.get_by_id(1).class_id == 2


def test_student_validation_errors_are_listed(client):
    login(client, "admin")

    r = client.post("/api/students", json={"firstName": "Nima"})

    body = r.get_json()
    assert r.status_code == 400
    assert "nationalId" in body["errors"]


def test_student_delete_reports_cascade(client):
    login(client, "admin")
    client.post("/api/attendance/mark", json={"studentId": 2, "date": DAY, "status": "PRESENT"})

    r = client.delete("/api/students/2")

    assert r.get_json()["data"] == {
        "deletedStudent": {"id": 2, "name": "Sara Bahrami"},
        "deletedRecords": {"attendance": 1, "payments": 0},
    }
    assert client.get("/api/students/2").status_code == 404


def test_users_are_admin_only(client):
    login(client, "rezaei")
    assert client.get("/api/users").status_code == 403

    client.post("/api/auth/logout")
    login(client, "admin")
    assert len(client.get("/api/users").get_json()["data"]["users"]) == 4
    assert client.delete("/api/users/1").status_code == 400


def test_payments_hidden_from_teachers(client):
    login(client, "rezaei")
    assert client.get("/api/payments").status_code == 403

    client.post("/api/auth/logout")
    login(client, "mali")
    r = client.post("/api/payments", json={"studentId": 1, "amount": 1200000, "dueDate": "2099-01-01"})
    assert r.status_code == 201
    assert r.get_json()["data"]["payment"]["status"] == "PENDING"


def test_dashboard_depends_on_role(client):
    login(client, "mali")
    assert "overduePayments" in client.get("/api/dashboard/stats").get_json()["data"]

    client.post("/api/auth/logout")
    login(client, "rezaei")
    assert "overduePayments" not in client.get("/api/dashboard/stats").get_json()["data"]


# -- errors ----------------------------------------------------------------


def test_unknown_route_uses_the_envelope(client):
    r = client.get("/api/nothing-here")

    assert r.status_code == 404
    assert r.get_json()["success"] is False


def test_unexpected_errors_are_hidden(client, app, monkeypatch):
    login(client, "admin")

    def boom(role):
        raise RuntimeError("db gone")

    monkeypatch.setattr(app.extensions["dabestan.container"].dashboard_service, "stats", boom)

    r = client.get("/api/dashboard/stats")

    assert r.status_code == 500
    assert r.get_json() == {"success": False, "error": GENERIC_ERROR}
