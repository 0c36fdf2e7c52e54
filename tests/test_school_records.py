from __future__ import annotations

from datetime import date

import pytest

from src.dabestan.dabestan.attendance.service import AttendanceService
from src.dabestan.dabestan.classes.service import ClassService
from src.dabestan.dabestan.core.exceptions import NotFoundError, ValidationError
from src.dabestan.dabestan.students.service import StudentService
from src.dabestan.dabestan.teachers.service import TeacherService
from tests.fakes import make_school


@pytest.fixture
def school():
    return make_school()


@pytest.fixture
def classes(school):
    return ClassService(school.classes, school.teachers)


@pytest.fixture
def teachers(school):
    return TeacherService(school.teachers, school.classes)


@pytest.fixture
def students(school):
    return StudentService(school.students, school.classes)


def _student_payload(**overrides):
    payload = {
        "studentId": "S-1003",
        "firstName": "Nima",
        "lastName": "Jafari",
        "fatherName": "Hamid",
        "nationalId": "4567890123",
        "birthDate": "2016-02-01",
        "classId": 1,
    }
    payload.update(overrides)
    return payload


# -- classes ---------------------------------------------------------------


def test_class_create_requires_grade_section_teacher(classes):
    with pytest.raises(ValidationError) as e:
        classes.create(grade=3, section="", teacher_id=1)
    assert str(e.value) == "پایه، شعبه و معلم الزامی است"


def test_class_create_checks_ranges_and_teacher(classes, school):
    with pytest.raises(ValidationError):
        classes.create(grade=13, section="الف", teacher_id=1)
    with pytest.raises(ValidationError):
        classes.create(grade=3, section="الف", teacher_id=1, capacity=60)
    with pytest.raises(NotFoundError):
        classes.create(grade=3, section="الف", teacher_id=77)

    school.teachers.update(2, {"is_active": 0})
    with pytest.raises(NotFoundError):
        classes.create(grade=3, section="الف", teacher_id=2)


def test_class_create_defaults_capacity(classes):
    klass = classes.create(grade="3", section="ج", teacher_id="1")

    assert klass.capacity == 30
    assert klass.to_dict()["teacher"] == {"name": "مریم رضایی"}


def test_duplicate_grade_section_rejected(classes):
    with pytest.raises(ValidationError) as e:
        classes.create(grade=1, section="الف", teacher_id=2)
    assert str(e.value) == "کلاس با این پایه و شعبه قبلاً ثبت شده است"

    with pytest.raises(ValidationError):
        classes.update(2, {"grade": 1, "section": "الف"})


def test_capacity_cannot_drop_below_enrolment(classes):
    with pytest.raises(ValidationError):
        classes.update(1, {"capacity": 1})

    assert classes.update(1, {"capacity": 2}).capacity == 2


def test_class_with_students_cannot_be_removed(classes, school):
    with pytest.raises(ValidationError):
        classes.deactivate(2)

    school.students.update(3, {"is_active": 0})
    classes.deactivate(2)

    assert [c.class_id for c in classes.list()] == [1]


# -- teachers --------------------------------------------------------------


def test_teacher_create_collects_field_errors(teachers):
    with pytest.raises(ValidationError) as e:
        teachers.create({"firstName": "ع", "lastName": "", "nationalId": "123", "phone": "12345", "email": "bad"})

    assert set(e.value.errors) == {"firstName", "lastName", "nationalId", "phone", "email"}


def test_teacher_create_generates_employee_id(teachers):
    teacher = teachers.create(
        {"firstName": "Laleh", "lastName": "Sadeghi", "nationalId": "0099887766", "phone": "09351234567"}
    )

    assert teacher.employee_id == "T-7766"
    assert teacher.hire_date is not None


def test_teacher_duplicates_are_reported_per_field(teachers):
    with pytest.raises(ValidationError) as e:
        teachers.create({"firstName": "Laleh", "lastName": "Sadeghi", "nationalId": "0011223344", "phone": "09122223344"})

    assert e.value.errors == {
        "nationalId": "این کد ملی قبلاً ثبت شده است",
        "phone": "این شماره تلفن قبلاً ثبت شده است",
    }


def test_teacher_update_ignores_own_values(teachers):
    teacher = teachers.update(1, {"nationalId": "0011223344", "email": "rezaei@school.ir"})

    assert teacher.email == "rezaei@school.ir"


def test_teacher_with_classes_cannot_be_deleted_or_retired(teachers, school):
    with pytest.raises(ValidationError):
        teachers.delete(1)
    with pytest.raises(ValidationError):
        teachers.deactivate(1)

    # an inactive class still references the teacher
    school.classes.update(1, {"is_active": 0})
    teachers.deactivate(1)
    with pytest.raises(ValidationError):
        teachers.delete(1)


def test_teacher_without_classes_can_be_deleted(teachers):
    teacher = teachers.create({"firstName": "Laleh", "lastName": "Sadeghi", "nationalId": "0099887766", "phone": "09351234567"})

    teachers.delete(teacher.teacher_id)

    with pytest.raises(NotFoundError):
        teachers.get(teacher.teacher_id)


# -- students --------------------------------------------------------------


def test_student_create_into_class(students):
    student = students.create(_student_payload())

    assert (student.class_id, student.grade, student.section) == (1, 1, "الف")
    assert student.enrollment_date == date.today()


def test_student_create_field_errors(students):
    with pytest.raises(ValidationError) as e:
        students.create({"studentId": "", "nationalId": "12", "birthDate": "not-a-date"})

    assert {"studentId", "firstName", "lastName", "fatherName", "nationalId", "birthDate", "classId"} <= set(e.value.errors)


def test_student_create_rejects_duplicates(students):
    with pytest.raises(ValidationError) as e:
        students.create(_student_payload(studentId="S-1001", nationalId="1234567890"))

    assert set(e.value.errors) == {"studentId", "nationalId"}


def test_full_class_refuses_new_students(students, classes):
    classes.update(1, {"capacity": 2})

    with pytest.raises(ValidationError) as e:
        students.create(_student_payload())
    assert str(e.value) == "ظرفیت کلاس تکمیل است"


def test_student_without_class_keeps_grade_and_section(students):
    student = students.create(_student_payload(classId=None, grade=4, section="د"))

    assert student.class_id is None
    assert (student.grade, student.section) == (4, "د")


def test_assign_class_moves_grade_and_section(students):
    student = students.assign_class(3, 1)

    assert (student.class_id, student.grade, student.section) == (1, 1, "الف")


def test_assign_to_inactive_class_is_not_found(students, school):
    school.classes.update(2, {"is_active": 0})

    with pytest.raises(NotFoundError):
        students.assign_class(1, 2)


def test_update_is_partial(students):
    student = students.update(1, {"phone": "09120000000", "address": "تهران"})

    assert student.phone == "09120000000"
    assert student.first_name == "Ali"


def test_list_is_active_only(students):
    students.deactivate(2)

    assert [s.student_id for s in students.list(class_id="1")] == [1]


def test_delete_reports_removed_records(students, school):
    AttendanceService(school.attendance, school.students).mark(1, date(2024, 3, 10), "PRESENT")

    deleted = students.delete(1)

    assert deleted.attendance_records == 1
    assert deleted.payment_records == 0
    with pytest.raises(NotFoundError):
        students.delete(1)
