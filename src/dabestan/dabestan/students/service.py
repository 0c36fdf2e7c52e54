from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..classes.model import SchoolClass
from ..classes.repository import ClassRepository
from ..common.validators import (
    check_email,
    check_mobile,
    check_national_id,
    clean_optional,
    require_date,
    require_int,
)
from ..core.constants import DEFAULT_STUDENT_PAGE_SIZE
from ..core.exceptions import NotFoundError, ValidationError
from .model import DeletedStudent, Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_REQUIRED = (
    ("studentId", "کد دانش‌آموزی"),
    ("firstName", "نام"),
    ("lastName", "نام خانوادگی"),
    ("fatherName", "نام پدر"),
    ("nationalId", "کد ملی"),
    ("birthDate", "تاریخ تولد"),
)

_TEXT_COLUMNS = {
    "studentId": "student_code",
    "firstName": "first_name",
    "lastName": "last_name",
    "fatherName": "father_name",
    "nationalId": "national_id",
}

_OPTIONAL_COLUMNS = {"phone": "phone", "email": "email", "address": "address"}


class StudentService:
    """Use cases: student records, class placement and removal."""

    def __init__(self, students: StudentRepository, classes: ClassRepository):
        self._students = students
        self._classes = classes

    def list(
        self,
        *,
        grade=None,
        class_id=None,
        search: Optional[str] = None,
        limit=None,
        offset=None,
    ) -> Sequence[Student]:
        return self._students.list(
            grade=require_int(grade, "پایه") if grade not in (None, "") else None,
            class_id=require_int(class_id, "کلاس") if class_id not in (None, "") else None,
            search=(search or "").strip() or None,
            limit=require_int(limit, "limit", min_value=1, max_value=500) if limit not in (None, "") else DEFAULT_STUDENT_PAGE_SIZE,
            offset=require_int(offset, "offset", min_value=0) if offset not in (None, "") else 0,
        )

    def get(self, student_id: int) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("دانش‌آموز یافت نشد")
        return student

    def _class_with_room(self, class_id, *, moving_student: Optional[Student] = None) -> SchoolClass:
        cid = require_int(class_id, "کلاس")
        klass = self._classes.get_by_id(cid)
        if not klass or not klass.is_active:
            raise NotFoundError("کلاس یافت نشد")
        already_there = moving_student is not None and moving_student.class_id == cid and moving_student.is_active
        if not already_there and klass.student_count >= klass.capacity:
            raise ValidationError("ظرفیت کلاس تکمیل است")
        return klass

    def _field_errors(self, payload: dict, *, partial: bool) -> dict[str, str]:
        errors: dict[str, str] = {}
        for key, label in _REQUIRED:
            if (key in payload or not partial) and not str(payload.get(key) or "").strip():
                errors[key] = f"{label} الزامی است"

        national_id = str(payload.get("nationalId") or "").strip()
        if national_id and not check_national_id(national_id):
            errors["nationalId"] = "کد ملی باید ۱۰ رقم باشد"
        phone = str(payload.get("phone") or "").strip()
        if phone and not check_mobile(phone):
            errors["phone"] = "شماره تلفن معتبر نیست"
        email = str(payload.get("email") or "").strip()
        if email and not check_email(email):
            errors["email"] = "ایمیل معتبر نیست"
        if payload.get("birthDate"):
            try:
                require_date(payload["birthDate"], "تاریخ تولد")
            except ValidationError as e:
                errors["birthDate"] = str(e)
        return errors

    def _check_duplicates(self, payload: dict, exclude_id: Optional[int] = None) -> None:
        dupes = self._students.find_duplicates(
            national_id=clean_optional(payload.get("nationalId")),
            student_code=clean_optional(payload.get("studentId")),
            exclude_id=exclude_id,
        )
        if dupes:
            messages = {
                "nationalId": "این کد ملی قبلاً ثبت شده است",
                "studentId": "این کد دانش‌آموزی قبلاً ثبت شده است",
            }
            raise ValidationError("اطلاعات تکراری است", {f: messages[f] for f in sorted(dupes)})

    def create(self, payload: dict) -> Student:
        errors = self._field_errors(payload, partial=False)
        if payload.get("classId") in (None, "") and (
            payload.get("grade") in (None, "") or not str(payload.get("section") or "").strip()
        ):
            errors["classId"] = "کلاس یا پایه و شعبه الزامی است"
        if errors:
            raise ValidationError("اطلاعات وارد شده معتبر نیست", errors)
        self._check_duplicates(payload)

        class_id: Optional[int] = None
        if payload.get("classId") not in (None, ""):
            klass = self._class_with_room(payload["classId"])
            class_id, grade, section = klass.class_id, klass.grade, klass.section
        else:
            grade = require_int(payload["grade"], "پایه", min_value=1, max_value=12)
            section = str(payload["section"]).strip()

        student = Student(
            student_id=0,
            student_code=str(payload["studentId"]).strip(),
            first_name=str(payload["firstName"]).strip(),
            last_name=str(payload["lastName"]).strip(),
            father_name=str(payload["fatherName"]).strip(),
            national_id=str(payload["nationalId"]).strip(),
            birth_date=require_date(payload["birthDate"], "تاریخ تولد"),
            grade=grade,
            section=section,
            class_id=class_id,
            enrollment_date=require_date(payload["enrollmentDate"]) if payload.get("enrollmentDate") else date.today(),
            phone=clean_optional(payload.get("phone")),
            email=clean_optional(payload.get("email")),
            address=clean_optional(payload.get("address")),
        )
        student_id = self._students.create(student)
        logger.info("student %s created (%s)", student_id, student.student_code)
        return self.get(student_id)

    def update(self, student_id: int, payload: dict) -> Student:
        current = self.get(student_id)
        errors = self._field_errors(payload, partial=True)
        if errors:
            raise ValidationError("اطلاعات وارد شده معتبر نیست", errors)
        self._check_duplicates(payload, exclude_id=student_id)

        fields: dict = {}
        for key, column in _TEXT_COLUMNS.items():
            if key in payload:
                fields[column] = str(payload[key]).strip()
        for key, column in _OPTIONAL_COLUMNS.items():
            if key in payload:
                fields[column] = clean_optional(payload[key])
        if "birthDate" in payload:
            fields["birth_date"] = require_date(payload["birthDate"], "تاریخ تولد")
        if payload.get("classId") not in (None, "") and payload["classId"] != current.class_id:
            klass = self._class_with_room(payload["classId"], moving_student=current)
            fields.update(class_id=klass.class_id, grade=klass.grade, section=klass.section)

        if fields:
            self._students.update(student_id, fields)
        return self.get(student_id)

    def assign_class(self, student_id: int, class_id) -> Student:
        student = self.get(student_id)
        if not student.is_active:
            raise ValidationError("دانش‌آموز غیرفعال است")
        klass = self._class_with_room(class_id, moving_student=student)
        if student.class_id != klass.class_id:
            self._students.update(
                student_id,
                {"class_id": klass.class_id, "grade": klass.grade, "section": klass.section},
            )
            logger.info("student %s moved to class %s", student_id, klass.class_id)
        return self.get(student_id)

    def deactivate(self, student_id: int) -> None:
        self.get(student_id)
        self._students.update(student_id, {"is_active": 0})

    def delete(self, student_id: int) -> DeletedStudent:
        deleted = self._students.delete_cascade(student_id)
        if not deleted:
            raise NotFoundError("دانش‌آموز یافت نشد")
        logger.info(
            "student %s hard-deleted (attendance=%s payments=%s)",
            student_id,
            deleted.attendance_records,
            deleted.payment_records,
        )
        return deleted
