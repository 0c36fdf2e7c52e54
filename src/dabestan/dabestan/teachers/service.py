from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from ..classes.repository import ClassRepository
from ..common.validators import (
    check_email,
    check_mobile,
    check_national_id,
    clean_optional,
    optional_date,
)
from ..core.exceptions import NotFoundError, ValidationError
from .model import Teacher
from .repository import TeacherRepository

logger = logging.getLogger(__name__)

_DUPLICATE_MESSAGES = {
    "nationalId": "این کد ملی قبلاً ثبت شده است",
    "phone": "این شماره تلفن قبلاً ثبت شده است",
    "email": "این ایمیل قبلاً ثبت شده است",
    "employeeId": "این کد پرسنلی قبلاً ثبت شده است",
}

_FIELD_COLUMNS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "nationalId": "national_id",
    "phone": "phone",
    "email": "email",
    "employeeId": "employee_id",
    "hireDate": "hire_date",
}


def _validate(payload: dict, *, partial: bool) -> dict[str, str]:
    """Field-level error map for a teacher payload (camelCase keys)."""

    errors: dict[str, str] = {}

    def present(key: str) -> bool:
        return key in payload or not partial

    for key, label in (("firstName", "نام"), ("lastName", "نام خانوادگی")):
        if present(key):
            value = (payload.get(key) or "").strip()
            if not value:
                errors[key] = f"{label} الزامی است"
            elif len(value) < 2:
                errors[key] = f"{label} باید حداقل ۲ کاراکتر باشد"

    if present("nationalId"):
        value = (payload.get("nationalId") or "").strip()
        if not value:
            errors["nationalId"] = "کد ملی الزامی است"
        elif not check_national_id(value):
            errors["nationalId"] = "کد ملی باید ۱۰ رقم باشد"

    if present("phone"):
        value = (payload.get("phone") or "").strip()
        if not value:
            errors["phone"] = "شماره تلفن الزامی است"
        elif not check_mobile(value):
            errors["phone"] = "شماره تلفن معتبر نیست"

    email = (payload.get("email") or "").strip()
    if email and not check_email(email):
        errors["email"] = "ایمیل معتبر نیست"

    return errors


class TeacherService:
    """Use cases: teacher records (create/update with duplicate checks, retire, delete)."""

    def __init__(self, teachers: TeacherRepository, classes: ClassRepository):
        self._teachers = teachers
        self._classes = classes

    def list(self) -> Sequence[Teacher]:
        return self._teachers.list_active()

    def get(self, teacher_id: int) -> Teacher:
        teacher = self._teachers.get_by_id(teacher_id)
        if not teacher:
            raise NotFoundError("معلم یافت نشد")
        return teacher

    def _check(self, payload: dict, *, partial: bool, exclude_id=None) -> None:
        errors = _validate(payload, partial=partial)
        if "hireDate" in payload:
            try:
                optional_date(payload.get("hireDate"), "تاریخ استخدام")
            except ValidationError as e:
                errors["hireDate"] = str(e)
        if errors:
            raise ValidationError("اطلاعات وارد شده معتبر نیست", errors)

        dupes = self._teachers.find_duplicates(
            national_id=clean_optional(payload.get("nationalId")),
            phone=clean_optional(payload.get("phone")),
            email=clean_optional(payload.get("email")),
            employee_id=clean_optional(payload.get("employeeId")),
            exclude_id=exclude_id,
        )
        if dupes:
            raise ValidationError(
                "اطلاعات تکراری است",
                {field: _DUPLICATE_MESSAGES[field] for field in sorted(dupes)},
            )

    def create(self, payload: dict) -> Teacher:
        self._check(payload, partial=False)

        employee_id = clean_optional(payload.get("employeeId"))
        if not employee_id:
            employee_id = f"T-{payload['nationalId'].strip()[-4:]}"
            if self._teachers.find_duplicates(employee_id=employee_id):
                employee_id = f"T-{payload['nationalId'].strip()}"
        teacher = Teacher(
            teacher_id=0,
            employee_id=employee_id,
            first_name=payload["firstName"].strip(),
            last_name=payload["lastName"].strip(),
            national_id=payload["nationalId"].strip(),
            phone=payload["phone"].strip(),
            email=clean_optional(payload.get("email")),
            hire_date=optional_date(payload.get("hireDate")) or date.today(),
        )
        teacher_id = self._teachers.create(teacher)
        logger.info("teacher %s created (%s)", teacher_id, employee_id)
        return self.get(teacher_id)

    def update(self, teacher_id: int, payload: dict) -> Teacher:
        self.get(teacher_id)
        self._check(payload, partial=True, exclude_id=teacher_id)

        fields: dict = {}
        for key, column in _FIELD_COLUMNS.items():
            if key not in payload:
                continue
            if key == "hireDate":
                fields[column] = optional_date(payload[key])
            elif key == "email":
                fields[column] = clean_optional(payload[key])
            else:
                fields[column] = str(payload[key]).strip()
        if "isActive" in payload:
            fields["is_active"] = int(bool(payload["isActive"]))

        if fields:
            self._teachers.update(teacher_id, fields)
        return self.get(teacher_id)

    def deactivate(self, teacher_id: int) -> None:
        self.get(teacher_id)
        if self._classes.list_active(teacher_id=teacher_id):
            raise ValidationError("معلمی که کلاس فعال دارد قابل غیرفعال‌سازی نیست")
        self._teachers.update(teacher_id, {"is_active": 0})

    def delete(self, teacher_id: int) -> None:
        teacher = self.get(teacher_id)
        if self._classes.count_for_teacher(teacher_id) > 0:
            raise ValidationError("نمی‌توان معلمی را که به کلاس اختصاص داده شده حذف کرد")
        self._teachers.delete(teacher_id)
        logger.info("teacher %s (%s) deleted", teacher_id, teacher.full_name)
