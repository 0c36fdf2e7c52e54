from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_int, require_non_empty
from ..core.constants import DEFAULT_CLASS_CAPACITY, MAX_CLASS_CAPACITY
from ..core.exceptions import NotFoundError, ValidationError
from ..teachers.repository import TeacherRepository
from .model import SchoolClass
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    """Use cases: list, create, edit and retire school classes."""

    def __init__(self, classes: ClassRepository, teachers: TeacherRepository):
        self._classes = classes
        self._teachers = teachers

    def list(self, *, grade: Optional[int] = None, teacher_id: Optional[int] = None) -> Sequence[SchoolClass]:
        return self._classes.list_active(grade=grade, teacher_id=teacher_id)

    def get(self, class_id: int) -> SchoolClass:
        klass = self._classes.get_by_id(class_id)
        if not klass:
            raise NotFoundError("کلاس یافت نشد")
        return klass

    def _require_teacher(self, teacher_id) -> int:
        tid = require_int(teacher_id, "معلم")
        teacher = self._teachers.get_by_id(tid)
        if not teacher or not teacher.is_active:
            raise NotFoundError("معلم یافت نشد")
        return tid

    def create(self, *, grade, section, teacher_id, capacity=None) -> SchoolClass:
        if grade in (None, "") or not section or teacher_id in (None, ""):
            raise ValidationError("پایه، شعبه و معلم الزامی است")

        grade_i = require_int(grade, "پایه", min_value=1, max_value=12)
        section_s = require_non_empty(section, "شعبه")
        cap = DEFAULT_CLASS_CAPACITY
        if capacity not in (None, ""):
            cap = require_int(capacity, "ظرفیت", min_value=1, max_value=MAX_CLASS_CAPACITY)

        if self._classes.get_by_grade_section(grade_i, section_s):
            raise ValidationError("کلاس با این پایه و شعبه قبلاً ثبت شده است")

        tid = self._require_teacher(teacher_id)
        class_id = self._classes.create(grade=grade_i, section=section_s, teacher_id=tid, capacity=cap)
        logger.info("class %s created (grade=%s section=%s)", class_id, grade_i, section_s)
        return self.get(class_id)

    def update(self, class_id: int, payload: dict) -> SchoolClass:
        current = self.get(class_id)
        fields: dict = {}

        if "grade" in payload:
            fields["grade"] = require_int(payload["grade"], "پایه", min_value=1, max_value=12)
        if "section" in payload:
            fields["section"] = require_non_empty(payload["section"], "شعبه")
        if "capacity" in payload:
            cap = require_int(payload["capacity"], "ظرفیت", min_value=1, max_value=MAX_CLASS_CAPACITY)
            if cap < current.student_count:
                raise ValidationError("ظرفیت نمی‌تواند کمتر از تعداد دانش‌آموزان فعلی باشد")
            fields["capacity"] = cap
        teacher_key = "teacherId" if "teacherId" in payload else "teacher_id"
        if teacher_key in payload:
            fields["teacher_id"] = self._require_teacher(payload[teacher_key])

        grade = fields.get("grade", current.grade)
        section = fields.get("section", current.section)
        if (grade, section) != (current.grade, current.section):
            other = self._classes.get_by_grade_section(grade, section)
            if other and other.class_id != current.class_id:
                raise ValidationError("کلاس با این پایه و شعبه قبلاً ثبت شده است")

        if fields:
            self._classes.update(class_id, fields)
        return self.get(class_id)

    def deactivate(self, class_id: int) -> None:
        klass = self.get(class_id)
        if klass.student_count > 0:
            raise ValidationError("نمی‌توان کلاسی را که دانش‌آموز فعال دارد حذف کرد")
        self._classes.update(class_id, {"is_active": 0})
        logger.info("class %s deactivated", class_id)
