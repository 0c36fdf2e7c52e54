from __future__ import annotations

from typing import Optional, Union

from ..classes.repository import ClassRepository
from ..common.validators import require_int
from ..core.enums import Action, Resource, Role
from ..core.exceptions import AuthorizationError
from ..students.repository import StudentRepository
from ..users.service import SessionUser
from .policy import _coerce, has_permission

_SCOPED = {Resource.STUDENT, Resource.ATTENDANCE}


class PermissionService:
    """Static permission table plus the teacher's own-class check.

    A TEACHER may update students and attendance only for the class they are
    the assigned teacher of. The class is looked up at check time, so moving a
    student to another class moves the permission with it.
    """

    def __init__(self, classes: ClassRepository, students: StudentRepository):
        self._classes = classes
        self._students = students

    def teaches(self, teacher_id: Optional[int], *, class_id=None, student_id=None) -> bool:
        if teacher_id is None:
            return False
        if class_id is None and student_id is not None:
            student = self._students.get_by_id(require_int(student_id, "دانش‌آموز"))
            if not student:
                return False
            class_id = student.class_id
        if class_id is None:
            return False
        klass = self._classes.get_by_id(require_int(class_id, "کلاس"))
        return bool(klass and klass.is_active and klass.teacher_id == int(teacher_id))

    def can(
        self,
        user: SessionUser,
        resource: Union[Resource, str],
        action: Union[Action, str],
        *,
        student_id=None,
        class_id=None,
    ) -> bool:
        if not has_permission(user.role, resource, action):
            return False

        resource_e = _coerce(Resource, resource)
        action_e = _coerce(Action, action)
        if user.role == Role.TEACHER and action_e == Action.UPDATE and resource_e in _SCOPED:
            return self.teaches(user.teacher_id, class_id=class_id, student_id=student_id)
        return True

    def require(self, user: SessionUser, resource, action, *, student_id=None, class_id=None) -> None:
        if not self.can(user, resource, action, student_id=student_id, class_id=class_id):
            raise AuthorizationError("شما مجوز انجام این عملیات را ندارید")
