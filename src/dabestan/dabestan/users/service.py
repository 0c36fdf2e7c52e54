from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import check_email, check_username, clean_optional, require_enum, require_int
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..teachers.repository import TeacherRepository
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    teacher_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.full_name,
            "role": self.role.value,
            "teacherId": self.teacher_id,
        }


class AuthService:
    """Use case: authenticate a staff member (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("نام کاربری یا رمز عبور اشتباه است")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except (TypeError, ValueError):
            # placeholder hashes like 'CHANGE_ME'
            ok = False
        if not ok:
            raise AuthenticationError("نام کاربری یا رمز عبور اشتباه است")

        self._users.touch_last_login(user.user_id)
        logger.info("user %s logged in", user.username)
        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            teacher_id=user.teacher_id,
        )


class UserService:
    """Use case: manage staff accounts (admin)."""

    def __init__(self, users: UserRepository, teachers: Optional[TeacherRepository] = None):
        self._users = users
        self._teachers = teachers

    def list(self) -> Sequence[User]:
        return self._users.list_all()

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("کاربر یافت نشد")
        return user

    def _teacher_link(self, value) -> Optional[int]:
        if value in (None, ""):
            return None
        teacher_id = require_int(value, "معلم")
        if self._teachers is not None and not self._teachers.get_by_id(teacher_id):
            raise NotFoundError("معلم یافت نشد")
        return teacher_id

    def create(self, payload: dict) -> User:
        username = str(payload.get("username") or "").strip()
        password = payload.get("password") or ""
        errors: dict[str, str] = {}
        if len(username) < 3:
            errors["username"] = "نام کاربری باید حداقل ۳ کاراکتر باشد"
        elif not check_username(username):
            errors["username"] = "نام کاربری فقط می‌تواند شامل حروف انگلیسی، اعداد و _ باشد"
        if len(password) < 6:
            errors["password"] = "رمز عبور باید حداقل ۶ کاراکتر باشد"
        email = clean_optional(payload.get("email"))
        if email and not check_email(email):
            errors["email"] = "ایمیل معتبر نیست"
        if errors:
            raise ValidationError("اطلاعات وارد شده معتبر نیست", errors)

        role = require_enum(payload.get("role"), Role, "نقش")
        if self._users.get_by_username(username):
            raise ValidationError("نام کاربری قبلاً ثبت شده است", {"username": "نام کاربری تکراری است"})

        user = User(
            user_id=0,
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            first_name=clean_optional(payload.get("firstName")),
            last_name=clean_optional(payload.get("lastName")),
            email=email,
            teacher_id=self._teacher_link(payload.get("teacherId")),
        )
        user_id = self._users.create(user)
        logger.info("user %s created with role %s", username, role.value)
        return self.get(user_id)

    def update(self, user_id: int, payload: dict) -> User:
        self.get(user_id)
        fields: dict = {}
        if "password" in payload:
            if len(payload["password"] or "") < 6:
                raise ValidationError("رمز عبور باید حداقل ۶ کاراکتر باشد")
            fields["password_hash"] = generate_password_hash(payload["password"])
        if "role" in payload:
            fields["role"] = require_enum(payload["role"], Role, "نقش")
        if "email" in payload:
            email = clean_optional(payload["email"])
            if email and not check_email(email):
                raise ValidationError("ایمیل معتبر نیست")
            fields["email"] = email
        for key, column in (("firstName", "first_name"), ("lastName", "last_name")):
            if key in payload:
                fields[column] = clean_optional(payload[key])
        if "teacherId" in payload:
            fields["teacher_id"] = self._teacher_link(payload["teacherId"])
        if "isActive" in payload:
            fields["is_active"] = int(bool(payload["isActive"]))

        if fields:
            self._users.update(user_id, fields)
        return self.get(user_id)

    def deactivate(self, *, current_user_id: int, user_id: int) -> None:
        if int(current_user_id) == int(user_id):
            raise ValidationError("امکان غیرفعال کردن حساب خودتان وجود ندارد")
        self.get(user_id)
        self._users.update(user_id, {"is_active": 0})
