from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """A staff account.

    ``teacher_id`` links TEACHER accounts to their row in ``teachers``; the
    permission gate uses it for class ownership checks.
    """

    user_id: int
    username: str
    password_hash: str
    role: Role
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    teacher_id: Optional[int] = None
    is_active: bool = True
    last_login_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.username

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "role": self.role.value,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "name": self.full_name,
            "email": self.email,
            "teacherId": self.teacher_id,
            "isActive": self.is_active,
            "lastLoginAt": self.last_login_at.isoformat() if self.last_login_at else None,
        }
