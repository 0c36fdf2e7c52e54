from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_row
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, username, password_hash, role, first_name, last_name, email,
    teacher_id, is_active, last_login_at
"""

_UPDATABLE = {"password_hash", "role", "first_name", "last_name", "email", "teacher_id", "is_active"}


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        email=row.get("email"),
        teacher_id=int(row["teacher_id"]) if row.get("teacher_id") is not None else None,
        is_active=bool(row.get("is_active", True)),
        last_login_at=row.get("last_login_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY role ASC, username ASC")
            return [_row_to_user(r) for r in fetchall(cur)]

    def create(self, user: User) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(username, password_hash, role, first_name, last_name, email, teacher_id, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.username,
                    user.password_hash,
                    user.role.value,
                    user.first_name,
                    user.last_name,
                    user.email,
                    user.teacher_id,
                    int(user.is_active),
                ),
            )
            return int(cur.lastrowid)

    def update(self, user_id: int, fields: dict) -> bool:
        return update_row(self._conn_factory, "users", "user_id", user_id, fields, _UPDATABLE)

    def touch_last_login(self, user_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET last_login_at=NOW() WHERE user_id=%s", (int(user_id),))
