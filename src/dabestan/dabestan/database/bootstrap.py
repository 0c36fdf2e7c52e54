from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # username, password, role, first name, last name, teacher employee id
    ("admin", "admin123", "ADMIN", "مدیر", "سیستم", None),
    ("moaven", "moaven123", "VICE_PRINCIPAL", "معاون", "آموزشی", None),
    ("rezaei", "teacher123", "TEACHER", "مریم", "رضایی", "T-1001"),
    ("mali", "finance123", "FINANCE", "کارشناس", "مالی", None),
)


def _factory(db_config: dict) -> DatabaseConnection:
    # Not the shared singleton: bootstrap may run before the app container exists.
    return DatabaseConnection(DBConfig.from_dict(db_config))


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _factory(db_config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def _apply_sql_file(db_config: dict, path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _apply_sql_file(db_config, schema_path)
    logger.info("schema applied from %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _apply_sql_file(db_config, seed_path)
    logger.info("seed data applied from %s", seed_path)


def ensure_demo_users(db_config: dict) -> None:
    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor(dictionary=True)

        for username, password, role, first_name, last_name, employee_id in DEMO_USERS:
            teacher_id = None
            if employee_id:
                cur.execute("SELECT teacher_id FROM teachers WHERE employee_id=%s", (employee_id,))
                row = cur.fetchone()
                if not row:
                    raise RuntimeError(f"Missing teachers row for employee_id={employee_id}")
                teacher_id = int(row["teacher_id"])

            password_hash = generate_password_hash(password)
            cur.execute(
                """
                INSERT INTO users (username, password_hash, role, first_name, last_name, teacher_id, is_active)
                VALUES (%s, %s, %s, %s, %s, %s, 1)
                ON DUPLICATE KEY UPDATE
                    password_hash=VALUES(password_hash), role=VALUES(role),
                    first_name=VALUES(first_name), last_name=VALUES(last_name),
                    teacher_id=VALUES(teacher_id), is_active=1
                """,
                (username, password_hash, role, first_name, last_name, teacher_id),
            )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
