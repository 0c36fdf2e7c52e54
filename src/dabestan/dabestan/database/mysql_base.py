from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def in_clause(values) -> Tuple[str, tuple]:
    """Placeholders for ``col IN (...)``; callers must not pass an empty list."""

    items = tuple(values)
    return ", ".join(["%s"] * len(items)), items


def _sql_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def update_row(
    conn_factory: DatabaseConnection,
    table: str,
    key_column: str,
    key: int,
    fields: Dict[str, Any],
    allowed: Iterable[str],
) -> bool:
    """Partial ``UPDATE`` of one row by primary key.

    Keys outside ``allowed`` are dropped so service dicts can never reach
    arbitrary columns. Returns ``False`` when nothing was left to write or the
    row did not change (MySQL reports 0 affected rows for a no-op update).
    """

    allowed = set(allowed)
    cols = [c for c in fields if c in allowed]
    if not cols:
        return False
    assignments = ", ".join(f"{c}=%s" for c in cols)
    with db_cursor(conn_factory) as (_, cur):
        cur.execute(
            f"UPDATE {table} SET {assignments} WHERE {key_column}=%s",
            tuple(_sql_value(fields[c]) for c in cols) + (int(key),),
        )
        return cur.rowcount > 0


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns come back as ``timedelta`` from the C extension and as
    ``time`` or ``'HH:MM[:SS]'`` strings elsewhere."""

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)
    if isinstance(value, str):
        hh, mm, *rest = value.strip().split(":")
        return time(int(hh), int(mm), int(rest[0]) if rest and rest[0] else 0)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
