from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Priority
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Announcement
from .repository import AnnouncementRepository

_COLUMNS = "announcement_id, title, content, priority, author, target_audience, publish_date, is_active"


def _row_to_announcement(r: dict) -> Announcement:
    return Announcement(
        announcement_id=int(r["announcement_id"]),
        title=r["title"],
        content=r["content"],
        author=r["author"],
        priority=Priority(r["priority"]),
        target_audience=r.get("target_audience") or "all",
        publish_date=r.get("publish_date"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLAnnouncementRepository(AnnouncementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, announcement_id: int) -> Optional[Announcement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM announcements WHERE announcement_id=%s", (int(announcement_id),))
            r = fetchone(cur)
            return _row_to_announcement(r) if r else None

    def list_active(self, *, limit: Optional[int] = None) -> Sequence[Announcement]:
        sql = f"SELECT {_COLUMNS} FROM announcements WHERE is_active=1 ORDER BY publish_date DESC, announcement_id DESC"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT %s"
            params = (int(limit),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_announcement(r) for r in fetchall(cur)]

    def create(self, announcement: Announcement) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO announcements(title, content, priority, author, target_audience)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    announcement.title,
                    announcement.content,
                    announcement.priority.value,
                    announcement.author,
                    announcement.target_audience,
                ),
            )
            return int(cur.lastrowid)

    def set_active(self, announcement_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE announcements SET is_active=%s WHERE announcement_id=%s",
                (int(is_active), int(announcement_id)),
            )
            return cur.rowcount > 0
