from __future__ import annotations

from typing import Sequence

from ..common.validators import clean_optional, require_enum, require_max_length, require_non_empty
from ..core.constants import RECENT_ANNOUNCEMENTS
from ..core.enums import Priority
from ..core.exceptions import NotFoundError
from .model import Announcement
from .repository import AnnouncementRepository


class AnnouncementService:
    def __init__(self, announcements: AnnouncementRepository):
        self._announcements = announcements

    def list(self) -> Sequence[Announcement]:
        return self._announcements.list_active()

    def recent(self, limit: int = RECENT_ANNOUNCEMENTS) -> Sequence[Announcement]:
        return self._announcements.list_active(limit=limit)

    def get(self, announcement_id: int) -> Announcement:
        announcement = self._announcements.get_by_id(announcement_id)
        if not announcement:
            raise NotFoundError("اطلاعیه یافت نشد")
        return announcement

    def create(self, payload: dict, *, author: str) -> Announcement:
        announcement = Announcement(
            announcement_id=0,
            title=require_max_length(require_non_empty(payload.get("title"), "عنوان"), "عنوان", 200),
            content=require_non_empty(payload.get("content"), "متن"),
            author=clean_optional(payload.get("author")) or author,
            priority=require_enum(payload.get("priority") or Priority.MEDIUM, Priority, "اولویت"),
            target_audience=clean_optional(payload.get("targetAudience")) or "all",
        )
        return self.get(self._announcements.create(announcement))

    def deactivate(self, announcement_id: int) -> None:
        self.get(announcement_id)
        self._announcements.set_active(announcement_id, is_active=False)
