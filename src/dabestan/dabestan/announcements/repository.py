from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Announcement


class AnnouncementRepository(Protocol):
    def get_by_id(self, announcement_id: int) -> Optional[Announcement]:
        raise NotImplementedError

    def list_active(self, *, limit: Optional[int] = None) -> Sequence[Announcement]:
        """Newest first."""

        raise NotImplementedError

    def create(self, announcement: Announcement) -> int:
        raise NotImplementedError

    def set_active(self, announcement_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError
