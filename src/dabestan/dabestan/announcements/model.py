from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Priority


@dataclass(frozen=True)
class Announcement:
    """A circular shown on the dashboard."""

    announcement_id: int
    title: str
    content: str
    author: str
    priority: Priority = Priority.MEDIUM
    target_audience: str = "all"
    publish_date: Optional[datetime] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.announcement_id,
            "title": self.title,
            "content": self.content,
            "priority": self.priority.value,
            "author": self.author,
            "targetAudience": self.target_audience,
            "publishDate": self.publish_date.isoformat() if self.publish_date else None,
            "isActive": self.is_active,
        }
