from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, TypeVar

from ..common.persian import to_english_digits
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError

T = TypeVar("T")

ALL = "all"
UNMARKED = "unmarked"


def _norm(text: Optional[str]) -> str:
    return to_english_digits(text or "").strip().casefold()


@dataclass(frozen=True)
class RosterFilter:
    """Search + status filter shared by the marking sheet and the export.

    Works on any row exposing ``first_name``, ``last_name``, ``student_code``,
    ``national_id`` and ``status`` (None or UNMARKED meaning no mark).
    """

    search: str = ""
    status: str = ALL

    @classmethod
    def parse(cls, search: Optional[str] = None, status: Optional[str] = None) -> "RosterFilter":
        raw = (status or ALL).strip()
        if raw.lower() in (ALL, UNMARKED, ""):
            key = raw.lower() or ALL
        else:
            try:
                key = AttendanceStatus(raw.upper()).value
            except ValueError:
                raise ValidationError(f"فیلتر وضعیت معتبر نیست: {status}")
            if key == AttendanceStatus.UNMARKED.value:
                key = UNMARKED
        return cls(search=(search or "").strip(), status=key)

    def _matches_search(self, row) -> bool:
        needle = _norm(self.search)
        if not needle:
            return True
        haystack = (
            f"{row.first_name} {row.last_name}",
            row.student_code,
            row.national_id,
        )
        return any(needle in _norm(value) for value in haystack)

    def _matches_status(self, row) -> bool:
        if self.status == ALL:
            return True
        current = row.status or AttendanceStatus.UNMARKED
        if self.status == UNMARKED:
            return current == AttendanceStatus.UNMARKED
        return current.value == self.status

    def matches(self, row) -> bool:
        return self._matches_search(row) and self._matches_status(row)

    def apply(self, rows: Iterable[T]) -> list[T]:
        return [row for row in rows if self.matches(row)]
