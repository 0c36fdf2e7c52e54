from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime


def today_local() -> date:
    """School-local date; services take it as an injectable clock."""
    return datetime.now().date()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of the month, both inclusive."""
    last_day = monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
