from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

_NATIONAL_ID_RE = re.compile(r"^\d{10}$")
_MOBILE_RE = re.compile(r"^(\+98|0)?9\d{9}$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
_HHMM_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} الزامی است", {field_name: f"{field_name} الزامی است"})
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} باید حداقل {min_len} کاراکتر باشد")
    return value


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} نباید بیش از {max_len} کاراکتر باشد")
    return value


def require_int(value: Any, field_name: str, *, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(f"{field_name} الزامی است", {field_name: f"{field_name} الزامی است"})
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} باید عدد صحیح باشد")
    if min_value is not None and number < min_value:
        raise ValidationError(f"{field_name} باید حداقل {min_value} باشد")
    if max_value is not None and number > max_value:
        raise ValidationError(f"{field_name} نباید بیش از {max_value} باشد")
    return number


def require_number(value: Any, field_name: str, *, min_value: float = 0, max_value: Optional[float] = None) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} باید عدد باشد")
    if number < min_value:
        raise ValidationError(f"{field_name} نمی‌تواند کمتر از {min_value:g} باشد")
    if max_value is not None and number > max_value:
        raise ValidationError(f"{field_name} بیش از حد مجاز است")
    return number


def require_date(value: Any, field_name: str = "تاریخ") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = require_non_empty(value, field_name)
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} معتبر نیست (YYYY-MM-DD)")


def optional_date(value: Any, field_name: str = "تاریخ") -> Optional[date]:
    if value is None or value == "":
        return None
    return require_date(value, field_name)


def require_enum(value: Any, enum_cls: Type[E], field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError(f"{field_name} معتبر نیست: {value}")


def check_national_id(value: str) -> bool:
    return bool(_NATIONAL_ID_RE.match(value or ""))


def check_mobile(value: str) -> bool:
    return bool(_MOBILE_RE.match(value or ""))


def check_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value or ""))


def check_username(value: str) -> bool:
    return bool(_USERNAME_RE.match(value or ""))


def require_hhmm(value: Any, field_name: str) -> str:
    text = require_non_empty(value, field_name)
    if not _HHMM_RE.match(text):
        raise ValidationError(f"فرمت {field_name} معتبر نیست (HH:MM)")
    return text


def clean_optional(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None
