"""Persian presentation helpers (digits and status labels)."""

from __future__ import annotations

from typing import Optional

from ..core.enums import AttendanceStatus, PaymentStatus

_EN_DIGITS = "0123456789"
_FA_DIGITS = "۰۱۲۳۴۵۶۷۸۹"
_AR_DIGITS = "٠١٢٣٤٥٦٧٨٩"

_TO_FA = str.maketrans(_EN_DIGITS, _FA_DIGITS)
_TO_EN = str.maketrans(_FA_DIGITS + _AR_DIGITS, _EN_DIGITS * 2)

ATTENDANCE_LABELS = {
    AttendanceStatus.PRESENT: "حاضر",
    AttendanceStatus.ABSENT: "غایب",
    AttendanceStatus.LATE: "تأخیر",
    AttendanceStatus.EXCUSED: "مرخصی",
    AttendanceStatus.UNMARKED: "ثبت نشده",
}

PAYMENT_LABELS = {
    PaymentStatus.PENDING: "در انتظار پرداخت",
    PaymentStatus.PAID: "پرداخت شده",
    PaymentStatus.OVERDUE: "معوق",
    PaymentStatus.CANCELLED: "لغو شده",
}


def to_persian_digits(value) -> str:
    if value is None:
        return "۰"
    return str(value).translate(_TO_FA)


def to_english_digits(value: Optional[str]) -> str:
    return (value or "").translate(_TO_EN)


def attendance_label(status: Optional[AttendanceStatus]) -> str:
    return ATTENDANCE_LABELS[status or AttendanceStatus.UNMARKED]


def class_label(grade: int, section: str) -> str:
    return f"پایه {grade} - شعبه {section}"
