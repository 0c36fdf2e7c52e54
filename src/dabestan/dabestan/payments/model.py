from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.persian import PAYMENT_LABELS
from ..core.enums import PaymentStatus, PaymentType


def effective_status(
    stored: PaymentStatus,
    due_date: date,
    paid_date: Optional[date],
    today: date,
) -> PaymentStatus:
    """Status as shown to users; OVERDUE exists only here, never in storage."""

    if stored == PaymentStatus.CANCELLED:
        return PaymentStatus.CANCELLED
    if paid_date is not None or stored == PaymentStatus.PAID:
        return PaymentStatus.PAID
    if due_date < today:
        return PaymentStatus.OVERDUE
    return PaymentStatus.PENDING


@dataclass(frozen=True)
class Payment:
    payment_id: int
    student_id: int
    amount: int
    due_date: date
    payment_type: PaymentType
    status: PaymentStatus = PaymentStatus.PENDING
    paid_date: Optional[date] = None
    description: Optional[str] = None
    student_name: Optional[str] = None

    def status_on(self, today: date) -> PaymentStatus:
        return effective_status(self.status, self.due_date, self.paid_date, today)

    def to_dict(self, today: date) -> dict:
        status = self.status_on(today)
        return {
            "id": self.payment_id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "amount": self.amount,
            "dueDate": self.due_date.isoformat(),
            "paidDate": self.paid_date.isoformat() if self.paid_date else None,
            "status": status.value,
            "statusLabel": PAYMENT_LABELS[status],
            "paymentType": self.payment_type.value,
            "description": self.description,
        }
