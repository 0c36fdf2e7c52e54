from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Callable, Optional

from ..common.datetime_utils import today_local
from ..common.validators import (
    clean_optional,
    optional_date,
    require_date,
    require_enum,
    require_int,
    require_max_length,
    require_number,
)
from ..core.constants import MAX_NOTE_LENGTH, MAX_PAYMENT_AMOUNT
from ..core.enums import PaymentStatus, PaymentType
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .model import Payment
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


def _amount(value) -> int:
    amount = require_number(value, "مبلغ", min_value=0, max_value=MAX_PAYMENT_AMOUNT)
    if amount <= 0:
        raise ValidationError("مبلغ باید بیشتر از صفر باشد")
    return int(round(amount))


class PaymentService:
    """Tuition and fee payments. OVERDUE is derived from the due date on read."""

    def __init__(
        self,
        payments: PaymentRepository,
        students: StudentRepository,
        *,
        clock: Callable[[], date] = today_local,
    ):
        self._payments = payments
        self._students = students
        self._clock = clock

    def today(self) -> date:
        return self._clock()

    def get(self, payment_id: int) -> Payment:
        payment = self._payments.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("پرداخت یافت نشد")
        return payment

    def list(self, *, student_id=None, status=None) -> list[Payment]:
        sid = require_int(student_id, "دانش‌آموز") if student_id not in (None, "") else None
        payments = list(self._payments.list(student_id=sid))
        if status not in (None, "", "all"):
            wanted = require_enum(status, PaymentStatus, "وضعیت")
            today = self.today()
            payments = [p for p in payments if p.status_on(today) == wanted]
        return payments

    def create(self, payload: dict) -> Payment:
        if payload.get("studentId") in (None, "") or payload.get("amount") in (None, "") or not payload.get("dueDate"):
            raise ValidationError("دانش‌آموز، مبلغ و تاریخ سررسید الزامی است")
        sid = require_int(payload["studentId"], "دانش‌آموز")
        if not self._students.get_by_id(sid):
            raise NotFoundError("دانش‌آموز یافت نشد")

        payment = Payment(
            payment_id=0,
            student_id=sid,
            amount=_amount(payload["amount"]),
            due_date=require_date(payload["dueDate"], "تاریخ سررسید"),
            payment_type=require_enum(payload.get("paymentType") or PaymentType.TUITION, PaymentType, "نوع پرداخت"),
            description=require_max_length(clean_optional(payload.get("description")), "توضیحات", MAX_NOTE_LENGTH),
        )
        payment_id = self._payments.create(payment)
        logger.info("payment %s created for student %s (%s)", payment_id, sid, payment.amount)
        return self.get(payment_id)

    def update(self, payment_id: int, payload: dict) -> Payment:
        current = self.get(payment_id)
        if current.status == PaymentStatus.CANCELLED:
            raise ValidationError("پرداخت لغو شده قابل ویرایش نیست")

        fields: dict = {}
        if "amount" in payload:
            fields["amount"] = _amount(payload["amount"])
        if "dueDate" in payload:
            fields["due_date"] = require_date(payload["dueDate"], "تاریخ سررسید")
        if "paymentType" in payload:
            fields["payment_type"] = require_enum(payload["paymentType"], PaymentType, "نوع پرداخت")
        if "description" in payload:
            fields["description"] = require_max_length(
                clean_optional(payload["description"]), "توضیحات", MAX_NOTE_LENGTH
            )
        if "paidDate" in payload:
            paid = optional_date(payload["paidDate"], "تاریخ پرداخت")
            fields["paid_date"] = paid
            fields["status"] = PaymentStatus.PAID if paid else PaymentStatus.PENDING
        if "status" in payload:
            status = require_enum(payload["status"], PaymentStatus, "وضعیت")
            if status == PaymentStatus.OVERDUE:
                raise ValidationError("وضعیت معوق به صورت خودکار محاسبه می‌شود")
            fields["status"] = status
            if status == PaymentStatus.PAID and not fields.get("paid_date") and not current.paid_date:
                fields["paid_date"] = self.today()
            if status == PaymentStatus.PENDING:
                fields["paid_date"] = None

        if fields:
            self._payments.update(payment_id, fields)
        return self.get(payment_id)

    def mark_paid(self, payment_id: int, paid_date=None) -> Payment:
        current = self.get(payment_id)
        if current.status == PaymentStatus.CANCELLED:
            raise ValidationError("پرداخت لغو شده قابل پرداخت نیست")
        paid = optional_date(paid_date, "تاریخ پرداخت") or self.today()
        self._payments.update(payment_id, {"status": PaymentStatus.PAID, "paid_date": paid})
        logger.info("payment %s marked paid on %s", payment_id, paid)
        return self.get(payment_id)

    def cancel(self, payment_id: int) -> Payment:
        current = self.get(payment_id)
        if current.status_on(self.today()) == PaymentStatus.PAID:
            raise ValidationError("پرداخت انجام شده قابل لغو نیست")
        self._payments.update(payment_id, {"status": PaymentStatus.CANCELLED})
        return self.get(payment_id)

    def delete(self, payment_id: int) -> None:
        self.get(payment_id)
        self._payments.delete(payment_id)
        logger.info("payment %s deleted", payment_id)

    def overdue_summary(self) -> dict:
        today = self.today()
        overdue = [p for p in self._payments.list_unsettled() if p.status_on(today) == PaymentStatus.OVERDUE]
        per_student: dict[int, int] = defaultdict(int)
        for p in overdue:
            per_student[p.student_id] += p.amount
        return {
            "overdueCount": len(overdue),
            "overdueAmount": sum(p.amount for p in overdue),
            "studentsWithOverdue": len(per_student),
        }
