from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import PaymentStatus, PaymentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_row
from .model import Payment
from .repository import PaymentRepository

_SELECT = """
    SELECT
        p.payment_id, p.student_id, p.amount, p.due_date, p.paid_date, p.status,
        p.payment_type, p.description,
        CONCAT(s.first_name, ' ', s.last_name) AS student_name
    FROM payments p
    JOIN students s ON s.student_id = p.student_id
"""

_UPDATABLE = {"amount", "due_date", "paid_date", "status", "payment_type", "description"}


def _row_to_payment(r: dict) -> Payment:
    return Payment(
        payment_id=int(r["payment_id"]),
        student_id=int(r["student_id"]),
        amount=int(r["amount"]),
        due_date=r["due_date"],
        paid_date=r.get("paid_date"),
        status=PaymentStatus(r["status"]),
        payment_type=PaymentType(r["payment_type"]),
        description=r.get("description"),
        student_name=r.get("student_name"),
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.payment_id=%s", (int(payment_id),))
            r = fetchone(cur)
            return _row_to_payment(r) if r else None

    def list(self, *, student_id: Optional[int] = None) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            if student_id is None:
                cur.execute(_SELECT + " ORDER BY p.due_date DESC, p.payment_id DESC")
            else:
                cur.execute(
                    _SELECT + " WHERE p.student_id=%s ORDER BY p.due_date DESC, p.payment_id DESC",
                    (int(student_id),),
                )
            return [_row_to_payment(r) for r in fetchall(cur)]

    def list_unsettled(self) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.status='PENDING' AND p.paid_date IS NULL ORDER BY p.due_date ASC")
            return [_row_to_payment(r) for r in fetchall(cur)]

    def create(self, payment: Payment) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(student_id, amount, due_date, paid_date, status, payment_type, description)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    payment.student_id,
                    payment.amount,
                    payment.due_date,
                    payment.paid_date,
                    payment.status.value,
                    payment.payment_type.value,
                    payment.description,
                ),
            )
            return int(cur.lastrowid)

    def update(self, payment_id: int, fields: dict) -> bool:
        return update_row(self._conn_factory, "payments", "payment_id", payment_id, fields, _UPDATABLE)

    def delete(self, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payments WHERE payment_id=%s", (int(payment_id),))
            return cur.rowcount > 0
