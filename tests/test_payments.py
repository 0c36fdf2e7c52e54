from __future__ import annotations

from datetime import date

import pytest

from src.dabestan.dabestan.core.enums import PaymentStatus, PaymentType
from src.dabestan.dabestan.core.exceptions import NotFoundError, ValidationError
from src.dabestan.dabestan.payments.model import Payment, effective_status
from src.dabestan.dabestan.payments.service import PaymentService
from tests.fakes import make_school

TODAY = date(2024, 3, 10)


@pytest.mark.parametrize(
    "stored,due,paid,expected",
    [
        (PaymentStatus.PENDING, date(2024, 3, 9), None, PaymentStatus.OVERDUE),
        (PaymentStatus.PENDING, TODAY, None, PaymentStatus.PENDING),
        (PaymentStatus.PENDING, date(2024, 1, 1), date(2024, 1, 2), PaymentStatus.PAID),
        (PaymentStatus.PAID, date(2024, 1, 1), None, PaymentStatus.PAID),
        (PaymentStatus.CANCELLED, date(2024, 1, 1), None, PaymentStatus.CANCELLED),
    ],
)
def test_effective_status(stored, due, paid, expected):
    assert effective_status(stored, due, paid, TODAY) == expected


@pytest.fixture
def school():
    return make_school()


@pytest.fixture
def service(school):
    return PaymentService(school.payments, school.students, clock=lambda: TODAY)


def _add(school, student_id, amount, due, **kwargs):
    return school.payments.create(Payment(0, student_id, amount, due, PaymentType.TUITION, **kwargs))


def test_create_validates_input(service):
    with pytest.raises(ValidationError):
        service.create({"studentId": 1, "dueDate": "2024-04-01"})
    with pytest.raises(ValidationError):
        service.create({"studentId": 1, "amount": 0, "dueDate": "2024-04-01"})
    with pytest.raises(ValidationError):
        service.create({"studentId": 1, "amount": 1000, "dueDate": "2024-04-01", "paymentType": "GIFT"})
    with pytest.raises(NotFoundError):
        service.create({"studentId": 42, "amount": 1000, "dueDate": "2024-04-01"})


def test_create_defaults_to_pending_tuition(service):
    payment = service.create({"studentId": 1, "amount": "2500000", "dueDate": "2024-04-01"})

    assert payment.amount == 2_500_000
    assert payment.payment_type == PaymentType.TUITION
    assert payment.to_dict(TODAY)["status"] == "PENDING"
    assert payment.to_dict(TODAY)["statusLabel"] == "در انتظار پرداخت"


def test_overdue_is_derived_on_read(service, school):
    pid = _add(school, 1, 1000, date(2024, 3, 1))

    assert school.payments.get_by_id(pid).status == PaymentStatus.PENDING
    assert service.get(pid).to_dict(TODAY)["status"] == "OVERDUE"
    assert [p.payment_id for p in service.list(status="OVERDUE")] == [pid]
    assert service.list(status="PENDING") == []


def test_overdue_cannot_be_stored(service, school):
    pid = _add(school, 1, 1000, date(2024, 3, 1))

    with pytest.raises(ValidationError):
        service.update(pid, {"status": "OVERDUE"})


def test_mark_paid_uses_today_by_default(service, school):
    pid = _add(school, 1, 1000, date(2024, 3, 1))

    payment = service.mark_paid(pid)

    assert payment.status == PaymentStatus.PAID
    assert payment.paid_date == TODAY


def test_update_to_pending_clears_paid_date(service, school):
    pid = _add(school, 1, 1000, date(2024, 4, 1), status=PaymentStatus.PAID, paid_date=date(2024, 3, 2))

    payment = service.update(pid, {"status": "PENDING"})

    assert payment.paid_date is None
    assert payment.status_on(TODAY) == PaymentStatus.PENDING


def test_paid_payment_cannot_be_cancelled(service, school):
    pid = _add(school, 1, 1000, date(2024, 3, 1), status=PaymentStatus.PAID, paid_date=date(2024, 2, 28))

    with pytest.raises(ValidationError):
        service.cancel(pid)


def test_cancelled_payment_is_frozen(service, school):
    pid = _add(school, 1, 1000, date(2024, 4, 1))
    service.cancel(pid)

    with pytest.raises(ValidationError):
        service.update(pid, {"amount": 2000})
    with pytest.raises(ValidationError):
        service.mark_paid(pid)


def test_overdue_summary(service, school):
    _add(school, 1, 1000, date(2024, 3, 1))
    _add(school, 1, 500, date(2024, 2, 1))
    _add(school, 2, 700, date(2024, 3, 9))
    _add(school, 3, 900, date(2024, 3, 20))
    _add(school, 3, 900, date(2024, 1, 20), status=PaymentStatus.CANCELLED)

    assert service.overdue_summary() == {"overdueCount": 3, "overdueAmount": 2200, "studentsWithOverdue": 2}


def test_delete_unknown_payment(service):
    with pytest.raises(NotFoundError):
        service.delete(5)
