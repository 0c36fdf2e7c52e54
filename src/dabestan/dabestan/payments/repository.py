from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Payment


class PaymentRepository(Protocol):
    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def list(self, *, student_id: Optional[int] = None) -> Sequence[Payment]:
        """Newest due date first."""

        raise NotImplementedError

    def list_unsettled(self) -> Sequence[Payment]:
        """Stored PENDING payments without a paid date."""

        raise NotImplementedError

    def create(self, payment: Payment) -> int:
        raise NotImplementedError

    def update(self, payment_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, payment_id: int) -> bool:
        raise NotImplementedError
