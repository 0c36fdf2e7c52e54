from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import MealType
from .model import MealService, MealSubscription, TransportAssignment, TransportRoute


class MealRepository(Protocol):
    def get_by_id(self, meal_id: int) -> Optional[MealService]:
        raise NotImplementedError

    def get_by_date_type(self, service_date: date, meal_type: MealType) -> Optional[MealService]:
        raise NotImplementedError

    def list(self, *, service_date: Optional[date] = None, active_only: bool = False) -> Sequence[MealService]:
        raise NotImplementedError

    def create(self, meal: MealService) -> int:
        raise NotImplementedError

    def update(self, meal_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, meal_id: int) -> bool:
        raise NotImplementedError

    def add_subscription(self, subscription: MealSubscription) -> int:
        raise NotImplementedError


class TransportRepository(Protocol):
    def get_by_id(self, route_id: int) -> Optional[TransportRoute]:
        raise NotImplementedError

    def get_by_name(self, route_name: str) -> Optional[TransportRoute]:
        raise NotImplementedError

    def list(self, *, active_only: bool = True) -> Sequence[TransportRoute]:
        raise NotImplementedError

    def create(self, route: TransportRoute) -> int:
        raise NotImplementedError

    def update(self, route_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, route_id: int) -> bool:
        raise NotImplementedError

    def find_open_assignment(self, student_id: int, on: date) -> Optional[TransportAssignment]:
        raise NotImplementedError

    def assign(self, assignment: TransportAssignment) -> int:
        raise NotImplementedError
