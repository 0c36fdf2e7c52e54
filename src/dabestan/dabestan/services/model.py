from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import MealType

ALL_MEALS = "ALL"


@dataclass(frozen=True)
class MealService:
    """One meal offered on one day; unique per (service_date, meal_type)."""

    meal_id: int
    service_date: date
    meal_type: MealType
    menu_items: str
    price: int = 0
    max_orders: int = 100
    total_orders: int = 0
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.meal_id,
            "date": self.service_date.isoformat(),
            "mealType": self.meal_type.value,
            "menuItems": self.menu_items,
            "price": self.price,
            "maxOrders": self.max_orders,
            "totalOrders": self.total_orders,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class MealSubscription:
    subscription_id: int
    student_id: int
    meal_type: str  # a MealType value or ALL_MEALS
    start_date: date
    end_date: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "id": self.subscription_id,
            "studentId": self.student_id,
            "mealType": self.meal_type,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat() if self.end_date else None,
        }


@dataclass(frozen=True)
class TransportRoute:
    route_id: int
    route_name: str
    driver_name: str
    vehicle_number: str
    pickup_time: time
    dropoff_time: time
    pickup_points: str
    capacity: int = 20
    monthly_fee: int = 0
    is_active: bool = True
    assigned_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.route_id,
            "routeName": self.route_name,
            "driverName": self.driver_name,
            "vehicleNumber": self.vehicle_number,
            "capacity": self.capacity,
            "pickupTime": self.pickup_time.strftime("%H:%M"),
            "dropoffTime": self.dropoff_time.strftime("%H:%M"),
            "pickupPoints": self.pickup_points,
            "monthlyFee": self.monthly_fee,
            "isActive": self.is_active,
            "assignedCount": self.assigned_count,
        }


@dataclass(frozen=True)
class TransportAssignment:
    assignment_id: int
    student_id: int
    route_id: int
    start_date: date
    pickup_point: str
    end_date: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "id": self.assignment_id,
            "studentId": self.student_id,
            "routeId": self.route_id,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "pickupPoint": self.pickup_point,
        }
