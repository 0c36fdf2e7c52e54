from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import today_local
from ..common.validators import (
    optional_date,
    require_date,
    require_enum,
    require_hhmm,
    require_int,
    require_max_length,
    require_non_empty,
    require_number,
)
from ..core.constants import DEFAULT_MEAL_MAX_ORDERS, DEFAULT_TRANSPORT_CAPACITY
from ..core.enums import MealType
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .model import ALL_MEALS, MealService, MealSubscription, TransportAssignment, TransportRoute
from .repository import MealRepository, TransportRepository

logger = logging.getLogger(__name__)

MAX_MEAL_PRICE = 1_000_000
MAX_MEAL_ORDERS = 500
MAX_ROUTE_CAPACITY = 50


def _hhmm(value, field_name: str) -> time:
    return datetime.strptime(require_hhmm(value, field_name), "%H:%M").time()


def _menu(value) -> str:
    return require_max_length(require_non_empty(value, "منو"), "منو", 500)


class MealMenuService:
    """Daily meal offerings and student meal subscriptions."""

    def __init__(
        self,
        meals: MealRepository,
        students: StudentRepository,
        *,
        clock: Callable[[], date] = today_local,
    ):
        self._meals = meals
        self._students = students
        self._clock = clock

    def list(self, *, service_date=None) -> Sequence[MealService]:
        return self._meals.list(service_date=optional_date(service_date))

    def get(self, meal_id: int) -> MealService:
        meal = self._meals.get_by_id(meal_id)
        if not meal:
            raise NotFoundError("سرویس غذا یافت نشد")
        return meal

    def create(self, payload: dict) -> MealService:
        if not payload.get("date") or not payload.get("mealType") or not payload.get("menuItems"):
            raise ValidationError("تاریخ، نوع وعده و منو الزامی است")
        service_date = require_date(payload["date"])
        meal_type = require_enum(payload["mealType"], MealType, "نوع وعده")
        if self._meals.get_by_date_type(service_date, meal_type):
            raise ValidationError("سرویس غذا برای این تاریخ و وعده قبلاً ثبت شده است")

        meal = MealService(
            meal_id=0,
            service_date=service_date,
            meal_type=meal_type,
            menu_items=_menu(payload["menuItems"]),
            price=int(require_number(payload.get("price") or 0, "قیمت", max_value=MAX_MEAL_PRICE)),
            max_orders=(
                require_int(payload["maxOrders"], "حداکثر سفارش", min_value=1, max_value=MAX_MEAL_ORDERS)
                if payload.get("maxOrders") not in (None, "")
                else DEFAULT_MEAL_MAX_ORDERS
            ),
        )
        meal_id = self._meals.create(meal)
        logger.info("meal service %s created (%s %s)", meal_id, service_date, meal_type.value)
        return self.get(meal_id)

    def update(self, meal_id: int, payload: dict) -> MealService:
        current = self.get(meal_id)
        fields: dict = {}
        if "date" in payload:
            fields["service_date"] = require_date(payload["date"])
        if "mealType" in payload:
            fields["meal_type"] = require_enum(payload["mealType"], MealType, "نوع وعده")
        if "menuItems" in payload:
            fields["menu_items"] = _menu(payload["menuItems"])
        if "price" in payload:
            fields["price"] = int(require_number(payload["price"], "قیمت", max_value=MAX_MEAL_PRICE))
        if "maxOrders" in payload:
            fields["max_orders"] = require_int(payload["maxOrders"], "حداکثر سفارش", min_value=1, max_value=MAX_MEAL_ORDERS)
        if "totalOrders" in payload:
            fields["total_orders"] = require_int(payload["totalOrders"], "تعداد سفارش", min_value=0)
        if "isActive" in payload:
            fields["is_active"] = int(bool(payload["isActive"]))

        if fields.get("total_orders", current.total_orders) > fields.get("max_orders", current.max_orders):
            raise ValidationError("تعداد سفارش از ظرفیت بیشتر است")

        new_date = fields.get("service_date", current.service_date)
        new_type = fields.get("meal_type", current.meal_type)
        if (new_date, new_type) != (current.service_date, current.meal_type):
            other = self._meals.get_by_date_type(new_date, new_type)
            if other and other.meal_id != meal_id:
                raise ValidationError("سرویس غذا برای این تاریخ و وعده قبلاً ثبت شده است")

        if fields:
            self._meals.update(meal_id, fields)
        return self.get(meal_id)

    def delete(self, meal_id: int) -> None:
        self.get(meal_id)
        self._meals.delete(meal_id)

    def subscribe(self, payload: dict) -> MealSubscription:
        if payload.get("studentId") in (None, "") or not payload.get("startDate"):
            raise ValidationError("دانش‌آموز و تاریخ شروع الزامی است")
        sid = require_int(payload["studentId"], "دانش‌آموز")
        student = self._students.get_by_id(sid)
        if not student or not student.is_active:
            raise NotFoundError("دانش‌آموز یافت نشد")

        raw_type = str(payload.get("mealType") or ALL_MEALS).upper()
        meal_type = ALL_MEALS if raw_type == ALL_MEALS else require_enum(raw_type, MealType, "نوع وعده").value
        start = require_date(payload["startDate"], "تاریخ شروع")
        end = optional_date(payload.get("endDate"), "تاریخ پایان")
        if end is not None and end < start:
            raise ValidationError("تاریخ پایان نمی‌تواند قبل از تاریخ شروع باشد")

        subscription = MealSubscription(0, sid, meal_type, start, end)
        subscription_id = self._meals.add_subscription(subscription)
        return MealSubscription(subscription_id, sid, meal_type, start, end)

    def today_count(self) -> dict:
        today = self._clock()
        meals = self._meals.list(service_date=today, active_only=True)
        return {
            "date": today.isoformat(),
            "totalOrders": sum(m.total_orders for m in meals),
            "mealServices": [m.to_dict() for m in meals],
        }

    def active_count(self) -> dict:
        today = self._clock()
        meals = self._meals.list(service_date=today, active_only=True)
        return {
            "date": today.isoformat(),
            "activeServicesCount": len(meals),
            "services": [
                {"id": m.meal_id, "mealType": m.meal_type.value, "totalOrders": m.total_orders, "isActive": m.is_active}
                for m in meals
            ],
        }


class TransportService:
    """School bus routes and student route assignments."""

    def __init__(
        self,
        routes: TransportRepository,
        students: StudentRepository,
        *,
        clock: Callable[[], date] = today_local,
    ):
        self._routes = routes
        self._students = students
        self._clock = clock

    def list(self) -> Sequence[TransportRoute]:
        return self._routes.list(active_only=True)

    def get(self, route_id: int) -> TransportRoute:
        route = self._routes.get_by_id(route_id)
        if not route:
            raise NotFoundError("سرویس حمل و نقل یافت نشد")
        return route

    def create(self, payload: dict) -> TransportRoute:
        name = require_non_empty(payload.get("routeName"), "نام مسیر")
        if self._routes.get_by_name(name):
            raise ValidationError("مسیری با این نام قبلاً ثبت شده است")

        route = TransportRoute(
            route_id=0,
            route_name=name,
            driver_name=require_non_empty(payload.get("driverName"), "نام راننده"),
            vehicle_number=require_non_empty(payload.get("vehicleNumber"), "شماره پلاک"),
            pickup_time=_hhmm(payload.get("pickupTime"), "زمان سوار شدن"),
            dropoff_time=_hhmm(payload.get("dropoffTime"), "زمان پیاده شدن"),
            pickup_points=require_max_length(
                require_non_empty(payload.get("pickupPoints"), "ایستگاه‌ها"), "ایستگاه‌ها", 1000
            ),
            capacity=(
                require_int(payload["capacity"], "ظرفیت", min_value=1, max_value=MAX_ROUTE_CAPACITY)
                if payload.get("capacity") not in (None, "")
                else DEFAULT_TRANSPORT_CAPACITY
            ),
            monthly_fee=int(require_number(payload.get("monthlyFee") or 0, "هزینه ماهانه")),
        )
        route_id = self._routes.create(route)
        logger.info("transport route %s created (%s)", route_id, name)
        return self.get(route_id)

    def update(self, route_id: int, payload: dict) -> TransportRoute:
        current = self.get(route_id)
        fields: dict = {}
        if "routeName" in payload:
            name = require_non_empty(payload["routeName"], "نام مسیر")
            other = self._routes.get_by_name(name)
            if other and other.route_id != route_id:
                raise ValidationError("مسیری با این نام قبلاً ثبت شده است")
            fields["route_name"] = name
        if "driverName" in payload:
            fields["driver_name"] = require_non_empty(payload["driverName"], "نام راننده")
        if "vehicleNumber" in payload:
            fields["vehicle_number"] = require_non_empty(payload["vehicleNumber"], "شماره پلاک")
        if "pickupTime" in payload:
            fields["pickup_time"] = _hhmm(payload["pickupTime"], "زمان سوار شدن")
        if "dropoffTime" in payload:
            fields["dropoff_time"] = _hhmm(payload["dropoffTime"], "زمان پیاده شدن")
        if "pickupPoints" in payload:
            fields["pickup_points"] = require_max_length(
                require_non_empty(payload["pickupPoints"], "ایستگاه‌ها"), "ایستگاه‌ها", 1000
            )
        if "capacity" in payload:
            capacity = require_int(payload["capacity"], "ظرفیت", min_value=1, max_value=MAX_ROUTE_CAPACITY)
            if capacity < current.assigned_count:
                raise ValidationError("ظرفیت نمی‌تواند کمتر از تعداد دانش‌آموزان فعلی باشد")
            fields["capacity"] = capacity
        if "monthlyFee" in payload:
            fields["monthly_fee"] = int(require_number(payload["monthlyFee"], "هزینه ماهانه"))
        if "isActive" in payload:
            fields["is_active"] = int(bool(payload["isActive"]))

        if fields:
            self._routes.update(route_id, fields)
        return self.get(route_id)

    def delete(self, route_id: int) -> None:
        route = self.get(route_id)
        if route.assigned_count > 0:
            raise ValidationError("نمی‌توان سرویسی را که دانش‌آموز مشترک دارد حذف کرد")
        self._routes.delete(route_id)

    def assign(self, route_id: int, payload: dict) -> TransportAssignment:
        route = self.get(route_id)
        if not route.is_active:
            raise ValidationError("این سرویس غیرفعال است")
        if payload.get("studentId") in (None, ""):
            raise ValidationError("دانش‌آموز الزامی است")
        sid = require_int(payload["studentId"], "دانش‌آموز")
        student = self._students.get_by_id(sid)
        if not student or not student.is_active:
            raise NotFoundError("دانش‌آموز یافت نشد")

        start = optional_date(payload.get("startDate"), "تاریخ شروع") or self._clock()
        end = optional_date(payload.get("endDate"), "تاریخ پایان")
        if end is not None and end < start:
            raise ValidationError("تاریخ پایان نمی‌تواند قبل از تاریخ شروع باشد")
        if route.assigned_count >= route.capacity:
            raise ValidationError("ظرفیت سرویس تکمیل است")
        if self._routes.find_open_assignment(sid, start):
            raise ValidationError("دانش‌آموز در این تاریخ به سرویس دیگری اختصاص داده شده است")

        assignment = TransportAssignment(
            assignment_id=0,
            student_id=sid,
            route_id=route.route_id,
            start_date=start,
            end_date=end,
            pickup_point=require_non_empty(payload.get("pickupPoint"), "ایستگاه"),
        )
        assignment_id = self._routes.assign(assignment)
        logger.info("student %s assigned to route %s", sid, route.route_id)
        return TransportAssignment(assignment_id, sid, route.route_id, start, assignment.pickup_point, end)
