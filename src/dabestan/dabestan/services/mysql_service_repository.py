from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import MealType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, update_row
from .model import MealService, MealSubscription, TransportAssignment, TransportRoute
from .repository import MealRepository, TransportRepository

_MEAL_COLUMNS = "meal_id, service_date, meal_type, menu_items, price, max_orders, total_orders, is_active"
_MEAL_UPDATABLE = {"service_date", "meal_type", "menu_items", "price", "max_orders", "total_orders", "is_active"}

_ROUTE_SELECT = """
    SELECT
        r.route_id, r.route_name, r.driver_name, r.vehicle_number, r.capacity,
        r.pickup_time, r.dropoff_time, r.pickup_points, r.monthly_fee, r.is_active,
        (
            SELECT COUNT(*) FROM transport_assignments ta
            WHERE ta.route_id = r.route_id AND (ta.end_date IS NULL OR ta.end_date >= CURDATE())
        ) AS assigned_count
    FROM transport_routes r
"""
_ROUTE_UPDATABLE = {
    "route_name",
    "driver_name",
    "vehicle_number",
    "capacity",
    "pickup_time",
    "dropoff_time",
    "pickup_points",
    "monthly_fee",
    "is_active",
}


def _row_to_meal(r: dict) -> MealService:
    return MealService(
        meal_id=int(r["meal_id"]),
        service_date=r["service_date"],
        meal_type=MealType(r["meal_type"]),
        menu_items=r["menu_items"],
        price=int(r.get("price") or 0),
        max_orders=int(r.get("max_orders") or 0),
        total_orders=int(r.get("total_orders") or 0),
        is_active=bool(r.get("is_active", 1)),
    )


def _row_to_route(r: dict) -> TransportRoute:
    return TransportRoute(
        route_id=int(r["route_id"]),
        route_name=r["route_name"],
        driver_name=r["driver_name"],
        vehicle_number=r["vehicle_number"],
        capacity=int(r.get("capacity") or 0),
        pickup_time=normalize_mysql_time(r["pickup_time"]),
        dropoff_time=normalize_mysql_time(r["dropoff_time"]),
        pickup_points=r["pickup_points"],
        monthly_fee=int(r.get("monthly_fee") or 0),
        is_active=bool(r.get("is_active", 1)),
        assigned_count=int(r.get("assigned_count") or 0),
    )


class MySQLMealRepository(MealRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, meal_id: int) -> Optional[MealService]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_MEAL_COLUMNS} FROM meal_services WHERE meal_id=%s", (int(meal_id),))
            r = fetchone(cur)
            return _row_to_meal(r) if r else None

    def get_by_date_type(self, service_date: date, meal_type: MealType) -> Optional[MealService]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_MEAL_COLUMNS} FROM meal_services WHERE service_date=%s AND meal_type=%s",
                (service_date, MealType(meal_type).value),
            )
            r = fetchone(cur)
            return _row_to_meal(r) if r else None

    def list(self, *, service_date: Optional[date] = None, active_only: bool = False) -> Sequence[MealService]:
        clauses = ["1=1"]
        params: list[object] = []
        if service_date is not None:
            clauses.append("service_date=%s")
            params.append(service_date)
        if active_only:
            clauses.append("is_active=1")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_MEAL_COLUMNS} FROM meal_services
                WHERE {' AND '.join(clauses)}
                ORDER BY service_date DESC, FIELD(meal_type, 'BREAKFAST', 'LUNCH', 'SNACK')
                """,
                tuple(params),
            )
            return [_row_to_meal(r) for r in fetchall(cur)]

    def create(self, meal: MealService) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO meal_services(service_date, meal_type, menu_items, price, max_orders, total_orders, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    meal.service_date,
                    meal.meal_type.value,
                    meal.menu_items,
                    meal.price,
                    meal.max_orders,
                    meal.total_orders,
                    int(meal.is_active),
                ),
            )
            return int(cur.lastrowid)

    def update(self, meal_id: int, fields: dict) -> bool:
        return update_row(self._conn_factory, "meal_services", "meal_id", meal_id, fields, _MEAL_UPDATABLE)

    def delete(self, meal_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM meal_services WHERE meal_id=%s", (int(meal_id),))
            return cur.rowcount > 0

    def add_subscription(self, subscription: MealSubscription) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO meal_subscriptions(student_id, meal_type, start_date, end_date) VALUES(%s,%s,%s,%s)",
                (subscription.student_id, subscription.meal_type, subscription.start_date, subscription.end_date),
            )
            return int(cur.lastrowid)


class MySQLTransportRepository(TransportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, route_id: int) -> Optional[TransportRoute]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_ROUTE_SELECT + " WHERE r.route_id=%s", (int(route_id),))
            r = fetchone(cur)
            return _row_to_route(r) if r else None

    def get_by_name(self, route_name: str) -> Optional[TransportRoute]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_ROUTE_SELECT + " WHERE r.route_name=%s", (route_name,))
            r = fetchone(cur)
            return _row_to_route(r) if r else None

    def list(self, *, active_only: bool = True) -> Sequence[TransportRoute]:
        where = " WHERE r.is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_ROUTE_SELECT + where + " ORDER BY r.route_name ASC")
            return [_row_to_route(r) for r in fetchall(cur)]

    def create(self, route: TransportRoute) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO transport_routes(
                    route_name, driver_name, vehicle_number, capacity, pickup_time, dropoff_time,
                    pickup_points, monthly_fee, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    route.route_name,
                    route.driver_name,
                    route.vehicle_number,
                    route.capacity,
                    route.pickup_time,
                    route.dropoff_time,
                    route.pickup_points,
                    route.monthly_fee,
                    int(route.is_active),
                ),
            )
            return int(cur.lastrowid)

    def update(self, route_id: int, fields: dict) -> bool:
        return update_row(self._conn_factory, "transport_routes", "route_id", route_id, fields, _ROUTE_UPDATABLE)

    def delete(self, route_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM transport_routes WHERE route_id=%s", (int(route_id),))
            return cur.rowcount > 0

    def find_open_assignment(self, student_id: int, on: date) -> Optional[TransportAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_id, student_id, route_id, start_date, end_date, pickup_point
                FROM transport_assignments
                WHERE student_id=%s AND start_date<=%s AND (end_date IS NULL OR end_date>=%s)
                LIMIT 1
                """,
                (int(student_id), on, on),
            )
            r = fetchone(cur)
            if not r:
                return None
            return TransportAssignment(
                assignment_id=int(r["assignment_id"]),
                student_id=int(r["student_id"]),
                route_id=int(r["route_id"]),
                start_date=r["start_date"],
                end_date=r.get("end_date"),
                pickup_point=r["pickup_point"],
            )

    def assign(self, assignment: TransportAssignment) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO transport_assignments(student_id, route_id, start_date, end_date, pickup_point)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    assignment.student_id,
                    assignment.route_id,
                    assignment.start_date,
                    assignment.end_date,
                    assignment.pickup_point,
                ),
            )
            return int(cur.lastrowid)
