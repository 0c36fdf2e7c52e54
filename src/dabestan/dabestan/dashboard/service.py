from __future__ import annotations

from typing import Union

from ..announcements.service import AnnouncementService
from ..attendance.service import AttendanceService
from ..classes.repository import ClassRepository
from ..core.enums import Action, Resource, Role
from ..payments.service import PaymentService
from ..permissions.policy import has_permission
from ..services.service import MealMenuService, TransportService
from ..students.repository import StudentRepository
from ..teachers.repository import TeacherRepository


class DashboardService:
    """Aggregates the headline numbers of the home screen for one role."""

    def __init__(
        self,
        *,
        students: StudentRepository,
        classes: ClassRepository,
        teachers: TeacherRepository,
        attendance: AttendanceService,
        payments: PaymentService,
        meals: MealMenuService,
        transport: TransportService,
        announcements: AnnouncementService,
    ):
        self._students = students
        self._classes = classes
        self._teachers = teachers
        self._attendance = attendance
        self._payments = payments
        self._meals = meals
        self._transport = transport
        self._announcements = announcements

    def stats(self, role: Union[Role, str]) -> dict:
        today = self._attendance.today_stats()
        absentees = self._attendance.frequent_absentees()
        meals = self._meals.today_count()

        data: dict = {
            "totalStudents": self._students.count_active(),
            "activeClasses": len(self._classes.list_active()),
            "activeTeachers": len(self._teachers.list_active()),
            "presentCountToday": today["presentToday"],
            "absentCountToday": today["absentToday"],
            "lateCountToday": today["lateToday"],
            "attendanceRate": today["attendanceRate"],
            "foodMealsToday": meals["totalOrders"],
            "activeServices": len(meals["mealServices"]) + len(self._transport.list()),
            "frequentAbsentees": absentees["count"],
            "announcements": [a.to_dict() for a in self._announcements.recent()],
        }
        alerts = []
        if absentees["count"]:
            alerts.append(
                {
                    "type": "attendance",
                    "level": "warning",
                    "message": f"{absentees['count']} دانش‌آموز غیبت مکرر دارند",
                }
            )

        if has_permission(role, Resource.PAYMENT, Action.VIEW):
            overdue = self._payments.overdue_summary()
            data["overduePayments"] = overdue["overdueCount"]
            data["overdueStudents"] = overdue["studentsWithOverdue"]
            if overdue["overdueCount"]:
                alerts.append(
                    {
                        "type": "payment",
                        "level": "danger",
                        "message": f"{overdue['overdueCount']} پرداخت معوق وجود دارد",
                    }
                )

        data["alerts"] = alerts
        return data
