from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .announcements.mysql_announcement_repository import MySQLAnnouncementRepository
from .announcements.repository import AnnouncementRepository
from .announcements.service import AnnouncementService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .core.constants import FREQUENT_ABSENCE_DAYS, FREQUENT_ABSENCE_THRESHOLD
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .permissions.service import PermissionService
from .services.mysql_service_repository import MySQLMealRepository, MySQLTransportRepository
from .services.repository import MealRepository, TransportRepository
from .services.service import MealMenuService, TransportService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .teachers.mysql_teacher_repository import MySQLTeacherRepository
from .teachers.repository import TeacherRepository
from .teachers.service import TeacherService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    teachers_repo: TeacherRepository
    classes_repo: ClassRepository
    students_repo: StudentRepository
    attendance_repo: AttendanceRepository
    payments_repo: PaymentRepository
    meals_repo: MealRepository
    transport_repo: TransportRepository
    announcements_repo: AnnouncementRepository

    auth_service: AuthService
    user_service: UserService
    permission_service: PermissionService
    teacher_service: TeacherService
    class_service: ClassService
    student_service: StudentService
    attendance_service: AttendanceService
    payment_service: PaymentService
    meal_service: MealMenuService
    transport_service: TransportService
    announcement_service: AnnouncementService
    dashboard_service: DashboardService


def assemble(
    *,
    users_repo: UserRepository,
    teachers_repo: TeacherRepository,
    classes_repo: ClassRepository,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    payments_repo: PaymentRepository,
    meals_repo: MealRepository,
    transport_repo: TransportRepository,
    announcements_repo: AnnouncementRepository,
    conn: Optional[DatabaseConnection] = None,
    absence_threshold: int = FREQUENT_ABSENCE_THRESHOLD,
    absence_days: int = FREQUENT_ABSENCE_DAYS,
) -> Container:
    """Wire services over the given repositories (MySQL in the app, fakes in tests)."""

    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        absence_threshold=absence_threshold,
        absence_days=absence_days,
    )
    payment_service = PaymentService(payments_repo, students_repo)
    meal_service = MealMenuService(meals_repo, students_repo)
    transport_service = TransportService(transport_repo, students_repo)
    announcement_service = AnnouncementService(announcements_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        teachers_repo=teachers_repo,
        classes_repo=classes_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        payments_repo=payments_repo,
        meals_repo=meals_repo,
        transport_repo=transport_repo,
        announcements_repo=announcements_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, teachers_repo),
        permission_service=PermissionService(classes_repo, students_repo),
        teacher_service=TeacherService(teachers_repo, classes_repo),
        class_service=ClassService(classes_repo, teachers_repo),
        student_service=StudentService(students_repo, classes_repo),
        attendance_service=attendance_service,
        payment_service=payment_service,
        meal_service=meal_service,
        transport_service=transport_service,
        announcement_service=announcement_service,
        dashboard_service=DashboardService(
            students=students_repo,
            classes=classes_repo,
            teachers=teachers_repo,
            attendance=attendance_service,
            payments=payment_service,
            meals=meal_service,
            transport=transport_service,
            announcements=announcement_service,
        ),
    )


def build_container(
    *,
    db_config: dict,
    absence_threshold: int = FREQUENT_ABSENCE_THRESHOLD,
    absence_days: int = FREQUENT_ABSENCE_DAYS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        teachers_repo=MySQLTeacherRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        meals_repo=MySQLMealRepository(conn),
        transport_repo=MySQLTransportRepository(conn),
        announcements_repo=MySQLAnnouncementRepository(conn),
        absence_threshold=absence_threshold,
        absence_days=absence_days,
    )
