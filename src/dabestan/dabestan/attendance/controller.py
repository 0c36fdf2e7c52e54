from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.web import current_user, json_body, ok, permission_required
from ..common.validators import require_date
from ..core.enums import Action, Resource, Role
from ..container import Container
from .export import XLSX_MIMETYPE, export_filename

_PREFIXES = ("/attendance", "/api/attendance")


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    permissions = container.permission_service

    def route(path: str, endpoint: str, methods: list[str]):
        """Serve ``path`` under both the page and the /api prefix."""

        def decorator(view):
            for prefix in _PREFIXES:
                name = endpoint if prefix == _PREFIXES[0] else f"api_{endpoint}"
                app.add_url_rule(f"{prefix}{path}", endpoint=name, view_func=view, methods=methods)
            return view

        return decorator

    @route("/mark", "attendance_mark", ["POST"])
    @permission_required(Resource.ATTENDANCE, Action.UPDATE)
    def mark():
        payload = json_body()
        student_id = payload.get("studentId")
        if student_id not in (None, ""):
            permissions.require(current_user(), Resource.ATTENDANCE, Action.UPDATE, student_id=student_id)
        record = service.mark(
            student_id,
            payload.get("date"),
            payload.get("status"),
            payload.get("notes"),
            payload.get("classId"),
        )
        return ok(record.to_dict() if record else {"studentId": student_id, "status": None}, "حضور و غیاب با موفقیت ثبت شد")

    @route("/bulk", "attendance_bulk", ["POST"])
    @permission_required(Resource.ATTENDANCE, Action.UPDATE)
    def bulk():
        payload = json_body()
        user = current_user()
        class_id = payload.get("classId")

        row_guard = None
        if user.role == Role.TEACHER:
            if class_id not in (None, ""):
                permissions.require(user, Resource.ATTENDANCE, Action.UPDATE, class_id=class_id)

            def row_guard(student_id: int) -> None:
                permissions.require(user, Resource.ATTENDANCE, Action.UPDATE, student_id=student_id)

        result = service.bulk_mark(payload.get("date"), payload.get("updates"), class_id, row_guard=row_guard)
        summary = result.summary()
        message = f"حضور و غیاب {summary['succeeded']} دانش‌آموز ثبت شد"
        if not result.success:
            message += f" ({summary['failed']} مورد ناموفق)"
        return {"success": result.success, "data": result.to_dict(), "message": message}, 200

    @route("/clear", "attendance_clear_class", ["POST"])
    @permission_required(Resource.ATTENDANCE, Action.UPDATE)
    def clear_class():
        payload = json_body()
        class_id = payload.get("classId")
        if class_id not in (None, ""):
            permissions.require(current_user(), Resource.ATTENDANCE, Action.UPDATE, class_id=class_id)
        cleared = service.clear(class_id, payload.get("date"))
        return ok({"cleared": cleared}, "حضور و غیاب کلاس پاک شد")

    @route("/clear", "attendance_clear_student", ["DELETE"])
    @permission_required(Resource.ATTENDANCE, Action.UPDATE)
    def clear_student():
        payload = json_body()
        student_id = payload.get("studentId") or request.args.get("studentId")
        attendance_date = payload.get("date") or request.args.get("date")
        if student_id not in (None, ""):
            permissions.require(current_user(), Resource.ATTENDANCE, Action.UPDATE, student_id=student_id)
        service.clear_student(student_id, attendance_date)
        return ok(message="حضور و غیاب حذف شد")

    @route("/export", "attendance_export", ["GET"])
    @permission_required(Resource.ATTENDANCE, Action.VIEW)
    def export():
        attendance_date = require_date(request.args.get("date"))
        content = service.export(
            attendance_date,
            request.args.get("classId"),
            request.args.get("search"),
            request.args.get("status"),
        )
        return send_file(
            io.BytesIO(content),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=export_filename(attendance_date),
        )

    @route("/roster", "attendance_roster", ["GET"])
    @permission_required(Resource.ATTENDANCE, Action.VIEW)
    def roster():
        classes = service.roster(request.args.get("date"), request.args.get("classId"))
        entries = [s for c in classes for s in c.students]
        return ok({"classes": [c.to_dict() for c in classes], "summary": service.summarize(entries)})

    @route("/student/<int:student_id>", "attendance_student", ["GET"])
    @permission_required(Resource.ATTENDANCE, Action.VIEW)
    def student(student_id: int):
        day = request.args.get("date")
        if day:
            record = service.student_day(student_id, day)
            if record is None:
                return ok(None, "حضور و غیاب برای این تاریخ ثبت نشده است")
            return ok(record.to_dict())
        return ok(
            service.student_history(
                student_id,
                month=request.args.get("month"),
                year=request.args.get("year"),
            )
        )

    @route("/stats/today", "attendance_stats_today", ["GET"])
    @permission_required(Resource.ATTENDANCE, Action.VIEW)
    def stats_today():
        return ok(service.today_stats(request.args.get("date")))

    @route("/frequent-absentees", "attendance_frequent_absentees", ["GET"])
    @permission_required(Resource.ATTENDANCE, Action.VIEW)
    def frequent_absentees():
        return ok(service.frequent_absentees())
