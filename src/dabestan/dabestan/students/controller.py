from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user, json_body, ok, permission_required
from ..core.enums import Action, Resource
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @permission_required(Resource.STUDENT, Action.VIEW)
    def list_students():
        students = container.student_service.list(
            grade=request.args.get("grade"),
            class_id=request.args.get("classId"),
            search=request.args.get("search"),
            limit=request.args.get("limit"),
            offset=request.args.get("offset"),
        )
        return ok({"students": [s.to_dict() for s in students], "count": len(students)})

    @app.route("/api/students", methods=["POST"], endpoint="create_student")
    @permission_required(Resource.STUDENT, Action.CREATE)
    def create_student():
        student = container.student_service.create(json_body())
        return ok({"student": student.to_dict()}, "دانش‌آموز با موفقیت ثبت شد", 201)

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="get_student")
    @permission_required(Resource.STUDENT, Action.VIEW)
    def get_student(student_id: int):
        return ok({"student": container.student_service.get(student_id).to_dict()})

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="update_student")
    @permission_required(Resource.STUDENT, Action.UPDATE)
    def update_student(student_id: int):
        current = container.student_service.get(student_id)
        container.permission_service.require(
            current_user(), Resource.STUDENT, Action.UPDATE, student_id=student_id
        )
        payload = json_body()
        # Moving a student between classes is a class change, as on /assign-class.
        new_class = payload.get("classId")
        if new_class not in (None, "") and str(new_class) != str(current.class_id):
            container.permission_service.require(current_user(), Resource.CLASS, Action.UPDATE)
        student = container.student_service.update(student_id, payload)
        return ok({"student": student.to_dict()}, "اطلاعات دانش‌آموز بروزرسانی شد")

    @app.route("/api/students/<int:student_id>/assign-class", methods=["POST"], endpoint="assign_student_class")
    @permission_required(Resource.CLASS, Action.UPDATE)
    def assign_student_class(student_id: int):
        student = container.student_service.assign_class(student_id, json_body().get("classId"))
        return ok({"student": student.to_dict()}, "کلاس دانش‌آموز تغییر کرد")

    @app.route("/api/students/<int:student_id>/deactivate", methods=["POST"], endpoint="deactivate_student")
    @permission_required(Resource.STUDENT, Action.DELETE)
    def deactivate_student(student_id: int):
        container.student_service.deactivate(student_id)
        return ok(message="دانش‌آموز غیرفعال شد")

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="delete_student")
    @permission_required(Resource.STUDENT, Action.DELETE)
    def delete_student(student_id: int):
        deleted = container.student_service.delete(student_id)
        return ok(
            {
                "deletedStudent": {"id": deleted.student_id, "name": deleted.name},
                "deletedRecords": {
                    "attendance": deleted.attendance_records,
                    "payments": deleted.payment_records,
                },
            },
            "دانش‌آموز و تمام اطلاعات مرتبط حذف شد",
        )
