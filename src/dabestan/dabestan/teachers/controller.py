from __future__ import annotations

from flask import Flask

from ..common.web import json_body, ok, permission_required
from ..core.enums import Action, Resource
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teachers", methods=["GET"], endpoint="list_teachers")
    @permission_required(Resource.TEACHER, Action.VIEW)
    def list_teachers():
        return ok({"teachers": [t.to_dict() for t in container.teacher_service.list()]})

    @app.route("/api/teachers", methods=["POST"], endpoint="create_teacher")
    @permission_required(Resource.TEACHER, Action.CREATE)
    def create_teacher():
        teacher = container.teacher_service.create(json_body())
        return ok({"teacher": teacher.to_dict()}, "معلم با موفقیت اضافه شد", 201)

    @app.route("/api/teachers/<int:teacher_id>", methods=["GET"], endpoint="get_teacher")
    @permission_required(Resource.TEACHER, Action.VIEW)
    def get_teacher(teacher_id: int):
        return ok({"teacher": container.teacher_service.get(teacher_id).to_dict()})

    @app.route("/api/teachers/<int:teacher_id>", methods=["PUT"], endpoint="update_teacher")
    @permission_required(Resource.TEACHER, Action.UPDATE)
    def update_teacher(teacher_id: int):
        teacher = container.teacher_service.update(teacher_id, json_body())
        return ok({"teacher": teacher.to_dict()}, "اطلاعات معلم بروزرسانی شد")

    @app.route("/api/teachers/<int:teacher_id>/deactivate", methods=["POST"], endpoint="deactivate_teacher")
    @permission_required(Resource.TEACHER, Action.UPDATE)
    def deactivate_teacher(teacher_id: int):
        container.teacher_service.deactivate(teacher_id)
        return ok(message="معلم غیرفعال شد")

    @app.route("/api/teachers/<int:teacher_id>", methods=["DELETE"], endpoint="delete_teacher")
    @permission_required(Resource.TEACHER, Action.DELETE)
    def delete_teacher(teacher_id: int):
        container.teacher_service.delete(teacher_id)
        return ok(message="معلم حذف شد")
