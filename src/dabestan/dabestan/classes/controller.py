from __future__ import annotations

import logging

from flask import Flask, request

from ..common.web import fail, json_body, ok, permission_required
from ..core.enums import Action, Resource
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/management/classes", methods=["GET"], endpoint="management_classes")
    @app.route("/api/classes", methods=["GET"], endpoint="list_classes")
    @permission_required(Resource.CLASS, Action.VIEW)
    def list_classes():
        grade = request.args.get("grade", type=int)
        try:
            classes = container.class_service.list(grade=grade)
        except Exception:
            logger.exception("failed to load classes")
            return fail("خطا در دریافت لیست کلاس‌ها", 500)
        return ok({"classes": [c.to_dict() for c in classes]})

    @app.route("/management/classes", methods=["POST"], endpoint="management_create_class")
    @app.route("/api/classes", methods=["POST"], endpoint="create_class")
    @permission_required(Resource.CLASS, Action.CREATE)
    def create_class():
        payload = json_body()
        klass = container.class_service.create(
            grade=payload.get("grade"),
            section=payload.get("section"),
            teacher_id=payload.get("teacherId"),
            capacity=payload.get("capacity"),
        )
        return ok({"class": klass.to_dict()}, "کلاس با موفقیت ایجاد شد", 201)

    @app.route("/api/classes/<int:class_id>", methods=["GET"], endpoint="get_class")
    @permission_required(Resource.CLASS, Action.VIEW)
    def get_class(class_id: int):
        return ok({"class": container.class_service.get(class_id).to_dict()})

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="update_class")
    @permission_required(Resource.CLASS, Action.UPDATE)
    def update_class(class_id: int):
        klass = container.class_service.update(class_id, json_body())
        return ok({"class": klass.to_dict()}, "کلاس با موفقیت بروزرسانی شد")

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="delete_class")
    @permission_required(Resource.CLASS, Action.DELETE)
    def delete_class(class_id: int):
        container.class_service.deactivate(class_id)
        return ok(message="کلاس با موفقیت حذف شد")
