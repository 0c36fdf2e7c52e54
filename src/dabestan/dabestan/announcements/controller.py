from __future__ import annotations

from flask import Flask

from ..common.web import current_user, json_body, login_required, ok, permission_required
from ..core.enums import Action, Resource
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.announcement_service

    @app.route("/api/announcements", methods=["GET"], endpoint="list_announcements")
    @permission_required(Resource.ANNOUNCEMENT, Action.VIEW)
    def list_announcements():
        return ok({"announcements": [a.to_dict() for a in service.list()]})

    @app.route("/api/circulars/recent", methods=["GET"], endpoint="recent_circulars")
    @login_required
    def recent_circulars():
        return ok([a.to_dict() for a in service.recent()])

    @app.route("/api/announcements", methods=["POST"], endpoint="create_announcement")
    @permission_required(Resource.ANNOUNCEMENT, Action.CREATE)
    def create_announcement():
        announcement = service.create(json_body(), author=current_user().full_name)
        return ok(announcement.to_dict(), "اطلاعیه منتشر شد", 201)

    @app.route("/api/announcements/<int:announcement_id>/deactivate", methods=["POST"], endpoint="deactivate_announcement")
    @permission_required(Resource.ANNOUNCEMENT, Action.UPDATE)
    def deactivate_announcement(announcement_id: int):
        service.deactivate(announcement_id)
        return ok(message="اطلاعیه غیرفعال شد")
