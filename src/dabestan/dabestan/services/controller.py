from __future__ import annotations

from flask import Flask, request

from ..common.web import json_body, login_required, ok, permission_required
from ..core.enums import Action, Resource
from ..container import Container


def register(app: Flask, container: Container) -> None:
    meals = container.meal_service
    transport = container.transport_service

    @app.route("/api/meals", methods=["GET"], endpoint="list_meals")
    @permission_required(Resource.MEAL, Action.VIEW)
    def list_meals():
        return ok({"mealServices": [m.to_dict() for m in meals.list(service_date=request.args.get("date"))]})

    @app.route("/api/meals", methods=["POST"], endpoint="create_meal")
    @permission_required(Resource.MEAL, Action.CREATE)
    def create_meal():
        meal = meals.create(json_body())
        return ok(meal.to_dict(), "سرویس غذا با موفقیت ایجاد شد", 201)

    @app.route("/api/meals/<int:meal_id>", methods=["GET"], endpoint="get_meal")
    @permission_required(Resource.MEAL, Action.VIEW)
    def get_meal(meal_id: int):
        return ok(meals.get(meal_id).to_dict())

    @app.route("/api/meals/<int:meal_id>", methods=["PUT"], endpoint="update_meal")
    @permission_required(Resource.MEAL, Action.UPDATE)
    def update_meal(meal_id: int):
        return ok(meals.update(meal_id, json_body()).to_dict(), "سرویس غذا با موفقیت به‌روزرسانی شد")

    @app.route("/api/meals/<int:meal_id>", methods=["DELETE"], endpoint="delete_meal")
    @permission_required(Resource.MEAL, Action.DELETE)
    def delete_meal(meal_id: int):
        meals.delete(meal_id)
        return ok(message="سرویس غذا با موفقیت حذف شد")

    @app.route("/api/meals/subscriptions", methods=["POST"], endpoint="subscribe_meal")
    @permission_required(Resource.MEAL, Action.CREATE)
    def subscribe_meal():
        subscription = meals.subscribe(json_body())
        return ok(subscription.to_dict(), "اشتراک غذا ثبت شد", 201)

    @app.route("/api/services/meals/today-count", methods=["GET"], endpoint="meals_today_count")
    @login_required
    def meals_today_count():
        return ok(meals.today_count())

    @app.route("/api/services/active-count", methods=["GET"], endpoint="services_active_count")
    @login_required
    def services_active_count():
        data = meals.active_count()
        data["activeRoutesCount"] = len(transport.list())
        return ok(data)

    @app.route("/api/transport", methods=["GET"], endpoint="list_transport")
    @permission_required(Resource.TRANSPORT, Action.VIEW)
    def list_transport():
        return ok({"transportServices": [r.to_dict() for r in transport.list()]})

    @app.route("/api/transport", methods=["POST"], endpoint="create_transport")
    @permission_required(Resource.TRANSPORT, Action.CREATE)
    def create_transport():
        route = transport.create(json_body())
        return ok(route.to_dict(), "سرویس حمل و نقل با موفقیت ایجاد شد", 201)

    @app.route("/api/transport/<int:route_id>", methods=["GET"], endpoint="get_transport")
    @permission_required(Resource.TRANSPORT, Action.VIEW)
    def get_transport(route_id: int):
        return ok(transport.get(route_id).to_dict())

    @app.route("/api/transport/<int:route_id>", methods=["PUT"], endpoint="update_transport")
    @permission_required(Resource.TRANSPORT, Action.UPDATE)
    def update_transport(route_id: int):
        return ok(transport.update(route_id, json_body()).to_dict(), "سرویس حمل و نقل به‌روزرسانی شد")

    @app.route("/api/transport/<int:route_id>", methods=["DELETE"], endpoint="delete_transport")
    @permission_required(Resource.TRANSPORT, Action.DELETE)
    def delete_transport(route_id: int):
        transport.delete(route_id)
        return ok(message="سرویس حمل و نقل با موفقیت حذف شد")

    @app.route("/api/transport/<int:route_id>/assign", methods=["POST"], endpoint="assign_transport")
    @permission_required(Resource.TRANSPORT, Action.UPDATE)
    def assign_transport(route_id: int):
        assignment = transport.assign(route_id, json_body())
        return ok(assignment.to_dict(), "دانش‌آموز به سرویس اختصاص داده شد", 201)
