from __future__ import annotations

from flask import Flask, request, session

from ..common.web import current_user, fail, json_body, login_required, ok, permission_required, store_session_user
from ..core.enums import Action, Resource
from ..core.exceptions import AuthenticationError
from ..container import Container
from ..permissions.policy import allowed_actions, permission_matrix


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        payload = json_body()
        username = str(payload.get("username") or "").strip()
        password = payload.get("password") or ""
        if not username or not password:
            return fail("نام کاربری و رمز عبور الزامی است", 400)

        try:
            s_user = container.auth_service.authenticate(username, password)
        except AuthenticationError as e:
            return fail(str(e), 401)

        session.clear()
        session.permanent = bool(payload.get("rememberMe", True))
        store_session_user(s_user)

        return ok(
            {"user": s_user.to_dict(), "permissions": permission_matrix(s_user.role)},
            "ورود با موفقیت انجام شد",
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="خروج با موفقیت انجام شد")

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return ok({"user": current_user().to_dict()})

    @app.route("/api/auth/permissions", methods=["GET"], endpoint="my_permissions")
    @login_required
    def my_permissions():
        user = current_user()
        resource = request.args.get("resource")
        if resource:
            if resource.upper() not in Resource.__members__:
                return fail("منبع نامعتبر است", 400)
            actions = [a.value for a in allowed_actions(user.role, resource)]
            return ok({"role": user.role.value, "resource": resource.upper(), "actions": actions})
        return ok({"role": user.role.value, "permissions": permission_matrix(user.role)})

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @permission_required(Resource.USER, Action.VIEW)
    def list_users():
        return ok({"users": [u.to_dict() for u in container.user_service.list()]})

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @permission_required(Resource.USER, Action.CREATE)
    def create_user():
        user = container.user_service.create(json_body())
        return ok({"user": user.to_dict()}, "کاربر با موفقیت ایجاد شد", 201)

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_user")
    @permission_required(Resource.USER, Action.UPDATE)
    def update_user(user_id: int):
        user = container.user_service.update(user_id, json_body())
        return ok({"user": user.to_dict()}, "کاربر با موفقیت بروزرسانی شد")

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="deactivate_user")
    @permission_required(Resource.USER, Action.DELETE)
    def deactivate_user(user_id: int):
        container.user_service.deactivate(current_user_id=current_user().user_id, user_id=user_id)
        return ok(message="کاربر غیرفعال شد")
