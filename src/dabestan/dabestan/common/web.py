"""Shared pieces of the JSON controllers: envelope, session user, guards."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from ..permissions.policy import has_permission
from ..users.service import SessionUser

logger = logging.getLogger(__name__)

GENERIC_ERROR = "خطای سرور. لطفاً دوباره تلاش کنید"


def ok(data: Any = None, message: Optional[str] = None, status: int = 200):
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return jsonify(body), status


def fail(error: str, status: int = 400, *, errors: Optional[dict] = None, data: Any = None):
    body: dict = {"success": False, "error": error}
    if errors:
        body["errors"] = errors
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def store_session_user(user: SessionUser) -> None:
    session["user_id"] = user.user_id
    session["name"] = user.full_name
    session["role"] = user.role.value
    session["teacher_id"] = user.teacher_id


def current_user() -> Optional[SessionUser]:
    if "user_id" not in session:
        return None
    try:
        role = Role(session.get("role"))
    except ValueError:
        return None
    return SessionUser(
        user_id=int(session["user_id"]),
        full_name=session.get("name") or "",
        role=role,
        teacher_id=session.get("teacher_id"),
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            return fail("لطفاً ابتدا وارد سیستم شوید", 401)
        return view(*args, **kwargs)

    return wrapper


def permission_required(resource, action):
    """Static gate on the session role; scoped checks stay in the handlers."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                return fail("لطفاً ابتدا وارد سیستم شوید", 401)
            if not has_permission(user.role, resource, action):
                return fail("شما مجوز انجام این عملیات را ندارید", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return fail(str(e), 400, errors=e.errors or None)

    @app.errorhandler(AuthenticationError)
    def _authentication(e: AuthenticationError):
        return fail(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return fail(str(e), 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return fail(str(e), 404)

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return fail(str(e), 400)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return fail(f"{GENERIC_ERROR}: {e}", 500)
        return fail(GENERIC_ERROR, 500)
