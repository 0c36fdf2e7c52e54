from __future__ import annotations

from flask import Flask

from ..common.web import current_user, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard/stats", methods=["GET"], endpoint="dashboard_stats")
    @login_required
    def dashboard_stats():
        return ok(container.dashboard_service.stats(current_user().role))
