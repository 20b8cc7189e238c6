from __future__ import annotations

from flask import Flask

from ..common.http import ok
from ..container import Container
from ..users.guards import current_scope, login_required


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        return ok(container.dashboard_service.summary(current_scope()))
