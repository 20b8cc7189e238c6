from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.http import json_body, ok
from ..common.validators import optional_int
from ..container import Container
from ..core.constants import DEFAULT_USERS_PAGE_SIZE
from ..core.enums import USER_MANAGER_ROLES, Role
from .guards import current_role, current_scope, current_user_id, login_required, roles_required

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    auth_service = container.auth_service
    user_service = container.user_service

    @app.before_request
    def refresh_session_user():
        """Re-read the logged-in account so deactivation and role changes apply at once."""

        if "user_id" not in session:
            return None
        s_user = auth_service.refresh(session["user_id"])
        if s_user is None:
            logger.info("Dropping session of inactive or missing user %s", session.get("user_id"))
            session.clear()
            return None
        fresh = s_user.to_session()
        if any(session.get(k) != v for k, v in fresh.items()):
            session.update(fresh)
        return None

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        body = json_body()
        s_user = auth_service.authenticate(body.get("email", ""), body.get("password", ""))

        session.clear()
        session.update(s_user.to_session())
        session.permanent = bool(body.get("remember_me", True))
        return ok(s_user, menu=auth_service.menu_for(s_user.role))

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return ok(None)

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return ok(user_service.get(current_user_id()), menu=auth_service.menu_for(current_role()))

    @app.route("/api/me/menu", methods=["GET"], endpoint="me_menu")
    @login_required
    def me_menu():
        return ok(auth_service.menu_for(current_role()))

    @app.route("/api/me/password", methods=["POST"], endpoint="me_password")
    @login_required
    def me_password():
        body = json_body()
        auth_service.change_password(
            current_user_id(),
            body.get("current_password", ""),
            body.get("new_password", ""),
            body.get("confirm_password", ""),
        )
        return ok(None, message="Password updated")

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @roles_required(Role.SUPER_ADMIN)
    def users_list():
        page = user_service.list_users(
            current_scope(),
            page=optional_int(request.args.get("page"), "page") or 1,
            per_page=optional_int(request.args.get("per_page"), "per_page") or DEFAULT_USERS_PAGE_SIZE,
        )
        return ok(page.as_dict(page.items))

    @app.route("/api/users/lookup", methods=["GET"], endpoint="users_lookup")
    @roles_required(*USER_MANAGER_ROLES)
    def users_lookup():
        return ok(user_service.find_by_email(current_scope(), request.args.get("email", "")))

    @app.route("/api/users/<int:user_id>/role", methods=["PUT"], endpoint="users_assign_role")
    @roles_required(*USER_MANAGER_ROLES)
    def users_assign_role(user_id: int):
        body = json_body()
        user = user_service.assign_role(
            current_scope(),
            user_id,
            body.get("role"),
            body.get("scope_type"),
            body.get("scope_id"),
            body.get("student_code", body.get("student_id")),
        )
        return ok(user)

    @app.route("/api/users/<int:user_id>/active", methods=["PUT"], endpoint="users_set_active")
    @roles_required(Role.SUPER_ADMIN)
    def users_set_active(user_id: int):
        is_active = bool(json_body().get("is_active", True))
        return ok(user_service.set_active(current_scope(), user_id, is_active=is_active))
