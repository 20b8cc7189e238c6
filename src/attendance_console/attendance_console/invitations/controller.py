from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, ok
from ..container import Container
from ..core.enums import USER_MANAGER_ROLES
from ..users.guards import current_scope, current_user_id, roles_required


def register(app: Flask, container: Container) -> None:
    service = container.invitation_service

    def _view(invitation) -> dict:
        return {"invitation": invitation, "is_valid": service.is_valid(invitation)}

    @app.route("/api/invitations", methods=["GET"], endpoint="invitations_list")
    @roles_required(*USER_MANAGER_ROLES)
    def invitations_list():
        return ok([_view(i) for i in service.list_by_inviter(current_user_id())])

    @app.route("/api/invitations", methods=["POST"], endpoint="invitations_create")
    @roles_required(*USER_MANAGER_ROLES)
    def invitations_create():
        body = json_body()
        invitation = service.create(
            current_scope(),
            email=body.get("email"),
            role=body.get("role"),
            scope_type=body.get("scope_type"),
            scope_id=body.get("scope_id"),
            student_code=body.get("student_code", body.get("student_id")),
        )
        link = f"{request.host_url.rstrip('/')}/invite/{invitation.token}"
        return ok(_view(invitation), 201, link=link)

    @app.route("/api/invitations/<int:invitation_id>", methods=["DELETE"], endpoint="invitations_delete")
    @roles_required(*USER_MANAGER_ROLES)
    def invitations_delete(invitation_id: int):
        service.delete(current_scope(), invitation_id)
        return ok({"id": invitation_id})

    # Public: the invitee is not logged in yet.
    @app.route("/api/invitations/token/<token>", methods=["GET"], endpoint="invitations_by_token")
    def invitations_by_token(token: str):
        invitation = service.get_by_token(token)
        return ok(
            {
                "email": invitation.email,
                "role": invitation.role,
                "expires_at": invitation.expires_at,
                "is_valid": service.is_valid(invitation),
            }
        )

    @app.route("/api/invitations/token/<token>/accept", methods=["POST"], endpoint="invitations_accept")
    def invitations_accept(token: str):
        body = json_body()
        user = service.accept(
            token,
            full_name=body.get("full_name"),
            password=body.get("password"),
            confirm_password=body.get("confirm_password"),
        )
        return ok(user, 201)
