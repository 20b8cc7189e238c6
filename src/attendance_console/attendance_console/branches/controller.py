from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, ok
from ..common.validators import optional_int
from ..container import Container
from ..core.enums import ADMIN_ROLES, USER_MANAGER_ROLES, Role
from ..users.guards import current_scope, login_required, roles_required
from .service import selection_from_args


def register(app: Flask, container: Container) -> None:
    service = container.branch_service
    resolver = container.scope_resolver

    def check_unit(**unit) -> None:
        resolver.ensure_unit_access(current_scope(), **unit)

    def check_new_parent(body: dict, key: str) -> None:
        # Moving a unit needs access to its new parent too.
        if key in body:
            check_unit(**{key: optional_int(body[key], key)})

    @app.route("/api/options", methods=["GET"], endpoint="branch_options")
    @login_required
    def branch_options():
        return ok(service.options(selection_from_args(request.args)))

    # main branches
    @app.route("/api/main-branches", methods=["GET"], endpoint="main_branches_list")
    @roles_required(*ADMIN_ROLES)
    def main_branches_list():
        return ok(service.list_main_branches())

    @app.route("/api/main-branches/<int:main_branch_id>", methods=["GET"], endpoint="main_branches_get")
    @roles_required(*ADMIN_ROLES)
    def main_branches_get(main_branch_id: int):
        return ok(service.main_branch_detail(main_branch_id))

    @app.route("/api/main-branches", methods=["POST"], endpoint="main_branches_create")
    @roles_required(Role.SUPER_ADMIN)
    def main_branches_create():
        return ok(service.create_main_branch(json_body()), 201)

    @app.route("/api/main-branches/<int:main_branch_id>", methods=["PUT", "PATCH"], endpoint="main_branches_update")
    @roles_required(Role.SUPER_ADMIN)
    def main_branches_update(main_branch_id: int):
        return ok(service.update_main_branch(main_branch_id, json_body()))

    @app.route("/api/main-branches/<int:main_branch_id>", methods=["DELETE"], endpoint="main_branches_delete")
    @roles_required(Role.SUPER_ADMIN)
    def main_branches_delete(main_branch_id: int):
        service.delete_main_branch(main_branch_id)
        return ok({"id": main_branch_id})

    # sub-branches
    @app.route("/api/sub-branches", methods=["GET"], endpoint="sub_branches_list")
    @roles_required(*ADMIN_ROLES)
    def sub_branches_list():
        main_branch_id = optional_int(request.args.get("main_branch_id"), "main_branch_id")
        return ok(service.list_sub_branches(request.args.get("q", ""), main_branch_id))

    @app.route("/api/sub-branches/<int:sub_branch_id>", methods=["GET"], endpoint="sub_branches_get")
    @roles_required(*ADMIN_ROLES)
    def sub_branches_get(sub_branch_id: int):
        return ok(service.sub_branch_detail(sub_branch_id))

    @app.route("/api/sub-branches", methods=["POST"], endpoint="sub_branches_create")
    @roles_required(*USER_MANAGER_ROLES)
    def sub_branches_create():
        body = json_body()
        check_unit(main_branch_id=optional_int(body.get("main_branch_id"), "main_branch_id"))
        return ok(service.create_sub_branch(body), 201)

    @app.route("/api/sub-branches/<int:sub_branch_id>", methods=["PUT", "PATCH"], endpoint="sub_branches_update")
    @roles_required(*USER_MANAGER_ROLES)
    def sub_branches_update(sub_branch_id: int):
        service.get_sub_branch(sub_branch_id)
        check_unit(sub_branch_id=sub_branch_id)
        body = json_body()
        check_new_parent(body, "main_branch_id")
        return ok(service.update_sub_branch(sub_branch_id, body))

    @app.route("/api/sub-branches/<int:sub_branch_id>", methods=["DELETE"], endpoint="sub_branches_delete")
    @roles_required(*USER_MANAGER_ROLES)
    def sub_branches_delete(sub_branch_id: int):
        service.get_sub_branch(sub_branch_id)
        check_unit(sub_branch_id=sub_branch_id)
        service.delete_sub_branch(sub_branch_id)
        return ok({"id": sub_branch_id})

    # classrooms
    classroom_editors = (*USER_MANAGER_ROLES, Role.BRANCH_ADMIN)

    @app.route("/api/classrooms", methods=["GET"], endpoint="classrooms_list")
    @roles_required(*ADMIN_ROLES)
    def classrooms_list():
        sub_branch_id = optional_int(request.args.get("sub_branch_id"), "sub_branch_id")
        return ok(service.list_classrooms(request.args.get("q", ""), sub_branch_id))

    @app.route("/api/classrooms/<int:classroom_id>", methods=["GET"], endpoint="classrooms_get")
    @roles_required(*ADMIN_ROLES)
    def classrooms_get(classroom_id: int):
        return ok(service.classroom_detail(classroom_id))

    @app.route("/api/classrooms", methods=["POST"], endpoint="classrooms_save")
    @roles_required(*classroom_editors)
    def classrooms_save():
        body = json_body()
        existing = service.find_classroom_by_name(body.get("name"))
        if existing:
            check_unit(classroom_id=existing.id)
            check_new_parent(body, "sub_branch_id")
        else:
            check_unit(sub_branch_id=optional_int(body.get("sub_branch_id"), "sub_branch_id"))
        return ok(service.save_classroom(body), 201)

    @app.route("/api/classrooms/<int:classroom_id>", methods=["PUT", "PATCH"], endpoint="classrooms_update")
    @roles_required(*classroom_editors)
    def classrooms_update(classroom_id: int):
        service.get_classroom(classroom_id)
        check_unit(classroom_id=classroom_id)
        body = json_body()
        check_new_parent(body, "sub_branch_id")
        return ok(service.update_classroom(classroom_id, body))

    @app.route("/api/classrooms/<int:classroom_id>", methods=["DELETE"], endpoint="classrooms_delete")
    @roles_required(*classroom_editors)
    def classrooms_delete(classroom_id: int):
        service.get_classroom(classroom_id)
        check_unit(classroom_id=classroom_id)
        service.delete_classroom(classroom_id)
        return ok({"id": classroom_id})
