from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, ok
from ..container import Container
from ..core.enums import ADMIN_ROLES, USER_MANAGER_ROLES
from ..users.guards import current_scope, roles_required


def register(app: Flask, container: Container) -> None:
    service = container.student_service
    resolver = container.scope_resolver

    # Reads stay organization-wide: enrolling and naming a person in charge search every student.
    def check_student(student_db_id: int) -> None:
        service.get(student_db_id)
        resolver.ensure_student_access(current_scope(), student_db_id)

    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    @roles_required(*ADMIN_ROLES)
    def students_list():
        query = request.args.get("q", "")
        return ok(service.search(query))

    @app.route("/api/students/<int:student_db_id>", methods=["GET"], endpoint="students_get")
    @roles_required(*ADMIN_ROLES)
    def students_get(student_db_id: int):
        return ok(service.get(student_db_id))

    @app.route("/api/students/by-code/<student_code>", methods=["GET"], endpoint="students_by_code")
    @roles_required(*ADMIN_ROLES)
    def students_by_code(student_code: str):
        return ok(service.get_by_code(student_code))

    @app.route("/api/students", methods=["POST"], endpoint="students_create")
    @roles_required(*ADMIN_ROLES)
    def students_create():
        return ok(service.create_student(json_body()), 201)

    @app.route("/api/students/<int:student_db_id>", methods=["PUT", "PATCH"], endpoint="students_update")
    @roles_required(*ADMIN_ROLES)
    def students_update(student_db_id: int):
        check_student(student_db_id)
        return ok(service.update_student(student_db_id, json_body()))

    @app.route("/api/students/<int:student_db_id>", methods=["DELETE"], endpoint="students_delete")
    @roles_required(*USER_MANAGER_ROLES)
    def students_delete(student_db_id: int):
        check_student(student_db_id)
        service.delete_student(student_db_id)
        return ok({"id": student_db_id})
