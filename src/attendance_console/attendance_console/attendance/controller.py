from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_date_field
from ..common.http import arg_date, json_body, ok
from ..common.validators import optional_int
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import ADMIN_ROLES, Role
from ..core.exceptions import ValidationError
from ..users.guards import current_scope, login_required, roles_required


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    resolver = container.scope_resolver

    markers = (*ADMIN_ROLES, Role.CADRE)

    def check_access(class_id: int) -> None:
        resolver.ensure_class_access(current_scope(), class_id)

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def attendance_list():
        scope = current_scope()
        if scope.role == Role.STUDENT:
            if scope.student_db_id is None:
                return ok([])
            return ok(service.list_by_student(scope.student_db_id, limit=None))

        class_id = optional_int(request.args.get("class_id"), "class_id")
        if class_id is not None:
            check_access(class_id)
            return ok(service.list_by_class(class_id, arg_date("date")))
        limit = optional_int(request.args.get("limit"), "limit")
        return ok(service.list_records(class_ids=resolver.allowed_class_ids(scope), limit=limit))

    @app.route("/api/attendance/students/<int:student_db_id>", methods=["GET"], endpoint="attendance_by_student")
    @roles_required(*ADMIN_ROLES)
    def attendance_by_student(student_db_id: int):
        allowed = resolver.allowed_class_ids(current_scope())
        limit = optional_int(request.args.get("limit"), "limit") or DEFAULT_HISTORY_LIMIT
        records = service.list_by_student(student_db_id, limit=limit)
        if allowed is not None:
            records = [r for r in records if r.class_id in set(allowed)]
        return ok(records)

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def attendance_stats():
        scope = current_scope()
        class_id = optional_int(request.args.get("class_id"), "class_id")
        student_id = optional_int(request.args.get("student_id"), "student_id")
        if scope.role == Role.STUDENT:
            if scope.student_db_id is None:
                return ok(service.stats(class_ids=[]))
            student_id = scope.student_db_id
        if class_id is not None:
            check_access(class_id)
            return ok(service.stats(class_id=class_id, student_id=student_id))
        return ok(service.stats(class_ids=resolver.allowed_class_ids(scope), student_id=student_id))

    @app.route("/api/me/attendance", methods=["GET"], endpoint="my_attendance")
    @login_required
    def my_attendance():
        scope = current_scope()
        if scope.student_db_id is None:
            return ok({"records": [], "stats": service.stats(class_ids=[])})
        return ok(
            {
                "records": service.list_by_student(scope.student_db_id),
                "stats": service.stats(student_id=scope.student_db_id),
            }
        )

    @app.route("/api/classes/<int:class_id>/roster", methods=["GET"], endpoint="attendance_roster")
    @roles_required(*markers)
    def attendance_roster(class_id: int):
        check_access(class_id)
        attendance_date = arg_date("date")
        if attendance_date is None:
            raise ValidationError("date is required")
        return ok(service.roster(class_id, attendance_date))

    @app.route("/api/classes/<int:class_id>/attendance-summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def attendance_summary(class_id: int):
        check_access(class_id)
        return ok(service.class_summary(class_id))

    @app.route("/api/classes/<int:class_id>/attendance", methods=["POST"], endpoint="attendance_save_sheet")
    @roles_required(*markers)
    def attendance_save_sheet(class_id: int):
        check_access(class_id)
        body = json_body()
        records = service.save_sheet(
            class_id,
            parse_date_field(body.get("attendance_date"), "Attendance date"),
            body.get("entries") or [],
            learning_progress=body.get("learning_progress"),
            lamrin_page=body.get("lamrin_page"),
            lamrin_line=body.get("lamrin_line"),
        )
        return ok(records)

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_create")
    @roles_required(*markers)
    def attendance_create():
        body = json_body()
        class_id = optional_int(body.get("class_id"), "class_id")
        if class_id is not None:
            check_access(class_id)
        return ok(service.create_record(body), 201)

    @app.route("/api/attendance/<int:record_id>", methods=["PUT", "PATCH"], endpoint="attendance_update")
    @roles_required(*markers)
    def attendance_update(record_id: int):
        check_access(service.get(record_id).class_id)
        return ok(service.update_record(record_id, json_body()))

    @app.route("/api/attendance/<int:record_id>", methods=["DELETE"], endpoint="attendance_delete")
    @roles_required(*ADMIN_ROLES)
    def attendance_delete(record_id: int):
        check_access(service.get(record_id).class_id)
        service.delete_record(record_id)
        return ok({"id": record_id})
