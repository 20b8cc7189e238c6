from __future__ import annotations

from flask import Flask, request

from ..common.http import arg_bool, json_body, ok
from ..common.validators import optional_int
from ..container import Container
from ..core.enums import ADMIN_ROLES, Role
from ..users.guards import current_scope, login_required, roles_required


def register(app: Flask, container: Container) -> None:
    service = container.class_service
    resolver = container.scope_resolver

    creators = (Role.SUPER_ADMIN, Role.STATE_ADMIN, Role.BRANCH_ADMIN, Role.CLASSROOM_ADMIN)

    def check_access(class_id: int) -> None:
        resolver.ensure_class_access(current_scope(), class_id)

    def check_manager(body: dict, current=None) -> None:
        """The managing sub-branch or classroom must stay inside the caller's scope."""

        sub_branch_id, classroom_id = service.managers_after(body, current)
        if current is not None and (sub_branch_id, classroom_id) == (
            current.manage_by_sub_branch_id,
            current.manage_by_classroom_id,
        ):
            return
        if classroom_id is not None:
            resolver.ensure_unit_access(current_scope(), classroom_id=classroom_id)
        else:
            resolver.ensure_unit_access(current_scope(), sub_branch_id=sub_branch_id)

    @app.route("/api/classes", methods=["GET"], endpoint="classes_list")
    @login_required
    def classes_list():
        class_ids = resolver.allowed_class_ids(current_scope())
        sub_branch_id = optional_int(request.args.get("sub_branch_id"), "sub_branch_id")
        if sub_branch_id is not None:
            items = service.list_by_sub_branch(sub_branch_id)
            if class_ids is not None:
                items = [c for c in items if c.id in set(class_ids)]
            return ok(items)
        if request.args.get("q"):
            return ok(service.search(request.args["q"], class_ids=class_ids))
        return ok(service.list_classes(include_archived=arg_bool("include_archived"), class_ids=class_ids))

    @app.route("/api/classes/archived", methods=["GET"], endpoint="classes_archived")
    @roles_required(*ADMIN_ROLES)
    def classes_archived():
        return ok(service.list_archived(class_ids=resolver.allowed_class_ids(current_scope())))

    @app.route("/api/classes/<int:class_id>", methods=["GET"], endpoint="classes_get")
    @login_required
    def classes_get(class_id: int):
        check_access(class_id)
        return ok(service.detail(class_id))

    @app.route("/api/classes", methods=["POST"], endpoint="classes_create")
    @roles_required(*creators)
    def classes_create():
        body = json_body()
        check_manager(body)
        return ok(service.create_class(body), 201)

    @app.route("/api/classes/<int:class_id>", methods=["PUT", "PATCH"], endpoint="classes_update")
    @roles_required(*ADMIN_ROLES)
    def classes_update(class_id: int):
        check_access(class_id)
        body = json_body()
        check_manager(body, service.get(class_id))
        return ok(service.update_class(class_id, body))

    @app.route("/api/classes/<int:class_id>/archive", methods=["POST"], endpoint="classes_archive")
    @roles_required(*ADMIN_ROLES)
    def classes_archive(class_id: int):
        check_access(class_id)
        return ok(service.archive_class(class_id))

    @app.route("/api/classes/<int:class_id>/unarchive", methods=["POST"], endpoint="classes_unarchive")
    @roles_required(*ADMIN_ROLES)
    def classes_unarchive(class_id: int):
        check_access(class_id)
        return ok(service.unarchive_class(class_id))

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="classes_delete")
    @roles_required(*creators)
    def classes_delete(class_id: int):
        check_access(class_id)
        service.delete_class(class_id)
        return ok({"id": class_id})

    # enrollment
    @app.route("/api/classes/<int:class_id>/students", methods=["GET"], endpoint="class_students_list")
    @login_required
    def class_students_list(class_id: int):
        check_access(class_id)
        return ok(service.list_students(class_id))

    @app.route("/api/classes/<int:class_id>/students", methods=["PUT"], endpoint="class_students_replace")
    @roles_required(*ADMIN_ROLES)
    def class_students_replace(class_id: int):
        check_access(class_id)
        return ok(service.replace_students(class_id, json_body().get("student_ids")))

    @app.route("/api/classes/<int:class_id>/students", methods=["POST"], endpoint="class_students_add")
    @roles_required(*ADMIN_ROLES)
    def class_students_add(class_id: int):
        check_access(class_id)
        student_db_id = json_body().get("student_id")
        service.add_student(class_id, student_db_id)
        return ok({"class_id": class_id, "student_id": student_db_id}, 201)

    @app.route(
        "/api/classes/<int:class_id>/students/<int:student_db_id>", methods=["DELETE"], endpoint="class_students_remove"
    )
    @roles_required(*ADMIN_ROLES)
    def class_students_remove(class_id: int, student_db_id: int):
        check_access(class_id)
        service.remove_student(class_id, student_db_id)
        return ok({"class_id": class_id, "student_id": student_db_id})

    # cadres
    @app.route("/api/classes/<int:class_id>/cadres", methods=["GET"], endpoint="class_cadres_list")
    @login_required
    def class_cadres_list(class_id: int):
        check_access(class_id)
        return ok(service.list_cadres(class_id))

    @app.route("/api/classes/<int:class_id>/cadres", methods=["POST"], endpoint="class_cadres_add")
    @roles_required(*ADMIN_ROLES)
    def class_cadres_add(class_id: int):
        check_access(class_id)
        body = json_body()
        return ok(service.add_cadre(class_id, body.get("student_id"), body.get("role")), 201)

    @app.route("/api/classes/<int:class_id>/cadres", methods=["PUT"], endpoint="class_cadres_replace")
    @roles_required(*ADMIN_ROLES)
    def class_cadres_replace(class_id: int):
        check_access(class_id)
        body = json_body()
        return ok(service.replace_cadres(class_id, body.get("role"), body.get("student_ids")))

    @app.route(
        "/api/classes/<int:class_id>/cadres/<int:student_db_id>", methods=["DELETE"], endpoint="class_cadres_remove"
    )
    @roles_required(*ADMIN_ROLES)
    def class_cadres_remove(class_id: int, student_db_id: int):
        check_access(class_id)
        service.remove_cadre(class_id, student_db_id, request.args.get("role"))
        return ok({"class_id": class_id, "student_id": student_db_id})
