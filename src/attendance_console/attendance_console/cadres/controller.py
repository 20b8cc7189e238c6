from __future__ import annotations

from flask import Flask, request

from ..branches.service import selection_from_args
from ..common.http import ok
from ..common.validators import optional_int
from ..container import Container
from ..core.constants import DEFAULT_CADRE_PAGE_SIZE
from ..core.enums import ADMIN_ROLES
from ..users.guards import current_scope, roles_required


def register(app: Flask, container: Container) -> None:
    service = container.cadre_service
    resolver = container.scope_resolver

    @app.route("/api/cadres", methods=["GET"], endpoint="cadres_list")
    @roles_required(*ADMIN_ROLES)
    def cadres_list():
        page = service.list_cadres(
            query=request.args.get("q", ""),
            selection=selection_from_args(request.args),
            page=optional_int(request.args.get("page"), "page") or 1,
            page_size=optional_int(request.args.get("page_size"), "page_size") or DEFAULT_CADRE_PAGE_SIZE,
            class_ids=resolver.allowed_class_ids(current_scope()),
        )
        return ok(page.as_dict(page.items))

    @app.route("/api/cadres/<int:student_db_id>", methods=["DELETE"], endpoint="cadres_remove")
    @roles_required(*ADMIN_ROLES)
    def cadres_remove(student_db_id: int):
        removed = service.remove_cadre(student_db_id, class_ids=resolver.allowed_class_ids(current_scope()))
        return ok({"student_id": student_db_id, "removed": removed})
