from __future__ import annotations

import csv
import io
from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import arg_date, ok, to_jsonable
from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS
from ..users.guards import current_scope, roles_required
from .model import WEEKLY_CSV_FIELDS
from .service import REPORT_ROLES


def register(app: Flask, container: Container) -> None:
    service = container.report_service

    def _date_range():
        end = arg_date("end", now_local().date())
        start = arg_date("start", end - timedelta(days=DEFAULT_REPORT_DAYS - 1))
        return start, end

    def _write_report_csv(*, rows, filename: str):
        """Write weekly rows as a CSV download (UTF-8 with BOM for Excel)."""

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=WEEKLY_CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            data = to_jsonable(row)
            writer.writerow({k: data[k] for k in WEEKLY_CSV_FIELDS})

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/reports/weekly", methods=["GET"], endpoint="reports_weekly")
    @roles_required(*REPORT_ROLES)
    def reports_weekly():
        start, end = _date_range()
        rows = service.weekly_attendance(current_scope(), start, end, request.args.get("class_id"))
        return ok(rows, start=start, end=end)

    @app.route("/api/reports/weekly.csv", methods=["GET"], endpoint="reports_weekly_csv")
    @roles_required(*REPORT_ROLES)
    def reports_weekly_csv():
        start, end = _date_range()
        rows = service.weekly_attendance(current_scope(), start, end, request.args.get("class_id"))
        filename = f"weekly_attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_report_csv(rows=rows, filename=filename)

    @app.route("/api/reports/classes", methods=["GET"], endpoint="reports_classes")
    @roles_required(*REPORT_ROLES)
    def reports_classes():
        start, end = _date_range()
        return ok(service.class_breakdown(current_scope(), start, end), start=start, end=end)
