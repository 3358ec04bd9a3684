from __future__ import annotations

from flask import Blueprint, jsonify

from services import reports_service

bp = Blueprint("reports", __name__)


@bp.route("/api/reports/coverage")
def coverage_api():
    return jsonify(reports_service.current_coverage())


@bp.route("/api/reports/export/xlsx")
def export_xlsx():
    stream, filename = reports_service.export_xlsx()
    return (stream.getvalue(), 200, {
        "Content-Type": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "Content-Disposition": f"attachment; filename={filename}",
    })
