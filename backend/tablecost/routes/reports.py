# Overview: Flask API routes for reports; profit and loss plus CSV exports.

from flask import Blueprint, Response, jsonify, request

from ..decorators import json_errors
from ..services import export_service, reporting_service
from ..storage import get_storage
from ..time_utils import utcnow

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _csv_response(body: str, name: str) -> Response:
    filename = f"{name}-report-{utcnow().date().isoformat()}.csv"
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@reports_bp.get("/profit-loss")
@json_errors("build profit and loss report")
def profit_and_loss_route():
    days = reporting_service.parse_days(request.args.get("days"))
    return jsonify(reporting_service.profit_and_loss(get_storage(), days))


@reports_bp.get("/sales.csv")
@json_errors("export sales report")
def sales_csv_route():
    days = reporting_service.parse_days(request.args.get("days"))
    return _csv_response(export_service.sales_csv(get_storage(), days), "sales")


@reports_bp.get("/costs.csv")
@json_errors("export costs report")
def costs_csv_route():
    days = reporting_service.parse_days(request.args.get("days"))
    return _csv_response(export_service.costs_csv(get_storage(), days), "costs")
