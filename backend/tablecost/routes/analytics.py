# Overview: Flask API routes for analytics; parses input and returns JSON responses.

"""
Analytics Routes

Sales analytics over a trailing window and the recipe costing summary.
"""

from decimal import Decimal

from flask import Blueprint, Response, current_app, jsonify, request

from ..decorators import json_errors
from ..services import export_service, reporting_service
from ..storage import get_storage

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api")


def _markup() -> Decimal:
    return Decimal(str(current_app.config.get("SUGGESTED_PRICE_MARKUP", reporting_service.DEFAULT_MARKUP)))


@analytics_bp.get("/analytics")
@json_errors("fetch analytics data")
def sales_analytics_route():
    """
    Query params:
    - days: int (optional, default 30) - trailing window
    """
    days = reporting_service.parse_days(request.args.get("days"))
    return jsonify(reporting_service.sales_analytics(get_storage(), days))


@analytics_bp.get("/summary")
@json_errors("fetch recipe summary")
def recipe_summary_route():
    return jsonify(reporting_service.recipe_summary(get_storage(), _markup()))


@analytics_bp.get("/summary.csv")
@json_errors("export recipe summary")
def recipe_summary_csv_route():
    body = export_service.recipe_summary_csv(get_storage(), _markup())
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=recipe-cost-summary.csv"},
    )
