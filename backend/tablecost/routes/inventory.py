# Overview: Flask API routes for inventory alerts and the product cost audit trail.

from flask import Blueprint, request, jsonify

from ..decorators import json_errors
from ..services import views_service
from ..storage import get_storage
from ..validation import ValidationError

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api")


@inventory_bp.get("/inventory/alerts")
@json_errors("fetch inventory alerts")
def inventory_alerts_route():
    return jsonify(views_service.inventory_alerts(get_storage()))


@inventory_bp.get("/cost-history")
@json_errors("fetch cost history")
def cost_history_route():
    """
    Query params:
    - product_id: int (optional) - only changes for this product
    """
    raw = request.args.get("product_id")
    product_id = None
    if raw:
        try:
            product_id = int(raw)
        except ValueError:
            raise ValidationError(
                "Invalid query parameters",
                [{"field": "product_id", "message": "product_id must be an integer"}],
            )

    history = get_storage().list_cost_history(product_id)
    return jsonify([h.to_dict() for h in history])
