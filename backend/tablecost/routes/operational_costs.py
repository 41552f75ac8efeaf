# Overview: Flask API routes for operational costs; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..decorators import json_errors
from ..models import OperationalCost
from ..services import reporting_service
from ..storage import get_storage
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_operational_cost

OPERATIONAL_COST_POLICY = ModelValidationPolicy(
    writable_fields={"type", "description", "amount", "date", "category", "is_recurring", "frequency"},
    required_on_create={"type", "description", "amount", "date", "category"},
    rules=(enforce_rules_operational_cost,),
    label="operational cost",
)

operational_costs_bp = Blueprint("operational_costs", __name__, url_prefix="/api/operational-costs")


@operational_costs_bp.get("")
@json_errors("fetch operational costs")
def list_operational_costs_route():
    return jsonify([c.to_dict() for c in get_storage().list_operational_costs()])


@operational_costs_bp.get("/summary")
@json_errors("summarize operational costs")
def operational_cost_summary_route():
    """
    Query params:
    - days: int (optional, default 30) - trailing window
    """
    days = reporting_service.parse_days(request.args.get("days"))
    return jsonify(reporting_service.operational_cost_summary(get_storage(), days))


@operational_costs_bp.get("/<int:cost_id>")
@json_errors("fetch operational cost")
def get_operational_cost_route(cost_id: int):
    cost = get_storage().get_operational_cost(cost_id)
    if cost is None:
        return jsonify({"error": "Operational cost not found"}), 404
    return jsonify(cost.to_dict())


@operational_costs_bp.post("")
@json_errors("create operational cost")
def create_operational_cost_route():
    payload = request.get_json(silent=True)
    patch = validate_payload(
        model=OperationalCost, payload=payload, policy=OPERATIONAL_COST_POLICY, partial=False
    )
    cost = get_storage().create_operational_cost(patch)
    return jsonify(cost.to_dict()), 201


@operational_costs_bp.put("/<int:cost_id>")
@json_errors("update operational cost")
def update_operational_cost_route(cost_id: int):
    payload = request.get_json(silent=True)
    patch = validate_payload(
        model=OperationalCost, payload=payload, policy=OPERATIONAL_COST_POLICY, partial=True
    )
    cost = get_storage().update_operational_cost(cost_id, patch)
    if cost is None:
        return jsonify({"error": "Operational cost not found"}), 404
    return jsonify(cost.to_dict())


@operational_costs_bp.delete("/<int:cost_id>")
@json_errors("delete operational cost")
def delete_operational_cost_route(cost_id: int):
    if not get_storage().delete_operational_cost(cost_id):
        return jsonify({"error": "Operational cost not found"}), 404
    return "", 204
