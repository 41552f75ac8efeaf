# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/tablecost/routes/sales.py
"""
Sales API routes.

POST takes the sold quantities off product stock. PUT and DELETE leave stock
alone: editing or removing a sale does not give stock back.
"""
from flask import Blueprint, request, jsonify

from ..decorators import json_errors
from ..models import Sale
from ..services import views_service
from ..storage import get_storage
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_sale

SALE_POLICY = ModelValidationPolicy(
    writable_fields={
        "total_amount", "tax_amount", "payment_method", "items",
        "customer_id", "cashier_id",
    },
    required_on_create={"total_amount", "payment_method", "items", "cashier_id"},
    rules=(enforce_rules_sale,),
    label="sale",
)

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
@json_errors("fetch sales")
def list_sales_route():
    return jsonify(views_service.sales_with_details(get_storage()))


@sales_bp.get("/<int:sale_id>")
@json_errors("fetch sale")
def get_sale_route(sale_id: int):
    sale = views_service.get_sale_with_details(get_storage(), sale_id)
    if sale is None:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify(sale)


@sales_bp.post("")
@json_errors("create sale")
def create_sale_route():
    payload = request.get_json(silent=True)
    patch = validate_payload(model=Sale, payload=payload, policy=SALE_POLICY, partial=False)
    sale = get_storage().create_sale(patch)
    return jsonify(sale.to_dict()), 201


@sales_bp.put("/<int:sale_id>")
@json_errors("update sale")
def update_sale_route(sale_id: int):
    payload = request.get_json(silent=True)
    patch = validate_payload(model=Sale, payload=payload, policy=SALE_POLICY, partial=True)
    sale = get_storage().update_sale(sale_id, patch)
    if sale is None:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify(sale.to_dict())


@sales_bp.delete("/<int:sale_id>")
@json_errors("delete sale")
def delete_sale_route(sale_id: int):
    if not get_storage().delete_sale(sale_id):
        return jsonify({"error": "Sale not found"}), 404
    return "", 204
