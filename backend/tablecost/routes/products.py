# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/tablecost/routes/products.py
"""
Product management routes.

A PUT that changes `cost` leaves a row in /api/cost-history.
"""
from flask import Blueprint, request, jsonify

from ..decorators import json_errors
from ..models import Product
from ..services import views_service
from ..storage import get_storage
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_product

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "category", "price", "cost", "stock", "unit",
        "barcode", "supplier", "min_stock", "is_active",
    },
    required_on_create={"name", "category", "price", "cost", "unit"},
    rules=(enforce_rules_product,),
    label="product",
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@json_errors("fetch products")
def list_products_route():
    return jsonify([p.to_dict() for p in get_storage().list_products()])


@products_bp.get("/with-margin")
@json_errors("fetch products with margin")
def products_with_margin_route():
    """Every product plus margin, margin_percentage and is_low_stock."""
    return jsonify(views_service.products_with_margin(get_storage()))


@products_bp.get("/<int:product_id>")
@json_errors("fetch product")
def get_product_route(product_id: int):
    product = get_storage().get_product(product_id)
    if product is None:
        return jsonify({"error": "Product not found"}), 404
    return jsonify(product.to_dict())


@products_bp.post("")
@json_errors("create product")
def create_product_route():
    payload = request.get_json(silent=True)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    product = get_storage().create_product(patch)
    return jsonify(product.to_dict()), 201


@products_bp.put("/<int:product_id>")
@json_errors("update product")
def update_product_route(product_id: int):
    payload = request.get_json(silent=True)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    product = get_storage().update_product(product_id, patch)
    if product is None:
        return jsonify({"error": "Product not found"}), 404
    return jsonify(product.to_dict())


@products_bp.delete("/<int:product_id>")
@json_errors("delete product")
def delete_product_route(product_id: int):
    """Hard delete. Sales and cost history that mention the product are kept."""
    if not get_storage().delete_product(product_id):
        return jsonify({"error": "Product not found"}), 404
    return "", 204
