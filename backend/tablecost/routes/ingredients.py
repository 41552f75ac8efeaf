# Overview: Flask API routes for ingredients; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..decorators import json_errors
from ..models import Ingredient
from ..storage import get_storage
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_ingredient

INGREDIENT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "unit", "cost_per_unit", "category"},
    required_on_create={"name", "unit", "cost_per_unit", "category"},
    rules=(enforce_rules_ingredient,),
    label="ingredient",
)

ingredients_bp = Blueprint("ingredients", __name__, url_prefix="/api/ingredients")


@ingredients_bp.get("")
@json_errors("fetch ingredients")
def list_ingredients_route():
    return jsonify([i.to_dict() for i in get_storage().list_ingredients()])


@ingredients_bp.get("/<int:ingredient_id>")
@json_errors("fetch ingredient")
def get_ingredient_route(ingredient_id: int):
    ingredient = get_storage().get_ingredient(ingredient_id)
    if ingredient is None:
        return jsonify({"error": "Ingredient not found"}), 404
    return jsonify(ingredient.to_dict())


@ingredients_bp.post("")
@json_errors("create ingredient")
def create_ingredient_route():
    payload = request.get_json(silent=True)
    patch = validate_payload(model=Ingredient, payload=payload, policy=INGREDIENT_POLICY, partial=False)
    ingredient = get_storage().create_ingredient(patch)
    return jsonify(ingredient.to_dict()), 201


@ingredients_bp.put("/<int:ingredient_id>")
@json_errors("update ingredient")
def update_ingredient_route(ingredient_id: int):
    """
    Partial update. Recipes that use this ingredient keep their stored
    total_cost until their ingredient list is saved again.
    """
    payload = request.get_json(silent=True)
    patch = validate_payload(model=Ingredient, payload=payload, policy=INGREDIENT_POLICY, partial=True)
    ingredient = get_storage().update_ingredient(ingredient_id, patch)
    if ingredient is None:
        return jsonify({"error": "Ingredient not found"}), 404
    return jsonify(ingredient.to_dict())


@ingredients_bp.delete("/<int:ingredient_id>")
@json_errors("delete ingredient")
def delete_ingredient_route(ingredient_id: int):
    if not get_storage().delete_ingredient(ingredient_id):
        return jsonify({"error": "Ingredient not found"}), 404
    return "", 204
