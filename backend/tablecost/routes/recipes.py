# Overview: Flask API routes for recipes; responses carry the expanded cost breakdown.

from flask import Blueprint, request, jsonify

from ..decorators import json_errors
from ..models import Recipe
from ..services import views_service
from ..storage import get_storage
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_recipe

RECIPE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category", "servings", "ingredients"},
    required_on_create={"name", "category", "servings", "ingredients"},
    rules=(enforce_rules_recipe,),
    label="recipe",
)

recipes_bp = Blueprint("recipes", __name__, url_prefix="/api/recipes")


@recipes_bp.get("")
@json_errors("fetch recipes")
def list_recipes_route():
    return jsonify(views_service.recipes_with_details(get_storage()))


@recipes_bp.get("/<int:recipe_id>")
@json_errors("fetch recipe")
def get_recipe_route(recipe_id: int):
    recipe = views_service.get_recipe_with_details(get_storage(), recipe_id)
    if recipe is None:
        return jsonify({"error": "Recipe not found"}), 404
    return jsonify(recipe)


@recipes_bp.post("")
@json_errors("create recipe")
def create_recipe_route():
    payload = request.get_json(silent=True)
    patch = validate_payload(model=Recipe, payload=payload, policy=RECIPE_POLICY, partial=False)
    storage = get_storage()
    recipe = storage.create_recipe(patch)
    return jsonify(views_service.recipe_with_details(storage, recipe)), 201


@recipes_bp.put("/<int:recipe_id>")
@json_errors("update recipe")
def update_recipe_route(recipe_id: int):
    """Partial update; total_cost is recomputed only when `ingredients` is sent."""
    payload = request.get_json(silent=True)
    patch = validate_payload(model=Recipe, payload=payload, policy=RECIPE_POLICY, partial=True)
    storage = get_storage()
    recipe = storage.update_recipe(recipe_id, patch)
    if recipe is None:
        return jsonify({"error": "Recipe not found"}), 404
    return jsonify(views_service.recipe_with_details(storage, recipe))


@recipes_bp.delete("/<int:recipe_id>")
@json_errors("delete recipe")
def delete_recipe_route(recipe_id: int):
    if not get_storage().delete_recipe(recipe_id):
        return jsonify({"error": "Recipe not found"}), 404
    return "", 204
