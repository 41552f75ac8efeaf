# Overview: Read-only composite views built from stored records.

"""
Derived views.

Nothing here writes to the store. Foreign ids that no longer resolve
(an ingredient or product deleted after use) are skipped, never raised.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..models import Product, Recipe, Sale
from ..money_utils import money_float, money_str, to_decimal
from ..storage import Storage

SEVERITY_CRITICAL = "critical"
SEVERITY_LOW = "low"


def is_low_stock(product: Product) -> bool:
    return product.min_stock is not None and product.stock <= product.min_stock


def product_with_margin(product: Product) -> dict:
    price = to_decimal(product.price)
    cost = to_decimal(product.cost)
    margin = price - cost
    margin_percentage = margin / cost * 100 if cost > 0 else Decimal("0")

    data = product.to_dict()
    data.update(
        margin=money_float(margin),
        margin_percentage=money_float(margin_percentage),
        is_low_stock=is_low_stock(product),
    )
    return data


def products_with_margin(storage: Storage) -> list[dict]:
    return [product_with_margin(p) for p in storage.list_products()]


def inventory_alerts(storage: Storage) -> list[dict]:
    """Products at or under their min_stock; critical at or under half of it."""
    alerts = []
    for product in storage.list_products():
        if not is_low_stock(product):
            continue
        critical = product.stock <= product.min_stock / 2
        alerts.append({
            "product_id": product.id,
            "product_name": product.name,
            "current_stock": product.stock,
            "min_stock": product.min_stock,
            "severity": SEVERITY_CRITICAL if critical else SEVERITY_LOW,
        })
    return alerts


def recipe_with_details(storage: Storage, recipe: Recipe) -> dict:
    details = []
    for line in recipe.ingredients or []:
        ingredient = storage.get_ingredient(line["ingredient_id"])
        if ingredient is None:
            continue
        quantity = to_decimal(line["quantity"])
        details.append({
            "ingredient": ingredient.to_dict(),
            "quantity": line["quantity"],
            "cost": money_float(to_decimal(ingredient.cost_per_unit) * quantity),
        })

    data = recipe.to_dict()
    data["ingredient_details"] = details
    data["cost_per_serving"] = money_float(cost_per_serving(recipe))
    return data


def cost_per_serving(recipe: Recipe) -> Decimal:
    servings = recipe.servings or 0
    if servings <= 0:
        return Decimal("0")
    return to_decimal(recipe.total_cost) / servings


def get_recipe_with_details(storage: Storage, recipe_id: int) -> Optional[dict]:
    recipe = storage.get_recipe(recipe_id)
    if recipe is None:
        return None
    return recipe_with_details(storage, recipe)


def recipes_with_details(storage: Storage) -> list[dict]:
    return [recipe_with_details(storage, r) for r in storage.list_recipes()]


def expand_sale_items(storage: Storage, sale: Sale) -> list[tuple[Product, dict]]:
    """(product, item) pairs for every item whose product still exists."""
    expanded = []
    for item in sale.items or []:
        product = storage.get_product(item["product_id"])
        if product is not None:
            expanded.append((product, item))
    return expanded


def sale_with_details(storage: Storage, sale: Sale) -> dict:
    data = sale.to_dict()
    data["item_details"] = [
        {
            "product": product.to_dict(),
            "quantity": item["quantity"],
            "price": money_str(item["price"]),
            "total": money_str(item["total"]),
        }
        for product, item in expand_sale_items(storage, sale)
    ]
    return data


def get_sale_with_details(storage: Storage, sale_id: int) -> Optional[dict]:
    sale = storage.get_sale(sale_id)
    if sale is None:
        return None
    return sale_with_details(storage, sale)


def sales_with_details(storage: Storage) -> list[dict]:
    return [sale_with_details(storage, s) for s in storage.list_sales()]
