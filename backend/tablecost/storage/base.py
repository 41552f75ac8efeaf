# backend/tablecost/storage/base.py
"""
Entity store contract.

All operations and their side effects live here:
- update_product appends a CostHistory row when the cost changes
- create_sale decrements stock of every product it still finds
- create_recipe / update_recipe(ingredients=...) recompute the cached total_cost

Backends only provide the persistence hooks (_all, _get, _add, _remove) and
the _reading/_writing context managers that scope a unit of work.

Records are the SQLAlchemy model instances from tablecost.models. The memory
backend keeps them as transient objects; the SQL backend persists them.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Optional, TypeVar

from ..models import (
    CostHistory,
    DEFAULT_MIN_STOCK,
    Ingredient,
    OperationalCost,
    Product,
    Recipe,
    Sale,
    normalize_recipe_lines,
    normalize_sale_items,
)
from ..money_utils import quantize_money, to_decimal
from ..time_utils import utcnow

logger = logging.getLogger(__name__)

M = TypeVar("M")

INGREDIENT_FIELDS = {"name", "unit", "cost_per_unit", "category"}
RECIPE_FIELDS = {"name", "category", "servings", "ingredients"}
PRODUCT_FIELDS = {
    "name", "category", "price", "cost", "stock", "unit",
    "barcode", "supplier", "min_stock", "is_active",
}
# created_at is accepted so imports and seeding can backdate sales
SALE_FIELDS = {
    "total_amount", "tax_amount", "payment_method", "items",
    "customer_id", "cashier_id", "created_at",
}
OPERATIONAL_COST_FIELDS = {
    "type", "description", "amount", "date", "category", "is_recurring", "frequency",
}
COST_HISTORY_FIELDS = {"product_id", "old_cost", "new_cost", "reason"}

MONEY_FIELDS = {
    "cost_per_unit", "price", "cost", "total_amount", "tax_amount",
    "amount", "old_cost", "new_cost",
}

PRODUCT_DEFAULTS = {
    "stock": 0,
    "min_stock": DEFAULT_MIN_STOCK,
    "is_active": True,
    "barcode": None,
    "supplier": None,
}
RECIPE_DEFAULTS = {"servings": 1, "ingredients": []}
SALE_DEFAULTS = {"tax_amount": Decimal("0"), "customer_id": None}
OPERATIONAL_COST_DEFAULTS = {"is_recurring": False, "frequency": None}

COST_CHANGE_REASON = "Manual update"


def _clean_patch(patch: dict, allowed: set[str]) -> dict:
    """Drop non-writable keys and normalize currency and nested JSON fields."""
    cleaned = {}
    for k, v in patch.items():
        if k not in allowed:
            continue
        if k in MONEY_FIELDS and v is not None:
            v = quantize_money(v)
        elif k == "ingredients" and v is not None:
            v = normalize_recipe_lines(v)
        elif k == "items" and v is not None:
            v = normalize_sale_items(v)
        cleaned[k] = v
    return cleaned


def apply_patch(obj, patch: dict) -> None:
    for k, v in patch.items():
        setattr(obj, k, v)


class Storage(ABC):
    """Entity store shared by handlers, views and reports."""

    backend_name = "abstract"

    # ------------------------------------------------------------------
    # Persistence hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _all(self, model: type[M]) -> list[M]:
        """All records of a model, ordered by id."""

    @abstractmethod
    def _get(self, model: type[M], entity_id: int) -> Optional[M]:
        ...

    @abstractmethod
    def _add(self, obj: M) -> M:
        """Persist a new record and assign its id."""

    @abstractmethod
    def _remove(self, model: type, entity_id: int) -> bool:
        ...

    @abstractmethod
    def _reading(self) -> AbstractContextManager:
        ...

    @abstractmethod
    def _writing(self) -> AbstractContextManager:
        """Scope of one mutation. The SQL backend commits once on exit."""

    def ping(self) -> dict:
        """Cheap liveness probe used by /health."""
        with self._reading():
            return {
                "backend": self.backend_name,
                "products": len(self._all(Product)),
                "recipes": len(self._all(Recipe)),
            }

    # ------------------------------------------------------------------
    # Generic CRUD
    # ------------------------------------------------------------------

    def _list_records(self, model):
        with self._reading():
            return self._all(model)

    def _get_record(self, model, entity_id: int):
        with self._reading():
            return self._get(model, entity_id)

    def _create_record(self, model, patch: dict, allowed: set[str], defaults: dict, stamp: str = "created_at"):
        fields = {k: (list(v) if isinstance(v, list) else v) for k, v in defaults.items()}
        fields.update(_clean_patch(patch, allowed))
        if stamp and fields.get(stamp) is None:
            fields[stamp] = utcnow()
        obj = model()
        apply_patch(obj, fields)
        return self._add(obj)

    def _update_record(self, model, entity_id: int, patch: dict, allowed: set[str]):
        with self._writing():
            obj = self._get(model, entity_id)
            if obj is None:
                return None
            apply_patch(obj, _clean_patch(patch, allowed))
            return obj

    def _delete_record(self, model, entity_id: int) -> bool:
        with self._writing():
            return self._remove(model, entity_id)

    # ------------------------------------------------------------------
    # Ingredients
    # ------------------------------------------------------------------

    def list_ingredients(self) -> list[Ingredient]:
        return self._list_records(Ingredient)

    def get_ingredient(self, ingredient_id: int) -> Optional[Ingredient]:
        return self._get_record(Ingredient, ingredient_id)

    def create_ingredient(self, patch: dict) -> Ingredient:
        with self._writing():
            return self._create_record(Ingredient, patch, INGREDIENT_FIELDS, {})

    def update_ingredient(self, ingredient_id: int, patch: dict) -> Optional[Ingredient]:
        # Recipes keep their cached total_cost; see update_recipe.
        return self._update_record(Ingredient, ingredient_id, patch, INGREDIENT_FIELDS)

    def delete_ingredient(self, ingredient_id: int) -> bool:
        return self._delete_record(Ingredient, ingredient_id)

    # ------------------------------------------------------------------
    # Recipes
    # ------------------------------------------------------------------

    def _recipe_total_cost(self, lines: list[dict]) -> Decimal:
        total = Decimal("0")
        for line in lines:
            ingredient = self._get(Ingredient, line["ingredient_id"])
            if ingredient is None:
                continue
            total += to_decimal(ingredient.cost_per_unit) * to_decimal(line["quantity"])
        return quantize_money(total)

    def list_recipes(self) -> list[Recipe]:
        return self._list_records(Recipe)

    def get_recipe(self, recipe_id: int) -> Optional[Recipe]:
        return self._get_record(Recipe, recipe_id)

    def create_recipe(self, patch: dict) -> Recipe:
        with self._writing():
            recipe = self._create_record(Recipe, patch, RECIPE_FIELDS, RECIPE_DEFAULTS)
            recipe.total_cost = self._recipe_total_cost(recipe.ingredients)
            logger.debug("Recipe %s costed at %s", recipe.id, recipe.total_cost)
            return recipe

    def update_recipe(self, recipe_id: int, patch: dict) -> Optional[Recipe]:
        """
        Partial update. total_cost is recomputed only when the patch carries
        `ingredients`; otherwise the stored snapshot is kept as-is.
        """
        with self._writing():
            recipe = self._get(Recipe, recipe_id)
            if recipe is None:
                return None
            apply_patch(recipe, _clean_patch(patch, RECIPE_FIELDS))
            if patch.get("ingredients") is not None:
                recipe.total_cost = self._recipe_total_cost(recipe.ingredients)
                logger.debug("Recipe %s re-costed at %s", recipe.id, recipe.total_cost)
            return recipe

    def delete_recipe(self, recipe_id: int) -> bool:
        return self._delete_record(Recipe, recipe_id)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def list_products(self) -> list[Product]:
        return self._list_records(Product)

    def get_product(self, product_id: int) -> Optional[Product]:
        return self._get_record(Product, product_id)

    def create_product(self, patch: dict) -> Product:
        with self._writing():
            return self._create_record(Product, patch, PRODUCT_FIELDS, PRODUCT_DEFAULTS)

    def update_product(self, product_id: int, patch: dict) -> Optional[Product]:
        """
        Partial update. A changed cost is recorded in the cost history before
        the new value is applied.
        """
        with self._writing():
            product = self._get(Product, product_id)
            if product is None:
                return None

            cleaned = _clean_patch(patch, PRODUCT_FIELDS)
            new_cost = cleaned.get("cost")
            if new_cost is not None and new_cost != quantize_money(product.cost):
                self._append_cost_history({
                    "product_id": product.id,
                    "old_cost": product.cost,
                    "new_cost": new_cost,
                    "reason": COST_CHANGE_REASON,
                })
                logger.info("Product %s cost changed %s -> %s", product.id, product.cost, new_cost)

            apply_patch(product, cleaned)
            return product

    def delete_product(self, product_id: int) -> bool:
        return self._delete_record(Product, product_id)

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def list_sales(self) -> list[Sale]:
        return self._list_records(Sale)

    def get_sale(self, sale_id: int) -> Optional[Sale]:
        return self._get_record(Sale, sale_id)

    def create_sale(self, patch: dict) -> Sale:
        """
        Record a sale and take its quantities off product stock.

        Items naming a product that no longer exists are kept in the snapshot
        but move no stock. Stock may go negative.
        """
        with self._writing():
            sale = self._create_record(Sale, patch, SALE_FIELDS, SALE_DEFAULTS)
            for item in sale.items:
                product = self._get(Product, item["product_id"])
                if product is None:
                    continue
                product.stock = product.stock - item["quantity"]
                logger.debug("Sale %s took %s of product %s (stock now %s)",
                             sale.id, item["quantity"], product.id, product.stock)
            return sale

    def update_sale(self, sale_id: int, patch: dict) -> Optional[Sale]:
        # Stock taken at creation is not given back or re-taken here.
        return self._update_record(Sale, sale_id, patch, SALE_FIELDS - {"created_at"})

    def delete_sale(self, sale_id: int) -> bool:
        # Stock taken at creation is not given back.
        return self._delete_record(Sale, sale_id)

    # ------------------------------------------------------------------
    # Operational costs
    # ------------------------------------------------------------------

    def list_operational_costs(self) -> list[OperationalCost]:
        return self._list_records(OperationalCost)

    def get_operational_cost(self, cost_id: int) -> Optional[OperationalCost]:
        return self._get_record(OperationalCost, cost_id)

    def create_operational_cost(self, patch: dict) -> OperationalCost:
        with self._writing():
            return self._create_record(
                OperationalCost, patch, OPERATIONAL_COST_FIELDS, OPERATIONAL_COST_DEFAULTS,
                stamp=None,
            )

    def update_operational_cost(self, cost_id: int, patch: dict) -> Optional[OperationalCost]:
        return self._update_record(OperationalCost, cost_id, patch, OPERATIONAL_COST_FIELDS)

    def delete_operational_cost(self, cost_id: int) -> bool:
        return self._delete_record(OperationalCost, cost_id)

    # ------------------------------------------------------------------
    # Cost history (append-only)
    # ------------------------------------------------------------------

    def _append_cost_history(self, patch: dict) -> CostHistory:
        return self._create_record(CostHistory, patch, COST_HISTORY_FIELDS, {"reason": None}, stamp="updated_at")

    def list_cost_history(self, product_id: Optional[int] = None) -> list[CostHistory]:
        with self._reading():
            history = self._all(CostHistory)
        if product_id is not None:
            history = [h for h in history if h.product_id == product_id]
        return history

    def create_cost_history(self, patch: dict) -> CostHistory:
        with self._writing():
            return self._append_cost_history(patch)
