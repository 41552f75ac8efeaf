from __future__ import annotations

from ..extensions import db
from ..money_utils import money_str, quantity_str
from ..time_utils import to_utc_z


class Ingredient(db.Model):
    """A purchasable ingredient priced per unit of measurement."""
    __tablename__ = "ingredients"
    __table_args__ = (
        db.Index("ix_ingredients_category", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    # e.g. "kg", "l", "piece"; cost_per_unit is the price of one of these
    unit = db.Column(db.String(32), nullable=False)
    cost_per_unit = db.Column(db.Numeric(10, 2), nullable=False)
    category = db.Column(db.String(64), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Ingredient id={self.id} name={self.name!r} cost_per_unit={self.cost_per_unit}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "cost_per_unit": money_str(self.cost_per_unit),
            "category": self.category,
            "created_at": to_utc_z(self.created_at),
        }


class Recipe(db.Model):
    """
    A menu recipe.

    `ingredients` is an ordered JSON list of {"ingredient_id": int, "quantity": str}.
    Ingredient ids are not foreign keys: an ingredient may be deleted while
    recipes still mention it, and readers skip what no longer resolves.

    `total_cost` is a cached snapshot written when the recipe is created or its
    ingredient list is replaced. Ingredient price changes do not touch it.
    """
    __tablename__ = "recipes"
    __table_args__ = (
        db.Index("ix_recipes_category", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=False)
    servings = db.Column(db.Integer, nullable=False, default=1)
    ingredients = db.Column(db.JSON, nullable=False, default=list)
    total_cost = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Recipe id={self.id} name={self.name!r} total_cost={self.total_cost}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "servings": self.servings,
            "ingredients": [dict(line) for line in (self.ingredients or [])],
            "total_cost": money_str(self.total_cost),
            "created_at": to_utc_z(self.created_at),
        }


def normalize_recipe_lines(lines: list) -> list[dict]:
    """
    Canonical stored form of a recipe ingredient list.

    Keeps order; quantities become fixed-point strings so the JSON column never
    holds floats.
    """
    return [
        {
            "ingredient_id": int(line["ingredient_id"]),
            "quantity": quantity_str(line["quantity"]),
        }
        for line in lines
    ]
