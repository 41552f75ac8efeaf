# backend/tablecost/storage/sample_data.py
"""Demo data for a fresh store: a small cafe menu, a few sales and running costs."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..time_utils import utcnow

SAMPLE_INGREDIENTS = [
    {"name": "Coffee beans", "unit": "kg", "cost_per_unit": "18.00", "category": "Beverages"},
    {"name": "Whole milk", "unit": "l", "cost_per_unit": "1.20", "category": "Dairy"},
    {"name": "Romaine lettuce", "unit": "kg", "cost_per_unit": "4.50", "category": "Produce"},
    {"name": "Parmesan", "unit": "kg", "cost_per_unit": "22.00", "category": "Dairy"},
    {"name": "Bread", "unit": "loaf", "cost_per_unit": "3.00", "category": "Bakery"},
]

# ingredient references are 1-based positions in SAMPLE_INGREDIENTS
SAMPLE_RECIPES = [
    {"name": "Cappuccino", "category": "Beverages", "servings": 1,
     "ingredients": [(1, "0.018"), (2, "0.15")]},
    {"name": "Caesar Salad", "category": "Salads", "servings": 2,
     "ingredients": [(3, "0.3"), (4, "0.05"), (5, "0.25")]},
]

SAMPLE_PRODUCTS = [
    {"name": "Espresso", "category": "Beverages", "price": "3.50", "cost": "0.75", "stock": 50,
     "unit": "cup", "supplier": "Coffee Co", "min_stock": 10, "barcode": "123456789"},
    {"name": "Cappuccino", "category": "Beverages", "price": "4.25", "cost": "1.20", "stock": 40,
     "unit": "cup", "supplier": "Coffee Co", "min_stock": 8, "barcode": "123456790"},
    {"name": "Croissant", "category": "Pastries", "price": "2.75", "cost": "1.10", "stock": 25,
     "unit": "piece", "supplier": "Bakery Plus", "min_stock": 5, "barcode": "234567891"},
    {"name": "Caesar Salad", "category": "Food", "price": "8.50", "cost": "3.25", "stock": 15,
     "unit": "plate", "supplier": "Fresh Foods", "min_stock": 3, "barcode": "345678912"},
    {"name": "Sandwich", "category": "Food", "price": "6.95", "cost": "2.80", "stock": 20,
     "unit": "piece", "supplier": "Deli Max", "min_stock": 5, "barcode": "456789123"},
]

# product references are 1-based positions in SAMPLE_PRODUCTS
SAMPLE_SALES = [
    {"days_ago": 1, "total_amount": "12.75", "tax_amount": "1.02", "payment_method": "card",
     "cashier_id": "cashier01",
     "items": [(1, 2, "3.50", "7.00"), (3, 2, "2.75", "5.50")]},
    {"days_ago": 3, "total_amount": "15.20", "tax_amount": "1.22", "payment_method": "cash",
     "cashier_id": "cashier01",
     "items": [(4, 1, "8.50", "8.50"), (2, 1, "4.25", "4.25")]},
]

SAMPLE_OPERATIONAL_COSTS = [
    {"type": "staff", "description": "Server wages - Day shift", "amount": "120.00", "days_ago": 0,
     "category": "Labor", "is_recurring": True, "frequency": "daily"},
    {"type": "utilities", "description": "Electricity bill", "amount": "85.50", "days_ago": 2,
     "category": "Utilities"},
    {"type": "supplies", "description": "Cleaning supplies", "amount": "45.75", "days_ago": 1,
     "category": "Operations"},
]


def seed_sample_data(storage, now: Optional[datetime] = None) -> dict:
    """
    Insert the sample records through the normal store operations, so sales
    take stock off the sample products like real ones would.
    Returns how many records of each kind were created.
    """
    now = now or utcnow()

    ingredients = [storage.create_ingredient(data) for data in SAMPLE_INGREDIENTS]
    recipes = []
    for data in SAMPLE_RECIPES:
        lines = [
            {"ingredient_id": ingredients[pos - 1].id, "quantity": qty}
            for pos, qty in data["ingredients"]
        ]
        recipes.append(storage.create_recipe({**data, "ingredients": lines}))

    products = [storage.create_product(data) for data in SAMPLE_PRODUCTS]
    sales = []
    for data in SAMPLE_SALES:
        items = [
            {"product_id": products[pos - 1].id, "quantity": qty, "price": price, "total": total}
            for pos, qty, price, total in data["items"]
        ]
        fields = {k: v for k, v in data.items() if k != "days_ago"}
        fields.update(items=items, created_at=now - timedelta(days=data["days_ago"]))
        sales.append(storage.create_sale(fields))

    costs = []
    for data in SAMPLE_OPERATIONAL_COSTS:
        fields = {k: v for k, v in data.items() if k != "days_ago"}
        fields["date"] = now - timedelta(days=data["days_ago"])
        costs.append(storage.create_operational_cost(fields))

    return {
        "ingredients": len(ingredients),
        "recipes": len(recipes),
        "products": len(products),
        "sales": len(sales),
        "operational_costs": len(costs),
    }
