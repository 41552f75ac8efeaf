from .recipes import Ingredient, Recipe, normalize_recipe_lines
from .inventory import Product, CostHistory, DEFAULT_MIN_STOCK
from .sales import Sale, normalize_sale_items
from .costs import OperationalCost, RECURRENCE_FREQUENCIES

__all__ = [
    'Ingredient', 'Recipe', 'normalize_recipe_lines',
    'Product', 'CostHistory', 'DEFAULT_MIN_STOCK',
    'Sale', 'normalize_sale_items',
    'OperationalCost', 'RECURRENCE_FREQUENCIES',
]
