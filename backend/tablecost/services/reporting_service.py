# Overview: Service-layer aggregations for dashboards; read-only over the store.

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..models import Sale
from ..money_utils import money_float, money_str, to_decimal
from ..storage import Storage
from ..time_utils import day_buckets, utcnow, window_start
from .views_service import cost_per_serving, expand_sale_items

DEFAULT_WINDOW_DAYS = 30
TREND_DAYS = 7
TOP_PRODUCTS_LIMIT = 5
# now - days must stay inside the datetime range
MAX_WINDOW_DAYS = 36500
DEFAULT_MARKUP = Decimal("3")

ZERO = Decimal("0")


class ReportError(Exception):
    """Raised when report parameters are unusable."""


def parse_days(raw: Optional[str], default: int = DEFAULT_WINDOW_DAYS) -> int:
    """Window size from a query-string value: a whole number of days, 1..MAX_WINDOW_DAYS."""
    if raw is None or raw.strip() == "":
        return default
    try:
        days = int(raw.strip())
    except ValueError:
        raise ReportError("days must be an integer")
    if days < 1:
        raise ReportError("days must be >= 1")
    if days > MAX_WINDOW_DAYS:
        raise ReportError(f"days must be <= {MAX_WINDOW_DAYS}")
    return days


def _sales_in_window(storage: Storage, days: int, now: datetime) -> list[Sale]:
    cutoff = window_start(days, now)
    return [s for s in storage.list_sales() if s.created_at >= cutoff]


def _sale_profit(expanded: list) -> Decimal:
    # Current product cost, not the cost at the time of the sale
    profit = ZERO
    for product, item in expanded:
        profit += to_decimal(item["total"]) - to_decimal(product.cost) * item["quantity"]
    return profit


def sales_analytics(storage: Storage, days: int = DEFAULT_WINDOW_DAYS, now: Optional[datetime] = None) -> dict:
    """
    Summary of the sales made in the trailing `days` window.

    sales_trend covers the last TREND_DAYS calendar days in UTC, oldest first,
    ending with the UTC day that contains `now`.

    Items whose product has been deleted drop out of profit, rankings and
    category totals, but their sale's total_amount still counts.
    """
    now = now or utcnow()
    sales = _sales_in_window(storage, days, now)
    expanded = {s.id: expand_sale_items(storage, s) for s in sales}

    total_sales = sum((to_decimal(s.total_amount) for s in sales), ZERO)
    total_profit = sum((_sale_profit(expanded[s.id]) for s in sales), ZERO)
    average_order_value = total_sales / len(sales) if sales else ZERO

    # dicts keep first-seen order, which the stable sort preserves for ties
    product_sales: dict[int, dict] = {}
    sales_by_category: dict[str, Decimal] = {}
    for sale in sales:
        for product, item in expanded[sale.id]:
            total = to_decimal(item["total"])
            entry = product_sales.get(product.id)
            if entry is None:
                product_sales[product.id] = {
                    "product": product,
                    "total_sold": item["quantity"],
                    "revenue": total,
                }
            else:
                entry["total_sold"] += item["quantity"]
                entry["revenue"] += total
            sales_by_category[product.category] = sales_by_category.get(product.category, ZERO) + total

    ranked = sorted(product_sales.values(), key=lambda e: e["total_sold"], reverse=True)
    top_selling_products = [
        {
            "product": e["product"].to_dict(),
            "total_sold": e["total_sold"],
            "revenue": money_float(e["revenue"]),
        }
        for e in ranked[:TOP_PRODUCTS_LIMIT]
    ]

    sales_trend = []
    for day, start, end in day_buckets(TREND_DAYS, now):
        day_sales = [s for s in sales if start <= s.created_at < end]
        sales_trend.append({
            "date": day.isoformat(),
            "sales": money_float(sum((to_decimal(s.total_amount) for s in day_sales), ZERO)),
            "profit": money_float(sum((_sale_profit(expanded[s.id]) for s in day_sales), ZERO)),
        })

    return {
        "days": days,
        "total_sales": money_float(total_sales),
        "total_profit": money_float(total_profit),
        "average_order_value": money_float(average_order_value),
        "top_selling_products": top_selling_products,
        "sales_by_category": {k: money_float(v) for k, v in sales_by_category.items()},
        "sales_trend": sales_trend,
    }


def _group_totals(rows: Iterable, key: str, amount: str) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for row in rows:
        totals[getattr(row, key)] += to_decimal(getattr(row, amount))
    return dict(totals)


def operational_cost_summary(storage: Storage, days: int = DEFAULT_WINDOW_DAYS, now: Optional[datetime] = None) -> dict:
    """Operational costs dated inside the trailing window."""
    now = now or utcnow()
    cutoff = window_start(days, now)
    costs = [c for c in storage.list_operational_costs() if cutoff <= c.date <= now]

    return {
        "days": days,
        "count": len(costs),
        "total_costs": money_float(sum((to_decimal(c.amount) for c in costs), ZERO)),
        "recurring_total": money_float(
            sum((to_decimal(c.amount) for c in costs if c.is_recurring), ZERO)
        ),
        "costs_by_category": {k: money_float(v) for k, v in _group_totals(costs, "category", "amount").items()},
        "costs_by_type": {k: money_float(v) for k, v in _group_totals(costs, "type", "amount").items()},
    }


def profit_and_loss(storage: Storage, days: int = DEFAULT_WINDOW_DAYS, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    analytics = sales_analytics(storage, days, now)
    costs = operational_cost_summary(storage, days, now)

    gross_profit = to_decimal(analytics["total_profit"])
    operational_costs = to_decimal(costs["total_costs"])
    return {
        "days": days,
        "total_sales": analytics["total_sales"],
        "gross_profit": analytics["total_profit"],
        "operational_costs": costs["total_costs"],
        "net_profit": money_float(gross_profit - operational_costs),
    }


def recipe_summary(storage: Storage, markup: Decimal = DEFAULT_MARKUP) -> dict:
    """
    Recipe costing dashboard.

    total_investment is the sum of every recipe's cached total_cost,
    average_cost its mean; suggested_price is cost per serving times markup.
    """
    recipes = storage.list_recipes()
    ingredient_count = len(storage.list_ingredients())

    total_investment = sum((to_decimal(r.total_cost) for r in recipes), ZERO)
    average_cost = total_investment / len(recipes) if recipes else ZERO

    rows = []
    for recipe in recipes:
        per_serving = cost_per_serving(recipe)
        rows.append({
            "id": recipe.id,
            "name": recipe.name,
            "category": recipe.category,
            "servings": recipe.servings,
            "total_cost": money_str(recipe.total_cost),
            "cost_per_serving": money_str(per_serving),
            "suggested_price": money_str(per_serving * markup),
        })

    return {
        "total_ingredients": ingredient_count,
        "total_recipes": len(recipes),
        "average_cost": money_str(average_cost),
        "total_investment": money_str(total_investment),
        "category_breakdown": {
            k: money_float(v) for k, v in _group_totals(recipes, "category", "total_cost").items()
        },
        "recipes": rows,
    }
