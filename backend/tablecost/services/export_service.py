# Overview: CSV renditions of the sales, cost and recipe reports.

from __future__ import annotations

import csv
import io
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..money_utils import money_str, to_decimal
from ..storage import Storage
from ..time_utils import utcnow, window_start
from .reporting_service import DEFAULT_MARKUP, DEFAULT_WINDOW_DAYS, recipe_summary
from .views_service import expand_sale_items

SALES_HEADER = ["Date", "Sale ID", "Items", "Payment Method", "Subtotal", "Tax", "Total"]
COSTS_HEADER = ["Date", "Type", "Category", "Description", "Amount"]
RECIPES_HEADER = ["Recipe Name", "Category", "Servings", "Total Cost", "Cost per Serving", "Suggested Price"]


def _render(header: list[str], rows: Iterable[list]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def sales_csv(storage: Storage, days: int = DEFAULT_WINDOW_DAYS, now: Optional[datetime] = None) -> str:
    cutoff = window_start(days, now or utcnow())
    rows = []
    for sale in storage.list_sales():
        if sale.created_at < cutoff:
            continue
        items = "; ".join(
            f"{product.name} ({item['quantity']})"
            for product, item in expand_sale_items(storage, sale)
        )
        total = to_decimal(sale.total_amount)
        tax = to_decimal(sale.tax_amount or 0)
        rows.append([
            sale.created_at.date().isoformat(),
            sale.id,
            items,
            sale.payment_method,
            money_str(total - tax),
            money_str(tax),
            money_str(total),
        ])
    return _render(SALES_HEADER, rows)


def costs_csv(storage: Storage, days: int = DEFAULT_WINDOW_DAYS, now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    cutoff = window_start(days, now)
    rows = [
        [c.date.date().isoformat(), c.type, c.category, c.description, money_str(c.amount)]
        for c in storage.list_operational_costs()
        if cutoff <= c.date <= now
    ]
    return _render(COSTS_HEADER, rows)


def recipe_summary_csv(storage: Storage, markup: Decimal = DEFAULT_MARKUP) -> str:
    summary = recipe_summary(storage, markup)
    rows = [
        [r["name"], r["category"], r["servings"], r["total_cost"], r["cost_per_serving"], r["suggested_price"]]
        for r in summary["recipes"]
    ]
    return _render(RECIPES_HEADER, rows)
