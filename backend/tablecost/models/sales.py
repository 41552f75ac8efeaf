from __future__ import annotations

from ..extensions import db
from ..money_utils import money_str
from ..time_utils import to_utc_z


class Sale(db.Model):
    """
    A completed point-of-sale transaction.

    `items` is a JSON snapshot taken at sale time:
    [{"product_id": int, "quantity": int, "price": "3.50", "total": "7.00"}]
    Product ids are not foreign keys so a sale survives product deletion.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    tax_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    payment_method = db.Column(db.String(32), nullable=False)
    items = db.Column(db.JSON, nullable=False, default=list)

    customer_id = db.Column(db.String(64), nullable=True)
    cashier_id = db.Column(db.String(64), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Sale id={self.id} total_amount={self.total_amount} items={len(self.items or [])}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "total_amount": money_str(self.total_amount),
            "tax_amount": money_str(self.tax_amount),
            "payment_method": self.payment_method,
            "items": [dict(item) for item in (self.items or [])],
            "customer_id": self.customer_id,
            "cashier_id": self.cashier_id,
            "created_at": to_utc_z(self.created_at),
        }


def normalize_sale_items(items: list) -> list[dict]:
    """Canonical stored form of a sale's line-item snapshot."""
    return [
        {
            "product_id": int(item["product_id"]),
            "quantity": int(item["quantity"]),
            "price": money_str(item["price"]),
            "total": money_str(item["total"]),
        }
        for item in items
    ]
