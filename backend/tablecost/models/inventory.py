from __future__ import annotations

from ..extensions import db
from ..money_utils import money_str
from ..time_utils import to_utc_z

DEFAULT_MIN_STOCK = 5


class Product(db.Model):
    """
    Sellable item with price, unit cost and an on-hand stock counter.

    Stock is a plain integer decremented when a sale is recorded. It may go
    negative; overselling is not rejected.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category", "category"),
        db.Index("ix_products_barcode", "barcode"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=False)

    price = db.Column(db.Numeric(10, 2), nullable=False)
    cost = db.Column(db.Numeric(10, 2), nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)
    unit = db.Column(db.String(32), nullable=False)
    barcode = db.Column(db.String(64), nullable=True)
    supplier = db.Column(db.String(255), nullable=True)

    # Low-stock threshold; NULL disables alerts for this product
    min_stock = db.Column(db.Integer, nullable=True, default=DEFAULT_MIN_STOCK)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": money_str(self.price),
            "cost": money_str(self.cost),
            "stock": self.stock,
            "unit": self.unit,
            "barcode": self.barcode,
            "supplier": self.supplier,
            "min_stock": self.min_stock,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class CostHistory(db.Model):
    """Append-only audit trail of product cost changes."""
    __tablename__ = "cost_history"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    # Not a foreign key: history outlives the product it describes
    product_id = db.Column(db.Integer, nullable=True, index=True)
    old_cost = db.Column(db.Numeric(10, 2), nullable=False)
    new_cost = db.Column(db.Numeric(10, 2), nullable=False)
    reason = db.Column(db.String(255), nullable=True)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "old_cost": money_str(self.old_cost),
            "new_cost": money_str(self.new_cost),
            "reason": self.reason,
            "updated_at": to_utc_z(self.updated_at),
        }
