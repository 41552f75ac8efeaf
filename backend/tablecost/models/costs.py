from __future__ import annotations

from ..extensions import db
from ..money_utils import money_str
from ..time_utils import to_utc_z

RECURRENCE_FREQUENCIES = ("daily", "weekly", "monthly")


class OperationalCost(db.Model):
    """Running cost of the business: staff, rent, utilities, supplies."""
    __tablename__ = "operational_costs"
    __table_args__ = (
        db.Index("ix_operational_costs_date", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(32), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False)
    category = db.Column(db.String(64), nullable=False)

    is_recurring = db.Column(db.Boolean, nullable=False, default=False)
    frequency = db.Column(db.String(16), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "amount": money_str(self.amount),
            "date": to_utc_z(self.date),
            "category": self.category,
            "is_recurring": self.is_recurring,
            "frequency": self.frequency,
        }
