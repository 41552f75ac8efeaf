"""
Pytest fixtures for TableCost backend tests.

Every test that uses the `app`, `client` or `storage` fixture runs twice:
once against the in-memory store and once against SQLite through SQLAlchemy.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from tablecost import create_app
from tablecost.extensions import db


@pytest.fixture(params=["memory", "sql"])
def app(request):
    """Create application for testing with a fresh, empty store."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORAGE_BACKEND': request.param,
        'SEED_SAMPLE_DATA': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


@pytest.fixture
def now():
    """A fixed mid-afternoon reference time for window and bucket tests."""
    return datetime(2026, 3, 10, 15, 0, 0)


def make_ingredient(storage, **overrides):
    data = {"name": "Flour", "unit": "kg", "cost_per_unit": "1.20", "category": "Dry Goods"}
    data.update(overrides)
    return storage.create_ingredient(data)


def make_product(storage, **overrides):
    data = {
        "name": "Espresso",
        "category": "Beverages",
        "price": "3.50",
        "cost": "1.00",
        "stock": 10,
        "unit": "cup",
    }
    data.update(overrides)
    return storage.create_product(data)


def make_sale(storage, items, **overrides):
    """items: list of (product_id, quantity, price)."""
    lines = [
        {"product_id": pid, "quantity": qty, "price": price, "total": str(Decimal(str(price)) * qty)}
        for pid, qty, price in items
    ]
    data = {
        "total_amount": str(sum((Decimal(str(price)) * qty for _, qty, price in items), Decimal("0")) or 1),
        "payment_method": "card",
        "cashier_id": "cashier01",
        "items": lines,
    }
    data.update(overrides)
    return storage.create_sale(data)


def make_cost(storage, **overrides):
    data = {
        "type": "utilities",
        "description": "Electricity",
        "amount": "80.00",
        "date": datetime(2026, 3, 9, 12, 0, 0),
        "category": "Utilities",
    }
    data.update(overrides)
    return storage.create_operational_cost(data)
