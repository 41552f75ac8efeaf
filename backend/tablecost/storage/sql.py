# backend/tablecost/storage/sql.py
"""
Relational store on the Flask-SQLAlchemy session.

Requires an application context. Each mutation commits once when its
_writing() block exits and rolls back if anything inside raised.
"""
from __future__ import annotations

from contextlib import contextmanager, nullcontext
from typing import Optional

from ..extensions import db
from ..models import CostHistory
from .base import Storage


class SqlStorage(Storage):
    backend_name = "sql"

    def __init__(self, database=db) -> None:
        self.db = database

    @property
    def session(self):
        return self.db.session

    def _reading(self):
        return nullcontext()

    @contextmanager
    def _writing(self):
        try:
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def _all(self, model):
        return self.session.query(model).order_by(model.id.asc()).all()

    def _get(self, model, entity_id: int) -> Optional[object]:
        return self.session.get(model, entity_id)

    def _add(self, obj):
        self.session.add(obj)
        self.session.flush()  # assigns obj.id
        return obj

    def _remove(self, model, entity_id: int) -> bool:
        obj = self.session.get(model, entity_id)
        if obj is None:
            return False
        self.session.delete(obj)
        return True

    def list_cost_history(self, product_id: Optional[int] = None):
        query = self.session.query(CostHistory)
        if product_id is not None:
            query = query.filter(CostHistory.product_id == product_id)
        return query.order_by(CostHistory.id.asc()).all()
