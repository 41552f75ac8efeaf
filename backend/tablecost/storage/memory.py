# backend/tablecost/storage/memory.py
"""
In-process store: one dict per model plus one id counter per model.

A single re-entrant lock guards every read and write, so id assignment stays
unique and updates are not lost under a threaded server. There is no rollback:
a failure halfway through a mutation leaves what was already applied.
"""
from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Optional

from .base import Storage


class MemoryStorage(Storage):
    backend_name = "memory"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: dict[type, dict[int, object]] = defaultdict(dict)
        self._next_ids: dict[type, int] = defaultdict(lambda: 1)

    @contextmanager
    def _reading(self):
        with self._lock:
            yield

    @contextmanager
    def _writing(self):
        with self._lock:
            yield

    def _all(self, model):
        table = self._tables[model]
        return [table[k] for k in sorted(table)]

    def _get(self, model, entity_id: int) -> Optional[object]:
        return self._tables[model].get(entity_id)

    def _add(self, obj):
        model = type(obj)
        obj.id = self._next_ids[model]
        self._next_ids[model] += 1
        self._tables[model][obj.id] = obj
        return obj

    def _remove(self, model, entity_id: int) -> bool:
        return self._tables[model].pop(entity_id, None) is not None

    def clear(self) -> None:
        """Forget every record. Id counters keep counting."""
        with self._lock:
            self._tables.clear()
