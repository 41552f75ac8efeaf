# backend/tablecost/storage/__init__.py
"""
Storage backends.

create_app() builds exactly one store per application and keeps it in
app.extensions["storage"]; handlers reach it through get_storage().
"""
from __future__ import annotations

import logging

from flask import Flask, current_app

from .base import Storage
from .memory import MemoryStorage
from .sql import SqlStorage
from .sample_data import seed_sample_data

logger = logging.getLogger(__name__)

BACKENDS = {
    "memory": MemoryStorage,
    "sql": SqlStorage,
}


def create_storage(app: Flask) -> Storage:
    name = (app.config.get("STORAGE_BACKEND") or "sql").lower()
    if name not in BACKENDS:
        raise ValueError(f"Unknown STORAGE_BACKEND {name!r}; expected one of {sorted(BACKENDS)}")

    storage = BACKENDS[name]()
    app.extensions["storage"] = storage
    logger.info("Using %s storage backend", name)

    if name == "memory" and app.config.get("SEED_SAMPLE_DATA"):
        counts = seed_sample_data(storage)
        logger.info("Seeded memory store: %s", counts)

    return storage


def get_storage() -> Storage:
    return current_app.extensions["storage"]


__all__ = [
    "Storage", "MemoryStorage", "SqlStorage",
    "create_storage", "get_storage", "seed_sample_data",
]
