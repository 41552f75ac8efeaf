# backend/tablecost/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/tablecost.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///tablecost.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" persists through SQLAlchemy, "memory" keeps everything in-process
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "sql")

    # Only honored by the memory backend; SQL databases are seeded via `flask data seed`
    SEED_SAMPLE_DATA = _env_flag("SEED_SAMPLE_DATA", False)

    # Suggested menu price = cost per serving * markup
    SUGGESTED_PRICE_MARKUP = os.environ.get("SUGGESTED_PRICE_MARKUP", "3")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    }
