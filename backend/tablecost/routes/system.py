# backend/tablecost/routes/system.py
"""System health endpoint."""

import time
from flask import Blueprint, current_app, jsonify

from ..storage import get_storage
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_storage_health() -> dict:
    """
    Check the configured store answers a trivial read.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        details = get_storage().ping()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Storage health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Storage error",
        }


@system_bp.get("/health")
def health():
    storage = check_storage_health()
    healthy = storage["status"] == "healthy"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "checks": {"storage": storage},
    }
    return jsonify(body), 200 if healthy else 503
