# backend/repairshop/routes/system.py
"""
System health endpoint.

Reports database and reminder broker connectivity.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        db.session.rollback()
        return {"status": "healthy", "latency_ms": round((time.time() - start_time) * 1000, 2)}
    except Exception:
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error",
        }


def check_broker_health() -> dict:
    start_time = time.time()
    celery = current_app.extensions["celery"]
    try:
        with celery.connection_for_write() as conn:
            conn.ensure_connection(max_retries=1)
        return {"status": "healthy", "latency_ms": round((time.time() - start_time) * 1000, 2)}
    except Exception:
        current_app.logger.exception("Broker health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Broker error",
        }


@system_bp.get("/health")
def health():
    checks = {
        "db": check_database_health(),
        "broker": check_broker_health(),
    }
    ok = all(c["status"] == "healthy" for c in checks.values())
    return {"ok": ok, "service": "api", "checks": checks}, 200 if ok else 503
