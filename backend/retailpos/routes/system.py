# backend/retailpos/routes/system.py
"""
System health endpoint.

Exempt from tenant resolution so load balancers can probe it without a
store identifier.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..responses import success_response
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")

_STARTED_AT = time.monotonic()


def check_database_health() -> dict:
    """Run a trivial query and report latency."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        status = "connected"
    except SQLAlchemyError:
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        status = "disconnected"
    return {"status": status, "latency_ms": round((time.time() - start_time) * 1000, 2)}


@system_bp.get("/health")
def health():
    database = check_database_health()
    return success_response(
        message="Server is running",
        data={
            "timestamp": to_utc_z(utcnow()),
            "uptime": round(time.monotonic() - _STARTED_AT, 2),
            "environment": current_app.config.get("ENV_NAME"),
            "database": database,
        },
    )
