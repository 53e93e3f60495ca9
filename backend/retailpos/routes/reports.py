# Overview: Flask API routes for reports operations; parses input and returns JSON responses.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..errors import ValidationError
from ..responses import success_response
from ..services import report_service
from ..validation import parse_date_range

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


@reports_bp.get("/overview")
@require_auth
@require_capability("reports", "read")
def overview():
    start, end = parse_date_range(request.args)
    return success_response(report_service.overview(g.tenant_id, start, end))


@reports_bp.get("/daily-sales")
@require_auth
@require_capability("reports", "read")
def daily_sales():
    """Query params: days (1..90, default 7)."""
    return success_response(report_service.daily_sales(g.tenant_id, _int_arg("days", 7)))


@reports_bp.get("/top-products")
@require_auth
@require_capability("reports", "read")
def top_products():
    """Query params: limit (1..50, default 10), start_date, end_date."""
    start, end = parse_date_range(request.args)
    rows = report_service.top_products(g.tenant_id, _int_arg("limit", 10), start, end)
    return success_response(rows, count=len(rows))


@reports_bp.get("/inventory")
@require_auth
@require_capability("reports", "read")
def inventory():
    return success_response(report_service.inventory_report(g.tenant_id))
