# Overview: Flask API routes for sales; parses input and returns JSON responses.

# backend/retailpos/routes/transactions.py
"""
Transaction routes.

MULTI-TENANT: sales are recorded in and listed from g.tenant only; product
and customer ids in the payload must belong to it.

SECURITY: every role may ring up and view sales; only admin/manager may
edit one afterwards.
"""
from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..money import money_to_json
from ..responses import paginated_response, success_response
from ..services import transaction_service
from ..validation import json_object, parse_date_range, parse_pagination

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("")
@require_auth
@require_capability("transactions", "read")
def list_transactions():
    """
    Query params: page, limit, start_date, end_date, cashier, customer,
    status, payment_method.
    """
    page, limit = parse_pagination(request.args)
    start, end = parse_date_range(request.args)
    result = transaction_service.list_transactions(
        g.tenant_id,
        page=page,
        limit=limit,
        start=start,
        end=end,
        cashier_id=request.args.get("cashier"),
        customer_id=request.args.get("customer"),
        status=request.args.get("status"),
        payment_method=request.args.get("payment_method"),
    )
    return paginated_response(result)


@transactions_bp.get("/stats/summary")
@require_auth
@require_capability("transactions", "read")
def summary():
    start, end = parse_date_range(request.args)
    return success_response(transaction_service.transaction_stats(g.tenant_id, start, end))


@transactions_bp.get("/<transaction_pk>")
@require_auth
@require_capability("transactions", "read")
def get_transaction(transaction_pk: str):
    return success_response(transaction_service.get_transaction(g.tenant_id, transaction_pk).to_dict())


@transactions_bp.post("")
@require_auth
@require_capability("transactions", "create")
def create_transaction():
    """
    Complete a sale.

    Body: {items: [{product_id, quantity}], payment_method, amount_paid,
    customer_id?, notes?}. Totals are computed server-side.
    """
    payload = json_object(request)
    transaction, change = transaction_service.complete_sale(g.tenant, g.current_user, payload)
    data = transaction.to_dict()
    data["change"] = money_to_json(change)
    return success_response(data, message="Transaction completed successfully", status=201)


@transactions_bp.put("/<transaction_pk>")
@require_auth
@require_capability("transactions", "update")
def update_transaction(transaction_pk: str):
    transaction = transaction_service.get_transaction(g.tenant_id, transaction_pk)
    payload = json_object(request)
    transaction = transaction_service.update_transaction(g.tenant, transaction, payload)
    return success_response(transaction.to_dict(), message="Transaction updated successfully")
