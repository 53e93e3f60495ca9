# Overview: Flask API routes for customers and loyalty credits.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..models import Customer
from ..responses import paginated_response, success_response
from ..services import customer_service
from ..services.customer_service import CUSTOMER_POLICY
from ..validation import json_object, parse_bool_arg, parse_pagination, validate_payload

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
@require_capability("customers", "read")
def list_customers():
    page, limit = parse_pagination(request.args)
    result = customer_service.list_customers(
        g.tenant_id,
        search=request.args.get("search"),
        is_active=parse_bool_arg(request.args, "is_active"),
        page=page,
        limit=limit,
    )
    return paginated_response(result)


@customers_bp.get("/stats")
@require_auth
@require_capability("customers", "read")
def stats():
    return success_response(customer_service.customer_stats(g.tenant_id))


@customers_bp.get("/<customer_id>")
@require_auth
@require_capability("customers", "read")
def get_customer(customer_id: str):
    return success_response(customer_service.get_customer(g.tenant_id, customer_id).to_dict())


@customers_bp.post("")
@require_auth
@require_capability("customers", "create")
def create_customer():
    payload = json_object(request)
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
    customer = customer_service.create_customer(g.tenant_id, patch)
    return success_response(customer.to_dict(), message="Customer created successfully", status=201)


@customers_bp.put("/<customer_id>")
@require_auth
@require_capability("customers", "update")
def update_customer(customer_id: str):
    customer = customer_service.get_customer(g.tenant_id, customer_id)
    payload = json_object(request)
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
    customer = customer_service.update_customer(customer, patch)
    return success_response(customer.to_dict(), message="Customer updated successfully")


@customers_bp.put("/<customer_id>/loyalty")
@require_auth
@require_capability("customers", "update")
def add_loyalty(customer_id: str):
    """Body: {"points": int, "total_spent": number (optional)}."""
    customer = customer_service.get_customer(g.tenant_id, customer_id)
    payload = json_object(request)
    customer = customer_service.add_loyalty(customer, payload.get("points"), payload.get("total_spent"))
    return success_response(customer.to_dict(), message="Loyalty points updated successfully")


@customers_bp.delete("/<customer_id>")
@require_auth
@require_capability("customers", "delete")
def delete_customer(customer_id: str):
    customer = customer_service.get_customer(g.tenant_id, customer_id)
    customer_service.delete_customer(customer)
    return success_response(message="Customer deleted successfully")
