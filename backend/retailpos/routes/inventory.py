# Overview: Flask API routes for inventory rows; parses input and returns JSON responses.

"""
Inventory routes.

STOCK: quantity written here goes to Product.stock first and is mirrored
back into every inventory row of the product.
"""
from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..models import Inventory
from ..responses import paginated_response, success_response
from ..services import inventory_service
from ..services.inventory_service import INVENTORY_POLICY
from ..validation import json_object, parse_bool_arg, parse_pagination, validate_payload

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@require_auth
@require_capability("inventory", "read")
def list_inventory():
    page, limit = parse_pagination(request.args, default_limit=50)
    result = inventory_service.list_inventory(
        g.tenant_id,
        search=request.args.get("search"),
        category_id=request.args.get("category"),
        low_stock=bool(parse_bool_arg(request.args, "low_stock")),
        page=page,
        limit=limit,
    )
    return paginated_response(result)


@inventory_bp.get("/summary")
@require_auth
@require_capability("inventory", "read")
def summary():
    return success_response(inventory_service.inventory_summary(g.tenant_id))


@inventory_bp.get("/<inventory_id>")
@require_auth
@require_capability("inventory", "read")
def get_inventory(inventory_id: str):
    return success_response(inventory_service.get_inventory(g.tenant_id, inventory_id).to_dict())


@inventory_bp.post("")
@require_auth
@require_capability("inventory", "create")
def upsert_inventory():
    """Create the (product, category) row, or update it when it already exists."""
    payload = json_object(request)
    patch = validate_payload(model=Inventory, payload=payload, policy=INVENTORY_POLICY, partial=False)
    row, created = inventory_service.upsert_inventory(g.tenant_id, patch)
    if created:
        return success_response(row.to_dict(), message="Inventory created successfully", status=201)
    return success_response(row.to_dict(), message="Inventory updated successfully")


@inventory_bp.put("/<inventory_id>")
@require_auth
@require_capability("inventory", "update")
def update_inventory(inventory_id: str):
    row = inventory_service.get_inventory(g.tenant_id, inventory_id)
    payload = json_object(request)
    patch = validate_payload(model=Inventory, payload=payload, policy=INVENTORY_POLICY, partial=True)
    row = inventory_service.update_inventory(g.tenant_id, row, patch)
    return success_response(row.to_dict(), message="Inventory updated successfully")


@inventory_bp.patch("/<inventory_id>/adjust")
@require_auth
@require_capability("inventory", "update")
def adjust_inventory(inventory_id: str):
    """Body: {"amount": <signed int>}. Stock cannot go negative."""
    row = inventory_service.get_inventory(g.tenant_id, inventory_id)
    payload = json_object(request)
    row = inventory_service.adjust_inventory(row, payload.get("amount"))
    return success_response(row.to_dict(), message="Inventory adjusted successfully")


@inventory_bp.delete("/<inventory_id>")
@require_auth
@require_capability("inventory", "delete")
def delete_inventory(inventory_id: str):
    row = inventory_service.get_inventory(g.tenant_id, inventory_id)
    inventory_service.delete_inventory(row)
    return success_response(message="Inventory deleted successfully")
