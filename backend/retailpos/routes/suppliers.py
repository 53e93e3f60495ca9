# Overview: Flask API routes for suppliers.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..models import Supplier
from ..responses import paginated_response, success_response
from ..services import supplier_service
from ..services.supplier_service import SUPPLIER_POLICY
from ..validation import json_object, parse_bool_arg, parse_pagination, validate_payload

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
@require_auth
@require_capability("suppliers", "read")
def list_suppliers():
    page, limit = parse_pagination(request.args)
    result = supplier_service.list_suppliers(
        g.tenant_id,
        search=request.args.get("search"),
        is_active=parse_bool_arg(request.args, "is_active"),
        page=page,
        limit=limit,
    )
    return paginated_response(result)


@suppliers_bp.get("/<supplier_id>")
@require_auth
@require_capability("suppliers", "read")
def get_supplier(supplier_id: str):
    supplier = supplier_service.get_supplier(g.tenant_id, supplier_id)
    return success_response(supplier_service.supplier_dict(supplier))


@suppliers_bp.post("")
@require_auth
@require_capability("suppliers", "create")
def create_supplier():
    payload = json_object(request)
    patch = validate_payload(model=Supplier, payload=payload, policy=SUPPLIER_POLICY, partial=False)
    supplier = supplier_service.create_supplier(g.tenant_id, patch)
    return success_response(supplier_service.supplier_dict(supplier),
                            message="Supplier created successfully", status=201)


@suppliers_bp.put("/<supplier_id>")
@require_auth
@require_capability("suppliers", "update")
def update_supplier(supplier_id: str):
    supplier = supplier_service.get_supplier(g.tenant_id, supplier_id)
    payload = json_object(request)
    patch = validate_payload(model=Supplier, payload=payload, policy=SUPPLIER_POLICY, partial=True)
    supplier = supplier_service.update_supplier(supplier, patch)
    return success_response(supplier_service.supplier_dict(supplier), message="Supplier updated successfully")


@suppliers_bp.delete("/<supplier_id>")
@require_auth
@require_capability("suppliers", "delete")
def delete_supplier(supplier_id: str):
    supplier = supplier_service.get_supplier(g.tenant_id, supplier_id)
    supplier_service.delete_supplier(supplier)
    return success_response(message="Supplier deleted successfully")
