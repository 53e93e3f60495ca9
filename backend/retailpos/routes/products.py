# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/retailpos/routes/products.py
"""
Product management routes with multi-tenant support.

MULTI-TENANT: All product operations are scoped to the caller's tenant
(g.tenant_id, set by tenant resolution / @require_auth).

SECURITY: All routes require authentication.
- Read operations require products:read (every role)
- Create/update require products:create / products:update (admin, manager)
- Delete requires products:delete (admin)
"""
from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..models import Product
from ..responses import paginated_response, success_response
from ..services import products_service
from ..services.products_service import PRODUCT_POLICY
from ..validation import json_object, parse_bool_arg, parse_pagination, validate_payload

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_capability("products", "read")
def list_products():
    """
    List products.

    Query params:
    - search: matches name, description, SKU or barcode
    - category: category id
    - in_stock: true/false
    - include_inactive: true to include soft-deleted products
    - page / limit: pagination (limit max 100)
    """
    page, limit = parse_pagination(request.args)
    result = products_service.list_products(
        g.tenant_id,
        search=request.args.get("search"),
        category_id=request.args.get("category"),
        in_stock=parse_bool_arg(request.args, "in_stock"),
        include_inactive=bool(parse_bool_arg(request.args, "include_inactive")),
        page=page,
        limit=limit,
    )
    return paginated_response(result)


@products_bp.get("/low-stock")
@require_auth
@require_capability("products", "read")
def low_stock():
    products = products_service.low_stock_products(g.tenant_id)
    return success_response([p.to_dict() for p in products], count=len(products))


@products_bp.get("/code/<code>")
@require_auth
@require_capability("products", "read")
def get_by_code(code: str):
    """Scanner lookup by barcode or SKU."""
    return success_response(products_service.find_by_code(g.tenant_id, code).to_dict())


@products_bp.get("/<product_id>")
@require_auth
@require_capability("products", "read")
def get_product(product_id: str):
    return success_response(products_service.get_product(g.tenant_id, product_id).to_dict())


@products_bp.post("")
@require_auth
@require_capability("products", "create")
def create_product():
    payload = json_object(request)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    product = products_service.create_product(g.tenant, patch)
    return success_response(product.to_dict(), message="Product created successfully", status=201)


@products_bp.put("/<product_id>")
@require_auth
@require_capability("products", "update")
def update_product(product_id: str):
    product = products_service.get_product(g.tenant_id, product_id)
    payload = json_object(request)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    product = products_service.update_product(g.tenant_id, product, patch)
    return success_response(product.to_dict(), message="Product updated successfully")


@products_bp.delete("/<product_id>")
@require_auth
@require_capability("products", "delete")
def delete_product(product_id: str):
    """Soft delete; the product stays referenced by past sales."""
    product = products_service.get_product(g.tenant_id, product_id)
    products_service.delete_product(product)
    return success_response(message="Product deleted successfully")


@products_bp.post("/<product_id>/image")
@require_auth
@require_capability("products", "update")
def upload_image(product_id: str):
    product = products_service.get_product(g.tenant_id, product_id)
    product = products_service.set_product_image(product, request.files.get("image"))
    return success_response(product.to_dict(), message="Image uploaded successfully")
