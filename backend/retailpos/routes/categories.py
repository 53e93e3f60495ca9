# Overview: Flask API routes for product categories.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..models import Category
from ..responses import success_response
from ..services import category_service
from ..services.category_service import CATEGORY_POLICY
from ..validation import json_object, parse_bool_arg, validate_payload

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@require_auth
@require_capability("categories", "read")
def list_categories():
    categories = category_service.list_categories(
        g.tenant_id,
        search=request.args.get("search"),
        include_inactive=bool(parse_bool_arg(request.args, "include_inactive")),
    )
    return success_response(categories, count=len(categories))


@categories_bp.get("/<category_id>")
@require_auth
@require_capability("categories", "read")
def get_category(category_id: str):
    category = category_service.get_category(g.tenant_id, category_id)
    return success_response(category_service.category_dict(category))


@categories_bp.post("")
@require_auth
@require_capability("categories", "create")
def create_category():
    payload = json_object(request)
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    category = category_service.create_category(g.tenant_id, patch)
    return success_response(category_service.category_dict(category),
                            message="Category created successfully", status=201)


@categories_bp.put("/<category_id>")
@require_auth
@require_capability("categories", "update")
def update_category(category_id: str):
    category = category_service.get_category(g.tenant_id, category_id)
    payload = json_object(request)
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
    category = category_service.update_category(category, patch)
    return success_response(category_service.category_dict(category), message="Category updated successfully")


@categories_bp.delete("/<category_id>")
@require_auth
@require_capability("categories", "delete")
def delete_category(category_id: str):
    category = category_service.get_category(g.tenant_id, category_id)
    category_service.delete_category(category)
    return success_response(message="Category deleted successfully")
