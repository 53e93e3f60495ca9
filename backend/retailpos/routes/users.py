# Overview: Flask API routes for user administration within a tenant.

"""
User management routes.

MULTI-TENANT: every lookup goes through get_scoped_or_404, so an id from
another store answers 404.

SECURITY: managers may list and view; only admins create, edit or deactivate.
"""
from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..responses import paginated_response, success_response
from ..services import user_service
from ..validation import json_object, parse_bool_arg, parse_pagination

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_capability("users", "read")
def list_users():
    page, limit = parse_pagination(request.args)
    result = user_service.list_users(
        g.tenant_id,
        search=request.args.get("search"),
        role=request.args.get("role"),
        is_active=parse_bool_arg(request.args, "is_active"),
        page=page,
        limit=limit,
    )
    return paginated_response(result)


@users_bp.get("/stats")
@require_auth
@require_capability("users", "read")
def stats():
    return success_response(user_service.user_stats(g.tenant_id))


@users_bp.get("/<user_id>")
@require_auth
@require_capability("users", "read")
def get_user(user_id: str):
    return success_response(user_service.get_user(g.tenant_id, user_id).to_dict())


@users_bp.post("")
@require_auth
@require_capability("users", "create")
def create_user():
    payload = json_object(request)
    user = user_service.admin_create_user(g.tenant, payload)
    return success_response(user.to_dict(), message="User created successfully", status=201)


@users_bp.put("/<user_id>")
@require_auth
@require_capability("users", "update")
def update_user(user_id: str):
    user = user_service.get_user(g.tenant_id, user_id)
    payload = json_object(request)
    user = user_service.update_user(g.current_user, user, payload)
    return success_response(user.to_dict(), message="User updated successfully")


@users_bp.delete("/<user_id>")
@require_auth
@require_capability("users", "delete")
def delete_user(user_id: str):
    user = user_service.get_user(g.tenant_id, user_id)
    user_service.delete_user(g.current_user, user)
    return success_response(message="User deactivated successfully")
