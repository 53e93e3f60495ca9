# Overview: Flask API routes for store sign-up and store profile.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..responses import success_response
from ..services import token_service
from ..services.registration_service import register_tenant
from ..services.tenant_service import update_tenant
from ..validation import json_object

tenants_bp = Blueprint("tenants", __name__, url_prefix="/api/tenants")


@tenants_bp.post("/register")
def register():
    """
    Create a store with its owner account.

    Exempt from tenant resolution; the response token is bound to the new store.
    """
    payload = json_object(request)
    tenant, owner = register_tenant(payload)
    return success_response(
        {
            "token": token_service.issue_token(owner),
            "tenant": tenant.to_dict(),
            "user": owner.to_dict(),
        },
        message="Store registered successfully",
        status=201,
    )


@tenants_bp.get("/info")
@require_auth
@require_capability("tenant", "read")
def info():
    tenant = g.tenant
    data = tenant.to_dict() if g.current_user.role == "admin" else tenant.to_public_dict()
    return success_response(data)


@tenants_bp.put("/settings")
@require_auth
@require_capability("tenant", "update")
def update_settings():
    payload = json_object(request)
    tenant = update_tenant(g.tenant, payload)
    return success_response(tenant.to_dict(), message="Store settings updated successfully")
