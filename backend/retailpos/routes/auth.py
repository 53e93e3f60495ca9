# Overview: Flask API routes for authentication; parses input and returns JSON responses.

"""
Authentication routes.

MULTI-TENANT: register needs a resolved tenant and always creates a cashier
in it. login is scoped to the resolved tenant when there is one; otherwise
the email has to identify a single account.
"""
from flask import Blueprint, g, request

from ..decorators import require_auth, require_tenant
from ..responses import success_response
from ..services import auth_service, token_service
from ..services.tenant_service import get_current_tenant
from ..validation import json_object

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user) -> dict:
    return {
        "token": token_service.issue_token(user),
        "user": user.to_dict(),
        "tenant": user.tenant.to_public_dict(),
    }


@auth_bp.post("/register")
@require_tenant
def register():
    """Self sign-up inside the resolved store. Role is always cashier."""
    payload = json_object(request)
    user = auth_service.create_user(
        get_current_tenant(),
        name=payload.get("name"),
        email=payload.get("email"),
        password=payload.get("password"),
        role="cashier",
        phone=payload.get("phone"),
        department=payload.get("department"),
    )
    return success_response(_session_payload(user), message="User registered successfully", status=201)


@auth_bp.post("/login")
def login():
    payload = json_object(request)
    user = auth_service.authenticate(
        payload.get("email"),
        payload.get("password"),
        tenant_id=getattr(g, "tenant_id", None),
    )
    return success_response(_session_payload(user), message="Login successful")


@auth_bp.post("/logout")
@require_auth
def logout():
    # Tokens are stateless; the client discards its copy
    return success_response(message="Logged out successfully")


@auth_bp.get("/me")
@require_auth
def me():
    return success_response({"user": g.current_user.to_dict(), "tenant": g.tenant.to_public_dict()})


@auth_bp.put("/profile")
@require_auth
def update_profile():
    payload = json_object(request)
    user = auth_service.update_profile(g.current_user, payload)
    return success_response(user.to_dict(), message="Profile updated successfully")


@auth_bp.put("/password")
@require_auth
def change_password():
    """
    Change the caller's password.

    SECURITY: every token issued before this call stops working; the
    response carries a fresh one.
    """
    payload = json_object(request)
    user = auth_service.change_password(
        g.current_user,
        payload.get("current_password"),
        payload.get("new_password"),
    )
    return success_response({"token": token_service.issue_token(user)}, message="Password changed successfully")
