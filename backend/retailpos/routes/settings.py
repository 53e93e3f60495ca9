# Overview: Flask API routes for the per-tenant settings singleton.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..responses import success_response
from ..services import settings_service
from ..validation import json_object

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
@require_auth
@require_capability("settings", "read")
def get_settings():
    """Created with defaults on first read."""
    return success_response(settings_service.get_settings(g.tenant_id).to_dict())


@settings_bp.put("")
@require_auth
@require_capability("settings", "update")
def update_settings():
    payload = json_object(request)
    settings = settings_service.update_settings(g.tenant_id, payload)
    return success_response(settings.to_dict(), message="Settings updated successfully")


@settings_bp.post("/reset")
@require_auth
@require_capability("settings", "reset")
def reset_settings():
    settings = settings_service.reset_settings(g.tenant_id)
    return success_response(settings.to_dict(), message="Settings reset to defaults")
