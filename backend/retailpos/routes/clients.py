# Overview: Flask API routes for B2B clients.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..models import Client
from ..responses import paginated_response, success_response
from ..services import customer_service
from ..services.customer_service import CLIENT_POLICY
from ..validation import json_object, parse_pagination, validate_payload

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.get("")
@require_auth
@require_capability("clients", "read")
def list_clients():
    page, limit = parse_pagination(request.args)
    result = customer_service.list_clients(
        g.tenant_id,
        search=request.args.get("search"),
        status=request.args.get("status"),
        page=page,
        limit=limit,
    )
    return paginated_response(result)


@clients_bp.get("/stats")
@require_auth
@require_capability("clients", "read")
def stats():
    return success_response(customer_service.client_stats(g.tenant_id))


@clients_bp.get("/<client_id>")
@require_auth
@require_capability("clients", "read")
def get_client(client_id: str):
    return success_response(customer_service.get_client(g.tenant_id, client_id).to_dict())


@clients_bp.post("")
@require_auth
@require_capability("clients", "create")
def create_client():
    payload = json_object(request)
    patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=False)
    client = customer_service.create_client(g.tenant_id, patch)
    return success_response(client.to_dict(), message="Client created successfully", status=201)


@clients_bp.put("/<client_id>")
@require_auth
@require_capability("clients", "update")
def update_client(client_id: str):
    client = customer_service.get_client(g.tenant_id, client_id)
    payload = json_object(request)
    patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=True)
    client = customer_service.update_client(client, patch)
    return success_response(client.to_dict(), message="Client updated successfully")


@clients_bp.delete("/<client_id>")
@require_auth
@require_capability("clients", "delete")
def delete_client(client_id: str):
    client = customer_service.get_client(g.tenant_id, client_id)
    customer_service.delete_client(client)
    return success_response(message="Client deleted successfully")
