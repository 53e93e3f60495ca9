# Overview: JSON envelope helpers shared by every route.

from __future__ import annotations

from typing import Any

from flask import jsonify


def success_response(data: Any = None, message: str | None = None, status: int = 200, **extra):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def error_response(message: str, status: int, error: str | None = None, details: Any = None):
    body: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    if details:
        body["errors"] = details
    return jsonify(body), status


def paginated_response(result: dict, message: str | None = None):
    """Envelope for list results produced by the services' paginate helper."""
    return success_response(
        result["items"],
        message=message,
        count=len(result["items"]),
        total=result["total"],
        page=result["page"],
        pages=result["pages"],
    )
