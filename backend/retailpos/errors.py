# Overview: Error taxonomy and the app-level handlers that turn it into JSON envelopes.

from __future__ import annotations

from flask import Flask, current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from .extensions import db
from .responses import error_response


class PosError(Exception):
    """Base for errors that map onto an HTTP status."""
    status_code = 500

    def __init__(self, message: str, details: dict | list | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(PosError, ValueError):
    """400-level input problem."""
    status_code = 400


class ConflictError(PosError, ValueError):
    """409-level business rule conflict (duplicate SKU/email/subdomain, plan limit)."""
    status_code = 409


class NotFoundError(PosError):
    status_code = 404


class AuthenticationError(PosError):
    """Missing, invalid or expired credentials."""
    status_code = 401


class PermissionDeniedError(PosError):
    """Authenticated, but the role may not perform the operation."""
    status_code = 403


class TenantRequiredError(PosError):
    status_code = 400

    def __init__(self, message: str = "Store identification required"):
        super().__init__(message)


class TenantNotFoundError(PosError):
    status_code = 404

    def __init__(self, message: str = "Store not found or inactive"):
        super().__init__(message)


class TenantAccessError(PosError):
    """Raised when cross-tenant access is attempted."""
    status_code = 403


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PosError)
    def handle_pos_error(exc: PosError):
        if exc.status_code >= 500:
            current_app.logger.exception("Unhandled application error")
        return error_response(exc.message, exc.status_code, details=exc.details)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(exc: IntegrityError):
        db.session.rollback()
        current_app.logger.warning("Uniqueness constraint violated: %s", exc.orig)
        return error_response("Duplicate value violates a uniqueness constraint", 409)

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        if exc.code == 404:
            return error_response("API endpoint not found", 404)
        return error_response(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled server error")
        detail = str(exc) if current_app.debug else "Internal server error"
        return error_response("Server error", 500, error=detail)
