# Overview: Request and capability decorators for API routes.

from functools import wraps

from flask import g, request

from .errors import AuthenticationError, PermissionDeniedError, TenantAccessError, TenantRequiredError
from .permissions import is_allowed
from .services import token_service
from .services.tenant_service import _log_cross_tenant_attempt


def _bearer_token() -> str:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise AuthenticationError("No token provided, authorization denied")
    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError("No token provided, authorization denied")
    return token


def require_auth(f):
    """
    Require a valid bearer token and bind it to the request's tenant.

    MULTI-TENANT: Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.tenant / g.tenant_id: adopted from the user when resolution found none

    SECURITY: Returns 401 if the token is missing, invalid, expired, issued
    before the last password change, or the user/tenant is deactivated.
    Returns 403 if the token's user belongs to a different tenant than the
    one the request resolved to.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = token_service.verify_token(_bearer_token())
        g.current_user = user

        resolved_id = getattr(g, "tenant_id", None)
        if resolved_id is None:
            g.tenant = user.tenant
            g.tenant_id = user.tenant_id
        elif resolved_id != user.tenant_id:
            _log_cross_tenant_attempt(
                f"user of tenant {user.tenant_id} presented token to tenant {resolved_id}",
                tenant_id=resolved_id,
            )
            raise TenantAccessError("Access denied: user does not belong to this store")

        return f(*args, **kwargs)

    return decorated_function


def require_tenant(f):
    """Reject the request (400) unless a tenant was resolved."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if getattr(g, "tenant", None) is None:
            raise TenantRequiredError()
        return f(*args, **kwargs)

    return decorated_function


def require_capability(resource: str, operation: str):
    """
    Gate a route on the capability table.

    Must be applied after @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, "current_user", None)
            if user is None:
                raise AuthenticationError("Authentication required")
            if not is_allowed(user.role, resource, operation):
                raise PermissionDeniedError(
                    f"User role {user.role} is not authorized to access this route",
                    details={"required": f"{resource}:{operation}"},
                )
            return f(*args, **kwargs)

        return decorated_function
    return decorator
