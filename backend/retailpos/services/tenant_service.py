"""
Multi-Tenant Service: Tenant Resolution and Scoping Helpers

Every request is resolved to at most one tenant before it reaches a route,
and every query touching tenant-owned data is filtered by that tenant.

RESOLUTION ORDER (first non-empty identifier wins):
1. SubdomainResolver    - leftmost Host label (skips IPs, bare hosts, www/localhost)
2. HeaderResolver       - X-Tenant-ID header
3. QueryParamResolver   - ?tenant=
4. DefaultTenantResolver - DEFAULT_TENANT config (never in production)

An identifier that looks like a 24-hex id is looked up by id, anything else
by subdomain. Only active tenants resolve.

SECURITY INVARIANTS:
1. An identifier that matches no active tenant rejects the request (404)
2. No identifier leaves g.tenant as None; require_tenant rejects later (400)
3. An authenticated user is only ever served from their own tenant (403)
4. Cross-tenant access attempts are logged at warning level

USAGE:
    from retailpos.services.tenant_service import scoped_query, get_scoped_or_404

    products = scoped_query(Product).filter_by(is_active=True).all()
    product = get_scoped_or_404(Product, product_id, label="Product")
"""
from __future__ import annotations

import ipaddress
import re

from flask import current_app, g, has_request_context, request

from ..errors import ConflictError, NotFoundError, TenantNotFoundError, TenantRequiredError
from ..extensions import db
from ..ids import is_object_id
from ..models import Tenant
from ..models.tenancy import CURRENCIES, LANGUAGES
from ..validation import ModelValidationPolicy, validate_payload

# Endpoints that never need a tenant (health probes, store sign-up, static files)
EXEMPT_ENDPOINTS = frozenset({"system.health", "tenants.register", "uploads.serve_upload", "static"})


class SubdomainResolver:
    name = "subdomain"

    def resolve(self, req, config) -> str | None:
        host = (req.host or "").split(":", 1)[0].strip().lower()
        if not host:
            return None
        try:
            ipaddress.ip_address(host)
            return None
        except ValueError:
            pass
        labels = host.split(".")
        if len(labels) < 2:
            return None
        candidate = labels[0]
        if not candidate or candidate in config.get("TENANT_IGNORED_SUBDOMAINS", ()):
            return None
        return candidate


class HeaderResolver:
    name = "header"

    def resolve(self, req, config) -> str | None:
        value = req.headers.get("X-Tenant-ID", "").strip()
        return value or None


class QueryParamResolver:
    name = "query"

    def resolve(self, req, config) -> str | None:
        value = (req.args.get("tenant") or "").strip()
        return value or None


class DefaultTenantResolver:
    name = "default"

    def resolve(self, req, config) -> str | None:
        if config.get("ENV_NAME") == "production":
            return None
        value = config.get("DEFAULT_TENANT")
        return value.strip() if value else None


DEFAULT_RESOLVERS = (
    SubdomainResolver(),
    HeaderResolver(),
    QueryParamResolver(),
    DefaultTenantResolver(),
)


def resolve_identifier(req, config, resolvers=DEFAULT_RESOLVERS) -> tuple[str | None, str | None]:
    """Run the resolver chain; returns (identifier, strategy name) or (None, None)."""
    for resolver in resolvers:
        identifier = resolver.resolve(req, config)
        if identifier:
            return identifier, resolver.name
    return None, None


def lookup_tenant(identifier: str) -> Tenant | None:
    """
    Find an ACTIVE tenant by id (24-hex) or subdomain.

    Inactive tenants are treated exactly like unknown ones.
    """
    query = db.session.query(Tenant).filter(Tenant.is_active.is_(True))
    if is_object_id(identifier):
        return query.filter(Tenant.id == identifier.lower()).first()
    return query.filter(Tenant.subdomain == identifier.lower()).first()


def resolve_request_tenant() -> None:
    """
    before_request hook: establish g.tenant / g.tenant_id.

    Raises TenantNotFoundError when an identifier is present but resolves to
    no active tenant. A request with no identifier passes through untouched.
    """
    g.tenant = None
    g.tenant_id = None
    g.current_user = None

    if request.method == "OPTIONS" or request.endpoint in EXEMPT_ENDPOINTS:
        return

    identifier, strategy = resolve_identifier(request, current_app.config)
    if identifier is None:
        return

    tenant = lookup_tenant(identifier)
    if tenant is None:
        current_app.logger.warning(
            "Tenant %r (via %s) not found or inactive for %s %s",
            identifier, strategy, request.method, request.path,
        )
        raise TenantNotFoundError()

    current_app.logger.debug("Resolved tenant %s via %s", tenant.id, strategy)
    g.tenant = tenant
    g.tenant_id = tenant.id


def get_current_tenant_id() -> str:
    """
    Get current tenant id from Flask g context.

    SECURITY: Raises TenantRequiredError if no tenant was established.
    """
    tenant_id = getattr(g, "tenant_id", None)
    if tenant_id is None:
        raise TenantRequiredError()
    return tenant_id


def get_current_tenant() -> Tenant:
    tenant = getattr(g, "tenant", None)
    if tenant is None:
        raise TenantRequiredError()
    return tenant


def scoped_query(model, tenant_id: str | None = None):
    """
    Create a base query scoped to a tenant.

    Args:
        model: SQLAlchemy model class (must have tenant_id column)
        tenant_id: Tenant id (defaults to g.tenant_id)
    """
    if tenant_id is None:
        tenant_id = get_current_tenant_id()
    return db.session.query(model).filter(model.tenant_id == tenant_id)


def get_scoped_or_404(model, record_id: str, tenant_id: str | None = None, label: str = "Record"):
    """
    Fetch a record by id within the tenant.

    SECURITY: A record owned by another tenant is reported as not found
    (never reveal that it exists elsewhere) and the attempt is logged.
    """
    if tenant_id is None:
        tenant_id = get_current_tenant_id()

    record = scoped_query(model, tenant_id).filter(model.id == record_id).first()
    if record is not None:
        return record

    foreign = db.session.query(model.tenant_id).filter(model.id == record_id).first()
    if foreign is not None:
        _log_cross_tenant_attempt(
            f"{model.__name__} {record_id} belongs to tenant {foreign[0]}, not {tenant_id}",
            tenant_id=tenant_id,
        )
    raise NotFoundError(f"{label} not found")


def enforce_limit(tenant: Tenant, resource: str, model) -> None:
    """Raise ConflictError once a tenant has used up its plan allowance."""
    limit = tenant.limit_for(resource)
    used = scoped_query(model, tenant.id).count()
    if used >= limit:
        raise ConflictError(
            f"{resource.capitalize()} limit reached for the {tenant.subscription_plan} plan ({limit})"
        )


_NON_SLUG = re.compile(r"[^a-z0-9]+")


def derive_subdomain(name: str) -> str:
    """Lowercase, hyphenated form of a store name usable as a DNS label."""
    slug = _NON_SLUG.sub("-", (name or "").lower()).strip("-")
    slug = slug[:63].strip("-")
    return slug or "store"


def unique_subdomain(base: str) -> str:
    """Append -2, -3, ... until the subdomain is unused."""
    candidate = base
    suffix = 2
    while db.session.query(Tenant.id).filter(Tenant.subdomain == candidate).first() is not None:
        tail = f"-{suffix}"
        candidate = f"{base[:63 - len(tail)].rstrip('-')}{tail}"
        suffix += 1
    return candidate


def subdomain_taken(subdomain: str) -> bool:
    return db.session.query(Tenant.id).filter(Tenant.subdomain == subdomain).first() is not None


def deactivate_tenant(tenant_id: str) -> Tenant:
    tenant = db.session.query(Tenant).filter_by(id=tenant_id).first()
    if tenant is None:
        raise NotFoundError("Store not found")
    tenant.is_active = False
    db.session.commit()
    return tenant


def _log_cross_tenant_attempt(reason: str, tenant_id: str | None = None) -> None:
    """
    Log a cross-tenant access attempt.

    SECURITY: Audit trail for detecting unauthorized access attempts.
    """
    if not has_request_context():
        current_app.logger.warning("CROSS_TENANT_ACCESS_DENIED tenant=%s: %s", tenant_id, reason)
        return

    user = getattr(g, "current_user", None)
    current_app.logger.warning(
        "CROSS_TENANT_ACCESS_DENIED user=%s tenant=%s %s %s ip=%s: %s",
        getattr(user, "id", None),
        tenant_id,
        request.method,
        request.path,
        request.remote_addr,
        reason,
    )


TENANT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "name", "description", "currency", "exchange_rate", "language", "timezone",
        "tax_rate", "capital", "address", "contact_phone", "contact_email", "contact_website",
        "low_stock_threshold", "low_stock_alerts",
    }),
    minimums={"capital": 0, "exchange_rate": 0, "tax_rate": 0, "low_stock_threshold": 0},
    maximums={"tax_rate": 1},
    choices={"currency": CURRENCIES, "language": LANGUAGES},
    email_fields=frozenset({"contact_email"}),
)


def update_tenant(tenant: Tenant, payload: dict) -> Tenant:
    """Admin edits to the store profile. Subdomain and plan limits are not client-writable."""
    patch = validate_payload(model=Tenant, payload=payload, policy=TENANT_POLICY, partial=True)
    for key, value in patch.items():
        setattr(tenant, key, value)
    db.session.commit()
    return tenant
