# Overview: Store sign-up; creates the tenant, its owner account and default settings in one unit of work.

"""
Tenant Registration

Creates, in a single commit:
1. the Tenant (subdomain supplied or derived from the store name)
2. its owner User (role admin, employee_id = last 6 of the tenant id, upper case)
3. the default Settings row

Owner emails are only unique inside a tenant, so the same person can own
several stores.
"""
from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..ids import new_object_id
from ..models import Tenant, User
from ..models.tenancy import CURRENCIES, LANGUAGES
from ..validation import SUBDOMAIN_RE, require_decimal, require_email
from .auth_service import create_user
from .settings_service import create_default_settings
from .tenant_service import derive_subdomain, subdomain_taken, unique_subdomain


def register_tenant(payload: dict) -> tuple[Tenant, User]:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    errors = []
    store_name = (payload.get("store_name") or "").strip()
    owner_name = (payload.get("owner_name") or "").strip()
    if not store_name:
        errors.append({"field": "store_name", "message": "Store name is required"})
    elif len(store_name) > 100:
        errors.append({"field": "store_name", "message": "Store name cannot exceed 100 characters"})
    if len(owner_name) < 2:
        errors.append({"field": "owner_name", "message": "Owner name must be at least 2 characters"})
    if not isinstance(payload.get("owner_password"), str) or len(payload["owner_password"]) < 6:
        errors.append({"field": "owner_password", "message": "Password must be at least 6 characters"})

    currency = payload.get("currency") or "USD"
    if currency not in CURRENCIES:
        errors.append({"field": "currency", "message": f"currency must be one of: {', '.join(CURRENCIES)}"})
    language = payload.get("language") or "en"
    if language not in LANGUAGES:
        errors.append({"field": "language", "message": f"language must be one of: {', '.join(LANGUAGES)}"})
    if errors:
        raise ValidationError("Validation failed", details=errors)

    owner_email = require_email(payload.get("owner_email"), "owner_email")
    capital = require_decimal(payload.get("store_capital", 0), "store_capital")
    tax_rate = payload.get("tax_rate")
    if tax_rate is None:
        tax_rate = Decimal(current_app.config.get("DEFAULT_TAX_RATE", "0.08"))
    else:
        tax_rate = require_decimal(tax_rate, "tax_rate")
        if tax_rate > 1:
            raise ValidationError("tax_rate must be a fraction between 0 and 1")

    requested = payload.get("subdomain")
    if requested:
        subdomain = str(requested).strip().lower()
        if not SUBDOMAIN_RE.match(subdomain):
            raise ValidationError("Subdomain may contain only lowercase letters, digits and hyphens")
        if subdomain_taken(subdomain):
            raise ConflictError("Subdomain is already taken")
    else:
        subdomain = unique_subdomain(derive_subdomain(store_name))

    address = payload.get("address")
    if isinstance(address, dict):
        address = ", ".join(str(v).strip() for v in address.values() if v)
    phone = payload.get("phone")

    tenant = Tenant(
        id=new_object_id(),
        name=store_name,
        description=(payload.get("description") or None),
        subdomain=subdomain,
        currency=currency,
        language=language,
        capital=capital,
        tax_rate=tax_rate,
        address=address or None,
        contact_phone=phone,
        contact_email=owner_email,
    )
    db.session.add(tenant)
    db.session.flush()

    owner = create_user(
        tenant,
        name=owner_name,
        email=owner_email,
        password=payload["owner_password"],
        role="admin",
        employee_id=tenant.id[-6:].upper(),
        phone=phone,
        department="Management",
        commit=False,
    )
    create_default_settings(tenant)
    db.session.commit()

    current_app.logger.info("Registered tenant %s (%s)", tenant.id, tenant.subdomain)
    return tenant, owner
