# Overview: Per-tenant settings singleton: lazy creation, partial updates and reset to defaults.

from __future__ import annotations

from decimal import Decimal

from ..errors import ValidationError
from ..extensions import db
from ..models import Settings, Tenant
from ..models.settings import DATE_FORMATS, SETTINGS_DEFAULTS, THEMES, TIME_FORMATS
from ..models.tenancy import CURRENCIES
from ..validation import ModelValidationPolicy, validate_payload
from .tenant_service import scoped_query

SETTINGS_POLICY = ModelValidationPolicy(
    writable_fields=frozenset(SETTINGS_DEFAULTS.keys()),
    minimums={
        "tax_rate": Decimal("0"),
        "low_stock_threshold": 0,
        "exchange_rate": Decimal("0"),
        "session_timeout": 5,
    },
    maximums={
        "tax_rate": Decimal("1"),
        "session_timeout": 480,
    },
    choices={
        "currency": CURRENCIES,
        "date_format": DATE_FORMATS,
        "time_format": TIME_FORMATS,
        "theme": THEMES,
    },
    email_fields=frozenset({"store_email"}),
)

# Settings fields that are also kept on the tenant row
_TENANT_MIRRORED = ("currency", "tax_rate", "exchange_rate", "low_stock_threshold", "low_stock_alerts")


def get_settings(tenant_id: str) -> Settings:
    """Return the tenant's settings, creating the row with defaults on first read."""
    settings = scoped_query(Settings, tenant_id).first()
    if settings is None:
        settings = create_default_settings(db.session.get(Tenant, tenant_id))
        db.session.commit()
    return settings


def create_default_settings(tenant: Tenant) -> Settings:
    """Build (not commit) a settings row seeded from SETTINGS_DEFAULTS and the tenant's own values."""
    values = dict(SETTINGS_DEFAULTS)
    if tenant is not None:
        values["store_name"] = tenant.name[:100]
        if tenant.address:
            values["store_address"] = tenant.address
        for key in _TENANT_MIRRORED:
            value = getattr(tenant, key, None)
            if value is not None:
                values[key] = value
    settings = Settings(tenant_id=tenant.id, **values)
    db.session.add(settings)
    return settings


def update_settings(tenant_id: str, payload: dict) -> Settings:
    if not payload:
        raise ValidationError("No settings provided")
    patch = validate_payload(model=Settings, payload=payload, policy=SETTINGS_POLICY, partial=True)
    settings = get_settings(tenant_id)
    for key, value in patch.items():
        setattr(settings, key, value)
    _mirror_to_tenant(tenant_id, patch)
    db.session.commit()
    return settings


def reset_settings(tenant_id: str) -> Settings:
    settings = get_settings(tenant_id)
    for key, value in SETTINGS_DEFAULTS.items():
        setattr(settings, key, value)
    _mirror_to_tenant(tenant_id, {k: SETTINGS_DEFAULTS[k] for k in _TENANT_MIRRORED})
    db.session.commit()
    return settings


def _mirror_to_tenant(tenant_id: str, patch: dict) -> None:
    tenant = db.session.get(Tenant, tenant_id)
    for key in _TENANT_MIRRORED:
        if key in patch and patch[key] is not None:
            setattr(tenant, key, patch[key])
