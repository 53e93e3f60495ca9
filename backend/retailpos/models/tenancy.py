from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..ids import new_object_id
from ..money import money_to_json
from ..time_utils import to_utc_z, utcnow

CURRENCIES = ("USD", "IQD")
LANGUAGES = ("en", "ar")
SUBSCRIPTION_PLANS = ("basic", "premium", "enterprise")
SUBSCRIPTION_STATUSES = ("active", "suspended", "cancelled")


class Tenant(db.Model):
    """
    Multi-tenant root: every store using the system is a Tenant.

    All users, catalog, customers and sales belong to exactly one tenant and
    every query is filtered by tenant_id. Tenants are never hard deleted;
    deactivation (is_active=False) makes them unresolvable.

    A tenant is addressed either by its 24-hex id or by its subdomain.
    """
    __tablename__ = "tenants"

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    subdomain = db.Column(db.String(63), nullable=False, unique=True, index=True)

    currency = db.Column(db.String(3), nullable=False, default="USD")
    exchange_rate = db.Column(db.Numeric(14, 4), nullable=False, default=Decimal("1"))
    language = db.Column(db.String(2), nullable=False, default="en")
    timezone = db.Column(db.String(64), nullable=False, default="UTC")

    # Fraction, e.g. 0.08 for 8%
    tax_rate = db.Column(db.Numeric(6, 4), nullable=False, default=Decimal("0.08"))
    # Grows by the amount paid on every completed sale
    capital = db.Column(db.Numeric(14, 2), nullable=False, default=Decimal("0"))

    address = db.Column(db.String(200), nullable=True)
    contact_phone = db.Column(db.String(20), nullable=True)
    contact_email = db.Column(db.String(255), nullable=True)
    contact_website = db.Column(db.String(255), nullable=True)

    subscription_plan = db.Column(db.String(16), nullable=False, default="basic")
    subscription_status = db.Column(db.String(16), nullable=False, default="active")
    subscription_start = db.Column(db.DateTime, nullable=False, default=utcnow)
    subscription_end = db.Column(db.DateTime, nullable=True)

    # Plan limits, enforced when creating users, products and transactions
    max_users = db.Column(db.Integer, nullable=False, default=5)
    max_products = db.Column(db.Integer, nullable=False, default=100)
    max_transactions = db.Column(db.Integer, nullable=False, default=1000)

    low_stock_threshold = db.Column(db.Integer, nullable=False, default=10)
    low_stock_alerts = db.Column(db.Boolean, nullable=False, default=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Tenant id={self.id} subdomain={self.subdomain!r}>"

    def limit_for(self, resource: str) -> int:
        return {
            "users": self.max_users,
            "products": self.max_products,
            "transactions": self.max_transactions,
        }[resource]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "subdomain": self.subdomain,
            "currency": self.currency,
            "exchange_rate": float(self.exchange_rate) if self.exchange_rate is not None else None,
            "language": self.language,
            "timezone": self.timezone,
            "tax_rate": float(self.tax_rate) if self.tax_rate is not None else None,
            "capital": money_to_json(self.capital),
            "address": self.address,
            "contact": {
                "phone": self.contact_phone,
                "email": self.contact_email,
                "website": self.contact_website,
            },
            "subscription": {
                "plan": self.subscription_plan,
                "status": self.subscription_status,
                "start_date": to_utc_z(self.subscription_start),
                "end_date": to_utc_z(self.subscription_end),
                "limits": {
                    "users": self.max_users,
                    "products": self.max_products,
                    "transactions": self.max_transactions,
                },
            },
            "low_stock_threshold": self.low_stock_threshold,
            "low_stock_alerts": self.low_stock_alerts,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_public_dict(self) -> dict:
        """Subset safe to return to any authenticated member of the tenant."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "subdomain": self.subdomain,
            "currency": self.currency,
            "language": self.language,
            "tax_rate": float(self.tax_rate) if self.tax_rate is not None else None,
            "address": self.address,
            "contact": {
                "phone": self.contact_phone,
                "email": self.contact_email,
                "website": self.contact_website,
            },
            "subscription": {
                "plan": self.subscription_plan,
                "status": self.subscription_status,
            },
        }
