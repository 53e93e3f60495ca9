from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..ids import new_object_id
from ..money import money_to_json
from ..time_utils import to_utc_z, utcnow

CLIENT_STATUSES = ("active", "inactive")


class Customer(db.Model):
    """
    Walk-in / retail customer.

    MULTI-TENANT: emails are unique within a tenant.

    Denormalized aggregates (total_spent, loyalty_points, last_visit) are
    updated when sales are completed.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "email", name="uq_customers_tenant_email"),
        db.Index("ix_customers_tenant_active", "tenant_id", "is_active"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    address = db.Column(db.JSON, nullable=True)

    loyalty_points = db.Column(db.Integer, nullable=False, default=0)
    total_spent = db.Column(db.Numeric(14, 2), nullable=False, default=Decimal("0"))
    last_visit = db.Column(db.DateTime, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    notes = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "loyalty_points": self.loyalty_points,
            "total_spent": money_to_json(self.total_spent),
            "last_visit": to_utc_z(self.last_visit) if self.last_visit else None,
            "is_active": self.is_active,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Client(db.Model):
    """
    Business (B2B) client with invoice/project counters.

    MULTI-TENANT: emails are unique within a tenant.
    """
    __tablename__ = "clients"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "email", name="uq_clients_tenant_email"),
        db.Index("ix_clients_tenant_status", "tenant_id", "status"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    address = db.Column(db.JSON, nullable=True)

    total_revenue = db.Column(db.Numeric(14, 2), nullable=False, default=Decimal("0"))
    active_invoices = db.Column(db.Integer, nullable=False, default=0)
    projects = db.Column(db.Integer, nullable=False, default=0)
    last_transaction = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="active")
    notes = db.Column(db.String(500), nullable=True)
    # Initials shown in place of a picture
    avatar = db.Column(db.String(4), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "total_revenue": money_to_json(self.total_revenue),
            "active_invoices": self.active_invoices,
            "projects": self.projects,
            "last_transaction": to_utc_z(self.last_transaction) if self.last_transaction else None,
            "status": self.status,
            "notes": self.notes,
            "avatar": self.avatar,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
