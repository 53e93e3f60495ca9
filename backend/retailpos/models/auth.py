from __future__ import annotations

from ..extensions import db
from ..ids import new_object_id
from ..time_utils import to_utc_z, utcnow

ROLES = ("admin", "manager", "cashier")
DEPARTMENTS = ("Management", "Sales", "Inventory", "Pharmacy", "Security", "Customer Service")


class User(db.Model):
    """
    User accounts for authentication and attribution.

    MULTI-TENANT: Users belong to exactly one tenant (tenant_id).
    Email and employee_id are unique within a tenant, not globally, so the
    same person can hold accounts in several stores.

    SECURITY: password_hash is never serialized. password_changed_at
    invalidates every token issued before it.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
        db.UniqueConstraint("tenant_id", "employee_id", name="uq_users_tenant_employee_id"),
        db.Index("ix_users_tenant_role", "tenant_id", "role"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, index=True)

    name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default="cashier")
    employee_id = db.Column(db.String(32), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    department = db.Column(db.String(32), nullable=False, default="Sales")

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    last_login_at = db.Column(db.DateTime, nullable=True)
    password_changed_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    tenant = db.relationship("Tenant", backref=db.backref("users", lazy=True))

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "employee_id": self.employee_id,
            "phone": self.phone,
            "department": self.department,
            "is_active": self.is_active,
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
