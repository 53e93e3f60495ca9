from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..ids import new_object_id
from ..money import money_to_json
from ..time_utils import to_utc_z, utcnow

EMPLOYEE_STATUSES = ("active", "inactive", "terminated")


class Employee(db.Model):
    """
    Staff record (HR view). Separate from User: an employee need not log in.

    MULTI-TENANT: email and employee_id are each unique within a tenant.
    """
    __tablename__ = "employees"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "email", name="uq_employees_tenant_email"),
        db.UniqueConstraint("tenant_id", "employee_id", name="uq_employees_tenant_employee_id"),
        db.Index("ix_employees_tenant_department", "tenant_id", "department"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    position = db.Column(db.String(100), nullable=False)
    department = db.Column(db.String(32), nullable=False, default="Sales")
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    employee_id = db.Column(db.String(32), nullable=False)

    hourly_rate = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal("0"))
    status = db.Column(db.String(16), nullable=False, default="active")
    shift = db.Column(db.String(64), nullable=False)
    hire_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    address = db.Column(db.JSON, nullable=True)

    hours_this_week = db.Column(db.Numeric(6, 2), nullable=False, default=Decimal("0"))
    # 0..100
    performance = db.Column(db.Integer, nullable=False, default=85)
    notes = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "position": self.position,
            "department": self.department,
            "email": self.email,
            "phone": self.phone,
            "employee_id": self.employee_id,
            "hourly_rate": money_to_json(self.hourly_rate),
            "status": self.status,
            "shift": self.shift,
            "hire_date": to_utc_z(self.hire_date),
            "address": self.address,
            "hours_this_week": float(self.hours_this_week) if self.hours_this_week is not None else 0.0,
            "performance": self.performance,
            "notes": self.notes,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
