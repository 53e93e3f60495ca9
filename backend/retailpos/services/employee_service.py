# Overview: Tenant-scoped employee records and workforce stats.

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func

from ..models import Employee
from ..models.auth import DEPARTMENTS
from ..models.employees import EMPLOYEE_STATUSES
from ..money import money_to_json
from ..validation import ModelValidationPolicy, ValidationError
from .crud import apply_search, create_record, delete_record, ensure_unique, paginate, update_record
from .tenant_service import get_scoped_or_404, scoped_query

EMPLOYEE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "name", "position", "department", "email", "phone", "employee_id", "hourly_rate", "status",
        "shift", "hire_date", "address", "hours_this_week", "performance", "notes", "is_active",
    }),
    required_on_create=frozenset({"name", "position", "department", "email", "phone", "employee_id",
                                  "hourly_rate", "shift"}),
    minimums={"hourly_rate": Decimal("0"), "hours_this_week": Decimal("0"), "performance": 0},
    maximums={"performance": 100},
    choices={"department": DEPARTMENTS, "status": EMPLOYEE_STATUSES},
    email_fields=frozenset({"email"}),
)


def list_employees(tenant_id: str, search: str | None = None, department: str | None = None,
                   status: str | None = None, page: int = 1, limit: int = 20) -> dict:
    query = scoped_query(Employee, tenant_id)
    if department:
        if department not in DEPARTMENTS:
            raise ValidationError(f"department must be one of: {', '.join(DEPARTMENTS)}")
        query = query.filter(Employee.department == department)
    if status:
        query = query.filter(Employee.status == status)
    query = apply_search(query, search, [Employee.name, Employee.email, Employee.employee_id, Employee.position])
    return paginate(query.order_by(Employee.name.asc()), page, limit)


def get_employee(tenant_id: str, employee_id: str) -> Employee:
    return get_scoped_or_404(Employee, employee_id, tenant_id, label="Employee")


def _ensure_unique(tenant_id: str, patch: dict, exclude_id: str | None = None) -> None:
    ensure_unique(Employee, tenant_id, "email", patch.get("email"),
                  "Employee with this email already exists", exclude_id=exclude_id)
    ensure_unique(Employee, tenant_id, "employee_id", patch.get("employee_id"),
                  "Employee with this employee ID already exists", exclude_id=exclude_id)


def create_employee(tenant_id: str, patch: dict) -> Employee:
    _ensure_unique(tenant_id, patch)
    return create_record(Employee, tenant_id, patch)


def update_employee(employee: Employee, patch: dict) -> Employee:
    _ensure_unique(employee.tenant_id, patch, exclude_id=employee.id)
    return update_record(employee, patch)


def delete_employee(employee: Employee) -> None:
    delete_record(employee)


def employee_stats(tenant_id: str) -> dict:
    base = scoped_query(Employee, tenant_id)
    total, avg_rate, avg_perf, hours = base.with_entities(
        func.count(Employee.id),
        func.avg(Employee.hourly_rate),
        func.avg(Employee.performance),
        func.coalesce(func.sum(Employee.hours_this_week), 0),
    ).one()
    by_department = dict(
        base.with_entities(Employee.department, func.count(Employee.id)).group_by(Employee.department).all()
    )
    by_status = dict(
        base.with_entities(Employee.status, func.count(Employee.id)).group_by(Employee.status).all()
    )
    return {
        "total_employees": total,
        "active_employees": by_status.get("active", 0),
        "by_status": by_status,
        "by_department": by_department,
        "average_hourly_rate": money_to_json(avg_rate) if avg_rate is not None else 0,
        "average_performance": round(float(avg_perf), 1) if avg_perf is not None else 0,
        "total_hours_this_week": float(hours),
    }
