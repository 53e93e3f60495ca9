# Overview: Customers and B2B clients: tenant-scoped CRUD, loyalty credits and summary stats.

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func

from ..extensions import db
from ..models import Client, Customer, Transaction
from ..models.customers import CLIENT_STATUSES
from ..money import money_to_json, to_money
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, ValidationError, require_decimal
from .crud import apply_search, create_record, delete_record, ensure_unique, paginate, update_record
from .tenant_service import get_scoped_or_404, scoped_query

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "email", "phone", "address", "is_active", "notes"}),
    required_on_create=frozenset({"name", "email"}),
    email_fields=frozenset({"email"}),
)

CLIENT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "name", "email", "phone", "address", "total_revenue", "active_invoices", "projects",
        "last_transaction", "status", "notes", "avatar",
    }),
    required_on_create=frozenset({"name", "email"}),
    minimums={"total_revenue": Decimal("0"), "active_invoices": 0, "projects": 0},
    choices={"status": CLIENT_STATUSES},
    email_fields=frozenset({"email"}),
)


# -- CUSTOMERS --

def list_customers(tenant_id: str, search: str | None = None, is_active: bool | None = None,
                   page: int = 1, limit: int = 20) -> dict:
    query = scoped_query(Customer, tenant_id)
    if is_active is not None:
        query = query.filter(Customer.is_active.is_(is_active))
    query = apply_search(query, search, [Customer.name, Customer.email, Customer.phone])
    return paginate(query.order_by(Customer.created_at.desc()), page, limit)


def get_customer(tenant_id: str, customer_id: str) -> Customer:
    return get_scoped_or_404(Customer, customer_id, tenant_id, label="Customer")


def create_customer(tenant_id: str, patch: dict) -> Customer:
    ensure_unique(Customer, tenant_id, "email", patch["email"], "Customer with this email already exists")
    return create_record(Customer, tenant_id, patch)


def update_customer(customer: Customer, patch: dict) -> Customer:
    if "email" in patch:
        ensure_unique(Customer, customer.tenant_id, "email", patch["email"],
                      "Customer with this email already exists", exclude_id=customer.id)
    return update_record(customer, patch)


def delete_customer(customer: Customer) -> None:
    """Sales keep their totals; they just lose the customer link."""
    scoped_query(Transaction, customer.tenant_id).filter(Transaction.customer_id == customer.id).update(
        {Transaction.customer_id: None}, synchronize_session=False
    )
    delete_record(customer)


def add_loyalty(customer: Customer, points, total_spent=None) -> Customer:
    """Credit loyalty points (and optionally spend) and stamp the visit."""
    if isinstance(points, bool) or not isinstance(points, int) or points < 0:
        raise ValidationError("Points must be a non-negative integer")
    customer.loyalty_points = customer.loyalty_points + points
    if total_spent is not None:
        spent = require_decimal(total_spent, "total_spent")
        customer.total_spent = to_money(customer.total_spent) + to_money(spent)
    customer.last_visit = utcnow()
    db.session.commit()
    return customer


def record_purchase(customer: Customer, total) -> None:
    """
    Sale side effects on the customer: spend, one loyalty point per whole
    currency unit of the total, and last visit. Does not commit.
    """
    amount = to_money(total)
    customer.total_spent = to_money(customer.total_spent) + amount
    customer.loyalty_points = customer.loyalty_points + int(amount)
    customer.last_visit = utcnow()


def customer_stats(tenant_id: str) -> dict:
    base = scoped_query(Customer, tenant_id)
    total, loyalty, spent = base.with_entities(
        func.count(Customer.id),
        func.coalesce(func.sum(Customer.loyalty_points), 0),
        func.coalesce(func.sum(Customer.total_spent), 0),
    ).one()
    active = base.filter(Customer.is_active.is_(True)).count()
    return {
        "total_customers": total,
        "active_customers": active,
        "total_loyalty_points": int(loyalty),
        "average_loyalty_points": round(int(loyalty) / total, 2) if total else 0,
        "total_spent": money_to_json(spent),
    }


# -- CLIENTS --

def initials(name: str) -> str:
    parts = [p for p in (name or "").split() if p]
    return "".join(p[0] for p in parts[:2]).upper() or "?"


def list_clients(tenant_id: str, search: str | None = None, status: str | None = None,
                 page: int = 1, limit: int = 20) -> dict:
    query = scoped_query(Client, tenant_id)
    if status:
        if status not in CLIENT_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(CLIENT_STATUSES)}")
        query = query.filter(Client.status == status)
    query = apply_search(query, search, [Client.name, Client.email, Client.phone])
    return paginate(query.order_by(Client.created_at.desc()), page, limit)


def get_client(tenant_id: str, client_id: str) -> Client:
    return get_scoped_or_404(Client, client_id, tenant_id, label="Client")


def create_client(tenant_id: str, patch: dict) -> Client:
    ensure_unique(Client, tenant_id, "email", patch["email"], "Client with this email already exists")
    values = dict(patch)
    if not values.get("avatar"):
        values["avatar"] = initials(values["name"])
    return create_record(Client, tenant_id, values)


def update_client(client: Client, patch: dict) -> Client:
    if "email" in patch:
        ensure_unique(Client, client.tenant_id, "email", patch["email"],
                      "Client with this email already exists", exclude_id=client.id)
    if "name" in patch and "avatar" not in patch:
        patch = {**patch, "avatar": initials(patch["name"])}
    return update_record(client, patch)


def delete_client(client: Client) -> None:
    delete_record(client)


def client_stats(tenant_id: str) -> dict:
    base = scoped_query(Client, tenant_id)
    total, revenue, invoices, projects = base.with_entities(
        func.count(Client.id),
        func.coalesce(func.sum(Client.total_revenue), 0),
        func.coalesce(func.sum(Client.active_invoices), 0),
        func.coalesce(func.sum(Client.projects), 0),
    ).one()
    return {
        "total_clients": total,
        "active_clients": base.filter(Client.status == "active").count(),
        "total_revenue": money_to_json(revenue),
        "total_active_invoices": int(invoices),
        "total_projects": int(projects),
    }
