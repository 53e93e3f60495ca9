# Overview: Tenant-scoped suppliers; product_count is derived from referencing products.

from __future__ import annotations

from sqlalchemy import func

from ..errors import ConflictError
from ..extensions import db
from ..models import Product, Supplier
from ..models.inventory import PAYMENT_TERMS
from ..validation import ModelValidationPolicy
from .crud import apply_search, create_record, delete_record, ensure_unique, paginate, update_record
from .tenant_service import get_scoped_or_404, scoped_query

SUPPLIER_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "name", "contact_person", "email", "phone", "address", "payment_terms", "is_active", "notes",
    }),
    required_on_create=frozenset({"name", "contact_person", "email", "phone"}),
    choices={"payment_terms": PAYMENT_TERMS},
    email_fields=frozenset({"email"}),
)


def product_count(supplier: Supplier) -> int:
    return (
        scoped_query(Product, supplier.tenant_id)
        .filter(Product.supplier_id == supplier.id, Product.is_active.is_(True))
        .count()
    )


def supplier_dict(supplier: Supplier) -> dict:
    return supplier.to_dict(product_count=product_count(supplier))


def list_suppliers(tenant_id: str, search: str | None = None, is_active: bool | None = None,
                   page: int = 1, limit: int = 20) -> dict:
    query = scoped_query(Supplier, tenant_id)
    if is_active is not None:
        query = query.filter(Supplier.is_active.is_(is_active))
    query = apply_search(query, search, [Supplier.name, Supplier.contact_person, Supplier.email])

    counts = dict(
        db.session.query(Product.supplier_id, func.count(Product.id))
        .filter(Product.tenant_id == tenant_id, Product.is_active.is_(True), Product.supplier_id.isnot(None))
        .group_by(Product.supplier_id)
        .all()
    )
    return paginate(
        query.order_by(Supplier.name.asc()), page, limit,
        serialize=lambda s: s.to_dict(product_count=counts.get(s.id, 0)),
    )


def get_supplier(tenant_id: str, supplier_id: str) -> Supplier:
    return get_scoped_or_404(Supplier, supplier_id, tenant_id, label="Supplier")


def create_supplier(tenant_id: str, patch: dict) -> Supplier:
    ensure_unique(Supplier, tenant_id, "email", patch.get("email"), "Supplier with this email already exists")
    return create_record(Supplier, tenant_id, patch)


def update_supplier(supplier: Supplier, patch: dict) -> Supplier:
    if "email" in patch:
        ensure_unique(Supplier, supplier.tenant_id, "email", patch["email"],
                      "Supplier with this email already exists", exclude_id=supplier.id)
    return update_record(supplier, patch)


def delete_supplier(supplier: Supplier) -> None:
    count = product_count(supplier)
    if count:
        raise ConflictError(f"Cannot delete supplier with {count} active product(s)")
    # Retired products keep their history but lose the link
    scoped_query(Product, supplier.tenant_id).filter(Product.supplier_id == supplier.id).update(
        {Product.supplier_id: None}, synchronize_session=False
    )
    delete_record(supplier)
