# Overview: Tenant-scoped product categories with derived product counts.

from __future__ import annotations

from sqlalchemy import func

from ..errors import ConflictError
from ..extensions import db
from ..models import Category, Product
from ..validation import ModelValidationPolicy
from .crud import apply_search, create_record, delete_record, ensure_unique, update_record
from .tenant_service import get_scoped_or_404, scoped_query

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "description", "color", "is_active"}),
    required_on_create=frozenset({"name"}),
)


def _product_counts(tenant_id: str) -> dict[str, int]:
    rows = (
        db.session.query(Product.category_id, func.count(Product.id))
        .filter(Product.tenant_id == tenant_id, Product.is_active.is_(True))
        .group_by(Product.category_id)
        .all()
    )
    return {category_id: count for category_id, count in rows}


def list_categories(tenant_id: str, search: str | None = None, include_inactive: bool = False) -> list[dict]:
    query = scoped_query(Category, tenant_id)
    if not include_inactive:
        query = query.filter(Category.is_active.is_(True))
    query = apply_search(query, search, [Category.name, Category.description])
    counts = _product_counts(tenant_id)
    return [c.to_dict(product_count=counts.get(c.id, 0)) for c in query.order_by(Category.name.asc()).all()]


def get_category(tenant_id: str, category_id: str) -> Category:
    return get_scoped_or_404(Category, category_id, tenant_id, label="Category")


def category_dict(category: Category) -> dict:
    return category.to_dict(product_count=_product_counts(category.tenant_id).get(category.id, 0))


def create_category(tenant_id: str, patch: dict) -> Category:
    ensure_unique(Category, tenant_id, "name", patch["name"], "Category with this name already exists")
    return create_record(Category, tenant_id, patch)


def update_category(category: Category, patch: dict) -> Category:
    if "name" in patch:
        ensure_unique(Category, category.tenant_id, "name", patch["name"],
                      "Category with this name already exists", exclude_id=category.id)
    return update_record(category, patch)


def delete_category(category: Category) -> None:
    in_use = scoped_query(Product, category.tenant_id).filter(Product.category_id == category.id).count()
    if in_use:
        raise ConflictError(f"Cannot delete category with {in_use} product(s). Move or delete them first.")
    delete_record(category)
