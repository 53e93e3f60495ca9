# backend/retailpos/services/products_service.py
"""
Products Service with Multi-Tenant Support

MULTI-TENANT: All product operations are tenant-scoped.
- category_id / supplier_id from client input must belong to the tenant
- SKUs are unique within a tenant (stored upper case)

STOCK: Product.stock is the system of record. Every stock or catalog change
is mirrored into the product's Inventory rows (inventory_service).
"""
from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..errors import NotFoundError
from ..extensions import db
from ..models import Category, Product, Supplier, Tenant
from ..validation import ModelValidationPolicy
from . import inventory_service, storage_service
from .crud import apply_patch, apply_search, ensure_unique, paginate
from .tenant_service import enforce_limit, get_scoped_or_404, scoped_query

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "name", "description", "price", "cost_price", "category_id", "supplier_id",
        "sku", "barcode", "stock", "reorder_level", "image", "tags", "is_active",
    }),
    required_on_create=frozenset({"name", "price", "category_id", "sku"}),
    minimums={"price": Decimal("0"), "cost_price": Decimal("0"), "stock": 0, "reorder_level": 0},
    upper_fields=frozenset({"sku"}),
)


def list_products(
    tenant_id: str,
    search: str | None = None,
    category_id: str | None = None,
    in_stock: bool | None = None,
    include_inactive: bool = False,
    page: int = 1,
    limit: int = 20,
) -> dict:
    """
    Tenant-scoped product listing.

    Filters: free-text search over name/description/SKU/barcode, category,
    in_stock (stock > 0). Inactive (soft-deleted) products are hidden unless
    include_inactive is set.
    """
    query = scoped_query(Product, tenant_id)
    if not include_inactive:
        query = query.filter(Product.is_active.is_(True))
    if category_id:
        query = query.filter(Product.category_id == category_id)
    if in_stock is True:
        query = query.filter(Product.stock > 0)
    elif in_stock is False:
        query = query.filter(Product.stock <= 0)
    query = apply_search(query, search, [Product.name, Product.description, Product.sku, Product.barcode])
    return paginate(query.order_by(Product.name.asc()), page, limit)


def get_product(tenant_id: str, product_id: str) -> Product:
    return get_scoped_or_404(Product, product_id, tenant_id, label="Product")


def find_by_code(tenant_id: str, code: str) -> Product:
    """Scanner lookup: barcode first, then SKU (case-insensitive). Active products only."""
    code = (code or "").strip()
    query = scoped_query(Product, tenant_id).filter(Product.is_active.is_(True))
    product = query.filter(Product.barcode == code).first()
    if product is None:
        product = query.filter(Product.sku == code.upper()).first()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def _check_references(tenant_id: str, patch: dict) -> None:
    if patch.get("category_id"):
        get_scoped_or_404(Category, patch["category_id"], tenant_id, label="Category")
    if patch.get("supplier_id"):
        get_scoped_or_404(Supplier, patch["supplier_id"], tenant_id, label="Supplier")


def create_product(tenant: Tenant, patch: dict) -> Product:
    """
    Create a product in the tenant.

    The plan's product allowance is enforced first (ConflictError).
    An Inventory row for (product, category) is created alongside.
    """
    enforce_limit(tenant, "products", Product)
    _check_references(tenant.id, patch)
    ensure_unique(Product, tenant.id, "sku", patch["sku"], "Product with this SKU already exists")

    values = dict(patch)
    values.setdefault("image", current_app.config.get("DEFAULT_PRODUCT_IMAGE"))
    values.setdefault("tags", [])
    product = Product(tenant_id=tenant.id, **values)
    db.session.add(product)
    db.session.flush()

    inventory_service.sync_from_product(product)
    db.session.commit()
    return product


def update_product(tenant_id: str, product: Product, patch: dict) -> Product:
    _check_references(tenant_id, patch)
    if "sku" in patch:
        ensure_unique(Product, tenant_id, "sku", patch["sku"], "Product with this SKU already exists",
                      exclude_id=product.id)

    apply_patch(product, patch)
    db.session.flush()
    inventory_service.sync_from_product(product)
    db.session.commit()
    return product


def delete_product(product: Product) -> Product:
    """Soft delete: the product disappears from listings but sale snapshots keep their reference."""
    product.is_active = False
    db.session.commit()
    return product


def set_product_image(product: Product, file) -> Product:
    stored = storage_service.upload_image(file)
    old_public_id = product.image_public_id
    product.image = stored.url
    product.image_public_id = stored.public_id
    db.session.commit()
    if old_public_id:
        storage_service.delete_image(old_public_id)
    return product


def low_stock_products(tenant_id: str) -> list[Product]:
    return (
        scoped_query(Product, tenant_id)
        .filter(Product.is_active.is_(True), Product.stock <= Product.reorder_level)
        .order_by(Product.stock.asc())
        .all()
    )
