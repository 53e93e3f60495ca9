# Overview: Inventory rows as a mirrored view of Product.stock; upsert, adjust and listing.

"""
Inventory Service

STOCK INVARIANT: Product.stock is the system of record. Inventory.quantity
is kept equal to it for every row of the product. Every write path here
changes the product first and then calls mirror_product_stock().

MULTI-TENANT: product_id / category_id from client input must belong to the
caller's tenant.
"""
from __future__ import annotations

from decimal import Decimal

from ..errors import ValidationError
from ..extensions import db
from ..models import Category, Inventory, Product
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy
from .crud import apply_search, paginate
from .tenant_service import get_scoped_or_404, scoped_query

INVENTORY_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "product_id", "category_id", "product_name", "description",
        "quantity", "sale_price", "cost_price", "reorder_level",
    }),
    required_on_create=frozenset({"product_id", "category_id", "quantity", "sale_price", "cost_price",
                                  "reorder_level"}),
    minimums={"quantity": 0, "sale_price": Decimal("0"), "cost_price": Decimal("0"), "reorder_level": 0},
)


def list_inventory(tenant_id: str, search: str | None = None, category_id: str | None = None,
                   low_stock: bool = False, page: int = 1, limit: int = 50) -> dict:
    query = scoped_query(Inventory, tenant_id)
    if category_id:
        query = query.filter(Inventory.category_id == category_id)
    if low_stock:
        query = query.filter(Inventory.quantity <= Inventory.reorder_level)
    query = apply_search(query, search, [Inventory.product_name, Inventory.description])
    return paginate(query.order_by(Inventory.product_name.asc()), page, limit)


def get_inventory(tenant_id: str, inventory_id: str) -> Inventory:
    return get_scoped_or_404(Inventory, inventory_id, tenant_id, label="Inventory record")


def mirror_product_stock(product: Product) -> None:
    """Copy Product.stock into every inventory row of the product."""
    now = utcnow()
    rows = scoped_query(Inventory, product.tenant_id).filter(Inventory.product_id == product.id).all()
    for row in rows:
        if product.stock > row.quantity:
            row.last_restocked = now
        row.quantity = product.stock
        row.last_updated = now


def sync_from_product(product: Product) -> Inventory:
    """
    Ensure the (product, product.category) row exists and reflects the catalog.

    Called after product create/update; does not commit.
    """
    row = (
        scoped_query(Inventory, product.tenant_id)
        .filter(Inventory.product_id == product.id, Inventory.category_id == product.category_id)
        .first()
    )
    if row is None:
        row = Inventory(
            tenant_id=product.tenant_id,
            product_id=product.id,
            category_id=product.category_id,
            quantity=product.stock,
        )
        db.session.add(row)
    row.product_name = product.name
    row.description = product.description
    row.sale_price = product.price
    row.cost_price = product.cost_price if product.cost_price is not None else Decimal("0")
    row.reorder_level = product.reorder_level
    mirror_product_stock(product)
    row.quantity = product.stock
    return row


def upsert_inventory(tenant_id: str, patch: dict) -> tuple[Inventory, bool]:
    """
    Create or update the row for (product_id, category_id).

    Returns (row, created). quantity becomes the product's stock.
    """
    product = get_scoped_or_404(Product, patch["product_id"], tenant_id, label="Product")
    get_scoped_or_404(Category, patch["category_id"], tenant_id, label="Category")

    row = (
        scoped_query(Inventory, tenant_id)
        .filter(Inventory.product_id == product.id, Inventory.category_id == patch["category_id"])
        .first()
    )
    created = row is None
    if created:
        row = Inventory(tenant_id=tenant_id, product_id=product.id, category_id=patch["category_id"],
                        quantity=product.stock)
        db.session.add(row)

    _apply_row_patch(row, product, patch)
    db.session.commit()
    return row, created


def update_inventory(tenant_id: str, row: Inventory, patch: dict) -> Inventory:
    if "product_id" in patch and patch["product_id"] != row.product_id:
        raise ValidationError("product_id cannot be changed")
    if "category_id" in patch:
        get_scoped_or_404(Category, patch["category_id"], tenant_id, label="Category")
    _apply_row_patch(row, row.product, patch)
    db.session.commit()
    return row


def _apply_row_patch(row: Inventory, product: Product, patch: dict) -> None:
    for key in ("category_id", "product_name", "description", "sale_price", "cost_price", "reorder_level"):
        if key in patch:
            setattr(row, key, patch[key])
    if row.product_name is None:
        row.product_name = product.name
    row.last_updated = utcnow()
    if "quantity" in patch:
        product.stock = patch["quantity"]
        db.session.flush()
        mirror_product_stock(product)
        row.quantity = product.stock


def adjust_inventory(row: Inventory, amount) -> Inventory:
    """
    Apply a signed delta to the product's stock (and therefore to every row).

    Stock may not go below zero.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError("amount must be an integer")
    if amount == 0:
        raise ValidationError("amount must be non-zero")

    product = row.product
    new_stock = product.stock + amount
    if new_stock < 0:
        raise ValidationError(f"Insufficient stock. Available: {product.stock}, adjustment: {amount}")

    product.stock = new_stock
    db.session.flush()
    mirror_product_stock(product)
    db.session.commit()
    return row


def decrement_stock(product: Product, quantity: int) -> None:
    """Sale path; caller has already checked availability. Does not commit."""
    product.stock = product.stock - quantity
    mirror_product_stock(product)


def delete_inventory(row: Inventory) -> None:
    """Removes the view row only; Product.stock is untouched."""
    db.session.delete(row)
    db.session.commit()


def inventory_summary(tenant_id: str) -> dict:
    products = scoped_query(Product, tenant_id).filter(Product.is_active.is_(True)).all()
    total_value = sum((p.price * p.stock for p in products), Decimal("0"))
    total_cost = sum(((p.cost_price or Decimal("0")) * p.stock for p in products), Decimal("0"))
    return {
        "total_products": len(products),
        "total_stock": sum(p.stock for p in products),
        "low_stock_count": sum(1 for p in products if p.is_low_stock),
        "out_of_stock_count": sum(1 for p in products if p.stock <= 0),
        "total_value": float(total_value),
        "total_cost": float(total_cost),
    }
