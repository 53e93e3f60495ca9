from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..ids import new_object_id
from ..money import money_to_json
from ..time_utils import to_utc_z, utcnow

PAYMENT_TERMS = ("Net 15", "Net 30", "Net 45", "Net 60", "COD")


class Category(db.Model):
    """
    Product grouping.

    MULTI-TENANT: Category names are unique within a tenant.
    """
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "name", name="uq_categories_tenant_name"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, index=True)

    name = db.Column(db.String(50), nullable=False)
    description = db.Column(db.String(200), nullable=True)
    color = db.Column(db.String(16), nullable=False, default="#3B82F6")
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self, product_count: int | None = None) -> dict:
        data = {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if product_count is not None:
            data["product_count"] = product_count
        return data


class Supplier(db.Model):
    """
    Vendor master data.

    MULTI-TENANT: Supplier emails are unique within a tenant.
    product_count is derived (products referencing the supplier), never stored.
    """
    __tablename__ = "suppliers"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "email", name="uq_suppliers_tenant_email"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    contact_person = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    address = db.Column(db.JSON, nullable=True)
    payment_terms = db.Column(db.String(16), nullable=False, default="Net 30")
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    notes = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self, product_count: int | None = None) -> dict:
        data = {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "contact_person": self.contact_person,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "payment_terms": self.payment_terms,
            "is_active": self.is_active,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if product_count is not None:
            data["product_count"] = product_count
        return data


class Product(db.Model):
    """
    Product master data.

    MULTI-TENANT: SKUs are unique within a tenant (stored upper case).

    STOCK: Product.stock is the system of record for on-hand quantity.
    Inventory rows mirror it; see services/inventory_service.py.
    Deletion is soft (is_active=False) so transaction snapshots keep resolving.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "sku", name="uq_products_tenant_sku"),
        db.Index("ix_products_tenant_name", "tenant_id", "name"),
        db.Index("ix_products_tenant_active", "tenant_id", "is_active"),
        db.Index("ix_products_tenant_barcode", "tenant_id", "barcode"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)

    price = db.Column(db.Numeric(12, 2), nullable=False)
    cost_price = db.Column(db.Numeric(12, 2), nullable=True)

    category_id = db.Column(db.String(24), db.ForeignKey("categories.id"), nullable=False, index=True)
    supplier_id = db.Column(db.String(24), db.ForeignKey("suppliers.id"), nullable=True, index=True)

    sku = db.Column(db.String(64), nullable=False)
    barcode = db.Column(db.String(64), nullable=True)

    stock = db.Column(db.Integer, nullable=False, default=0)
    reorder_level = db.Column(db.Integer, nullable=False, default=10)

    image = db.Column(db.String(500), nullable=True)
    image_public_id = db.Column(db.String(255), nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    supplier = db.relationship("Supplier", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} tenant_id={self.tenant_id}>"

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.reorder_level

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "price": money_to_json(self.price),
            "cost_price": money_to_json(self.cost_price),
            "category_id": self.category_id,
            "category": {"id": self.category.id, "name": self.category.name, "color": self.category.color}
            if self.category else None,
            "supplier_id": self.supplier_id,
            "supplier": {"id": self.supplier.id, "name": self.supplier.name} if self.supplier else None,
            "sku": self.sku,
            "barcode": self.barcode,
            "stock": self.stock,
            "reorder_level": self.reorder_level,
            "is_low_stock": self.is_low_stock,
            "image": self.image,
            "tags": list(self.tags or []),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Inventory(db.Model):
    """
    Per (product, category) stock view.

    MULTI-TENANT: unique per (tenant_id, product_id, category_id).
    quantity mirrors Product.stock.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "product_id", "category_id", name="uq_inventory_product_category"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, index=True)

    product_id = db.Column(db.String(24), db.ForeignKey("products.id"), nullable=False, index=True)
    category_id = db.Column(db.String(24), db.ForeignKey("categories.id"), nullable=False, index=True)
    product_name = db.Column(db.String(100), nullable=True)
    description = db.Column(db.String(500), nullable=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    sale_price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0"))
    cost_price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0"))
    reorder_level = db.Column(db.Integer, nullable=False, default=10)

    last_restocked = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_updated = db.Column(db.DateTime, nullable=False, default=utcnow)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    product = db.relationship("Product", backref=db.backref("inventory_rows", lazy=True))
    category = db.relationship("Category")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "product_id": self.product_id,
            "product": {"id": self.product.id, "name": self.product.name, "sku": self.product.sku}
            if self.product else None,
            "category_id": self.category_id,
            "category": {"id": self.category.id, "name": self.category.name} if self.category else None,
            "product_name": self.product_name,
            "description": self.description,
            "quantity": self.quantity,
            "sale_price": money_to_json(self.sale_price),
            "cost_price": money_to_json(self.cost_price),
            "reorder_level": self.reorder_level,
            "is_low_stock": self.quantity <= self.reorder_level,
            "last_restocked": to_utc_z(self.last_restocked),
            "last_updated": to_utc_z(self.last_updated),
            "created_at": to_utc_z(self.created_at),
        }
