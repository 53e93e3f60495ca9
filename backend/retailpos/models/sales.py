from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..ids import new_object_id
from ..money import money_to_json
from ..time_utils import to_utc_z, utcnow

PAYMENT_METHODS = ("cash", "card", "digital")
TRANSACTION_STATUSES = ("completed", "refunded", "cancelled", "due")


class Transaction(db.Model):
    """
    A completed (or partially paid) sale.

    MULTI-TENANT: transaction_id is unique within a tenant.

    Line items embed a snapshot of the product (name, price, SKU) taken at
    sale time; later catalog edits never change historical sales.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "transaction_id", name="uq_transactions_tenant_txid"),
        db.Index("ix_transactions_tenant_created", "tenant_id", "created_at"),
        db.Index("ix_transactions_tenant_status", "tenant_id", "status"),
        db.Index("ix_transactions_tenant_cashier", "tenant_id", "cashier_id"),
        db.Index("ix_transactions_tenant_customer", "tenant_id", "customer_id"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, index=True)

    # Human-facing receipt number, see transaction_service.generate_transaction_id
    transaction_id = db.Column(db.String(40), nullable=False)

    customer_id = db.Column(db.String(24), db.ForeignKey("customers.id"), nullable=True)
    cashier_id = db.Column(db.String(24), db.ForeignKey("users.id"), nullable=False)

    subtotal = db.Column(db.Numeric(14, 2), nullable=False, default=Decimal("0"))
    tax = db.Column(db.Numeric(14, 2), nullable=False, default=Decimal("0"))
    total = db.Column(db.Numeric(14, 2), nullable=False)

    payment_method = db.Column(db.String(16), nullable=False)
    amount_paid = db.Column(db.Numeric(14, 2), nullable=False)
    due_amount = db.Column(db.Numeric(14, 2), nullable=False, default=Decimal("0"))
    is_paid = db.Column(db.Boolean, nullable=False, default=False)

    status = db.Column(db.String(16), nullable=False, default="completed")
    notes = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    items = db.relationship(
        "TransactionItem",
        backref="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionItem.position",
        lazy=True,
    )
    customer = db.relationship("Customer")
    cashier = db.relationship("User")

    def __repr__(self) -> str:
        return f"<Transaction {self.transaction_id} total={self.total} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "transaction_id": self.transaction_id,
            "items": [item.to_dict() for item in self.items],
            "customer_id": self.customer_id,
            "customer": {"id": self.customer.id, "name": self.customer.name, "email": self.customer.email}
            if self.customer else None,
            "cashier_id": self.cashier_id,
            "cashier": {"id": self.cashier.id, "name": self.cashier.name, "employee_id": self.cashier.employee_id}
            if self.cashier else None,
            "subtotal": money_to_json(self.subtotal),
            "tax": money_to_json(self.tax),
            "total": money_to_json(self.total),
            "payment_method": self.payment_method,
            "amount_paid": money_to_json(self.amount_paid),
            "due_amount": money_to_json(self.due_amount),
            "is_paid": self.is_paid,
            "status": self.status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class TransactionItem(db.Model):
    """One sold line with its product snapshot. total_price = quantity * unit_price."""
    __tablename__ = "transaction_items"
    __table_args__ = (
        db.Index("ix_transaction_items_product", "product_id"),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    transaction_pk = db.Column(db.String(24), db.ForeignKey("transactions.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    product_id = db.Column(db.String(24), db.ForeignKey("products.id"), nullable=False)

    # Snapshot at sale time
    product_name = db.Column(db.String(100), nullable=False)
    product_price = db.Column(db.Numeric(12, 2), nullable=False)
    product_sku = db.Column(db.String(64), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    total_price = db.Column(db.Numeric(14, 2), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_snapshot": {
                "name": self.product_name,
                "price": money_to_json(self.product_price),
                "sku": self.product_sku,
            },
            "quantity": self.quantity,
            "unit_price": money_to_json(self.unit_price),
            "total_price": money_to_json(self.total_price),
        }
