# Overview: Sale completion and transaction maintenance; totals come from the cart calculator.

"""
Transaction Service

complete_sale() is the server-side twin of Cart.complete(): it rebuilds the
cart from tenant-scoped products, computes subtotal/tax/total with the
tenant's tax rate, snapshots every line, and applies the side effects:

1. Product.stock decremented (Inventory rows mirrored)
2. Customer total_spent / loyalty_points / last_visit updated
3. Tenant capital increased by the amount paid

Everything happens in one database transaction; a failure rolls all of it back.

STATUS: "completed" when amount_paid covers the total, otherwise "due" with
due_amount = total - amount_paid.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from ..cart import Cart, CartError, CartProduct
from ..errors import ValidationError
from ..extensions import db
from ..ids import generate_transaction_id
from ..models import Customer, Product, Tenant, Transaction, TransactionItem, User
from ..models.sales import PAYMENT_METHODS, TRANSACTION_STATUSES
from ..money import ZERO, money_to_json, to_money
from ..validation import ModelValidationPolicy, require_decimal, require_positive_int, validate_payload
from . import inventory_service
from .crud import paginate
from .customer_service import record_purchase
from .tenant_service import enforce_limit, get_scoped_or_404, scoped_query

# Statuses that count as money taken in
SALE_STATUSES = ("completed", "due")

TRANSACTION_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"status", "amount_paid", "payment_method", "notes"}),
    minimums={"amount_paid": Decimal("0")},
    choices={"status": TRANSACTION_STATUSES, "payment_method": PAYMENT_METHODS},
)


def _settle(total: Decimal, amount_paid: Decimal) -> tuple[Decimal, bool]:
    due = to_money(total) - to_money(amount_paid)
    if due <= ZERO:
        return ZERO, True
    return due, False


def complete_sale(tenant: Tenant, cashier: User, payload: dict) -> tuple[Transaction, Decimal]:
    """
    Validate and record a sale. Returns (transaction, change).

    Raises:
        ValidationError: bad items/payment, insufficient stock
        NotFoundError: product or customer outside the tenant
        ConflictError: plan transaction allowance exhausted
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError("Items array is required and must not be empty")

    payment_method = payload.get("payment_method")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError("Valid payment method is required (cash, card, or digital)")

    amount_paid = to_money(require_decimal(payload.get("amount_paid"), "amount_paid"))

    notes = payload.get("notes")
    if notes is not None and (not isinstance(notes, str) or len(notes) > 500):
        raise ValidationError("Notes cannot exceed 500 characters")

    customer = None
    if payload.get("customer_id"):
        customer = get_scoped_or_404(Customer, payload["customer_id"], tenant.id, label="Customer")

    enforce_limit(tenant, "transactions", Transaction)

    cart = Cart(tax_rate=tenant.tax_rate)
    products: dict[str, Product] = {}
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Each item must be an object")
        product_id = item.get("product_id") or item.get("product")
        if not product_id:
            raise ValidationError("Each item needs a product_id")
        quantity = require_positive_int(item.get("quantity"), "quantity")

        product = products.get(product_id)
        if product is None:
            product = get_scoped_or_404(Product, product_id, tenant.id, label="Product")
            if not product.is_active:
                raise ValidationError(f"Product {product.name} is not available for sale")
            products[product_id] = product
        cart.add_item(CartProduct.from_model(product), quantity)

    for line in cart.snapshot.lines:
        product = products[line.product.id]
        if product.stock < line.quantity:
            raise ValidationError(
                f"Insufficient stock for {product.name}. Available: {product.stock}, Requested: {line.quantity}"
            )

    if customer is not None:
        cart.attach_customer(customer.id)

    try:
        sale = cart.complete(payment_method, amount_paid, transaction_id=generate_transaction_id(tenant.id))
    except CartError as e:
        raise ValidationError(str(e))

    due_amount, is_paid = _settle(sale.total, sale.amount_paid)
    transaction = Transaction(
        tenant_id=tenant.id,
        transaction_id=sale.transaction_id,
        customer_id=sale.customer_id,
        cashier_id=cashier.id,
        subtotal=sale.subtotal,
        tax=sale.tax,
        total=sale.total,
        payment_method=sale.payment_method,
        amount_paid=sale.amount_paid,
        due_amount=due_amount,
        is_paid=is_paid,
        status="completed" if is_paid else "due",
        notes=notes,
    )
    for position, line in enumerate(sale.lines):
        transaction.items.append(TransactionItem(
            position=position,
            product_id=line.product_id,
            product_name=line.name,
            product_price=line.price,
            product_sku=line.sku,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.total_price,
        ))
    db.session.add(transaction)

    for line in sale.lines:
        inventory_service.decrement_stock(products[line.product_id], line.quantity)

    if customer is not None:
        record_purchase(customer, sale.total)

    tenant.capital = to_money(tenant.capital) + sale.amount_paid

    db.session.commit()
    current_app.logger.info(
        "Sale %s recorded for tenant %s: total=%s paid=%s status=%s",
        transaction.transaction_id, tenant.id, sale.total, sale.amount_paid, transaction.status,
    )
    return transaction, sale.change


def list_transactions(
    tenant_id: str,
    page: int = 1,
    limit: int = 20,
    start: datetime | None = None,
    end: datetime | None = None,
    cashier_id: str | None = None,
    customer_id: str | None = None,
    status: str | None = None,
    payment_method: str | None = None,
) -> dict:
    query = scoped_query(Transaction, tenant_id)
    if start:
        query = query.filter(Transaction.created_at >= start)
    if end:
        query = query.filter(Transaction.created_at <= end)
    if cashier_id:
        query = query.filter(Transaction.cashier_id == cashier_id)
    if customer_id:
        query = query.filter(Transaction.customer_id == customer_id)
    if status:
        if status not in TRANSACTION_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(TRANSACTION_STATUSES)}")
        query = query.filter(Transaction.status == status)
    if payment_method:
        query = query.filter(Transaction.payment_method == payment_method)
    return paginate(query.order_by(Transaction.created_at.desc()), page, limit)


def get_transaction(tenant_id: str, transaction_pk: str) -> Transaction:
    return get_scoped_or_404(Transaction, transaction_pk, tenant_id, label="Transaction")


def update_transaction(tenant: Tenant, transaction: Transaction, payload: dict) -> Transaction:
    """
    Limited edit: status, amount_paid, payment_method, notes.

    When amount_paid changes, due_amount and is_paid are recomputed, a
    due/completed status follows the payment unless a status was supplied,
    and the tenant capital moves by the difference.
    """
    patch = validate_payload(model=Transaction, payload=payload, policy=TRANSACTION_UPDATE_POLICY, partial=True)

    if "amount_paid" in patch and patch["amount_paid"] is not None:
        new_paid = to_money(patch["amount_paid"])
        delta = new_paid - to_money(transaction.amount_paid)
        transaction.amount_paid = new_paid
        transaction.due_amount, transaction.is_paid = _settle(transaction.total, new_paid)
        if "status" not in patch and transaction.status in SALE_STATUSES:
            transaction.status = "completed" if transaction.is_paid else "due"
        tenant.capital = to_money(tenant.capital) + delta

    for key in ("status", "payment_method", "notes"):
        if key in patch:
            setattr(transaction, key, patch[key])

    db.session.commit()
    return transaction


def transaction_stats(tenant_id: str, start: datetime | None = None, end: datetime | None = None) -> dict:
    query = scoped_query(Transaction, tenant_id)
    if start:
        query = query.filter(Transaction.created_at >= start)
    if end:
        query = query.filter(Transaction.created_at <= end)

    sales = query.filter(Transaction.status.in_(SALE_STATUSES))
    count, revenue, tax_total, paid, due = sales.with_entities(
        func.count(Transaction.id),
        func.coalesce(func.sum(Transaction.total), 0),
        func.coalesce(func.sum(Transaction.tax), 0),
        func.coalesce(func.sum(Transaction.amount_paid), 0),
        func.coalesce(func.sum(Transaction.due_amount), 0),
    ).one()

    items_sold = (
        sales.join(TransactionItem, TransactionItem.transaction_pk == Transaction.id)
        .with_entities(func.coalesce(func.sum(TransactionItem.quantity), 0))
        .scalar()
    )

    by_payment = {
        method: {"count": n, "total": money_to_json(amount)}
        for method, n, amount in sales.with_entities(
            Transaction.payment_method, func.count(Transaction.id), func.coalesce(func.sum(Transaction.total), 0)
        ).group_by(Transaction.payment_method).all()
    }
    by_status = dict(
        query.with_entities(Transaction.status, func.count(Transaction.id)).group_by(Transaction.status).all()
    )

    return {
        "total_transactions": count,
        "total_revenue": money_to_json(revenue),
        "total_tax": money_to_json(tax_total),
        "total_paid": money_to_json(paid),
        "total_due": money_to_json(due),
        "average_transaction": money_to_json(to_money(revenue) / count) if count else 0,
        "total_items_sold": int(items_sold or 0),
        "by_payment_method": by_payment,
        "by_status": by_status,
    }
