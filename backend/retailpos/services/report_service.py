# Overview: Service-layer operations for reporting; tenant-scoped aggregates over sales, catalog and people.

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func

from ..errors import ValidationError
from ..models import Category, Customer, Product, Transaction, TransactionItem, User
from ..money import money_to_json, to_money
from ..time_utils import days_back, start_of_day, to_utc_z, utcnow
from .inventory_service import inventory_summary
from .tenant_service import scoped_query
from .transaction_service import SALE_STATUSES, transaction_stats


def _sales_query(tenant_id: str, start: datetime | None = None, end: datetime | None = None):
    query = scoped_query(Transaction, tenant_id).filter(Transaction.status.in_(SALE_STATUSES))
    if start:
        query = query.filter(Transaction.created_at >= start)
    if end:
        query = query.filter(Transaction.created_at <= end)
    return query


def overview(tenant_id: str, start: datetime | None = None, end: datetime | None = None) -> dict:
    sales = transaction_stats(tenant_id, start, end)

    products = inventory_summary(tenant_id)

    customers = scoped_query(Customer, tenant_id).filter(Customer.is_active.is_(True))
    customer_count, loyalty = customers.with_entities(
        func.count(Customer.id), func.coalesce(func.sum(Customer.loyalty_points), 0)
    ).one()

    by_role = dict(
        scoped_query(User, tenant_id)
        .filter(User.is_active.is_(True))
        .with_entities(User.role, func.count(User.id))
        .group_by(User.role)
        .all()
    )

    return {
        "range": {"start": to_utc_z(start), "end": to_utc_z(end)},
        "sales": {
            "total_transactions": sales["total_transactions"],
            "total_revenue": sales["total_revenue"],
            "total_tax": sales["total_tax"],
            "average_transaction": sales["average_transaction"],
            "total_items_sold": sales["total_items_sold"],
        },
        "products": products,
        "customers": {
            "total_customers": customer_count,
            "total_loyalty_points": int(loyalty),
            "average_loyalty_points": round(int(loyalty) / customer_count, 2) if customer_count else 0,
        },
        "users": {
            "total_users": sum(by_role.values()),
            "admin_count": by_role.get("admin", 0),
            "manager_count": by_role.get("manager", 0),
            "cashier_count": by_role.get("cashier", 0),
        },
    }


def daily_sales(tenant_id: str, days: int = 7, now: datetime | None = None) -> list[dict]:
    """
    One row per calendar day (UTC) for the last `days` days, oldest first.
    Days without sales are present with zeros.
    """
    if isinstance(days, bool) or not isinstance(days, int) or not 1 <= days <= 90:
        raise ValidationError("Days must be between 1 and 90")

    calendar = days_back(now or utcnow(), days)

    buckets: OrderedDict[str, dict] = OrderedDict()
    for day in calendar:
        key = day.isoformat()
        buckets[key] = {"date": key, "transactions": 0, "revenue": Decimal("0"), "items_sold": 0}

    for txn in _sales_query(tenant_id, start=start_of_day(calendar[0])).all():
        bucket = buckets.get(txn.created_at.date().isoformat())
        if bucket is None:
            continue
        bucket["transactions"] += 1
        bucket["revenue"] += to_money(txn.total)
        bucket["items_sold"] += sum(item.quantity for item in txn.items)

    return [
        {**row, "revenue": money_to_json(row["revenue"])}
        for row in buckets.values()
    ]


def top_products(tenant_id: str, limit: int = 10, start: datetime | None = None,
                 end: datetime | None = None) -> list[dict]:
    """Best sellers by quantity, using the sale-time snapshot name/SKU."""
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= 50:
        raise ValidationError("Limit must be between 1 and 50")

    sales = _sales_query(tenant_id, start, end)
    rows = (
        sales.join(TransactionItem, TransactionItem.transaction_pk == Transaction.id)
        .with_entities(
            TransactionItem.product_id,
            func.max(TransactionItem.product_name),
            func.max(TransactionItem.product_sku),
            func.sum(TransactionItem.quantity).label("quantity"),
            func.sum(TransactionItem.total_price),
            func.count(func.distinct(Transaction.id)),
        )
        .group_by(TransactionItem.product_id)
        .order_by(func.sum(TransactionItem.quantity).desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "product_id": product_id,
            "name": name,
            "sku": sku,
            "quantity_sold": int(quantity or 0),
            "revenue": money_to_json(revenue),
            "transactions": txn_count,
        }
        for product_id, name, sku, quantity, revenue, txn_count in rows
    ]


def inventory_report(tenant_id: str) -> dict:
    products = (
        scoped_query(Product, tenant_id)
        .filter(Product.is_active.is_(True))
        .order_by(Product.stock.asc())
        .all()
    )
    categories = {c.id: c for c in scoped_query(Category, tenant_id).all()}

    breakdown: dict[str, dict] = {}
    for product in products:
        category = categories.get(product.category_id)
        row = breakdown.setdefault(product.category_id, {
            "category_id": product.category_id,
            "category": category.name if category else None,
            "products": 0,
            "stock": 0,
            "value": Decimal("0"),
        })
        row["products"] += 1
        row["stock"] += product.stock
        row["value"] += to_money(product.price) * product.stock

    return {
        "stats": inventory_summary(tenant_id),
        "low_stock": [
            {
                "id": p.id,
                "name": p.name,
                "sku": p.sku,
                "stock": p.stock,
                "reorder_level": p.reorder_level,
            }
            for p in products if p.is_low_stock
        ],
        "categories": [
            {**row, "value": money_to_json(row["value"])}
            for row in sorted(breakdown.values(), key=lambda r: r["category"] or "")
        ],
    }
