# Overview: Pytest coverage for reporting aggregates (overview, daily sales, best sellers, inventory).

from datetime import timedelta

import pytest

from retailpos.errors import ValidationError
from retailpos.models import Transaction
from retailpos.services import products_service, report_service
from retailpos.time_utils import utcnow


@pytest.fixture
def tea(tenant_a, category_a):
    return products_service.create_product(tenant_a, {
        "name": "Green Tea",
        "price": 4,
        "category_id": category_a.id,
        "sku": "GT-001",
        "stock": 3,
        "reorder_level": 5,
    })


def _sell(client, headers, *lines, paid=100, **extra):
    payload = {
        "items": [{"product_id": p.id, "quantity": q} for p, q in lines],
        "payment_method": "cash",
        "amount_paid": paid,
    }
    payload.update(extra)
    resp = client.post("/api/transactions", json=payload, headers=headers)
    assert resp.status_code == 201
    return resp.json["data"]


class TestOverview:

    def test_counts_sales_catalog_and_people(self, client, manager_headers, cashier_headers, product_a, tea,
                                             customer_a):
        _sell(client, cashier_headers, (product_a, 2), customer_id=customer_a.id)
        refunded = _sell(client, cashier_headers, (tea, 1))
        client.put(f"/api/transactions/{refunded['id']}", json={"status": "refunded"}, headers=manager_headers)

        data = client.get("/api/reports/overview", headers=manager_headers).json["data"]
        assert data["range"] == {"start": None, "end": None}
        assert data["sales"]["total_transactions"] == 1
        assert data["sales"]["total_revenue"] == 21.6
        assert data["sales"]["total_items_sold"] == 2
        assert data["products"]["total_products"] == 2
        assert data["products"]["low_stock_count"] == 1
        assert data["customers"]["total_customers"] == 1
        assert data["customers"]["total_loyalty_points"] == 21
        assert data["users"] == {"total_users": 2, "admin_count": 0, "manager_count": 1, "cashier_count": 1}

    def test_cashier_forbidden(self, client, cashier_headers):
        assert client.get("/api/reports/overview", headers=cashier_headers).status_code == 403

    def test_other_store_sales_excluded(self, client, manager_headers, cashier_headers, admin_b_headers,
                                        product_a, product_b):
        _sell(client, cashier_headers, (product_a, 1))
        _sell(client, admin_b_headers, (product_b, 5))
        data = client.get("/api/reports/overview", headers=manager_headers).json["data"]
        assert data["sales"]["total_transactions"] == 1


class TestDailySales:

    def test_buckets_by_day(self, client, db_session, tenant_a, manager_headers, cashier_headers, product_a):
        old = _sell(client, cashier_headers, (product_a, 1))
        _sell(client, cashier_headers, (product_a, 3))

        now = utcnow()
        db_session.get(Transaction, old["id"]).created_at = now - timedelta(days=2)
        db_session.commit()

        rows = report_service.daily_sales(tenant_a.id, days=3, now=now)
        assert [r["date"] for r in rows] == [
            (now - timedelta(days=2)).date().isoformat(),
            (now - timedelta(days=1)).date().isoformat(),
            now.date().isoformat(),
        ]
        assert [r["transactions"] for r in rows] == [1, 0, 1]
        assert [r["items_sold"] for r in rows] == [1, 0, 3]
        assert rows[0]["revenue"] == 10.8
        assert rows[1]["revenue"] == 0

    def test_endpoint_default_and_bounds(self, client, manager_headers):
        resp = client.get("/api/reports/daily-sales", headers=manager_headers)
        assert len(resp.json["data"]) == 7

        for bad in ("0", "91", "abc"):
            assert client.get(f"/api/reports/daily-sales?days={bad}", headers=manager_headers).status_code == 400

    def test_days_must_be_int(self, tenant_a):
        with pytest.raises(ValidationError):
            report_service.daily_sales(tenant_a.id, days=True)


class TestTopProducts:

    def test_ordered_by_quantity_with_snapshot_names(self, client, manager_headers, admin_headers,
                                                     cashier_headers, product_a, tea):
        _sell(client, cashier_headers, (product_a, 1), (tea, 2))
        _sell(client, cashier_headers, (tea, 1))
        client.put(f"/api/products/{tea.id}", json={"name": "Renamed Tea"}, headers=admin_headers)

        resp = client.get("/api/reports/top-products?limit=5", headers=manager_headers).json
        assert resp["count"] == 2
        first, second = resp["data"]
        assert first["product_id"] == tea.id
        assert first["name"] == "Green Tea"
        assert first["quantity_sold"] == 3
        assert first["revenue"] == 12.0
        assert first["transactions"] == 2
        assert second["product_id"] == product_a.id

    def test_limit_bounds(self, client, manager_headers):
        assert client.get("/api/reports/top-products?limit=51", headers=manager_headers).status_code == 400


class TestInventoryReport:

    def test_low_stock_and_category_breakdown(self, client, manager_headers, product_a, tea):
        data = client.get("/api/reports/inventory", headers=manager_headers).json["data"]
        assert data["stats"]["total_stock"] == 23
        assert [p["sku"] for p in data["low_stock"]] == ["GT-001"]
        assert data["categories"] == [{
            "category_id": product_a.category_id,
            "category": "Beverages",
            "products": 2,
            "stock": 23,
            "value": 212.0,
        }]
