# Overview: Pytest coverage for sale completion, snapshots and transaction edits.

from decimal import Decimal

from retailpos.models import Customer, Inventory, Product, Tenant, Transaction
from retailpos.services import products_service
from retailpos.time_utils import utcnow


def _sale(product, quantity=2, paid=30, **extra):
    payload = {
        "items": [{"product_id": product.id, "quantity": quantity}],
        "payment_method": "cash",
        "amount_paid": paid,
    }
    payload.update(extra)
    return payload


class TestCompleteSale:

    def test_totals_stock_and_capital(self, client, db_session, tenant_a, cashier_a, cashier_headers, product_a):
        resp = client.post("/api/transactions", json=_sale(product_a), headers=cashier_headers)
        assert resp.status_code == 201
        data = resp.json["data"]

        # 2 x 10.00, tax 8%
        assert data["subtotal"] == 20.0
        assert data["tax"] == 1.6
        assert data["total"] == 21.6
        assert data["change"] == 8.4
        assert data["status"] == "completed"
        assert data["is_paid"] is True
        assert data["due_amount"] == 0.0
        assert data["cashier"]["id"] == cashier_a.id
        assert data["transaction_id"].startswith(tenant_a.id[-4:].upper() + "-")

        assert db_session.get(Product, product_a.id).stock == 18
        assert db_session.query(Inventory).filter_by(product_id=product_a.id).one().quantity == 18
        assert db_session.get(Tenant, tenant_a.id).capital == Decimal("30.00")

    def test_two_products_change_and_shortfall(self, client, tenant_a, category_a, cashier_headers, product_a):
        scarf = products_service.create_product(tenant_a, {
            "name": "Scarf", "price": Decimal("5.00"), "category_id": category_a.id, "sku": "SC-001", "stock": 5,
        })
        items = [{"product_id": product_a.id, "quantity": 2}, {"product_id": scarf.id, "quantity": 1}]

        paid = client.post("/api/transactions", json={"items": items, "payment_method": "cash", "amount_paid": 30},
                           headers=cashier_headers).json["data"]
        assert (paid["subtotal"], paid["tax"], paid["total"]) == (25.0, 2.0, 27.0)
        assert paid["change"] == 3.0

        short = client.post("/api/transactions", json={"items": items, "payment_method": "cash", "amount_paid": 20},
                            headers=cashier_headers).json["data"]
        assert short["change"] == -7.0
        assert short["due_amount"] == 7.0
        assert short["status"] == "due"

    def test_partial_payment_is_due(self, client, cashier_headers, product_a):
        resp = client.post("/api/transactions", json=_sale(product_a, paid=15), headers=cashier_headers)
        data = resp.json["data"]
        assert data["status"] == "due"
        assert data["is_paid"] is False
        assert data["due_amount"] == 6.6
        assert data["change"] == -6.6

    def test_duplicate_lines_are_merged(self, client, cashier_headers, product_a):
        payload = _sale(product_a)
        payload["items"].append({"product_id": product_a.id, "quantity": 1})
        data = client.post("/api/transactions", json=payload, headers=cashier_headers).json["data"]
        assert len(data["items"]) == 1
        assert data["items"][0]["quantity"] == 3

    def test_customer_loyalty_and_spend(self, client, db_session, cashier_headers, product_a, customer_a):
        resp = client.post("/api/transactions", json=_sale(product_a, quantity=5, paid=60,
                                                           customer_id=customer_a.id),
                           headers=cashier_headers)
        assert resp.status_code == 201
        customer = db_session.get(Customer, customer_a.id)
        # total 54.00 -> 54 points
        assert customer.loyalty_points == 54
        assert customer.total_spent == Decimal("54.00")
        assert customer.last_visit is not None

    def test_insufficient_stock(self, client, db_session, cashier_headers, product_a):
        resp = client.post("/api/transactions", json=_sale(product_a, quantity=21, paid=500),
                           headers=cashier_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Insufficient stock for Cold Brew. Available: 20, Requested: 21"
        assert db_session.query(Transaction).count() == 0
        assert db_session.get(Product, product_a.id).stock == 20

    def test_validation_errors(self, client, cashier_headers, product_a):
        bad_payloads = [
            {"items": [], "payment_method": "cash", "amount_paid": 1},
            _sale(product_a, payment_method="barter"),
            _sale(product_a, quantity=0),
            _sale(product_a, paid=-1),
        ]
        for payload in bad_payloads:
            resp = client.post("/api/transactions", json=payload, headers=cashier_headers)
            assert resp.status_code == 400, payload

    def test_inactive_product_cannot_be_sold(self, client, db_session, cashier_headers, product_a):
        product_a.is_active = False
        db_session.commit()
        resp = client.post("/api/transactions", json=_sale(product_a), headers=cashier_headers)
        assert resp.status_code == 400


class TestSnapshots:

    def test_line_snapshot_survives_product_edits(self, client, admin_headers, cashier_headers, product_a):
        created = client.post("/api/transactions", json=_sale(product_a), headers=cashier_headers).json["data"]

        client.put(f"/api/products/{product_a.id}", json={"name": "Renamed", "price": 99, "sku": "NEW-SKU"},
                   headers=admin_headers)
        client.delete(f"/api/products/{product_a.id}", headers=admin_headers)

        fetched = client.get(f"/api/transactions/{created['id']}", headers=cashier_headers).json["data"]
        snapshot = fetched["items"][0]["product_snapshot"]
        assert snapshot == {"name": "Cold Brew", "price": 10.0, "sku": "CB-001"}
        assert fetched["items"][0]["total_price"] == 20.0


class TestTransactionUpdates:

    def test_paying_off_due_sale(self, client, db_session, tenant_a, cashier_headers, manager_headers, product_a):
        txn = client.post("/api/transactions", json=_sale(product_a, paid=10), headers=cashier_headers).json["data"]
        assert txn["status"] == "due"

        resp = client.put(f"/api/transactions/{txn['id']}", json={"amount_paid": 21.6}, headers=manager_headers)
        assert resp.status_code == 200
        data = resp.json["data"]
        assert data["status"] == "completed"
        assert data["is_paid"] is True
        assert data["due_amount"] == 0.0
        assert db_session.get(Tenant, tenant_a.id).capital == Decimal("21.60")

    def test_only_whitelisted_fields(self, client, cashier_headers, manager_headers, product_a):
        txn = client.post("/api/transactions", json=_sale(product_a), headers=cashier_headers).json["data"]
        resp = client.put(f"/api/transactions/{txn['id']}", json={"total": 1}, headers=manager_headers)
        assert resp.status_code == 400

    def test_refund_status(self, client, cashier_headers, manager_headers, product_a):
        txn = client.post("/api/transactions", json=_sale(product_a), headers=cashier_headers).json["data"]
        resp = client.put(f"/api/transactions/{txn['id']}", json={"status": "refunded", "notes": "damaged"},
                          headers=manager_headers)
        assert resp.json["data"]["status"] == "refunded"


class TestTransactionQueries:

    def test_list_filters_and_stats(self, client, cashier_headers, manager_headers, product_a):
        client.post("/api/transactions", json=_sale(product_a, quantity=1, paid=20), headers=cashier_headers)
        client.post("/api/transactions", json=_sale(product_a, quantity=1, paid=5), headers=cashier_headers)

        due = client.get("/api/transactions?status=due", headers=manager_headers).json
        assert due["total"] == 1

        stats = client.get("/api/transactions/stats/summary", headers=manager_headers).json["data"]
        assert stats["total_transactions"] == 2
        assert stats["total_revenue"] == 21.6
        assert stats["total_items_sold"] == 2
        assert stats["total_due"] == 5.8
        assert stats["by_status"] == {"completed": 1, "due": 1}

    def test_bad_status_filter(self, client, manager_headers):
        assert client.get("/api/transactions?status=bogus", headers=manager_headers).status_code == 400

    def test_transaction_limit(self, client, db_session, tenant_a, cashier_headers, product_a):
        tenant_a.max_transactions = 1
        db_session.commit()
        assert client.post("/api/transactions", json=_sale(product_a, 1), headers=cashier_headers).status_code == 201
        resp = client.post("/api/transactions", json=_sale(product_a, 1), headers=cashier_headers)
        assert resp.status_code == 409

    def test_date_only_range_covers_whole_day(self, client, cashier_headers, manager_headers, product_a):
        client.post("/api/transactions", json=_sale(product_a, 1), headers=cashier_headers)
        today = utcnow().date().isoformat()

        resp = client.get(f"/api/transactions?start_date={today}&end_date={today}", headers=manager_headers)
        assert resp.json["total"] == 1

        bad = client.get("/api/transactions?start_date=yesterday", headers=manager_headers)
        assert bad.status_code == 400
