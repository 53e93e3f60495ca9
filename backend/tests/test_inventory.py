# Overview: Pytest coverage for inventory rows as a mirror of product stock.

from retailpos.models import Category, Inventory, Product


class TestInventoryUpsert:

    def test_post_existing_pair_updates_row(self, client, db_session, admin_headers, product_a, category_a):
        resp = client.post("/api/inventory", json={
            "product_id": product_a.id, "category_id": category_a.id, "quantity": 35,
            "sale_price": 10, "cost_price": 4, "reorder_level": 8,
        }, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["data"]["quantity"] == 35
        assert db_session.get(Product, product_a.id).stock == 35
        assert db_session.query(Inventory).filter_by(product_id=product_a.id).count() == 1

    def test_post_new_category_creates_row_and_mirrors(self, client, db_session, tenant_a, admin_headers,
                                                       product_a):
        shelf = Category(tenant_id=tenant_a.id, name="Promo Shelf")
        db_session.add(shelf)
        db_session.commit()

        resp = client.post("/api/inventory", json={
            "product_id": product_a.id, "category_id": shelf.id, "quantity": 25,
            "sale_price": 9, "cost_price": 4, "reorder_level": 5,
        }, headers=admin_headers)
        assert resp.status_code == 201

        rows = db_session.query(Inventory).filter_by(product_id=product_a.id).all()
        assert len(rows) == 2
        assert {r.quantity for r in rows} == {25}

    def test_missing_fields(self, client, admin_headers, product_a):
        resp = client.post("/api/inventory", json={"product_id": product_a.id}, headers=admin_headers)
        assert resp.status_code == 400


class TestInventoryAdjust:

    def test_adjust_changes_product_stock(self, client, db_session, manager_headers, product_a):
        row = product_a.inventory_rows[0]
        resp = client.patch(f"/api/inventory/{row.id}/adjust", json={"amount": -5}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json["data"]["quantity"] == 15
        assert db_session.get(Product, product_a.id).stock == 15

    def test_adjust_cannot_go_negative(self, client, manager_headers, product_a):
        row = product_a.inventory_rows[0]
        resp = client.patch(f"/api/inventory/{row.id}/adjust", json={"amount": -21}, headers=manager_headers)
        assert resp.status_code == 400
        assert product_a.stock == 20

    def test_adjust_requires_integer(self, client, manager_headers, product_a):
        row = product_a.inventory_rows[0]
        for bad in (0, 1.5, "3", None):
            resp = client.patch(f"/api/inventory/{row.id}/adjust", json={"amount": bad}, headers=manager_headers)
            assert resp.status_code == 400, bad


class TestInventoryQueries:

    def test_low_stock_filter_and_summary(self, client, db_session, admin_headers, product_a):
        row = product_a.inventory_rows[0]
        client.patch(f"/api/inventory/{row.id}/adjust", json={"amount": -17}, headers=admin_headers)

        listing = client.get("/api/inventory?low_stock=true", headers=admin_headers)
        assert [r["id"] for r in listing.json["data"]] == [row.id]

        summary = client.get("/api/inventory/summary", headers=admin_headers).json["data"]
        assert summary["total_products"] == 1
        assert summary["total_stock"] == 3
        assert summary["low_stock_count"] == 1

    def test_delete_row_keeps_product_stock(self, client, db_session, admin_headers, product_a):
        row = product_a.inventory_rows[0]
        assert client.delete(f"/api/inventory/{row.id}", headers=admin_headers).status_code == 200
        assert db_session.get(Product, product_a.id).stock == 20
