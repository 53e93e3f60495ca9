# Overview: Pytest coverage for categories, suppliers, customers, clients, employees and users.

import pytest

from retailpos.errors import ValidationError
from retailpos.models import Product, Supplier, Transaction, User
from retailpos.services import products_service, user_service


class TestCategories:

    def test_crud_and_product_count(self, client, db_session, manager_headers, admin_headers, product_a,
                                    category_a):
        listing = client.get("/api/categories", headers=manager_headers).json
        assert listing["count"] == 1
        assert listing["data"][0]["product_count"] == 1

        created = client.post("/api/categories", json={"name": "Snacks", "color": "#f59e0b"},
                              headers=manager_headers)
        assert created.status_code == 201
        snack_id = created.json["data"]["id"]

        renamed = client.put(f"/api/categories/{snack_id}", json={"name": "Chips"}, headers=manager_headers)
        assert renamed.json["data"]["name"] == "Chips"

        assert client.delete(f"/api/categories/{snack_id}", headers=admin_headers).status_code == 200

    def test_duplicate_name(self, client, manager_headers, category_a):
        resp = client.post("/api/categories", json={"name": "Beverages"}, headers=manager_headers)
        assert resp.status_code == 409

    def test_delete_in_use(self, client, admin_headers, product_a, category_a):
        resp = client.delete(f"/api/categories/{category_a.id}", headers=admin_headers)
        assert resp.status_code == 409
        assert "1 product(s)" in resp.json["message"]

    def test_cashier_cannot_create(self, client, cashier_headers, tenant_a):
        assert client.post("/api/categories", json={"name": "Nope"}, headers=cashier_headers).status_code == 403


class TestSuppliers:

    PAYLOAD = {
        "name": "Acme Wholesale",
        "contact_person": "Pat Lee",
        "email": "Orders@Acme.test",
        "phone": "555-0100",
        "payment_terms": "Net 30",
    }

    def test_create_normalizes_email(self, client, admin_headers):
        resp = client.post("/api/suppliers", json=self.PAYLOAD, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json["data"]["email"] == "orders@acme.test"
        assert resp.json["data"]["product_count"] == 0

        again = client.post("/api/suppliers", json=self.PAYLOAD, headers=admin_headers)
        assert again.status_code == 409

    def test_bad_payment_terms(self, client, admin_headers):
        resp = client.post("/api/suppliers", json={**self.PAYLOAD, "payment_terms": "Net 90"},
                           headers=admin_headers)
        assert resp.status_code == 400

    def test_delete_with_active_products(self, client, db_session, tenant_a, admin_headers, product_a):
        supplier_id = client.post("/api/suppliers", json=self.PAYLOAD, headers=admin_headers).json["data"]["id"]
        product_a.supplier_id = supplier_id
        db_session.commit()

        assert client.delete(f"/api/suppliers/{supplier_id}", headers=admin_headers).status_code == 409

        products_service.delete_product(db_session.get(Product, product_a.id))
        assert client.delete(f"/api/suppliers/{supplier_id}", headers=admin_headers).status_code == 200
        assert db_session.get(Supplier, supplier_id) is None
        assert db_session.get(Product, product_a.id).supplier_id is None

    def test_manager_read_only(self, client, manager_headers):
        assert client.get("/api/suppliers", headers=manager_headers).status_code == 200
        assert client.post("/api/suppliers", json=self.PAYLOAD, headers=manager_headers).status_code == 403


class TestCustomers:

    def test_cashier_can_create_and_credit(self, client, cashier_headers):
        created = client.post("/api/customers", json={"name": "Jamie Fox", "email": "jamie@example.test"},
                              headers=cashier_headers)
        assert created.status_code == 201
        customer_id = created.json["data"]["id"]

        resp = client.put(f"/api/customers/{customer_id}/loyalty", json={"points": 15, "total_spent": 42.5},
                          headers=cashier_headers)
        data = resp.json["data"]
        assert data["loyalty_points"] == 15
        assert data["total_spent"] == 42.5
        assert data["last_visit"] is not None

    def test_loyalty_rejects_negative_points(self, client, cashier_headers, customer_a):
        resp = client.put(f"/api/customers/{customer_a.id}/loyalty", json={"points": -3}, headers=cashier_headers)
        assert resp.status_code == 400

    def test_duplicate_email(self, client, cashier_headers, customer_a):
        resp = client.post("/api/customers", json={"name": "Other", "email": "alex@example.test"},
                           headers=cashier_headers)
        assert resp.status_code == 409

    def test_stats(self, client, cashier_headers, customer_a):
        client.put(f"/api/customers/{customer_a.id}/loyalty", json={"points": 10}, headers=cashier_headers)
        client.post("/api/customers", json={"name": "Jamie Fox", "email": "jamie@example.test"},
                    headers=cashier_headers)
        stats = client.get("/api/customers/stats", headers=cashier_headers).json["data"]
        assert stats["total_customers"] == 2
        assert stats["total_loyalty_points"] == 10
        assert stats["average_loyalty_points"] == 5

    def test_delete_keeps_sales(self, client, db_session, cashier_headers, admin_headers, product_a, customer_a):
        sale = client.post("/api/transactions", json={
            "items": [{"product_id": product_a.id, "quantity": 1}],
            "payment_method": "cash",
            "amount_paid": 20,
            "customer_id": customer_a.id,
        }, headers=cashier_headers).json["data"]

        assert client.delete(f"/api/customers/{customer_a.id}", headers=cashier_headers).status_code == 403
        assert client.delete(f"/api/customers/{customer_a.id}", headers=admin_headers).status_code == 200

        transaction = db_session.get(Transaction, sale["id"])
        assert transaction is not None
        assert transaction.customer_id is None


class TestClients:

    def test_avatar_initials(self, client, cashier_headers):
        resp = client.post("/api/clients", json={"name": "northwind traders ltd", "email": "buy@northwind.test"},
                           headers=cashier_headers)
        assert resp.status_code == 201
        assert resp.json["data"]["avatar"] == "NT"
        client_id = resp.json["data"]["id"]

        renamed = client.put(f"/api/clients/{client_id}", json={"name": "Contoso"}, headers=cashier_headers)
        assert renamed.json["data"]["avatar"] == "C"

    def test_status_filter_and_stats(self, client, cashier_headers):
        client.post("/api/clients", json={"name": "Active Co", "email": "a@co.test", "total_revenue": 1200,
                                          "projects": 2}, headers=cashier_headers)
        client.post("/api/clients", json={"name": "Dormant Co", "email": "d@co.test", "status": "inactive"},
                    headers=cashier_headers)

        active = client.get("/api/clients?status=active", headers=cashier_headers).json
        assert active["total"] == 1
        assert client.get("/api/clients?status=gone", headers=cashier_headers).status_code == 400

        stats = client.get("/api/clients/stats", headers=cashier_headers).json["data"]
        assert stats["total_clients"] == 2
        assert stats["active_clients"] == 1
        assert stats["total_revenue"] == 1200.0
        assert stats["total_projects"] == 2


class TestEmployees:

    PAYLOAD = {
        "name": "Riley Chen",
        "position": "Floor Lead",
        "department": "Sales",
        "email": "riley@alpha.test",
        "phone": "555-0142",
        "employee_id": "E-100",
        "hourly_rate": 18.5,
        "shift": "Morning (6AM-2PM)",
    }

    def test_create_and_stats(self, client, manager_headers):
        resp = client.post("/api/employees", json=self.PAYLOAD, headers=manager_headers)
        assert resp.status_code == 201
        assert resp.json["data"]["performance"] == 85

        stats = client.get("/api/employees/stats", headers=manager_headers).json["data"]
        assert stats["total_employees"] == 1
        assert stats["active_employees"] == 1
        assert stats["by_department"] == {"Sales": 1}
        assert stats["average_hourly_rate"] == 18.5

    def test_validation_and_uniqueness(self, client, manager_headers):
        assert client.post("/api/employees", json={**self.PAYLOAD, "department": "Space"},
                           headers=manager_headers).status_code == 400
        assert client.post("/api/employees", json={**self.PAYLOAD, "performance": 101},
                           headers=manager_headers).status_code == 400

        client.post("/api/employees", json=self.PAYLOAD, headers=manager_headers)
        dup = client.post("/api/employees", json={**self.PAYLOAD, "email": "other@alpha.test"},
                          headers=manager_headers)
        assert dup.status_code == 409
        assert dup.json["message"] == "Employee with this employee ID already exists"

    def test_cashier_cannot_create(self, client, cashier_headers):
        assert client.post("/api/employees", json=self.PAYLOAD, headers=cashier_headers).status_code == 403


class TestUsers:

    def test_admin_creates_user(self, client, admin_headers):
        resp = client.post("/api/users", json={
            "name": "New Manager", "email": "new.manager@alpha.test", "password": "secret-pass",
            "role": "manager",
        }, headers=admin_headers)
        assert resp.status_code == 201
        data = resp.json["data"]
        assert data["role"] == "manager"
        assert data["employee_id"].startswith("EMP")
        assert "password_hash" not in data

    def test_manager_can_list_but_not_create(self, client, manager_headers, admin_a):
        listing = client.get("/api/users", headers=manager_headers).json
        assert listing["total"] == 2
        resp = client.post("/api/users", json={"name": "X", "email": "x@alpha.test", "password": "secret-pass"},
                           headers=manager_headers)
        assert resp.status_code == 403

    def test_admin_cannot_demote_or_delete_self(self, client, admin_a, admin_headers):
        demote = client.put(f"/api/users/{admin_a.id}", json={"role": "cashier"}, headers=admin_headers)
        assert demote.status_code == 400
        delete = client.delete(f"/api/users/{admin_a.id}", headers=admin_headers)
        assert delete.status_code == 400

    def test_password_reset_invalidates_tokens(self, client, cashier_a, cashier_headers, admin_headers):
        assert client.get("/api/auth/me", headers=cashier_headers).status_code == 200

        resp = client.put(f"/api/users/{cashier_a.id}", json={"password": "reset-by-admin"}, headers=admin_headers)
        assert resp.status_code == 200
        assert client.get("/api/auth/me", headers=cashier_headers).status_code == 401

        login = client.post("/api/auth/login", json={"email": "cashier@alpha.test", "password": "reset-by-admin"},
                            headers={"X-Tenant-ID": "alpha"})
        assert login.status_code == 200

    def test_delete_deactivates(self, client, db_session, cashier_a, admin_headers):
        assert client.delete(f"/api/users/{cashier_a.id}", headers=admin_headers).status_code == 200
        assert db_session.get(User, cashier_a.id).is_active is False

    def test_pair_list_body_does_not_change_role(self, client, db_session, cashier_a, admin_headers):
        resp = client.put(f"/api/users/{cashier_a.id}", json=[["role", "admin"]], headers=admin_headers)
        assert resp.status_code == 400
        assert db_session.get(User, cashier_a.id).role == "cashier"

    def test_update_user_requires_mapping(self, client, admin_a, cashier_a, admin_headers):
        with pytest.raises(ValidationError, match="Invalid JSON payload"):
            user_service.update_user(admin_a, cashier_a, [("role", "admin")])
        assert cashier_a.role == "cashier"

        inactive = client.get("/api/users?is_active=false", headers=admin_headers).json
        assert [u["id"] for u in inactive["data"]] == [cashier_a.id]

    def test_stats(self, client, admin_a, manager_a, cashier_a, admin_headers):
        stats = client.get("/api/users/stats", headers=admin_headers).json["data"]
        assert stats == {
            "total_users": 3,
            "active_users": 3,
            "admin_count": 1,
            "manager_count": 1,
            "cashier_count": 1,
        }


class TestRequestBodies:

    @pytest.mark.parametrize("method, path, body", [
        ("post", "/api/categories", ["Snacks"]),
        ("post", "/api/customers", "Alex"),
        ("post", "/api/transactions", [{"product_id": "x", "quantity": 1}]),
        ("put", "/api/settings", 5),
        ("put", "/api/tenants/settings", [["tax_rate", 0]]),
    ])
    def test_non_object_json_is_a_validation_error(self, client, admin_headers, method, path, body):
        resp = getattr(client, method)(path, json=body, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid JSON payload"
