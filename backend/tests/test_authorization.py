"""
Authorization tests for RetailPOS.

Verifies:
- Unauthenticated requests return 401
- The capability table grants what each role needs and nothing more
- Cashier and manager are denied operations outside their rows (403)
"""

import pytest

from retailpos.permissions import (
    CAPABILITY_DEFINITIONS,
    ROLES,
    get_allowed_roles,
    get_capabilities_for_role,
    is_allowed,
    validate_capability,
)


# =============================================================================
# CAPABILITY TABLE
# =============================================================================


class TestCapabilityTable:

    def test_every_row_names_known_roles(self):
        for resource, operation, roles in CAPABILITY_DEFINITIONS:
            assert roles, f"{resource}:{operation} grants nobody"
            assert set(roles) <= set(ROLES)

    def test_rows_are_unique(self):
        keys = [(r, o) for r, o, _ in CAPABILITY_DEFINITIONS]
        assert len(keys) == len(set(keys))

    @pytest.mark.parametrize(
        "role,resource,operation,expected",
        [
            ("cashier", "products", "read", True),
            ("cashier", "products", "create", False),
            ("manager", "products", "update", True),
            ("manager", "products", "delete", False),
            ("cashier", "customers", "create", True),
            ("cashier", "customers", "delete", False),
            ("manager", "suppliers", "create", False),
            ("manager", "users", "read", True),
            ("manager", "users", "create", False),
            ("cashier", "transactions", "create", True),
            ("cashier", "transactions", "update", False),
            ("cashier", "reports", "read", False),
            ("manager", "settings", "read", True),
            ("manager", "settings", "update", False),
            ("admin", "settings", "reset", True),
            ("cashier", "tenant", "read", True),
            ("manager", "tenant", "update", False),
        ],
    )
    def test_table(self, role, resource, operation, expected):
        assert is_allowed(role, resource, operation) is expected

    def test_undefined_capability_allows_nobody(self):
        assert not validate_capability("transactions", "delete")
        assert get_allowed_roles("transactions", "delete") == frozenset()
        assert not is_allowed("admin", "transactions", "delete")

    def test_admin_is_superset_of_cashier(self):
        assert set(get_capabilities_for_role("cashier")) <= set(get_capabilities_for_role("admin"))


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/products"),
            ("POST", "/api/products"),
            ("GET", "/api/categories"),
            ("GET", "/api/inventory"),
            ("GET", "/api/customers"),
            ("GET", "/api/clients"),
            ("GET", "/api/employees"),
            ("GET", "/api/suppliers"),
            ("GET", "/api/users"),
            ("GET", "/api/transactions"),
            ("POST", "/api/transactions"),
            ("GET", "/api/reports/overview"),
            ("GET", "/api/settings"),
            ("GET", "/api/tenants/info"),
            ("GET", "/api/auth/me"),
        ],
    )
    def test_requires_auth(self, client, tenant_a, method, path):
        resp = client.open(path, method=method, headers={"X-Tenant-ID": "alpha"})
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"


# =============================================================================
# ROLE DENIALS - 403
# =============================================================================


class TestCashierDenied:

    def test_cannot_create_product(self, client, cashier_headers, category_a):
        resp = client.post("/api/products", json={
            "name": "X", "price": 1, "category_id": category_a.id, "sku": "X-1",
        }, headers=cashier_headers)
        assert resp.status_code == 403

    def test_cannot_list_users(self, client, cashier_headers):
        assert client.get("/api/users", headers=cashier_headers).status_code == 403

    def test_cannot_read_reports(self, client, cashier_headers):
        assert client.get("/api/reports/overview", headers=cashier_headers).status_code == 403

    def test_cannot_adjust_inventory(self, client, cashier_headers, product_a):
        row = product_a.inventory_rows[0]
        resp = client.patch(f"/api/inventory/{row.id}/adjust", json={"amount": 5}, headers=cashier_headers)
        assert resp.status_code == 403

    def test_cannot_edit_transaction(self, client, cashier_headers):
        resp = client.put("/api/transactions/000000000000000000000000", json={"notes": "x"},
                          headers=cashier_headers)
        assert resp.status_code == 403

    def test_can_ring_up_sale(self, client, cashier_headers, product_a):
        resp = client.post("/api/transactions", json={
            "items": [{"product_id": product_a.id, "quantity": 1}],
            "payment_method": "cash",
            "amount_paid": 20,
        }, headers=cashier_headers)
        assert resp.status_code == 201


class TestManagerDenied:

    def test_cannot_delete_product(self, client, manager_headers, product_a):
        assert client.delete(f"/api/products/{product_a.id}", headers=manager_headers).status_code == 403

    def test_cannot_update_settings(self, client, manager_headers):
        resp = client.put("/api/settings", json={"theme": "dark"}, headers=manager_headers)
        assert resp.status_code == 403

    def test_can_read_settings_and_reports(self, client, manager_headers):
        assert client.get("/api/settings", headers=manager_headers).status_code == 200
        assert client.get("/api/reports/overview", headers=manager_headers).status_code == 200

    def test_cannot_create_user(self, client, manager_headers):
        resp = client.post("/api/users", json={
            "name": "X", "email": "x@alpha.test", "password": "secret1",
        }, headers=manager_headers)
        assert resp.status_code == 403


class TestAdminAllowed:

    def test_admin_can_update_store_profile(self, client, admin_headers):
        resp = client.put("/api/tenants/settings", json={"contact_phone": "555-0199"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["data"]["contact"]["phone"] == "555-0199"

    def test_store_profile_rejects_subdomain_change(self, client, admin_headers):
        resp = client.put("/api/tenants/settings", json={"subdomain": "taken"}, headers=admin_headers)
        assert resp.status_code == 400
