# Overview: Pytest coverage for registration, login and bearer token lifecycle.

from retailpos.models import Settings, Tenant, User
from retailpos.services import token_service
from retailpos.services.auth_service import create_user

PASSWORD = "Password123!"

STORE_PAYLOAD = {
    "store_name": "Gamma Grocers",
    "owner_name": "Gale Owner",
    "owner_email": "owner@gamma.test",
    "owner_password": "secret12",
    "store_capital": 2500,
}


class TestStoreRegistration:

    def test_register_creates_tenant_owner_and_settings(self, client, db_session):
        resp = client.post("/api/tenants/register", json=STORE_PAYLOAD)
        assert resp.status_code == 201
        data = resp.json["data"]

        tenant = db_session.get(Tenant, data["tenant"]["id"])
        assert tenant.subdomain == "gamma-grocers"
        assert float(tenant.capital) == 2500.0

        owner = db_session.get(User, data["user"]["id"])
        assert owner.role == "admin"
        assert owner.tenant_id == tenant.id
        assert owner.employee_id == tenant.id[-6:].upper()
        assert "password_hash" not in data["user"]

        assert db_session.query(Settings).filter_by(tenant_id=tenant.id).count() == 1

    def test_registration_token_is_usable(self, client, db_session):
        token = client.post("/api/tenants/register", json=STORE_PAYLOAD).json["data"]["token"]
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json["data"]["user"]["email"] == "owner@gamma.test"

    def test_duplicate_subdomain_conflicts(self, client, tenant_a):
        resp = client.post("/api/tenants/register", json=dict(STORE_PAYLOAD, subdomain="alpha"))
        assert resp.status_code == 409

    def test_derived_subdomain_is_made_unique(self, client, db_session):
        first = client.post("/api/tenants/register", json=STORE_PAYLOAD)
        second = client.post("/api/tenants/register", json=STORE_PAYLOAD)
        assert first.status_code == second.status_code == 201
        assert second.json["data"]["tenant"]["subdomain"] == "gamma-grocers-2"

    def test_missing_fields_report_each_error(self, client, db_session):
        resp = client.post("/api/tenants/register", json={"owner_email": "x@y.test"})
        assert resp.status_code == 400
        fields = {e["field"] for e in resp.json["errors"]}
        assert {"store_name", "owner_name", "owner_password"} <= fields


class TestLogin:

    def test_login_within_tenant(self, client, admin_a):
        resp = client.post("/api/auth/login", json={"email": "admin@alpha.test", "password": PASSWORD},
                           headers={"X-Tenant-ID": "alpha"})
        assert resp.status_code == 200
        claims = token_service.decode_token(resp.json["data"]["token"])
        assert claims["sub"] == admin_a.id
        assert claims["tid"] == admin_a.tenant_id
        assert claims["role"] == "admin"

    def test_login_without_tenant_when_email_is_unique(self, client, admin_a):
        resp = client.post("/api/auth/login", json={"email": "ADMIN@alpha.test", "password": PASSWORD})
        assert resp.status_code == 200

    def test_wrong_password(self, client, admin_a):
        resp = client.post("/api/auth/login", json={"email": "admin@alpha.test", "password": "nope-nope"},
                           headers={"X-Tenant-ID": "alpha"})
        assert resp.status_code == 401
        assert resp.json["message"] == "Invalid credentials"

    def test_non_object_body_is_rejected(self, client, admin_a):
        resp = client.post("/api/auth/login", json=[1, 2], headers={"X-Tenant-ID": "alpha"})
        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid JSON payload"

    def test_same_email_in_two_tenants(self, client, tenant_a, tenant_b):
        create_user(tenant_a, name="Sam A", email="sam@shared.test", password=PASSWORD)
        sam_b = create_user(tenant_b, name="Sam B", email="sam@shared.test", password=PASSWORD)

        ambiguous = client.post("/api/auth/login", json={"email": "sam@shared.test", "password": PASSWORD})
        assert ambiguous.status_code == 400

        resp = client.post("/api/auth/login", json={"email": "sam@shared.test", "password": PASSWORD},
                           headers={"X-Tenant-ID": "beta"})
        assert resp.status_code == 200
        assert resp.json["data"]["user"]["id"] == sam_b.id

    def test_deactivated_user_cannot_login(self, client, db_session, cashier_a):
        cashier_a.is_active = False
        db_session.commit()
        resp = client.post("/api/auth/login", json={"email": "cashier@alpha.test", "password": PASSWORD},
                           headers={"X-Tenant-ID": "alpha"})
        assert resp.status_code == 401


class TestSelfRegistration:

    def test_register_always_creates_cashier(self, client, tenant_a):
        resp = client.post("/api/auth/register", json={
            "name": "Newbie", "email": "newbie@alpha.test", "password": "secret1", "role": "admin",
        }, headers={"X-Tenant-ID": "alpha"})
        assert resp.status_code == 201
        assert resp.json["data"]["user"]["role"] == "cashier"

    def test_duplicate_email_in_tenant_conflicts(self, client, admin_a):
        resp = client.post("/api/auth/register", json={
            "name": "Copy", "email": "admin@alpha.test", "password": "secret1",
        }, headers={"X-Tenant-ID": "alpha"})
        assert resp.status_code == 409

    def test_user_limit_enforced(self, client, db_session, tenant_a):
        tenant_a.max_users = 1
        db_session.commit()
        create_user(tenant_a, name="Only One", email="one@alpha.test", password=PASSWORD)
        resp = client.post("/api/auth/register", json={
            "name": "Two", "email": "two@alpha.test", "password": "secret1",
        }, headers={"X-Tenant-ID": "alpha"})
        assert resp.status_code == 409
        assert "limit reached" in resp.json["message"]


class TestTokenLifecycle:

    def test_missing_token(self, client, tenant_a):
        resp = client.get("/api/auth/me", headers={"X-Tenant-ID": "alpha"})
        assert resp.status_code == 401

    def test_garbage_token(self, client, tenant_a):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt", "X-Tenant-ID": "alpha"})
        assert resp.status_code == 401
        assert resp.json["message"] == "Invalid token"

    def test_expired_token(self, app, client, admin_a, monkeypatch):
        monkeypatch.setitem(app.config, "JWT_EXPIRES_MINUTES", -1)
        token = token_service.issue_token(admin_a)
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json["message"] == "Token expired"

    def test_password_change_invalidates_older_tokens(self, client, admin_a, headers_for):
        old_headers = headers_for(admin_a)
        resp = client.put("/api/auth/password", json={
            "current_password": PASSWORD, "new_password": "brand-new-pass",
        }, headers=old_headers)
        assert resp.status_code == 200
        new_token = resp.json["data"]["token"]

        assert client.get("/api/auth/me", headers=old_headers).status_code == 401
        fresh = client.get("/api/auth/me", headers={"Authorization": f"Bearer {new_token}"})
        assert fresh.status_code == 200

    def test_password_change_requires_current_password(self, client, admin_headers):
        resp = client.put("/api/auth/password", json={
            "current_password": "wrong-one", "new_password": "brand-new-pass",
        }, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Current password is incorrect"

    def test_deactivated_tenant_rejects_tokens(self, client, db_session, tenant_a, admin_a, headers_for):
        headers = headers_for(admin_a, tenant="")
        tenant_a.is_active = False
        db_session.commit()
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_profile_update(self, client, admin_headers):
        resp = client.put("/api/auth/profile", json={"name": "Renamed Admin", "phone": "555-0101"},
                          headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["data"]["name"] == "Renamed Admin"

    def test_profile_cannot_change_role(self, client, cashier_headers):
        resp = client.put("/api/auth/profile", json={"role": "admin"}, headers=cashier_headers)
        assert resp.status_code == 400
