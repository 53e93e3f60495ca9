"""
Pytest fixtures for RetailPOS backend tests.

Provides test database setup, two isolated tenants with staff accounts,
token helpers and a small catalog.
"""

from decimal import Decimal

import pytest

from retailpos import create_app
from retailpos.config import TestingConfig
from retailpos.extensions import db
from retailpos.models import Category, Customer, Tenant
from retailpos.services import products_service, token_service
from retailpos.services.auth_service import create_user

PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app(config_class=TestingConfig)
    app.config.update({
        'UPLOAD_FOLDER': str(tmp_path_factory.mktemp("uploads")),
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def tenant_a(db_session):
    """Create Tenant A (first store)."""
    tenant = Tenant(name="Alpha Market", subdomain="alpha", tax_rate=Decimal("0.08"))
    db_session.add(tenant)
    db_session.commit()
    return tenant


@pytest.fixture(scope='function')
def tenant_b(db_session):
    """Create Tenant B (second store)."""
    tenant = Tenant(name="Beta Goods", subdomain="beta", tax_rate=Decimal("0.10"))
    db_session.add(tenant)
    db_session.commit()
    return tenant


@pytest.fixture(scope='function')
def admin_a(tenant_a):
    return create_user(tenant_a, name="Admin A", email="admin@alpha.test", password=PASSWORD, role="admin")


@pytest.fixture(scope='function')
def manager_a(tenant_a):
    return create_user(tenant_a, name="Manager A", email="manager@alpha.test", password=PASSWORD, role="manager")


@pytest.fixture(scope='function')
def cashier_a(tenant_a):
    return create_user(tenant_a, name="Cashier A", email="cashier@alpha.test", password=PASSWORD, role="cashier")


@pytest.fixture(scope='function')
def admin_b(tenant_b):
    return create_user(tenant_b, name="Admin B", email="admin@beta.test", password=PASSWORD, role="admin")


@pytest.fixture(scope='function')
def category_a(db_session, tenant_a):
    category = Category(tenant_id=tenant_a.id, name="Beverages")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def category_b(db_session, tenant_b):
    category = Category(tenant_id=tenant_b.id, name="Beverages")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def product_a(tenant_a, category_a):
    """Create Product in Tenant A: price 10.00, stock 20."""
    return products_service.create_product(tenant_a, {
        "name": "Cold Brew",
        "price": Decimal("10.00"),
        "cost_price": Decimal("4.00"),
        "category_id": category_a.id,
        "sku": "CB-001",
        "barcode": "4000000000011",
        "stock": 20,
        "reorder_level": 5,
    })


@pytest.fixture(scope='function')
def product_b(tenant_b, category_b):
    """Create Product in Tenant B."""
    return products_service.create_product(tenant_b, {
        "name": "Beta Water",
        "price": Decimal("2.00"),
        "category_id": category_b.id,
        "sku": "BW-001",
        "stock": 50,
        "reorder_level": 5,
    })


@pytest.fixture(scope='function')
def customer_a(db_session, tenant_a):
    customer = Customer(tenant_id=tenant_a.id, name="Alex Morgan", email="alex@example.test")
    db_session.add(customer)
    db_session.commit()
    return customer


def auth_headers(user, tenant: str | None = None) -> dict:
    """Authorization header for user, plus X-Tenant-ID (defaults to the user's store)."""
    headers = {'Authorization': f'Bearer {token_service.issue_token(user)}'}
    tenant_header = tenant if tenant is not None else user.tenant.subdomain
    if tenant_header:
        headers['X-Tenant-ID'] = tenant_header
    return headers


@pytest.fixture(scope='function')
def headers_for():
    return auth_headers


@pytest.fixture(scope='function')
def admin_headers(admin_a):
    return auth_headers(admin_a)


@pytest.fixture(scope='function')
def manager_headers(manager_a):
    return auth_headers(manager_a)


@pytest.fixture(scope='function')
def cashier_headers(cashier_a):
    return auth_headers(cashier_a)


@pytest.fixture(scope='function')
def admin_b_headers(admin_b):
    return auth_headers(admin_b)
