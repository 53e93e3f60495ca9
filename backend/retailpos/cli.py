# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/retailpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask db upgrade
#   Apply migrations in backend/migrations (preferred for real databases).
# - python -m flask system init
#   Create all tables directly (idempotent; quick local setups).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Store management (MULTI-TENANT):
# - python -m flask tenants list
#   List all stores with user/product counts.
# - python -m flask tenants create --name "Corner Shop" --owner-email owner@corner.test --owner-password secret1
#   Register a store and its admin owner.
# - python -m flask tenants deactivate <tenant_id>
#   Deactivate a store; its users can no longer log in.
#
# User inspection/bootstrap:
# - python -m flask users list [--tenant-id <id>]
#   List users with role and active status.
# - python -m flask users create --tenant-id <id> --name "Jo" --email jo@corner.test --password secret1 --role cashier
#   Create a user (prompts if options are omitted).
#
# Demo data:
# - python -m flask seed demo [--subdomain demo]
#   Create a demo store with catalog, customers and staff. Passwords: "Password123!"

from decimal import Decimal

import click
from flask.cli import with_appcontext

from .errors import PosError
from .extensions import db
from .models import Category, Customer, Product, Supplier, Tenant, User
from .models.auth import ROLES
from .services import inventory_service
from .services.auth_service import create_user
from .services.registration_service import register_tenant
from .services.tenant_service import deactivate_tenant

DEMO_PASSWORD = "Password123!"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create every table that does not exist yet."""
    click.echo("START Initializing RetailPOS schema...")
    db.create_all()
    click.echo("PASS Schema ready. Register a store with 'python -m flask tenants create' or 'seed demo'.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('tenants')
def tenants_group():
    """Store (tenant) management commands."""


@tenants_group.command('list')
@with_appcontext
def list_tenants():
    """List all stores."""
    tenants = db.session.query(Tenant).order_by(Tenant.created_at.asc()).all()

    if not tenants:
        click.echo("No stores found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<26} {'Name':<30} {'Subdomain':<20} {'Active':<8} {'Users':<6} {'Products'}")
    click.echo("="*100)

    for tenant in tenants:
        user_count = db.session.query(User).filter_by(tenant_id=tenant.id).count()
        product_count = db.session.query(Product).filter_by(tenant_id=tenant.id).count()
        active_str = "Yes" if tenant.is_active else "No"
        click.echo(
            f"{tenant.id:<26} {tenant.name[:30]:<30} {tenant.subdomain:<20} {active_str:<8} "
            f"{user_count:<6} {product_count}"
        )

    click.echo("="*100 + "\n")


@tenants_group.command('create')
@click.option('--name', required=True, help='Store name')
@click.option('--subdomain', default=None, help='Subdomain (derived from the name if omitted)')
@click.option('--owner-name', default='Store Owner', help='Owner display name')
@click.option('--owner-email', required=True, help='Owner email')
@click.option('--owner-password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--capital', default='0', help='Opening capital')
@with_appcontext
def create_tenant_cli(name, subdomain, owner_name, owner_email, owner_password, capital):
    """Register a new store and its admin owner."""
    try:
        tenant, owner = register_tenant({
            "store_name": name,
            "subdomain": subdomain,
            "owner_name": owner_name,
            "owner_email": owner_email,
            "owner_password": owner_password,
            "store_capital": capital,
        })
    except PosError as e:
        db.session.rollback()
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)

    click.echo(f"PASS Created store: {tenant.name} (ID: {tenant.id}, Subdomain: {tenant.subdomain})")
    click.echo(f"PASS Owner: {owner.email} (Employee ID: {owner.employee_id})")


@tenants_group.command('deactivate')
@click.argument('tenant_id')
@with_appcontext
def deactivate_tenant_cli(tenant_id):
    """Deactivate a store. Tokens of its users stop working immediately."""
    try:
        tenant = deactivate_tenant(tenant_id)
    except PosError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)
    click.echo(f"PASS Deactivated store: {tenant.name} ({tenant.id})")


@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('create')
@click.option('--tenant-id', required=True, help='Store ID')
@click.option('--name', prompt=True)
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(ROLES), default='cashier', show_default=True)
@with_appcontext
def create_user_cli(tenant_id, name, email, password, role):
    """Create a user inside a store."""
    tenant = db.session.get(Tenant, tenant_id)
    if tenant is None:
        click.echo(f"FAIL Store {tenant_id} not found")
        raise SystemExit(1)

    try:
        user = create_user(tenant, name=name, email=email, password=password, role=role)
    except PosError as e:
        db.session.rollback()
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)

    click.echo(f"PASS Created user {user.email} (ID: {user.id}, Role: {user.role})")


@users_group.command('list')
@click.option('--tenant-id', help='Filter by store ID')
@with_appcontext
def list_users(tenant_id):
    """List all users with their roles."""
    query = db.session.query(User)

    if tenant_id:
        query = query.filter_by(tenant_id=tenant_id)

    users = query.order_by(User.tenant_id, User.created_at).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*110)
    click.echo(f"{'ID':<26} {'Store':<26} {'Email':<32} {'Role':<10} {'Active'}")
    click.echo("="*110)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<26} {user.tenant_id:<26} {user.email:<32} {user.role:<10} {active_str}")

    click.echo("="*110 + "\n")


@click.group('seed')
def seed_group():
    """Demo data commands."""


DEMO_CATEGORIES = [
    ("Beverages", "#0ea5e9"),
    ("Snacks", "#f59e0b"),
    ("Household", "#10b981"),
]

DEMO_PRODUCTS = [
    # name, category, sku, barcode, price, cost, stock, reorder level
    ("Sparkling Water 500ml", "Beverages", "BEV-001", "4000000000011", "1.25", "0.40", 120, 24),
    ("Cold Brew Coffee", "Beverages", "BEV-002", "4000000000028", "3.99", "1.60", 40, 10),
    ("Sea Salt Crisps", "Snacks", "SNK-001", "4000000000035", "2.49", "0.90", 60, 15),
    ("Dark Chocolate Bar", "Snacks", "SNK-002", "4000000000042", "1.99", "0.75", 8, 12),
    ("Dish Soap 750ml", "Household", "HSE-001", "4000000000059", "4.50", "1.80", 25, 5),
]


@seed_group.command('demo')
@click.option('--subdomain', default='demo', show_default=True)
@with_appcontext
def seed_demo(subdomain):
    """Create a demo store with staff, a small catalog and a few customers."""
    if db.session.query(Tenant).filter_by(subdomain=subdomain).first() is not None:
        click.echo(f"SKIP Store with subdomain '{subdomain}' already exists")
        return

    tenant, owner = register_tenant({
        "store_name": "Demo Market",
        "subdomain": subdomain,
        "owner_name": "Demo Admin",
        "owner_email": "admin@demo.test",
        "owner_password": DEMO_PASSWORD,
        "store_capital": "5000",
    })
    click.echo(f"PASS Created store {tenant.name} ({tenant.id})")

    for role in ("manager", "cashier"):
        create_user(tenant, name=f"Demo {role.title()}", email=f"{role}@demo.test",
                    password=DEMO_PASSWORD, role=role, commit=False)

    supplier = Supplier(tenant_id=tenant.id, name="Acme Wholesale", contact_person="Pat Lee",
                        email="orders@acme.test", phone="555-0100")
    db.session.add(supplier)

    categories = {}
    for name, color in DEMO_CATEGORIES:
        category = Category(tenant_id=tenant.id, name=name, color=color)
        db.session.add(category)
        categories[name] = category
    db.session.flush()

    for name, category, sku, barcode, price, cost, stock, reorder in DEMO_PRODUCTS:
        product = Product(
            tenant_id=tenant.id, name=name, category_id=categories[category].id, supplier_id=supplier.id,
            sku=sku, barcode=barcode, price=Decimal(price), cost_price=Decimal(cost),
            stock=stock, reorder_level=reorder, tags=[],
        )
        db.session.add(product)
        db.session.flush()
        inventory_service.sync_from_product(product)

    for name, email in (("Alex Morgan", "alex@example.test"), ("Sam Rivera", "sam@example.test")):
        db.session.add(Customer(tenant_id=tenant.id, name=name, email=email))

    db.session.commit()
    click.echo(f"PASS Seeded {len(DEMO_PRODUCTS)} products, 2 customers and 3 staff accounts")
    click.echo(f"INFO Log in as admin@demo.test / {DEMO_PASSWORD} with X-Tenant-ID: {subdomain}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(tenants_group)  # Multi-tenant store management
    app.cli.add_command(users_group)
    app.cli.add_command(seed_group)
