"""initial retailpos schema

Revision ID: rp001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the multi-tenant RetailPOS schema:
- tenants: store root, subdomain unique across the deployment
- users, categories, suppliers, products, inventory, customers, clients,
  employees, transactions, transaction_items, settings

MULTI-TENANT: every table except tenants carries tenant_id, and every
uniqueness rule is scoped by it (email, SKU, employee ID, receipt number).
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'rp001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', sa.String(length=24), nullable=False)


def _tenant_fk():
    return sa.Column('tenant_id', sa.String(length=24), sa.ForeignKey('tenants.id'), nullable=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    # ==========================================================================
    # tenants: one row per store
    # ==========================================================================
    op.create_table(
        'tenants',
        _id(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('subdomain', sa.String(length=63), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('exchange_rate', sa.Numeric(14, 4), nullable=False, server_default='1'),
        sa.Column('language', sa.String(length=2), nullable=False, server_default='en'),
        sa.Column('timezone', sa.String(length=64), nullable=False, server_default='UTC'),
        sa.Column('tax_rate', sa.Numeric(6, 4), nullable=False, server_default='0.08'),
        sa.Column('capital', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('address', sa.String(length=200), nullable=True),
        sa.Column('contact_phone', sa.String(length=20), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_website', sa.String(length=255), nullable=True),
        sa.Column('subscription_plan', sa.String(length=16), nullable=False, server_default='basic'),
        sa.Column('subscription_status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('subscription_start', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('subscription_end', sa.DateTime(), nullable=True),
        sa.Column('max_users', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('max_products', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('max_transactions', sa.Integer(), nullable=False, server_default='1000'),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('low_stock_alerts', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tenants_subdomain', 'tenants', ['subdomain'], unique=True)
    op.create_index('ix_tenants_is_active', 'tenants', ['is_active'])

    # ==========================================================================
    # users: staff accounts (admin / manager / cashier)
    # ==========================================================================
    op.create_table(
        'users',
        _id(),
        _tenant_fk(),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='cashier'),
        sa.Column('employee_id', sa.String(length=32), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('department', sa.String(length=32), nullable=False, server_default='Sales'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('password_changed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_users_tenant_email'),
        sa.UniqueConstraint('tenant_id', 'employee_id', name='uq_users_tenant_employee_id'),
    )
    op.create_index('ix_users_tenant_id', 'users', ['tenant_id'])
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_tenant_role', 'users', ['tenant_id', 'role'])

    # ==========================================================================
    # catalog: categories, suppliers, products, inventory
    # ==========================================================================
    op.create_table(
        'categories',
        _id(),
        _tenant_fk(),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=200), nullable=True),
        sa.Column('color', sa.String(length=16), nullable=False, server_default='#3B82F6'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_categories_tenant_name'),
    )
    op.create_index('ix_categories_tenant_id', 'categories', ['tenant_id'])

    op.create_table(
        'suppliers',
        _id(),
        _tenant_fk(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('contact_person', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('payment_terms', sa.String(length=16), nullable=False, server_default='Net 30'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('notes', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_suppliers_tenant_email'),
    )
    op.create_index('ix_suppliers_tenant_id', 'suppliers', ['tenant_id'])

    op.create_table(
        'products',
        _id(),
        _tenant_fk(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('cost_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('category_id', sa.String(length=24), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('supplier_id', sa.String(length=24), sa.ForeignKey('suppliers.id'), nullable=True),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('barcode', sa.String(length=64), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),  # System of record
        sa.Column('reorder_level', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('image_public_id', sa.String(length=255), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'sku', name='uq_products_tenant_sku'),
    )
    op.create_index('ix_products_tenant_id', 'products', ['tenant_id'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])
    op.create_index('ix_products_supplier_id', 'products', ['supplier_id'])
    op.create_index('ix_products_tenant_name', 'products', ['tenant_id', 'name'])
    op.create_index('ix_products_tenant_active', 'products', ['tenant_id', 'is_active'])
    op.create_index('ix_products_tenant_barcode', 'products', ['tenant_id', 'barcode'])

    # Mirror of products.stock per (product, category)
    op.create_table(
        'inventory',
        _id(),
        _tenant_fk(),
        sa.Column('product_id', sa.String(length=24), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('category_id', sa.String(length=24), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('product_name', sa.String(length=100), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sale_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('cost_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('reorder_level', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('last_restocked', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_updated', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'product_id', 'category_id', name='uq_inventory_product_category'),
    )
    op.create_index('ix_inventory_tenant_id', 'inventory', ['tenant_id'])
    op.create_index('ix_inventory_product_id', 'inventory', ['product_id'])
    op.create_index('ix_inventory_category_id', 'inventory', ['category_id'])

    # ==========================================================================
    # people: customers, clients, employees
    # ==========================================================================
    op.create_table(
        'customers',
        _id(),
        _tenant_fk(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('loyalty_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_spent', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('last_visit', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('notes', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_customers_tenant_email'),
    )
    op.create_index('ix_customers_tenant_id', 'customers', ['tenant_id'])
    op.create_index('ix_customers_tenant_active', 'customers', ['tenant_id', 'is_active'])

    op.create_table(
        'clients',
        _id(),
        _tenant_fk(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('total_revenue', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('active_invoices', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('projects', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_transaction', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('avatar', sa.String(length=4), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_clients_tenant_email'),
    )
    op.create_index('ix_clients_tenant_id', 'clients', ['tenant_id'])
    op.create_index('ix_clients_tenant_status', 'clients', ['tenant_id', 'status'])

    op.create_table(
        'employees',
        _id(),
        _tenant_fk(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('position', sa.String(length=100), nullable=False),
        sa.Column('department', sa.String(length=32), nullable=False, server_default='Sales'),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('employee_id', sa.String(length=32), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('shift', sa.String(length=64), nullable=False),
        sa.Column('hire_date', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('hours_this_week', sa.Numeric(6, 2), nullable=False, server_default='0'),
        sa.Column('performance', sa.Integer(), nullable=False, server_default='85'),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_employees_tenant_email'),
        sa.UniqueConstraint('tenant_id', 'employee_id', name='uq_employees_tenant_employee_id'),
    )
    op.create_index('ix_employees_tenant_id', 'employees', ['tenant_id'])
    op.create_index('ix_employees_tenant_department', 'employees', ['tenant_id', 'department'])

    # ==========================================================================
    # sales: transactions with snapshot line items
    # ==========================================================================
    op.create_table(
        'transactions',
        _id(),
        _tenant_fk(),
        sa.Column('transaction_id', sa.String(length=40), nullable=False),
        sa.Column('customer_id', sa.String(length=24), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('cashier_id', sa.String(length=24), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('subtotal', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('tax', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(14, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('amount_paid', sa.Numeric(14, 2), nullable=False),
        sa.Column('due_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='completed'),
        sa.Column('notes', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'transaction_id', name='uq_transactions_tenant_txid'),
    )
    op.create_index('ix_transactions_tenant_id', 'transactions', ['tenant_id'])
    op.create_index('ix_transactions_tenant_created', 'transactions', ['tenant_id', 'created_at'])
    op.create_index('ix_transactions_tenant_status', 'transactions', ['tenant_id', 'status'])
    op.create_index('ix_transactions_tenant_cashier', 'transactions', ['tenant_id', 'cashier_id'])
    op.create_index('ix_transactions_tenant_customer', 'transactions', ['tenant_id', 'customer_id'])

    op.create_table(
        'transaction_items',
        _id(),
        sa.Column('transaction_pk', sa.String(length=24), sa.ForeignKey('transactions.id'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('product_id', sa.String(length=24), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('product_name', sa.String(length=100), nullable=False),
        sa.Column('product_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('product_sku', sa.String(length=64), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(14, 2), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_transaction_items_transaction_pk', 'transaction_items', ['transaction_pk'])
    op.create_index('ix_transaction_items_product', 'transaction_items', ['product_id'])

    # ==========================================================================
    # settings: one row per tenant
    # ==========================================================================
    op.create_table(
        'settings',
        _id(),
        _tenant_fk(),
        sa.Column('store_name', sa.String(length=100), nullable=False),
        sa.Column('store_address', sa.String(length=200), nullable=True),
        sa.Column('store_phone', sa.String(length=20), nullable=True),
        sa.Column('store_email', sa.String(length=255), nullable=True),
        sa.Column('receipt_header', sa.String(length=200), nullable=True),
        sa.Column('receipt_footer', sa.String(length=200), nullable=True),
        sa.Column('print_logo', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('autoprint', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('tax_rate', sa.Numeric(6, 4), nullable=False, server_default='0.08'),
        sa.Column('date_format', sa.String(length=16), nullable=False, server_default='MM/DD/YYYY'),
        sa.Column('time_format', sa.String(length=2), nullable=False, server_default='12'),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('exchange_rate', sa.Numeric(14, 4), nullable=False, server_default='1'),
        sa.Column('low_stock_alerts', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('email_notifications', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('sound_effects', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('session_timeout', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('require_password_change', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('two_factor_auth', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('theme', sa.String(length=8), nullable=False, server_default='light'),
        sa.Column('compact_mode', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('show_product_images', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_settings_tenant_id', 'settings', ['tenant_id'], unique=True)


def downgrade():
    for table_name in (
        'settings', 'transaction_items', 'transactions', 'employees', 'clients', 'customers',
        'inventory', 'products', 'suppliers', 'categories', 'users', 'tenants',
    ):
        op.drop_table(table_name)
