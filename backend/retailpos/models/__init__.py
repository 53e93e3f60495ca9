from .tenancy import Tenant
from .auth import User
from .inventory import Category, Supplier, Product, Inventory
from .customers import Customer, Client
from .employees import Employee
from .sales import Transaction, TransactionItem
from .settings import Settings

__all__ = [
    'Tenant',
    'User',
    'Category', 'Supplier', 'Product', 'Inventory',
    'Customer', 'Client',
    'Employee',
    'Transaction', 'TransactionItem',
    'Settings',
]
