from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..ids import new_object_id
from ..time_utils import to_utc_z, utcnow

DATE_FORMATS = ("MM/DD/YYYY", "DD/MM/YYYY", "YYYY-MM-DD")
TIME_FORMATS = ("12", "24")
THEMES = ("light", "dark", "auto")

# Values a fresh (or reset) settings row starts with
SETTINGS_DEFAULTS = {
    "store_name": "RetailPOS Store",
    "store_address": "123 Main Street, City, State 12345",
    "store_phone": "(555) 123-4567",
    "store_email": "info@retailpos.com",
    "receipt_header": "Thank you for your business!",
    "receipt_footer": "Please keep this receipt for your records",
    "print_logo": True,
    "autoprint": False,
    "currency": "USD",
    "tax_rate": Decimal("0.08"),
    "date_format": "MM/DD/YYYY",
    "time_format": "12",
    "low_stock_threshold": 10,
    "exchange_rate": Decimal("1"),
    "low_stock_alerts": True,
    "email_notifications": True,
    "sound_effects": True,
    "session_timeout": 30,
    "require_password_change": False,
    "two_factor_auth": False,
    "theme": "light",
    "compact_mode": False,
    "show_product_images": True,
}


class Settings(db.Model):
    """
    Per-tenant preferences. Exactly one row per tenant, created lazily
    with SETTINGS_DEFAULTS on first read.
    """
    __tablename__ = "settings"

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    tenant_id = db.Column(db.String(24), db.ForeignKey("tenants.id"), nullable=False, unique=True, index=True)

    # Store information
    store_name = db.Column(db.String(100), nullable=False, default=SETTINGS_DEFAULTS["store_name"])
    store_address = db.Column(db.String(200), nullable=True, default=SETTINGS_DEFAULTS["store_address"])
    store_phone = db.Column(db.String(20), nullable=True, default=SETTINGS_DEFAULTS["store_phone"])
    store_email = db.Column(db.String(255), nullable=True, default=SETTINGS_DEFAULTS["store_email"])

    # Receipt
    receipt_header = db.Column(db.String(200), nullable=True, default=SETTINGS_DEFAULTS["receipt_header"])
    receipt_footer = db.Column(db.String(200), nullable=True, default=SETTINGS_DEFAULTS["receipt_footer"])
    print_logo = db.Column(db.Boolean, nullable=False, default=True)
    autoprint = db.Column(db.Boolean, nullable=False, default=False)

    # System
    currency = db.Column(db.String(3), nullable=False, default="USD")
    tax_rate = db.Column(db.Numeric(6, 4), nullable=False, default=SETTINGS_DEFAULTS["tax_rate"])
    date_format = db.Column(db.String(16), nullable=False, default="MM/DD/YYYY")
    time_format = db.Column(db.String(2), nullable=False, default="12")
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=10)
    exchange_rate = db.Column(db.Numeric(14, 4), nullable=False, default=SETTINGS_DEFAULTS["exchange_rate"])

    # Notifications
    low_stock_alerts = db.Column(db.Boolean, nullable=False, default=True)
    email_notifications = db.Column(db.Boolean, nullable=False, default=True)
    sound_effects = db.Column(db.Boolean, nullable=False, default=True)

    # Security (minutes, 5..480)
    session_timeout = db.Column(db.Integer, nullable=False, default=30)
    require_password_change = db.Column(db.Boolean, nullable=False, default=False)
    two_factor_auth = db.Column(db.Boolean, nullable=False, default=False)

    # Display
    theme = db.Column(db.String(8), nullable=False, default="light")
    compact_mode = db.Column(db.Boolean, nullable=False, default=False)
    show_product_images = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        data = {"id": self.id, "tenant_id": self.tenant_id}
        for key in SETTINGS_DEFAULTS:
            value = getattr(self, key)
            data[key] = float(value) if isinstance(value, Decimal) else value
        data["created_at"] = to_utc_z(self.created_at)
        data["updated_at"] = to_utc_z(self.updated_at)
        return data
