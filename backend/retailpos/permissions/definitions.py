# Overview: Declarative capability table.
# Each capability is defined as: (resource, operation, allowed roles)
# Roles are flat; a role absent from a row may not perform that operation.

ROLES = ("admin", "manager", "cashier")

_ALL = frozenset(ROLES)
_STAFF = frozenset({"admin", "manager"})
_ADMIN = frozenset({"admin"})


def _crud(resource, read, create, update, delete):
    return [
        (resource, "read", read),
        (resource, "create", create),
        (resource, "update", update),
        (resource, "delete", delete),
    ]


# -- CATALOG --

CATALOG_CAPABILITIES = (
    _crud("products", _ALL, _STAFF, _STAFF, _ADMIN)
    + _crud("categories", _ALL, _STAFF, _STAFF, _ADMIN)
    + _crud("inventory", _ALL, _STAFF, _STAFF, _ADMIN)
    + _crud("suppliers", _ALL, _ADMIN, _ADMIN, _ADMIN)
)


# -- PEOPLE --

PEOPLE_CAPABILITIES = (
    _crud("customers", _ALL, _ALL, _ALL, _ADMIN)
    + _crud("clients", _ALL, _ALL, _ALL, _ADMIN)
    + _crud("employees", _ALL, _STAFF, _STAFF, _ADMIN)
    + _crud("users", _STAFF, _ADMIN, _ADMIN, _ADMIN)
)


# -- SALES --

SALES_CAPABILITIES = [
    ("transactions", "read", _ALL),
    ("transactions", "create", _ALL),
    ("transactions", "update", _STAFF),
    ("reports", "read", _STAFF),
]


# -- ADMINISTRATION --

ADMIN_CAPABILITIES = [
    ("settings", "read", _STAFF),
    ("settings", "update", _ADMIN),
    ("settings", "reset", _ADMIN),
    ("tenant", "read", _ALL),
    ("tenant", "update", _ADMIN),
]


CAPABILITY_DEFINITIONS = (
    CATALOG_CAPABILITIES
    + PEOPLE_CAPABILITIES
    + SALES_CAPABILITIES
    + ADMIN_CAPABILITIES
)
