# Overview: Role capability package.
# Re-exports the capability table and its lookup helpers.

from .definitions import (
    ROLES,
    CAPABILITY_DEFINITIONS,
    CATALOG_CAPABILITIES,
    PEOPLE_CAPABILITIES,
    SALES_CAPABILITIES,
    ADMIN_CAPABILITIES,
)
from .helpers import (
    get_allowed_roles,
    get_capabilities_for_role,
    is_allowed,
    validate_capability,
)

__all__ = [
    "ROLES",
    "CAPABILITY_DEFINITIONS",
    "CATALOG_CAPABILITIES",
    "PEOPLE_CAPABILITIES",
    "SALES_CAPABILITIES",
    "ADMIN_CAPABILITIES",
    "get_allowed_roles",
    "get_capabilities_for_role",
    "is_allowed",
    "validate_capability",
]
