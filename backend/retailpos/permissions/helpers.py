# Overview: Utility functions for capability lookups and validation.

from .definitions import CAPABILITY_DEFINITIONS

_TABLE = {(resource, operation): roles for resource, operation, roles in CAPABILITY_DEFINITIONS}


def get_allowed_roles(resource, operation):
    """Roles allowed to perform operation on resource (empty if undefined)."""
    return _TABLE.get((resource, operation), frozenset())


def is_allowed(role, resource, operation):
    return role in get_allowed_roles(resource, operation)


def get_capabilities_for_role(role):
    """All (resource, operation) pairs a role may perform."""
    return sorted(key for key, roles in _TABLE.items() if role in roles)


def validate_capability(resource, operation):
    """Check if a (resource, operation) pair is defined."""
    return (resource, operation) in _TABLE
