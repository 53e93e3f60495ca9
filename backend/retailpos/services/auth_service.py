# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service with Multi-Tenant Support

MULTI-TENANT: Users belong to exactly one tenant (tenant_id).
Email and employee_id uniqueness is tenant-scoped, so login needs the tenant
whenever the same email exists in more than one store.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor BCRYPT_LOG_ROUNDS, 12 by default)
- Minimum 6 characters required
- Password change stamps password_changed_at, invalidating older tokens
- Authentication validates the tenant is active
"""
from __future__ import annotations

import bcrypt
from flask import current_app

from ..errors import AuthenticationError, ConflictError, TenantRequiredError, ValidationError
from ..extensions import db
from ..ids import new_object_id
from ..models import Tenant, User
from ..models.auth import DEPARTMENTS, ROLES
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, require_email, validate_payload
from .tenant_service import enforce_limit, scoped_query

MIN_PASSWORD_LENGTH = 6

PROFILE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "email", "phone", "department"}),
    email_fields=frozenset({"email"}),
    choices={"department": DEPARTMENTS},
)


def validate_password_strength(password) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_LOG_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        current_app.logger.error("Stored password hash is not a valid bcrypt hash")
        return False


def ensure_user_unique(tenant_id: str, email: str | None = None, employee_id: str | None = None,
                       exclude_id: str | None = None) -> None:
    if email:
        query = scoped_query(User, tenant_id).filter(User.email == email)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first() is not None:
            raise ConflictError("User with this email already exists")
    if employee_id:
        query = scoped_query(User, tenant_id).filter(User.employee_id == employee_id)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first() is not None:
            raise ConflictError("User with this employee ID already exists")


def create_user(
    tenant: Tenant,
    name: str,
    email: str,
    password: str,
    role: str = "cashier",
    employee_id: str | None = None,
    phone: str | None = None,
    department: str | None = None,
    commit: bool = True,
) -> User:
    """
    Create a user inside a tenant.

    MULTI-TENANT: email and employee_id must be unique within the tenant.
    The tenant's user allowance is enforced (ConflictError when exhausted).
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name is required")
    name = name.strip()
    if len(name) > 50:
        raise ValidationError("Name cannot exceed 50 characters")
    email = require_email(email)
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    if department is not None and department not in DEPARTMENTS:
        raise ValidationError(f"department must be one of: {', '.join(DEPARTMENTS)}")

    enforce_limit(tenant, "users", User)

    user_id = new_object_id()
    if employee_id:
        employee_id = str(employee_id).strip()
    else:
        employee_id = f"EMP{user_id[-6:].upper()}"

    ensure_user_unique(tenant.id, email=email, employee_id=employee_id)

    user = User(
        id=user_id,
        tenant_id=tenant.id,
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
        employee_id=employee_id,
        phone=phone.strip() if isinstance(phone, str) else phone,
        department=department or "Sales",
    )
    db.session.add(user)
    if commit:
        db.session.commit()
    return user


def authenticate(email: str, password: str, tenant_id: str | None = None) -> User:
    """
    Authenticate by email and password.

    MULTI-TENANT: With a resolved tenant the lookup is scoped to it. Without
    one, the email must identify exactly one user across active tenants;
    otherwise the caller has to identify the store (TenantRequiredError).

    Raises AuthenticationError on bad credentials; updates last_login_at.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")
    email = str(email).strip().lower()

    query = (
        db.session.query(User)
        .join(Tenant, Tenant.id == User.tenant_id)
        .filter(User.email == email, Tenant.is_active.is_(True))
    )
    if tenant_id is not None:
        query = query.filter(User.tenant_id == tenant_id)

    candidates = query.all()
    if len(candidates) > 1:
        raise TenantRequiredError()

    user = candidates[0] if candidates else None
    if user is None or not verify_password(password, user.password_hash):
        current_app.logger.warning("Failed login for %s (tenant=%s)", email, tenant_id)
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        current_app.logger.warning("Login attempt on deactivated account %s", user.id)
        raise AuthenticationError("Account is deactivated")

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def change_password(user: User, current_password: str, new_password: str) -> User:
    """
    Replace the password after checking the current one.

    SECURITY: password_changed_at is stamped after hashing so that any token
    issued before this call is rejected and one issued after is accepted.
    """
    if not current_password or not new_password:
        raise ValidationError("Current password and new password are required")
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    user.password_changed_at = utcnow()
    db.session.commit()
    current_app.logger.info("Password changed for user %s", user.id)
    return user


def update_profile(user: User, payload: dict) -> User:
    patch = validate_payload(model=User, payload=payload, policy=PROFILE_POLICY, partial=True)
    if "email" in patch:
        ensure_user_unique(user.tenant_id, email=patch["email"], exclude_id=user.id)
    for key, value in patch.items():
        setattr(user, key, value)
    db.session.commit()
    return user
