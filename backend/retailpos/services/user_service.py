# Overview: Admin-side user management within a tenant (list, create, update, deactivate, stats).

from __future__ import annotations

from sqlalchemy import func

from ..errors import ValidationError
from ..extensions import db
from ..models import Tenant, User
from ..models.auth import DEPARTMENTS, ROLES
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, validate_payload
from .auth_service import create_user, ensure_user_unique, hash_password
from .crud import apply_search, paginate
from .tenant_service import get_scoped_or_404, scoped_query

USER_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "email", "role", "employee_id", "phone", "department", "is_active"}),
    choices={"role": ROLES, "department": DEPARTMENTS},
    email_fields=frozenset({"email"}),
)


def list_users(tenant_id: str, search: str | None = None, role: str | None = None,
               is_active: bool | None = None, page: int = 1, limit: int = 20) -> dict:
    query = scoped_query(User, tenant_id)
    if role:
        if role not in ROLES:
            raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
        query = query.filter(User.role == role)
    if is_active is not None:
        query = query.filter(User.is_active.is_(is_active))
    query = apply_search(query, search, [User.name, User.email, User.employee_id])
    return paginate(query.order_by(User.created_at.desc()), page, limit)


def get_user(tenant_id: str, user_id: str) -> User:
    return get_scoped_or_404(User, user_id, tenant_id, label="User")


def admin_create_user(tenant: Tenant, payload: dict) -> User:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return create_user(
        tenant,
        name=payload.get("name"),
        email=payload.get("email"),
        password=payload.get("password"),
        role=payload.get("role") or "cashier",
        employee_id=payload.get("employee_id"),
        phone=payload.get("phone"),
        department=payload.get("department"),
    )


def update_user(actor: User, user: User, payload: dict) -> User:
    """
    Admin edit of another account. A password in the payload is re-hashed and
    invalidates the user's existing tokens.

    SECURITY: admins cannot demote or deactivate themselves, so a tenant is
    never left without an admin by accident.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    payload = dict(payload)
    new_password = payload.pop("password", None)
    patch = validate_payload(model=User, payload=payload, policy=USER_UPDATE_POLICY, partial=True)

    if user.id == actor.id:
        if patch.get("role", user.role) != user.role:
            raise ValidationError("You cannot change your own role")
        if patch.get("is_active") is False:
            raise ValidationError("You cannot deactivate your own account")

    ensure_user_unique(user.tenant_id, email=patch.get("email"), employee_id=patch.get("employee_id"),
                       exclude_id=user.id)
    for key, value in patch.items():
        setattr(user, key, value)

    if new_password:
        user.password_hash = hash_password(new_password)
        user.password_changed_at = utcnow()

    db.session.commit()
    return user


def delete_user(actor: User, user: User) -> User:
    """Deactivate rather than delete: sales keep their cashier."""
    if user.id == actor.id:
        raise ValidationError("You cannot delete your own account")
    user.is_active = False
    db.session.commit()
    return user


def user_stats(tenant_id: str) -> dict:
    base = scoped_query(User, tenant_id)
    by_role = dict(base.with_entities(User.role, func.count(User.id)).group_by(User.role).all())
    return {
        "total_users": sum(by_role.values()),
        "active_users": base.filter(User.is_active.is_(True)).count(),
        "admin_count": by_role.get("admin", 0),
        "manager_count": by_role.get("manager", 0),
        "cashier_count": by_role.get("cashier", 0),
    }
