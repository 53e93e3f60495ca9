# Overview: Signed bearer tokens (JWT via python-jose) and their verification.

"""
Token Service

Tokens are HS256 JWTs carrying:
- sub:    user id
- tid:    tenant id
- role:   role at issue time (informational; the database role is authoritative)
- iat/exp: standard issue/expiry (seconds)
- iat_us: issue time in microseconds

SECURITY: A token issued before the user's password_changed_at is rejected,
so changing a password logs out every other session. iat has one-second
resolution, which is why the comparison uses iat_us.
"""
from __future__ import annotations

from datetime import timedelta

from flask import current_app
from jose import ExpiredSignatureError, JWTError, jwt

from ..errors import AuthenticationError
from ..extensions import db
from ..models import Tenant, User
from ..time_utils import to_epoch_micros, utcnow


def issue_token(user: User) -> str:
    now = utcnow()
    expires = now + timedelta(minutes=current_app.config["JWT_EXPIRES_MINUTES"])
    claims = {
        "sub": user.id,
        "tid": user.tenant_id,
        "role": user.role,
        "iat": to_epoch_micros(now) // 1_000_000,
        "exp": to_epoch_micros(expires) // 1_000_000,
        "iat_us": to_epoch_micros(now),
    }
    return jwt.encode(
        claims,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_token(token: str) -> dict:
    """Verify signature and expiry. Raises AuthenticationError."""
    try:
        return jwt.decode(
            token,
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except JWTError:
        raise AuthenticationError("Invalid token")


def verify_token(token: str) -> User:
    """
    Resolve a bearer token to its active user.

    SECURITY: Returns 401-class errors when:
    - signature/expiry invalid
    - user missing or deactivated
    - tenant missing or deactivated
    - token issued before the last password change
    """
    claims = decode_token(token)

    user_id = claims.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token")

    user = db.session.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    tenant = db.session.get(Tenant, user.tenant_id)
    if tenant is None or not tenant.is_active:
        raise AuthenticationError("Store not found or inactive")

    if user.password_changed_at is not None:
        issued_us = claims.get("iat_us")
        if issued_us is None:
            issued_us = int(claims.get("iat", 0)) * 1_000_000
        if int(issued_us) < to_epoch_micros(user.password_changed_at):
            raise AuthenticationError("Password recently changed. Please log in again")

    return user
