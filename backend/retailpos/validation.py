# Overview: Payload validation driven by SQLAlchemy column metadata plus per-model policies.

from __future__ import annotations
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, Numeric, String, Text

from .errors import ValidationError, ConflictError  # noqa: F401  (re-exported)
from .time_utils import parse_iso_datetime

EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")
SUBDOMAIN_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")

# Upper bound for any money field; keeps Numeric(12, 2) from overflowing
MAX_MONEY = Decimal("9999999999.99")


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - minimums / maximums: inclusive numeric bounds
    - choices: enumerated values per field
    - email_fields: validated and lowercased
    - upper_fields: normalized to upper case (SKU)
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()
    minimums: dict[str, Any] = field(default_factory=dict)
    maximums: dict[str, Any] = field(default_factory=dict)
    choices: dict[str, tuple] = field(default_factory=dict)
    email_fields: frozenset[str] = frozenset()
    upper_fields: frozenset[str] = frozenset()


def _columns_by_key(model) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false", "1", "0"}:
            return value.strip().lower() in {"true", "1"}
        raise ValidationError(f"{col.key} must be a boolean")

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or "e" in stripped.lower() or "." in stripped:
                raise ValidationError(f"{col.key} must be an integer")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise ValidationError(f"{col.key} must be an integer")

    # Money and rates
    if isinstance(coltype, (Numeric, Float)):
        if isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a number")
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{col.key} must be a number")
        if not number.is_finite():
            raise ValidationError(f"{col.key} must be a number")
        return number

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    if isinstance(coltype, JSON):
        if not isinstance(value, (list, dict)):
            raise ValidationError(f"{col.key} must be a list or object")
        return value

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    - the policy's bounds, choices and format rules
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = _apply_policy_rules(k, val, policy)

    return patch


def _apply_policy_rules(key: str, val: Any, policy: ModelValidationPolicy) -> Any:
    if key in policy.email_fields and isinstance(val, str) and val:
        val = val.lower()
        if not EMAIL_RE.match(val):
            raise ValidationError("Please enter a valid email")

    if key in policy.upper_fields and isinstance(val, str):
        val = val.upper()

    if key in policy.choices and val not in policy.choices[key]:
        allowed = ", ".join(str(c) for c in policy.choices[key])
        raise ValidationError(f"{key} must be one of: {allowed}")

    if key in policy.minimums and val < policy.minimums[key]:
        raise ValidationError(f"{key} must be >= {policy.minimums[key]}")

    if key in policy.maximums and val > policy.maximums[key]:
        raise ValidationError(f"{key} must be <= {policy.maximums[key]}")

    if isinstance(val, Decimal) and abs(val) > MAX_MONEY:
        raise ValidationError(f"{key} cannot exceed {MAX_MONEY}")

    return val


def require_email(value: Any, field_name: str = "email") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    email = value.strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email")
    return email


def require_decimal(value: Any, field_name: str, minimum: Decimal | None = Decimal("0")) -> Decimal:
    """Parse a JSON number into Decimal, rejecting bools, NaN and values under minimum."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be a non-negative number")
    return number


def require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{field_name} must be at least 1")
    return value


def json_object(req) -> dict:
    """
    Request body as a dict. A missing or unparseable body is an empty dict;
    valid JSON that is not an object (array, string, number) is rejected.
    """
    payload = req.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def parse_pagination(args, default_limit: int = 20, max_limit: int = 100) -> tuple[int, int]:
    page = _parse_int_arg(args, "page", 1)
    limit = _parse_int_arg(args, "limit", default_limit)
    if page < 1:
        raise ValidationError("Page must be a positive integer")
    if limit < 1 or limit > max_limit:
        raise ValidationError(f"Limit must be between 1 and {max_limit}")
    return page, limit


def parse_date_range(args) -> tuple[datetime | None, datetime | None]:
    try:
        start = parse_iso_datetime(args.get("start_date"))
        end = parse_iso_datetime(args.get("end_date"), end_of_range=True)
    except ValueError:
        raise ValidationError("Invalid date format")
    return start, end


def _parse_int_arg(args, name: str, default: int) -> int:
    raw = args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


def parse_bool_arg(args, name: str) -> bool | None:
    """Parse a true/false query flag; an absent flag means no filter."""
    raw = args.get(name)
    if raw in (None, ""):
        return None
    value = str(raw).strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    raise ValidationError(f"{name} must be true or false")
