# Overview: Shared tenant-scoped list/create/update helpers used by the entity services.

from __future__ import annotations

import math
from typing import Callable

from ..errors import ConflictError
from ..extensions import db
from .tenant_service import scoped_query


def paginate(query, page: int, limit: int, serialize: Callable | None = None) -> dict:
    """
    Run a query one page at a time.

    Returns {"items", "total", "page", "pages"}; items are serialized with
    to_dict() unless a serializer is given.
    """
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    serialize = serialize or (lambda row: row.to_dict())
    return {
        "items": [serialize(row) for row in rows],
        "total": total,
        "page": page,
        "pages": math.ceil(total / limit) if total else 0,
    }


def apply_search(query, term: str | None, columns):
    """Case-insensitive substring match across columns."""
    if not term:
        return query
    pattern = f"%{term.strip()}%"
    return query.filter(db.or_(*[col.ilike(pattern) for col in columns]))


def ensure_unique(model, tenant_id: str, column: str, value, message: str, exclude_id: str | None = None) -> None:
    """
    Raise ConflictError when another record of the tenant already holds value.

    The table's unique constraint still guards against races; this check only
    produces a friendlier message in the common case.
    """
    if value in (None, ""):
        return
    query = scoped_query(model, tenant_id).filter(getattr(model, column) == value)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(message)


def create_record(model, tenant_id: str, patch: dict):
    record = model(tenant_id=tenant_id, **patch)
    db.session.add(record)
    db.session.commit()
    return record


def apply_patch(record, patch: dict) -> None:
    for key, value in patch.items():
        setattr(record, key, value)


def update_record(record, patch: dict):
    apply_patch(record, patch)
    db.session.commit()
    return record


def delete_record(record) -> None:
    db.session.delete(record)
    db.session.commit()
