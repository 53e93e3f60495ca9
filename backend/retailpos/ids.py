# Overview: Record identifiers shared by every model.

from __future__ import annotations

import os
import secrets
import string
import re
import time

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_object_id() -> str:
    """
    24 hex characters: 4-byte big-endian epoch seconds followed by 8 random bytes.

    Ids sort roughly by creation time and can be told apart from subdomains,
    which tenant resolution relies on.
    """
    return int(time.time()).to_bytes(4, "big").hex() + os.urandom(8).hex()


def is_object_id(value: str | None) -> bool:
    return bool(value) and bool(OBJECT_ID_RE.match(value))


_TXN_ALPHABET = string.ascii_uppercase + string.digits


def generate_transaction_id(tenant_id: str, now_ms: int | None = None) -> str:
    """
    Receipt number: <last 4 of tenant id, upper>-<epoch millis>-<5 random upper alnum>.

    Unique per tenant in practice; the (tenant_id, transaction_id) constraint
    is the guarantee.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_TXN_ALPHABET) for _ in range(5))
    return f"{str(tenant_id)[-4:].upper()}-{now_ms}-{suffix}"
