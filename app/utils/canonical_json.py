"""
Deterministic JSON serialization utilities.

Used to turn ORM rows into mirror payloads and to fingerprint them.
"""

import hashlib
import json
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import inspect


def _canonical_default(value: Any) -> Any:
    """Serialize unsupported types into stable JSON-friendly values."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    raise TypeError(f"Type {type(value)} not serializable")


def canonical_dumps(value: Any) -> str:
    """Return deterministic JSON with sorted keys and tight separators."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        default=_canonical_default,
        ensure_ascii=True,
    )


def canonical_hash(value: Any) -> str:
    """Compute SHA-256 hash of canonical JSON representation."""
    return hashlib.sha256(canonical_dumps(value).encode("utf-8")).hexdigest()


def json_safe(value: Any) -> Any:
    """Round-trip a value through canonical JSON so it only holds JSON types."""
    return json.loads(canonical_dumps(value))


def row_payload(obj) -> Dict[str, Any]:
    """Column values of an ORM instance (relationships excluded), JSON-safe."""
    mapper = inspect(obj).mapper
    return json_safe({attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs})
