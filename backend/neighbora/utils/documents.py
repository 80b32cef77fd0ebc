# neighbora/utils/documents.py
"""Mongo document helpers: id parsing, money encoding, JSON-friendly output."""
from datetime import datetime, timezone
from decimal import Decimal, DecimalException
from typing import Any, Dict, Optional

from bson import Decimal128, ObjectId
from bson.errors import InvalidId

from neighbora.core.errors import ValidationFailure


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def store_dt(value: Optional[datetime]) -> Optional[datetime]:
    """Naive UTC, the form Mongo hands back; naive input is taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_object_id(value: Any, field: str = "id") -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise ValidationFailure(f"Invalid {field} format")


def to_decimal128(value: Any) -> Decimal128:
    try:
        return Decimal128(Decimal(str(value)))
    except DecimalException:
        raise ValidationFailure(f"Amount out of range: {value}")


def from_money(value: Any) -> Decimal:
    """Decimal from whatever the document holds (Decimal128, int, float, str)."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from dragging binary noise in
    return Decimal(str(value))


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Mongo returns naive datetimes that are UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _normalize(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, dict):
        return {k: _normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    return value


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """`_id` -> `id`, ObjectId -> str, Decimal128 -> Decimal, datetimes as ISO strings."""
    if doc is None:
        return None
    out = _normalize(dict(doc))
    if "_id" in out:
        out["id"] = out.pop("_id")
    return out


def page_params(page: int, limit: int) -> Dict[str, int]:
    page = max(page, 1)
    limit = max(limit, 1)
    return {"page": page, "limit": limit, "skip": (page - 1) * limit}


def pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": (total + limit - 1) // limit if limit else 0,
    }


def db_now() -> datetime:
    return store_dt(now_utc())
