# =============================================================================
# registry_core/data/mapping.py
# Conversion Between Remote Rows, Local Blobs and Typed Entities
# =============================================================================
"""
Remote rows arrive as untyped mappings. Every row is converted into a typed
entity here, and nothing past this module looks at the raw shape again.

Column mapping (remote <-> entity field):
    qr_code       <-> qrcode
    category_id   <-> category_id
    user_name     <-> user       (registrations)
    product_name  <-> product    (registrations)
    created_at    passthrough
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from registry_core.errors import ValidationError
from .models import Category, EntityKind, Product, Registration

logger = logging.getLogger(__name__)


def _text(value: Any) -> Optional[str]:
    """Normalize an optional scalar to a stripped string (None when blank)."""
    if value is None:
        return None
    if isinstance(value, (dict, list, tuple, set)):
        raise ValidationError("Expected a scalar value", value=repr(value))
    text = str(value).strip()
    return text or None


def _required(row: Mapping[str, Any], *columns: str) -> str:
    for column in columns:
        value = _text(row.get(column))
        if value is not None:
            return value
    raise ValidationError(f"Missing required column '{columns[0]}'", field=columns[0])


# =============================================================================
# REMOTE ROW -> ENTITY
# =============================================================================

def from_row(kind: EntityKind, row: Any) -> Any:
    """
    Convert one remote row into the entity for ``kind``.

    Raises:
        ValidationError: if the row is not a mapping or misses required fields
    """
    if not isinstance(row, Mapping):
        raise ValidationError(f"Row for {kind.value} is not a mapping", value=repr(row))

    if kind.is_named:
        return _required(row, "name")

    if kind is EntityKind.CATEGORIES:
        return Category(id=_required(row, "id"), name=_required(row, "name"))

    if kind is EntityKind.PRODUCTS:
        return Product(
            id=_required(row, "id"),
            name=_required(row, "name"),
            qrcode=_text(row.get("qr_code", row.get("qrcode"))),
            category_id=_text(row.get("category_id", row.get("categoryId"))),
            created_at=_text(row.get("created_at")),
            attachment_url=_text(row.get("attachment_url")),
            attachment_name=_text(row.get("attachment_name")),
        )

    return Registration(
        id=_required(row, "id"),
        user=_required(row, "user_name", "user"),
        product=_required(row, "product_name", "product"),
        location=_required(row, "location"),
        purpose=_required(row, "purpose"),
        timestamp=_required(row, "timestamp", "created_at"),
        date=_text(row.get("date")) or "",
        time=_text(row.get("time")) or "",
        qrcode=_text(row.get("qr_code", row.get("qrcode"))),
        created_at=_text(row.get("created_at")),
    )


def rows_to_collection(kind: EntityKind, rows: Optional[Iterable[Any]]) -> List[Any]:
    """Convert remote rows, dropping (and logging) any row that does not map."""
    collection = []
    for row in rows or []:
        try:
            collection.append(from_row(kind, row))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {kind.value} row: {e}")
    return collection


# =============================================================================
# ENTITY -> REMOTE ROW
# =============================================================================

def to_row(kind: EntityKind, value: Any) -> Dict[str, Any]:
    """
    Convert an entity into the row inserted remotely.

    Category and registration ids are assigned by the server, so they are
    left out; product ids are generated client-side and sent along.
    """
    if kind.is_named:
        return {"name": value}

    if kind is EntityKind.CATEGORIES:
        return {"name": value.name}

    if kind is EntityKind.PRODUCTS:
        return {
            "id": value.id,
            "name": value.name,
            "qr_code": value.qrcode,
            "category_id": value.category_id,
            "created_at": value.created_at,
            "attachment_url": value.attachment_url,
            "attachment_name": value.attachment_name,
        }

    return {
        "user_name": value.user,
        "product_name": value.product,
        "location": value.location,
        "purpose": value.purpose,
        "timestamp": value.timestamp,
        "date": value.date,
        "time": value.time,
        "qr_code": value.qrcode,
    }


# =============================================================================
# LOCAL MIRROR (in-memory shape <-> plain JSON values)
# =============================================================================

def to_plain(kind: EntityKind, value: Any) -> Any:
    """In-memory entity to a JSON-compatible value (names stay strings)."""
    if kind.is_named:
        return value
    return value.to_dict()


def from_plain(kind: EntityKind, data: Any) -> Any:
    """Inverse of ``to_plain``."""
    if kind.is_named:
        if not isinstance(data, str):
            raise ValidationError(f"Expected a name for {kind.value}", value=repr(data))
        return data
    if not isinstance(data, Mapping):
        raise ValidationError(f"Expected an object for {kind.value}", value=repr(data))
    if kind is EntityKind.CATEGORIES:
        return Category(**data)
    if kind is EntityKind.PRODUCTS:
        return Product(**data)
    return Registration(**data)
