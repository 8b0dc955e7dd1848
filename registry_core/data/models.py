# =============================================================================
# registry_core/data/models.py
# Entity Types for the Product Registry
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any


class EntityKind(Enum):
    """The six collections held by a session (value = remote table name)."""
    USERS = "users"
    PRODUCTS = "products"
    LOCATIONS = "locations"
    PURPOSES = "purposes"
    CATEGORIES = "categories"
    REGISTRATIONS = "registrations"

    @property
    def is_named(self) -> bool:
        """Kinds whose values are bare name strings keyed by name."""
        return self in NAMED_KINDS

    @property
    def key_column(self) -> str:
        return "name" if self.is_named else "id"


NAMED_KINDS = frozenset({EntityKind.USERS, EntityKind.LOCATIONS, EntityKind.PURPOSES})

# Kinds that have an edit dialog in the UI
EDITABLE_KINDS = frozenset({
    EntityKind.PRODUCTS,
    EntityKind.USERS,
    EntityKind.CATEGORIES,
    EntityKind.LOCATIONS,
    EntityKind.PURPOSES,
})


@dataclass
class Category:
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Product:
    id: str
    name: str
    qrcode: Optional[str] = None
    category_id: Optional[str] = None
    created_at: Optional[str] = None
    attachment_url: Optional[str] = None
    attachment_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Registration:
    """
    One logged product usage.

    User, product, location and purpose are denormalized copies of the names
    at creation time, not references. Registrations are never updated.
    """
    id: str
    user: str
    product: str
    location: str
    purpose: str
    timestamp: str
    date: str
    time: str
    qrcode: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def create(
        cls,
        user: str,
        product: str,
        location: str,
        purpose: str,
        now: datetime,
        qrcode: Optional[str] = None,
    ) -> Registration:
        """
        Build a registration stamped at ``now``.

        ``timestamp`` and ``date`` are taken from the UTC instant so they sort
        and filter alongside server rows; ``time`` is the local wall clock.
        A naive ``now`` is read as local time.
        """
        local = now.astimezone()
        return cls(
            id=instant_id(now),
            user=user,
            product=product,
            location=location,
            purpose=purpose,
            timestamp=utc_iso(now),
            date=now.astimezone(timezone.utc).strftime("%Y-%m-%d"),
            time=local.strftime("%H:%M:%S"),
            qrcode=qrcode,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def instant_id(now: datetime) -> str:
    """Id derived from the creation instant (epoch milliseconds)."""
    return str(int(now.timestamp() * 1000))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_iso(now: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")
