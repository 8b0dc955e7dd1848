# =============================================================================
# registry_core/data/__init__.py
# Entity types, seed sets and the remote store boundary
# =============================================================================

from .models import (
    EntityKind,
    Category,
    Product,
    Registration,
    EDITABLE_KINDS,
    NAMED_KINDS,
    instant_id,
)
from .seeds import seed_for

__all__ = [
    "EntityKind",
    "Category",
    "Product",
    "Registration",
    "EDITABLE_KINDS",
    "NAMED_KINDS",
    "instant_id",
    "seed_for",
]
