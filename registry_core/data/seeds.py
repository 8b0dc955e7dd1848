# =============================================================================
# registry_core/data/seeds.py
# Default Seed Sets
# =============================================================================
"""
Fixed default collections substituted when neither the remote store nor the
local mirror has data. The remote fallback and the local fallback use the
same values, so a session looks the same whichever path triggered it.
"""

from __future__ import annotations
import copy
from typing import Any, Dict, List

from .models import Category, EntityKind, Product

_SEEDS: Dict[EntityKind, List[Any]] = {
    EntityKind.USERS: [
        "Jan Janssen",
        "Marie Pietersen",
        "Piet de Vries",
        "Anna van der Berg",
    ],
    EntityKind.LOCATIONS: [
        "Kantoor 1.1",
        "Kantoor 1.2",
        "Vergaderzaal A",
        "Warehouse",
        "Thuis",
    ],
    EntityKind.PURPOSES: [
        "Presentatie",
        "Thuiswerken",
        "Reparatie",
        "Training",
        "Demonstratie",
    ],
    EntityKind.CATEGORIES: [
        Category(id="1", name="Smeermiddelen"),
        Category(id="2", name="Reinigers"),
        Category(id="3", name="Onderhoud"),
    ],
    EntityKind.PRODUCTS: [
        Product(id="1", name="Interflon Fin Super", qrcode="IFLS001", category_id="1"),
        Product(id="2", name="Interflon Food Lube", qrcode="IFFL002", category_id="1"),
        Product(id="3", name="Interflon Degreaser", qrcode="IFD003", category_id="2"),
        Product(id="4", name="Interflon Fin Grease", qrcode="IFGR004", category_id="1"),
        Product(id="5", name="Interflon Metal Clean", qrcode="IFMC005", category_id="2"),
        Product(id="6", name="Interflon Maintenance Kit", qrcode="IFMK006", category_id="3"),
    ],
    # No sample history: an empty registration list is the seed
    EntityKind.REGISTRATIONS: [],
}


def seed_for(kind: EntityKind) -> List[Any]:
    """Return a fresh copy of the seed set for ``kind``."""
    return copy.deepcopy(_SEEDS[kind])
