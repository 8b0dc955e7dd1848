# =============================================================================
# registry_core/services/history_service.py
# History Filtering, Statistics and Export
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

from registry_core.data.models import Product, Registration
from .base_service import BaseService

ALL = "all"

SORT_FIELDS = ("date", "user", "product", "location")

EXPORT_COLUMNS = {
    "date": "Datum",
    "time": "Tijd",
    "user": "Gebruiker",
    "product": "Product",
    "qrcode": "QR code",
    "location": "Locatie",
    "purpose": "Doel",
}


@dataclass
class HistoryFilter:
    """Criteria for the History tab."""
    search: str = ""
    user: str = ALL
    location: str = ALL
    date_from: Optional[str] = None  # YYYY-MM-DD, inclusive
    date_to: Optional[str] = None    # YYYY-MM-DD, inclusive
    sort_by: str = "date"
    sort_order: str = "newest"       # newest | oldest


def _frame(registrations: List[Registration]) -> pd.DataFrame:
    columns = list(Registration.__dataclass_fields__)
    return pd.DataFrame([r.to_dict() for r in registrations], columns=columns)


class HistoryService(BaseService):
    """
    Read-only views over the registration history.

    Usage:
        service = HistoryService()
        rows = service.filter_registrations(session.registrations, HistoryFilter(user="Jan Janssen"))
        stats = service.statistics(
            session.registrations, session.users, session.products, session.locations
        )
    """

    TOP_N = 5

    def filter_registrations(
        self,
        registrations: List[Registration],
        criteria: Optional[HistoryFilter] = None,
    ) -> List[Registration]:
        """Apply search, user/location and date-range filters, then sort."""
        criteria = criteria or HistoryFilter()
        if not registrations:
            return []

        df = _frame(registrations)
        df["_pos"] = range(len(df))
        mask = pd.Series(True, index=df.index)

        search = criteria.search.strip().lower()
        if search:
            searchable = df[["user", "product", "location", "purpose", "qrcode"]].fillna("")
            hits = searchable.apply(lambda col: col.str.lower().str.contains(search, regex=False))
            mask &= hits.any(axis=1)

        if criteria.user != ALL:
            mask &= df["user"] == criteria.user
        if criteria.location != ALL:
            mask &= df["location"] == criteria.location

        if criteria.date_from or criteria.date_to:
            day = pd.to_datetime(df["timestamp"], errors="coerce", utc=True, format="ISO8601")
            day = day.dt.strftime("%Y-%m-%d").fillna(df["date"])
            if criteria.date_from:
                mask &= day >= criteria.date_from
            if criteria.date_to:
                mask &= day <= criteria.date_to

        df = df[mask]

        ascending = criteria.sort_order != "newest"
        if criteria.sort_by in ("user", "product", "location"):
            df = df.sort_values(
                criteria.sort_by,
                ascending=ascending,
                key=lambda col: col.str.casefold(),
                kind="mergesort",
            )
        else:
            instants = pd.to_datetime(df["timestamp"], errors="coerce", utc=True, format="ISO8601")
            df = df.assign(_instant=instants).sort_values("_instant", ascending=ascending, kind="mergesort")

        return [registrations[pos] for pos in df["_pos"]]

    def statistics(
        self,
        registrations: List[Registration],
        users: List[str],
        products: List[Product],
        locations: List[str],
    ) -> Dict[str, Any]:
        """Totals plus the top products, users and locations by registration count."""
        df = _frame(registrations)

        def top(column: str) -> List[tuple]:
            if df.empty:
                return []
            counts = df[column].value_counts().head(self.TOP_N)
            return [(str(name), int(count)) for name, count in counts.items()]

        return {
            "total_registrations": len(registrations),
            "total_users": len(users),
            "total_products": len(products),
            "total_locations": len(locations),
            "top_products": top("product"),
            "top_users": top("user"),
            "top_locations": top("location"),
        }

    def export_csv(self, registrations: List[Registration]) -> bytes:
        """History as UTF-8 CSV with Dutch column headers."""
        df = _frame(registrations)[list(EXPORT_COLUMNS)].rename(columns=EXPORT_COLUMNS)
        return df.to_csv(index=False).encode("utf-8")


# =============================================================================
# SELECTOR HELPERS
# =============================================================================

def filter_products(
    products: List[Product],
    category_id: str = ALL,
    search: str = "",
) -> List[Product]:
    """Products in ``category_id`` whose name or scan code contains ``search``."""
    needle = search.strip().lower()
    result = []
    for product in products:
        if category_id != ALL and product.category_id != category_id:
            continue
        if needle and needle not in product.name.lower() and needle not in (product.qrcode or "").lower():
            continue
        result.append(product)
    return result


def filter_users(users: List[str], search: str = "") -> List[str]:
    """Users containing ``search``, sorted case-insensitively."""
    needle = search.strip().lower()
    return sorted((u for u in users if needle in u.lower()), key=str.casefold)
