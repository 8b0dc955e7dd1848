# =============================================================================
# registry_core/services/sync_service.py
# Registry Session - the six in-memory collections and their sync rules
# =============================================================================
"""
RegistrySession owns the in-memory collections for one user session and
decides, per call, whether a change goes to Supabase or to the local mirror.

Lifecycle:
    session = RegistrySession(settings)
    session.start()          # check -> load six collections -> subscribe
    session.add_user("Piet")
    session.remove_product("3")
    session.close()          # tear down realtime channels and their loop

Mutations are optimistic: the in-memory collection is changed even when the
remote write failed (the failure is returned for the caller to show), and a
later realtime push replaces the collection with the authoritative copy.
In local mode every mutation is flushed to the local mirror.
"""

from __future__ import annotations
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from registry_core.config import AppSettings
from registry_core.data.entity_store import EntityStore
from registry_core.data.models import (
    Category,
    EntityKind,
    Product,
    Registration,
    instant_id,
    utc_iso,
    utc_now,
)
from registry_core.data.realtime_client import RealtimeClient
from registry_core.data.supabase_client import get_supabase_client
from registry_core.errors import LocalStorageError
from registry_core.offline.connectivity import ConnectivityDetector, SessionMode
from registry_core.offline.edit_guard import EditGuard
from registry_core.offline.local_mirror import LocalMirror
from registry_core.offline.realtime import SubscriptionManager
from .base_service import BaseService, ServiceResult

NO_CATEGORY = "Geen"

Clock = Callable[[], datetime]


class RegistrySession(BaseService):
    """
    Session-scoped state for all six entity collections.

    Collaborators are injectable so tests can pass a mocked Supabase client,
    a realtime stand-in, a temporary mirror and a fixed clock. The clock
    should return timezone-aware instants.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        client: Any = None,
        mirror: Optional[LocalMirror] = None,
        guard: Optional[EditGuard] = None,
        clock: Optional[Clock] = None,
        realtime: Optional[RealtimeClient] = None,
    ):
        super().__init__()
        self.settings = settings or AppSettings()
        self.client = client if client is not None else get_supabase_client(self.settings.remote)
        self.mirror = mirror or LocalMirror(self.settings.db_path, self.settings.namespace)
        self.guard = guard or EditGuard()
        self.clock = clock or utc_now
        self.realtime = realtime

        self.stores: Dict[EntityKind, EntityStore] = {
            kind: EntityStore(kind, self.client) for kind in EntityKind
        }
        self.detector = ConnectivityDetector(self.settings.remote, self.stores[EntityKind.USERS])
        self.subscriptions = SubscriptionManager(self.stores.values(), self.apply_push)

        self.mode: Optional[SessionMode] = None
        self.load_errors: Dict[EntityKind, str] = {}
        self._collections: Dict[EntityKind, List[Any]] = {kind: [] for kind in EntityKind}
        self._lock = threading.RLock()

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_connected(self) -> bool:
        return self.mode is SessionMode.CONNECTED

    def collection(self, kind: EntityKind) -> List[Any]:
        """Snapshot of one collection."""
        with self._lock:
            return list(self._collections[kind])

    @property
    def users(self) -> List[str]:
        return self.collection(EntityKind.USERS)

    @property
    def products(self) -> List[Product]:
        return self.collection(EntityKind.PRODUCTS)

    @property
    def locations(self) -> List[str]:
        return self.collection(EntityKind.LOCATIONS)

    @property
    def purposes(self) -> List[str]:
        return self.collection(EntityKind.PURPOSES)

    @property
    def categories(self) -> List[Category]:
        return self.collection(EntityKind.CATEGORIES)

    @property
    def registrations(self) -> List[Registration]:
        return self.collection(EntityKind.REGISTRATIONS)

    # =========================================================================
    # STARTUP
    # =========================================================================

    def start(self) -> SessionMode:
        """Check, load every collection and, when connected, attach realtime channels."""
        with self.log_operation("Starting registry session"):
            mode = self.detector.check()
            self._set_mode(mode)
            self.load()
            if self.is_connected:
                self._start_realtime()
                self.subscriptions.attach_all()
        return mode

    def _set_mode(self, mode: SessionMode) -> None:
        self.mode = mode
        for store in self.stores.values():
            store.mode = mode

    def load(self) -> None:
        """
        Load all six collections.

        Connected mode fetches concurrently and joins; a failed fetch only
        falls that collection back to its seed. Local mode reads the mirror.
        """
        self.load_errors = {}

        if not self.is_connected:
            with self._lock:
                for kind in EntityKind:
                    self._collections[kind] = self.mirror.load(kind)
            self.logger.info("Loaded collections from local mirror")
            return

        with ThreadPoolExecutor(max_workers=len(self.stores)) as executor:
            futures = {
                kind: executor.submit(store.fetch_all)
                for kind, store in self.stores.items()
            }
            results = {kind: future.result() for kind, future in futures.items()}

        with self._lock:
            for kind, result in results.items():
                self._collections[kind] = list(result.data or [])
                if not result.success:
                    self.load_errors[kind] = result.error or result.error_code or "unknown"

        counts = {kind.value: len(self._collections[kind]) for kind in EntityKind}
        self.logger.info(f"Loaded collections from Supabase: {counts}")

    def _start_realtime(self) -> None:
        if self.realtime is None:
            self.realtime = RealtimeClient(
                self.settings.remote, timeout=self.settings.realtime_timeout_s
            )
        if not self.realtime.start():
            self.logger.warning(
                f"Realtime unavailable ({self.realtime.error}); "
                "collections only change on refresh"
            )
        for store in self.stores.values():
            store.realtime = self.realtime

    def close(self) -> None:
        """Discard realtime channels; in-memory state goes with the session."""
        self.subscriptions.teardown()
        if self.realtime is not None:
            self.realtime.close()

    # =========================================================================
    # STATE MUTATION
    # =========================================================================

    def _replace(self, kind: EntityKind, collection: List[Any]) -> None:
        with self._lock:
            self._collections[kind] = list(collection)
            if self.mode is SessionMode.LOCAL:
                try:
                    self.mirror.flush(kind, self._collections[kind])
                except LocalStorageError as e:
                    self.logger.error(f"Local mirror write failed: {e}")

    def apply_push(self, kind: EntityKind, collection: List[Any]) -> bool:
        """
        Replace a collection with a realtime push.

        Returns:
            False when the edit guard suppressed the push
        """
        if not self.guard.should_apply(kind):
            self.logger.info(f"Dropped {kind.value} push while an edit is in progress")
            return False
        self._replace(kind, collection)
        return True

    def refresh(self, kind: EntityKind) -> ServiceResult:
        """Re-read one collection from the remote store (connected mode only)."""
        if not self.is_connected:
            return ServiceResult.ok(self.collection(kind), metadata={"mode": "local"})
        result = self.stores[kind].fetch_all()
        self._replace(kind, result.data or [])
        return result

    def _new_id(self, kind: EntityKind) -> str:
        """Instant-derived id, bumped until unique within the collection."""
        candidate = int(instant_id(self.clock()))
        existing = {item.id for item in self._collections[kind]}
        while str(candidate) in existing:
            candidate += 1
        return str(candidate)

    def _append(self, kind: EntityKind, value: Any, front: bool = False) -> None:
        with self._lock:
            current = list(self._collections[kind])
            current = [value] + current if front else current + [value]
            self._replace(kind, current)

    def _remove_where(self, kind: EntityKind, predicate: Callable[[Any], bool]) -> None:
        with self._lock:
            self._replace(kind, [item for item in self._collections[kind] if not predicate(item)])

    def _create(
        self,
        kind: EntityKind,
        value: Any,
        front: bool = False,
        apply_on_failure: bool = True,
    ) -> ServiceResult:
        result = self.stores[kind].create(value)
        if not result.success and not apply_on_failure:
            return result
        confirmed = result.data if result.data is not None else value
        self._append(kind, confirmed, front=front)
        return result

    # =========================================================================
    # NAMED KINDS (users, locations, purposes)
    # =========================================================================

    def _add_named(self, kind: EntityKind, name: str) -> ServiceResult:
        name = (name or "").strip()
        if not name:
            return ServiceResult.fail("Name is required", error_code="EMPTY")
        with self._lock:
            if name in self._collections[kind]:
                return ServiceResult.fail(f"'{name}' already exists", error_code="DUPLICATE")
            return self._create(kind, name)

    def _remove_named(self, kind: EntityKind, name: str) -> ServiceResult:
        result = self.stores[kind].delete(name)
        self._remove_where(kind, lambda item: item == name)
        return result

    def add_user(self, name: str) -> ServiceResult:
        return self._add_named(EntityKind.USERS, name)

    def remove_user(self, name: str) -> ServiceResult:
        return self._remove_named(EntityKind.USERS, name)

    def add_location(self, name: str) -> ServiceResult:
        return self._add_named(EntityKind.LOCATIONS, name)

    def remove_location(self, name: str) -> ServiceResult:
        return self._remove_named(EntityKind.LOCATIONS, name)

    def add_purpose(self, name: str) -> ServiceResult:
        return self._add_named(EntityKind.PURPOSES, name)

    def remove_purpose(self, name: str) -> ServiceResult:
        return self._remove_named(EntityKind.PURPOSES, name)

    # =========================================================================
    # CATEGORIES / PRODUCTS
    # =========================================================================

    def add_category(self, name: str) -> ServiceResult:
        name = (name or "").strip()
        if not name:
            return ServiceResult.fail("Name is required", error_code="EMPTY")
        with self._lock:
            if any(category.name == name for category in self._collections[EntityKind.CATEGORIES]):
                return ServiceResult.fail(f"'{name}' already exists", error_code="DUPLICATE")
            category = Category(id=self._new_id(EntityKind.CATEGORIES), name=name)
            return self._create(EntityKind.CATEGORIES, category)

    def remove_category(self, category_id: str) -> ServiceResult:
        # Products keep their category_id; the reference just dangles
        result = self.stores[EntityKind.CATEGORIES].delete(category_id)
        self._remove_where(EntityKind.CATEGORIES, lambda item: item.id == category_id)
        return result

    def add_product(
        self,
        name: str,
        qrcode: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> ServiceResult:
        name = (name or "").strip()
        if not name:
            return ServiceResult.fail("Name is required", error_code="EMPTY")
        with self._lock:
            product = Product(
                id=self._new_id(EntityKind.PRODUCTS),
                name=name,
                qrcode=(qrcode or "").strip() or None,
                category_id=None if category_id in (None, "", "none") else category_id,
                created_at=utc_iso(self.clock()),
            )
            return self._create(EntityKind.PRODUCTS, product)

    def remove_product(self, product_id: str) -> ServiceResult:
        result = self.stores[EntityKind.PRODUCTS].delete(product_id)
        self._remove_where(EntityKind.PRODUCTS, lambda item: item.id == product_id)
        return result

    def update_entity(self, kind: EntityKind, key: str, value: Any) -> ServiceResult:
        """Forwarded to the adapter, which does not implement updates."""
        return self.stores[kind].update(key, value)

    # =========================================================================
    # REGISTRATIONS
    # =========================================================================

    def add_registration(self, registration: Registration) -> ServiceResult:
        """
        Record a registration; newest first, never modified afterwards.

        Unlike other kinds a failed remote insert is not applied locally, so
        the form can retry without leaving a duplicate behind.
        """
        return self._create(EntityKind.REGISTRATIONS, registration, front=True, apply_on_failure=False)

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def find_product_by_name(self, name: str) -> Optional[Product]:
        """First match wins; product names are not guaranteed unique."""
        return next((p for p in self.products if p.name == name), None)

    def find_product_by_qrcode(self, qrcode: str) -> Optional[Product]:
        code = (qrcode or "").strip()
        if not code:
            return None
        return next((p for p in self.products if p.qrcode == code), None)

    def category_name(self, category_id: Optional[str]) -> str:
        """Category name for a product, or the placeholder for a dangling reference."""
        if not category_id:
            return NO_CATEGORY
        category = next((c for c in self.categories if c.id == category_id), None)
        return category.name if category else NO_CATEGORY

    def get_status(self) -> dict:
        status = self.detector.get_status_display()
        status.update({
            "counts": {kind.value: len(self._collections[kind]) for kind in EntityKind},
            "load_errors": {kind.value: error for kind, error in self.load_errors.items()},
            "subscriptions": self.subscriptions.active_count,
            "realtime": self.realtime_status(),
            "realtime_error": self.realtime.error if self.realtime is not None else None,
        })
        return status

    def realtime_status(self) -> str:
        """``off`` in local mode, ``degraded`` when any collection lacks a push channel."""
        if not self.is_connected:
            return "off"
        if self.subscriptions.active_count == len(self.stores):
            return "active"
        return "degraded"
