# =============================================================================
# registry_core/data/entity_store.py
# Entity Store Adapter - remote fetch/create/delete/subscribe per entity kind
# =============================================================================
"""
EntityStore wraps one remote table behind a result-returning API.

Nothing raises past this boundary: every call returns a ``ServiceResult``.
In local mode writes are echoed back unchanged and no remote call is made;
the caller owns the in-memory collection and the local mirror. Push
channels need a started ``RealtimeClient``; the synchronous Supabase client
has no realtime support of its own.
"""

from __future__ import annotations
import logging
from typing import Any, Callable, List, Optional

from registry_core.errors import MOCK_MODE
from registry_core.offline.connectivity import SessionMode
from registry_core.services.base_service import BaseService, ServiceResult
from .mapping import rows_to_collection, to_row
from .models import EntityKind
from .seeds import seed_for
from .supabase_client import translate_remote_error

logger = logging.getLogger(__name__)

PushCallback = Callable[[List[Any]], None]


class Subscription:
    """Handle for one realtime channel."""

    def __init__(self, kind: EntityKind, handle: Any):
        self.kind = kind
        self.handle = handle
        self.closed = False

    def unsubscribe(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.handle.unsubscribe()
        logger.debug(f"Unsubscribed from {self.kind.value} changes")


class EntityStore(BaseService):
    """
    Remote adapter for a single entity kind.

    Usage:
        store = EntityStore(EntityKind.USERS, client)
        result = store.fetch_all()
        users = result.data  # never empty on first load
    """

    BATCH_SIZE = 1000

    # (column, descending) used when reading a table
    ORDERING = {
        EntityKind.CATEGORIES: ("name", False),
    }
    DEFAULT_ORDERING = ("created_at", True)

    def __init__(
        self,
        kind: EntityKind,
        client: Any,
        mode: SessionMode = SessionMode.CONNECTED,
        realtime: Any = None,
    ):
        super().__init__()
        self.kind = kind
        self.client = client
        self.mode = mode
        self.realtime = realtime

    @property
    def table(self) -> str:
        return self.kind.value

    @property
    def is_local(self) -> bool:
        return self.mode is SessionMode.LOCAL

    # =========================================================================
    # READ
    # =========================================================================

    def _select_all(self) -> List[Any]:
        """Read every row, paging past the PostgREST row limit."""
        column, descending = self.ORDERING.get(self.kind, self.DEFAULT_ORDERING)
        rows: List[Any] = []
        offset = 0

        while True:
            response = (
                self.client.table(self.table)
                .select("*")
                .order(column, desc=descending)
                .range(offset, offset + self.BATCH_SIZE - 1)
                .execute()
            )
            batch = response.data or []
            rows.extend(batch)
            if len(batch) < self.BATCH_SIZE:
                break
            offset += self.BATCH_SIZE

        return rows

    def fetch_remote(self) -> ServiceResult:
        """
        Read the remote table without any fallback.

        Returns:
            ServiceResult with the typed collection, or the remote error
            (``error_code == MOCK_MODE`` when the client is a stub)
        """
        try:
            rows = self._select_all()
        except Exception as e:
            error = translate_remote_error(e, self.table, "select")
            if error.code == MOCK_MODE:
                self.logger.info(f"{self.table}: remote store in mock mode")
            else:
                self.logger.warning(f"Error fetching {self.table}: {error}")
            return ServiceResult.from_exception(error)

        return ServiceResult.ok(rows_to_collection(self.kind, rows))

    def fetch_all(self) -> ServiceResult:
        """
        Fetch the collection, never returning an empty first load.

        A remote error or an empty remote table both yield the seed set; the
        error (if any) is kept on the result for the caller to inspect.
        """
        if self.is_local:
            return ServiceResult.ok(seed_for(self.kind), metadata={"fallback": "local"})

        result = self.fetch_remote()
        if not result.success:
            self.logger.info(f"{self.table}: using seed data ({result.error_code})")
            return ServiceResult.fail(
                result.error,
                error_code=result.error_code,
                data=seed_for(self.kind),
                metadata={"fallback": "error"},
            )

        if not result.data:
            self.logger.info(f"{self.table}: remote table empty, using seed data")
            return ServiceResult.ok(seed_for(self.kind), metadata={"fallback": "empty"})

        self.logger.debug(f"Fetched {len(result.data)} {self.table} from Supabase")
        return result

    # =========================================================================
    # WRITE
    # =========================================================================

    def create(self, value: Any) -> ServiceResult:
        """
        Insert ``value``.

        Connected mode returns the server-confirmed record. On failure the
        input is echoed in ``data`` so the caller may still apply it locally.
        Local mode echoes the input; id generation is the caller's job.
        """
        if self.is_local:
            return ServiceResult.ok(value, metadata={"mode": "local"})

        try:
            response = self.client.table(self.table).insert(to_row(self.kind, value)).execute()
        except Exception as e:
            error = translate_remote_error(e, self.table, "insert")
            self.logger.error(f"Error saving to {self.table}: {error}")
            return ServiceResult.from_exception(error, data=value)

        confirmed = rows_to_collection(self.kind, getattr(response, "data", None))
        return ServiceResult.ok(confirmed[0] if confirmed else value)

    def delete(self, key: str) -> ServiceResult:
        """
        Delete by primary key (name for users/locations/purposes, id otherwise).

        Deleting a key that is already gone is a successful no-op.
        """
        if self.kind is EntityKind.REGISTRATIONS:
            return ServiceResult.fail("Registrations cannot be deleted", error_code="NOT_SUPPORTED")

        if self.is_local:
            return ServiceResult.ok(key, metadata={"mode": "local"})

        try:
            self.client.table(self.table).delete().eq(self.kind.key_column, key).execute()
        except Exception as e:
            error = translate_remote_error(e, self.table, "delete")
            self.logger.error(f"Error deleting from {self.table}: {error}")
            return ServiceResult.from_exception(error, data=key)

        return ServiceResult.ok(key)

    def update(self, key: str, value: Any) -> ServiceResult:
        """Update by key. Not wired to any persistence call yet."""
        self.logger.warning(f"update({self.table}, {key!r}) requested but not implemented")
        return ServiceResult.fail(
            f"Updating {self.table} is not implemented",
            error_code="NOT_IMPLEMENTED",
        )

    # =========================================================================
    # REALTIME
    # =========================================================================

    def subscribe(self, callback: PushCallback) -> Optional[Subscription]:
        """
        Push the full refreshed collection to ``callback`` on every remote change.

        Returns:
            Subscription handle, or None in local mode, without a connected
            realtime client, or when the channel could not be opened
        """
        if self.is_local:
            return None
        if self.realtime is None or not self.realtime.is_available:
            self.logger.warning(f"Realtime unavailable; {self.table} changes will not be pushed")
            return None

        def on_change(payload: Any) -> None:
            self.logger.debug(f"{self.table} change detected")
            result = self.fetch_remote()
            if result.success:
                callback(result.data)

        try:
            handle = self.realtime.open_channel(f"{self.table}-changes", self.table, on_change)
        except Exception as e:
            self.logger.warning(f"Could not subscribe to {self.table} changes: {e}")
            return None

        return Subscription(self.kind, handle)
