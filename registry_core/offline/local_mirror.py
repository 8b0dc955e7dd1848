# =============================================================================
# registry_core/offline/local_mirror.py
# Local Persistence Mirror - SQLite key/value store for local mode
# =============================================================================
"""
LocalMirror - keeps the full in-memory collections on disk while a session
runs in local mode.

Each collection is stored as one JSON blob under ``<namespace>-<kind>``,
matching the in-memory shape exactly (no schema versioning). A missing or
unparseable blob loads as the kind's seed set.
"""

from __future__ import annotations
import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional
import logging

from registry_core.config import DEFAULT_DB_PATH, DEFAULT_NAMESPACE
from registry_core.data.mapping import from_plain, to_plain
from registry_core.data.models import EntityKind
from registry_core.data.seeds import seed_for
from registry_core.errors import LocalStorageError, ValidationError

logger = logging.getLogger(__name__)


class LocalMirror:
    """
    Durable local copy of the six collections.

    Usage:
        mirror = LocalMirror(Path("local_data/registry.db"))
        mirror.flush(EntityKind.USERS, ["Jan Janssen"])
        users = mirror.load(EntityKind.USERS)
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS local_storage (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    def __init__(self, db_path: Optional[Path] = None, namespace: str = DEFAULT_NAMESPACE):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.namespace = namespace
        self._local = threading.local()
        self._initialized = False
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def key_for(self, kind: EntityKind) -> str:
        return f"{self.namespace}-{kind.value}"

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if getattr(self._local, "connection", None) is None:
            self._local.connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
        return self._local.connection

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def initialize(self) -> None:
        """Create the key/value table if needed."""
        if self._initialized:
            return
        with self.transaction() as conn:
            conn.execute(self.SCHEMA)
        self._initialized = True
        logger.info(f"Local mirror initialized at: {self.db_path}")

    # =========================================================================
    # RAW KEY/VALUE
    # =========================================================================

    def get_raw(self, key: str) -> Optional[str]:
        self.initialize()
        row = self._get_connection().execute(
            "SELECT value FROM local_storage WHERE key = ?", (key,)
        ).fetchone()
        return row[0] if row else None

    def set_raw(self, key: str, value: str) -> None:
        self.initialize()
        with self.transaction() as conn:
            conn.execute(
                "INSERT INTO local_storage (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (key, value, datetime.now().isoformat()),
            )

    # =========================================================================
    # COLLECTIONS
    # =========================================================================

    def flush(self, kind: EntityKind, collection: List[Any]) -> None:
        """
        Serialize the whole collection for ``kind``.

        Raises:
            LocalStorageError: if the blob cannot be written
        """
        key = self.key_for(kind)
        try:
            blob = json.dumps([to_plain(kind, value) for value in collection])
            self.set_raw(key, blob)
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise LocalStorageError(f"Could not persist {kind.value}: {e}", key=key) from e
        logger.debug(f"Persisted {len(collection)} {kind.value} to {key}")

    def load(self, kind: EntityKind) -> List[Any]:
        """Read the stored collection, or the seed set when absent or unparseable."""
        key = self.key_for(kind)
        try:
            blob = self.get_raw(key)
        except sqlite3.Error as e:
            logger.warning(f"Could not read {key}: {e}; using seed data")
            return seed_for(kind)

        if blob is None:
            logger.debug(f"No stored {kind.value}; using seed data")
            return seed_for(kind)

        try:
            data = json.loads(blob)
            if not isinstance(data, list):
                raise ValidationError(f"Stored {kind.value} is not a list", field=key)
            return [from_plain(kind, item) for item in data]
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Stored {kind.value} unreadable ({e}); using seed data")
            return seed_for(kind)

    def clear(self, kind: Optional[EntityKind] = None) -> None:
        """Remove one collection, or every collection in this namespace."""
        self.initialize()
        with self.transaction() as conn:
            if kind is None:
                conn.execute(
                    "DELETE FROM local_storage WHERE key LIKE ?", (f"{self.namespace}-%",)
                )
            else:
                conn.execute("DELETE FROM local_storage WHERE key = ?", (self.key_for(kind),))

    def close(self) -> None:
        conn = getattr(self._local, "connection", None)
        if conn is not None:
            conn.close()
            self._local.connection = None
