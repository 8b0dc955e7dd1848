# =============================================================================
# registry_core/data/supabase_client.py
# Supabase Client Configuration for the Product Registry
# Creates the remote client, or a stub client when Supabase is unavailable
# =============================================================================

from __future__ import annotations
import logging
from typing import Any

from registry_core.config import RemoteConfig
from registry_core.errors import RemoteStoreError, MOCK_MODE, TABLE_NOT_FOUND

logger = logging.getLogger(__name__)


class _StubQuery:
    """Chainable query whose execution always reports mock mode."""

    def __init__(self, table_name: str, reason: str):
        self._table_name = table_name
        self._reason = reason

    def __getattr__(self, name: str):
        if name.startswith("__"):
            raise AttributeError(name)

        # select/insert/delete/eq/order/range... all chain back to the stub
        def chain(*args, **kwargs):
            return self
        return chain

    def execute(self):
        raise RemoteStoreError(
            self._reason,
            code=MOCK_MODE,
            table=self._table_name,
        )


class StubSupabaseClient:
    """
    Stand-in client used when Supabase is not configured or failed to start.

    Every table operation raises ``RemoteStoreError`` with the ``MOCK_MODE``
    code, which lets callers tell "not configured" apart from "unreachable".
    """

    is_stub = True

    def __init__(self, reason: str = "Supabase niet geconfigureerd"):
        self.reason = reason

    def table(self, table_name: str) -> _StubQuery:
        return _StubQuery(table_name, self.reason)


def get_supabase_client(config: RemoteConfig) -> Any:
    """
    Initialize and return a Supabase client for ``config``.

    Returns:
        A ``supabase.Client``, or a ``StubSupabaseClient`` when the
        credentials are missing or the client could not be created
    """
    if not config.is_configured():
        logger.info("Supabase URL or anon key missing; using stub client")
        return StubSupabaseClient()

    try:
        from supabase import create_client

        client = create_client(config.url, config.key)
        logger.info("Supabase client initialized")
        return client
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        return StubSupabaseClient("Supabase initialisatie mislukt")


def is_stub_client(client: Any) -> bool:
    return getattr(client, "is_stub", False) is True


def translate_remote_error(error: Exception, table: str, operation: str) -> RemoteStoreError:
    """Normalize any client exception into a RemoteStoreError."""
    if isinstance(error, RemoteStoreError):
        return error

    message = getattr(error, "message", None) or str(error)
    code = "REMOTE_001"
    if "does not exist" in message or "Could not find the table" in message:
        code = TABLE_NOT_FOUND

    return RemoteStoreError(
        message,
        code=code,
        table=table,
        operation=operation,
        details={"remote_code": getattr(error, "code", None)},
    )
