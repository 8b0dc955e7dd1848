# =============================================================================
# registry_core/data/realtime_client.py
# Realtime Client - async Supabase channels driven from synchronous code
# =============================================================================
"""
The synchronous ``supabase.Client`` cannot open realtime channels, so push
channels go through an ``AsyncClient`` whose event loop runs on a private
daemon thread. Callers stay synchronous: every call blocks until the loop
has done the work or ``timeout`` seconds have passed.

Usage:
    realtime = RealtimeClient(settings.remote)
    if realtime.start():
        handle = realtime.open_channel("users-changes", "users", on_change)
        ...
        handle.unsubscribe()
    realtime.close()
"""

from __future__ import annotations
import asyncio
import logging
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional

from registry_core.config import RemoteConfig
from registry_core.errors import ConfigurationError, RemoteStoreError

logger = logging.getLogger(__name__)

REALTIME_UNAVAILABLE = "REALTIME_UNAVAILABLE"

ChangeCallback = Callable[[Any], None]


class RealtimeChannelHandle:
    """An open channel; ``unsubscribe()`` removes it from the client."""

    def __init__(self, owner: "RealtimeClient", name: str, channel: Any):
        self.owner = owner
        self.name = name
        self.channel = channel

    def unsubscribe(self) -> None:
        self.owner.remove_channel(self.channel)
        logger.debug(f"Removed realtime channel {self.name}")


class RealtimeClient:
    """
    Owns one ``AsyncClient`` and the event loop thread it runs on.

    ``start()`` returns False when the socket cannot be opened and ``error``
    says why. ``close()`` is safe to call more than once.
    """

    def __init__(self, config: RemoteConfig, timeout: float = 10.0):
        self.config = config
        self.timeout = timeout
        self.error: Optional[str] = None
        self._client: Any = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_available(self) -> bool:
        return self._client is not None

    # =========================================================================
    # LOOP
    # =========================================================================

    def _start_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever,
            daemon=True,
            name="SupabaseRealtime",
        )
        self._thread.start()

    def _stop_loop(self) -> None:
        if self._loop is None:
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread:
            self._thread.join(timeout=5)
        if self._thread is None or not self._thread.is_alive():
            self._loop.close()
        self._loop = None
        self._thread = None

    def _run(self, coro) -> Any:
        """Run ``coro`` on the loop thread and wait for its result."""
        if self._loop is None:
            coro.close()
            raise RemoteStoreError("Realtime loop is not running", code=REALTIME_UNAVAILABLE)

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            future.cancel()
            raise RemoteStoreError(
                f"Realtime request timed out after {self.timeout}s",
                code=REALTIME_UNAVAILABLE,
            )

    # =========================================================================
    # CONNECTION
    # =========================================================================

    async def _connect(self) -> Any:
        from supabase import acreate_client

        client = await acreate_client(self.config.url, self.config.key)
        await client.realtime.connect()
        return client

    def start(self) -> bool:
        """
        Create the async client and open the realtime socket.

        Raises:
            ConfigurationError: when the Supabase credentials are missing
        """
        if self._client is not None:
            return True
        if not self.config.is_configured():
            raise ConfigurationError(
                "Realtime needs a Supabase url and anon key",
                config_key="supabase",
            )

        self._start_loop()
        try:
            self._client = self._run(self._connect())
        except Exception as e:
            self.error = str(e) or type(e).__name__
            logger.warning(f"Realtime unavailable: {self.error}")
            self._stop_loop()
            return False

        self.error = None
        logger.info("Realtime client connected")
        return True

    def close(self) -> None:
        """Close the socket and stop the loop thread."""
        if self._client is not None:
            try:
                self._run(self._client.realtime.close())
            except Exception as e:
                logger.warning(f"Error closing realtime socket: {e}")
            self._client = None
        self._stop_loop()

    # =========================================================================
    # CHANNELS
    # =========================================================================

    def _deliver(self, callback: ChangeCallback, payload: Any) -> None:
        try:
            callback(payload)
        except Exception as e:
            logger.error(f"Realtime callback failed: {e}")

    def open_channel(self, name: str, table: str, callback: ChangeCallback) -> RealtimeChannelHandle:
        """
        Listen for every postgres change on ``public.<table>``.

        ``callback`` runs on a worker thread, not on the loop, so it may
        make blocking calls such as a synchronous re-fetch.

        Raises:
            RemoteStoreError: when the client is not connected or the
                channel could not be joined in time
        """
        if self._client is None:
            raise RemoteStoreError(
                self.error or "Realtime client not started",
                code=REALTIME_UNAVAILABLE,
                table=table,
            )

        loop = self._loop

        def dispatch(payload: Any) -> None:
            loop.run_in_executor(None, self._deliver, callback, payload)

        def on_status(status: Any, error: Optional[Exception] = None) -> None:
            if error:
                logger.warning(f"{name} status {status}: {error}")
            else:
                logger.debug(f"{name} status: {status}")

        async def join() -> Any:
            channel = self._client.channel(name)
            channel.on_postgres_changes("*", schema="public", table=table, callback=dispatch)
            await channel.subscribe(on_status)
            return channel

        channel = self._run(join())
        return RealtimeChannelHandle(self, name, channel)

    def remove_channel(self, channel: Any) -> None:
        if self._client is None:
            return
        self._run(self._client.remove_channel(channel))
