# =============================================================================
# registry_core/offline/connectivity.py
# Connection Detection - selects connected or local mode for a session
# =============================================================================
"""
ConnectivityDetector - decides once, at session start, whether the remote
store is configured and reachable.

The check never raises. Missing credentials, a stub client (mock-mode
sentinel) or an unexpected exception select local mode. Any other read
error keeps the session connected; each collection then falls back to its
seed on its own.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from registry_core.config import RemoteConfig
from registry_core.errors import MOCK_MODE

if TYPE_CHECKING:
    from registry_core.data.entity_store import EntityStore

logger = logging.getLogger(__name__)


class SessionMode(Enum):
    """Where reads and writes go for the whole session."""
    CONNECTED = "connected"     # Remote store configured and answering
    LOCAL = "local"             # State lives in the local mirror only


@dataclass
class ConnectionState:
    """Outcome of the last check."""
    mode: Optional[SessionMode] = None
    configured: bool = False
    last_check: Optional[datetime] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    reason: str = "not checked"


class ConnectivityDetector:
    """
    Check the remote store once per session.

    Usage:
        detector = ConnectivityDetector(settings.remote, users_store)
        mode = detector.check()
    """

    def __init__(self, config: RemoteConfig, check_store: EntityStore):
        self.config = config
        self.check_store = check_store
        self._state = ConnectionState()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state.mode is SessionMode.CONNECTED

    def check(self) -> SessionMode:
        """
        Check credentials, then try one real read of the users table.

        Returns:
            SessionMode.CONNECTED when credentials are present and the trial
            read did not report the mock-mode sentinel
        """
        state = ConnectionState(last_check=datetime.now())
        try:
            state.configured = self.config.is_configured()
            if not state.configured:
                state.mode = SessionMode.LOCAL
                state.reason = "not configured"
            else:
                result = self.check_store.fetch_remote()
                if result.error_code == MOCK_MODE:
                    state.mode = SessionMode.LOCAL
                    state.reason = "mock mode"
                elif not result.success:
                    logger.warning(f"Trial read failed ({result.error_code}); staying connected")
                    state.mode = SessionMode.CONNECTED
                    state.reason = "connected, trial read failed"
                else:
                    state.mode = SessionMode.CONNECTED
                    state.reason = "connected"
                state.error_code = result.error_code
                state.error_message = result.error
        except Exception as e:
            logger.warning(f"Connectivity check failed: {e}")
            state.mode = SessionMode.LOCAL
            state.reason = "error"
            state.error_message = str(e)

        self._state = state
        logger.info(f"Session mode: {state.mode.value} ({state.reason})")
        return state.mode

    def get_status_display(self) -> dict:
        """Get status information for the UI status line."""
        if self._state.mode is SessionMode.CONNECTED:
            label = "Supabase verbonden"
        elif self._state.mode is SessionMode.LOCAL:
            label = f"Lokale data actief ({self._state.reason})"
        else:
            label = "Controleren..."

        return {
            "mode": self._state.mode.value if self._state.mode else None,
            "label": label,
            "configured": self._state.configured,
            "last_check": self._state.last_check.isoformat() if self._state.last_check else None,
            "error": self._state.error_message,
        }
