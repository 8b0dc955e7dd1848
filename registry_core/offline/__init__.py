# =============================================================================
# registry_core/offline/__init__.py
# Connected/Local Mode Support
# =============================================================================
"""
Pieces that let a session run against Supabase or, when it is unavailable,
entirely from local storage.

    ConnectivityDetector  picks the session mode once at start
    LocalMirror           persists collections while in local mode
    SubscriptionManager   realtime push channels while connected
    EditGuard             suppresses pushes while an edit is open
"""

from registry_core.offline.connectivity import (
    ConnectivityDetector,
    ConnectionState,
    SessionMode,
)
from registry_core.offline.edit_guard import EditGuard
from registry_core.offline.local_mirror import LocalMirror
from registry_core.offline.realtime import SubscriptionManager

__all__ = [
    "ConnectivityDetector",
    "ConnectionState",
    "SessionMode",
    "EditGuard",
    "LocalMirror",
    "SubscriptionManager",
]
