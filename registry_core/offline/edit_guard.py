# =============================================================================
# registry_core/offline/edit_guard.py
# Edit-In-Progress Guard
# =============================================================================

from __future__ import annotations
import logging
import threading
from typing import Dict

from registry_core.data.models import EDITABLE_KINDS, EntityKind

logger = logging.getLogger(__name__)


class EditGuard:
    """
    Advisory flags that suppress realtime pushes while an edit dialog is open.

    Passed explicitly to whatever applies pushes; ``should_apply`` is the
    predicate it consults. A push dropped while a flag is set is not queued
    and is never replayed.
    """

    def __init__(self):
        self._flags: Dict[EntityKind, bool] = {kind: False for kind in EDITABLE_KINDS}
        self._dropped: Dict[EntityKind, int] = {kind: 0 for kind in EntityKind}
        self._lock = threading.Lock()

    def set_edit_in_progress(self, kind: EntityKind, editing: bool) -> None:
        if kind not in self._flags:
            raise ValueError(f"{kind.value} has no edit path")
        with self._lock:
            self._flags[kind] = bool(editing)
        logger.debug(f"Edit in progress for {kind.value}: {editing}")

    def is_editing(self, kind: EntityKind) -> bool:
        return self._flags.get(kind, False)

    def should_apply(self, kind: EntityKind) -> bool:
        """False while an edit for ``kind`` is open; the push is counted as dropped."""
        with self._lock:
            if self._flags.get(kind, False):
                self._dropped[kind] += 1
                return False
        return True

    def dropped_pushes(self, kind: EntityKind) -> int:
        return self._dropped[kind]
