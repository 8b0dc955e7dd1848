# =============================================================================
# registry_core/offline/realtime.py
# Realtime Subscription Manager
# =============================================================================

from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from registry_core.data.models import EntityKind

logger = logging.getLogger(__name__)

# Receives (kind, full collection) for every push
PushHandler = Callable[[EntityKind, List[Any]], None]


class SubscriptionManager:
    """
    Opens one push channel per entity kind and closes them together.

    Usage:
        manager = SubscriptionManager(stores, session.apply_push)
        teardown = manager.attach_all()
        ...
        teardown()
    """

    def __init__(self, stores: Iterable[Any], on_push: PushHandler):
        self._stores = list(stores)
        self._on_push = on_push
        self._handles: Dict[EntityKind, Optional[Any]] = {}

    @property
    def handles(self) -> Dict[EntityKind, Optional[Any]]:
        return dict(self._handles)

    @property
    def active_count(self) -> int:
        return sum(1 for handle in self._handles.values() if handle is not None)

    def _callback_for(self, kind: EntityKind) -> Callable[[List[Any]], None]:
        def callback(collection: List[Any]) -> None:
            logger.debug(f"{kind.value} updated via subscription: {len(collection)}")
            self._on_push(kind, collection)
        return callback

    def attach_all(self) -> Callable[[], None]:
        """
        Subscribe every store.

        Returns:
            teardown function that unsubscribes every open handle
        """
        for store in self._stores:
            self._handles[store.kind] = store.subscribe(self._callback_for(store.kind))

        logger.info(f"Realtime subscriptions active: {self.active_count}/{len(self._stores)}")
        return self.teardown

    def teardown(self) -> None:
        """Unsubscribe every non-null handle; already-closed handles are tolerated."""
        for kind, handle in self._handles.items():
            if handle is None:
                continue
            try:
                handle.unsubscribe()
            except Exception as e:
                logger.warning(f"Error closing {kind.value} subscription: {e}")
        self._handles = {}
