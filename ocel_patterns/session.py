"""
Interactive analysis session.

A thin observer wrapper over the pure engine: it owns the base log, the
active object filters and the current config. Every change recomputes the
complete AnalysisSnapshot from scratch and only then publishes it to the
subscribed handlers, so a subscriber never sees a partially updated result.

Handler failures are logged and do not interrupt the other handlers.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .config import MiningConfig
from .engine import AnalysisSnapshot, compute
from .filtering.log_filter import ObjectFilter, apply_filters
from .mining.variants import Variant
from .ocel.models import OCELLog

logger = logging.getLogger(__name__)


class SnapshotHandler(ABC):
    """Receives every published snapshot."""

    @abstractmethod
    def handle(self, snapshot: AnalysisSnapshot) -> None:
        """
        Handle a snapshot.

        Args:
            snapshot: The freshly computed result set
        """
        pass


class CallbackSnapshotHandler(SnapshotHandler):
    """Handler that calls a callback function."""

    def __init__(self, callback: Callable[[AnalysisSnapshot], None]):
        self._callback = callback

    def handle(self, snapshot: AnalysisSnapshot) -> None:
        """Call the callback with the snapshot."""
        self._callback(snapshot)


class HistorySnapshotHandler(SnapshotHandler):
    """Keeps the most recent snapshots in memory."""

    def __init__(self, max_size: int = 10):
        self._history: deque = deque(maxlen=max_size)

    def handle(self, snapshot: AnalysisSnapshot) -> None:
        self._history.append(snapshot)

    @property
    def snapshots(self) -> List[AnalysisSnapshot]:
        return list(self._history)

    @property
    def latest(self) -> Optional[AnalysisSnapshot]:
        return self._history[-1] if self._history else None


class AnalysisSession:
    """
    Recomputes and publishes analysis results as parameters change.

    Example:
        session = AnalysisSession(load_ocel("log.json"))
        session.subscribe(lambda snap: print(len(snap.variants)))
        session.refresh()
        session.update_config(status="Understock")
        filter_id = session.add_variant_filter(session.snapshot.variants[0])
    """

    def __init__(
        self,
        log: OCELLog,
        config: Optional[MiningConfig] = None,
        related_types: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the session.

        Args:
            log: Unfiltered base log
            config: Initial configuration
            related_types: Object types pulled in next to filtered objects
                (None pulls in every directly related object)
        """
        self.base_log = log
        self.config = config or MiningConfig()
        self.related_types = tuple(related_types) if related_types is not None else None
        self.snapshot: Optional[AnalysisSnapshot] = None

        self._filters: Dict[int, ObjectFilter] = {}
        self._next_filter_id = 1
        self._handlers: List[SnapshotHandler] = []

    @property
    def filters(self) -> Dict[int, ObjectFilter]:
        return dict(self._filters)

    @property
    def working_log(self) -> OCELLog:
        """Base log restricted by the active filters."""
        return apply_filters(self.base_log, list(self._filters.values()), self.related_types)

    def subscribe(
        self,
        handler: Union[SnapshotHandler, Callable[[AnalysisSnapshot], None]],
    ) -> SnapshotHandler:
        """
        Register a handler or callback.

        A current snapshot, if any, is delivered immediately.

        Returns:
            The registered handler (needed to unsubscribe a plain callback)
        """
        if not isinstance(handler, SnapshotHandler):
            handler = CallbackSnapshotHandler(handler)
        self._handlers.append(handler)
        if self.snapshot is not None:
            self._deliver(handler, self.snapshot)
        return handler

    def unsubscribe(self, handler: SnapshotHandler) -> bool:
        if handler in self._handlers:
            self._handlers.remove(handler)
            return True
        return False

    def refresh(self) -> AnalysisSnapshot:
        """Recompute everything and publish the new snapshot."""
        snapshot = compute(self.working_log, self.config)
        self.config = snapshot.config
        self.snapshot = snapshot
        for handler in list(self._handlers):
            self._deliver(handler, snapshot)
        return snapshot

    def update_config(self, **changes: Any) -> AnalysisSnapshot:
        """Apply config changes and recompute."""
        self.config = self.config.with_overrides(**changes)
        return self.refresh()

    def add_filter(self, object_filter: ObjectFilter) -> int:
        """Activate a filter, recompute, and return its id."""
        filter_id = self._next_filter_id
        self._next_filter_id += 1
        self._filters[filter_id] = object_filter
        self.refresh()
        return filter_id

    def add_variant_filter(self, variant: Variant, label: Optional[str] = None) -> int:
        """Activate a filter selecting the members of a variant."""
        return self.add_filter(ObjectFilter(
            label=label or f"Variant ({variant.count})",
            object_type=self.config.lead_object_type,
            object_ids=set(variant.to_filter()),
        ))

    def remove_filter(self, filter_id: int) -> bool:
        """Deactivate a filter; recomputes only if it existed."""
        if filter_id not in self._filters:
            return False
        del self._filters[filter_id]
        self.refresh()
        return True

    def clear_filters(self) -> None:
        self._filters.clear()
        self.refresh()

    @staticmethod
    def _deliver(handler: SnapshotHandler, snapshot: AnalysisSnapshot) -> None:
        try:
            handler.handle(snapshot)
        except Exception as e:
            logger.error(f"Handler {type(handler).__name__} failed: {e}")
