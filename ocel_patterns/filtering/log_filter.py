"""
Restricting a log to a subset of objects.

Mining results (variants, pattern supporters) are exported as object
filters. Active filters combine with AND semantics: an object survives only
if every filter selects it, while one filter's id set is an OR over its ids.
The working log then keeps the events touching a surviving object or one of
its directly related objects (optionally limited to whitelisted types).
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..ocel.models import OCELLog

logger = logging.getLogger(__name__)


@dataclass
class ObjectFilter:
    """A named selection of object ids."""
    label: str
    object_type: str
    object_ids: Set[str] = field(default_factory=set)

    def __post_init__(self):
        self.object_ids = set(self.object_ids)

    def __contains__(self, object_id: str) -> bool:
        return object_id in self.object_ids

    def to_dict(self) -> Dict[str, object]:
        return {
            'label': self.label,
            'object_type': self.object_type,
            'object_ids': sorted(self.object_ids),
        }


@dataclass
class ActivityStat:
    """Frequency of one event type."""
    activity: str
    count: int
    percent: float

    def to_dict(self) -> Dict[str, object]:
        return {'activity': self.activity, 'count': self.count, 'percent': round(self.percent, 2)}


def surviving_ids(filters: Sequence[ObjectFilter]) -> Set[str]:
    """Intersection of the id sets of all filters."""
    if not filters:
        return set()
    result = set(filters[0].object_ids)
    for f in filters[1:]:
        result &= f.object_ids
    return result


def apply_filters(
    log: OCELLog,
    filters: Sequence[ObjectFilter],
    related_types: Optional[Iterable[str]] = None,
) -> OCELLog:
    """
    Restrict a log to the objects selected by all filters.

    Args:
        log: The unfiltered log snapshot
        filters: Active filters (none returns the log unchanged)
        related_types: Object types whose direct neighbours are pulled in;
            None pulls in neighbours of every type

    Returns:
        A new log with the retained events and the objects they reference
    """
    if not filters:
        return log

    allowed = set(related_types) if related_types is not None else None
    object_types = {obj.id: obj.type for obj in log.objects}
    survivors = surviving_ids(filters)

    trigger_ids = set(survivors)
    for event in log.events:
        ids = event.object_ids
        if not any(object_id in survivors for object_id in ids):
            continue
        for object_id in ids:
            if allowed is None or object_types.get(object_id) in allowed:
                trigger_ids.add(object_id)

    events = tuple(
        e for e in log.events
        if any(object_id in trigger_ids for object_id in e.object_ids)
    )
    referenced = {object_id for e in events for object_id in e.object_ids}
    objects = tuple(
        obj for obj in log.objects
        if obj.id in referenced or obj.id in survivors
    )

    logger.info(
        f"Filters {[f.label for f in filters]} kept {len(survivors)} objects, "
        f"{len(events)}/{len(log.events)} events"
    )
    return log.replace(objects=objects, events=events)


def activity_statistics(log: OCELLog, object_ids: Iterable[str]) -> List[ActivityStat]:
    """
    Event type frequencies among events touching any of the given objects.

    Returns:
        One row per event type, most frequent first
    """
    wanted = set(object_ids)
    counts = Counter(
        e.type for e in log.events
        if any(object_id in wanted for object_id in e.object_ids)
    )
    total = sum(counts.values())
    return [
        ActivityStat(activity=activity, count=count, percent=(count / total * 100) if total else 0.0)
        for activity, count in counts.most_common()
    ]
