"""
Status segmentation of a lead instance's event history.

With a status filter active, a time-ordered history is split into maximal
contiguous runs of events whose status attribute equals the filter value;
events in any other status are discarded. Without a filter the whole history
is a single segment.
"""

from typing import List, Optional, Sequence

from ..ocel.models import OCELEvent

# Status filter value meaning "no segmentation"
ALL_STATUSES = "All"

# Attribute names holding the status of an event, in lookup order
DEFAULT_STATUS_ATTRIBUTES = ("Current Status", "Status")


def is_segmenting(status: Optional[str]) -> bool:
    """True when a status value actually restricts the history."""
    return bool(status) and status != ALL_STATUSES


def event_status(
    event: OCELEvent,
    status_attributes: Sequence[str] = DEFAULT_STATUS_ATTRIBUTES,
) -> str:
    """Status of an event as a string; empty when the attribute is absent."""
    value = event.get_attribute(*status_attributes)
    return "" if value is None else str(value)


def split_segments(
    events: Sequence[OCELEvent],
    status: Optional[str] = None,
    status_attributes: Sequence[str] = DEFAULT_STATUS_ATTRIBUTES,
) -> List[List[OCELEvent]]:
    """
    Split a time-ordered history into status segments.

    Args:
        events: Events of one lead instance, oldest first
        status: Status value to keep, or None / "All" for no segmentation
        status_attributes: Attribute names holding the status

    Returns:
        List of non-empty segments, each preserving the input order
    """
    if not events:
        return []
    if not is_segmenting(status):
        return [list(events)]

    segments: List[List[OCELEvent]] = []
    current: List[OCELEvent] = []
    for event in events:
        if event_status(event, status_attributes) == status:
            current.append(event)
        elif current:
            segments.append(current)
            current = []
    if current:
        segments.append(current)
    return segments
