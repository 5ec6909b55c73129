"""
Log filtering by object selections and activity statistics.
"""

from .log_filter import (
    ActivityStat,
    ObjectFilter,
    activity_statistics,
    apply_filters,
    surviving_ids,
)

__all__ = [
    "ActivityStat",
    "ObjectFilter",
    "activity_statistics",
    "apply_filters",
    "surviving_ids",
]
