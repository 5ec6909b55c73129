"""
Event context analysis: windowed before/after features and their
correlation with a selected activity.
"""

from .event_context import (
    ContextCorrelations,
    EventContextAnalyzer,
    activities,
    feature_key,
    pearson,
    scale_correlation,
)

__all__ = [
    "ContextCorrelations",
    "EventContextAnalyzer",
    "activities",
    "feature_key",
    "pearson",
    "scale_correlation",
]
