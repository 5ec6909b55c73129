"""
OCEL 2.0 log model, loader and index.

Main components:
- models: immutable event/object/type dataclasses and the OCELLog snapshot
- loader: JSON parsing with structural validation
- index: lookup structures shared by all builders

Example usage:
    from ocel_patterns.ocel import load_ocel, LogIndex

    log = load_ocel("example_ocel.json")
    index = LogIndex(log)
    lead_type = index.resolve_lead_type("MAT_PLA")
"""

from .models import (
    OCELEvent,
    OCELEventType,
    OCELLog,
    OCELObject,
    OCELObjectType,
    OCELRelationship,
    base_activity,
)

from .loader import (
    OCELLoader,
    ValidationResult,
    load_ocel,
    parse_ocel,
    parse_timestamp,
)

from .index import LogIndex

__all__ = [
    # Models
    "OCELEvent",
    "OCELEventType",
    "OCELLog",
    "OCELObject",
    "OCELObjectType",
    "OCELRelationship",
    "base_activity",
    # Loader
    "OCELLoader",
    "ValidationResult",
    "load_ocel",
    "parse_ocel",
    "parse_timestamp",
    # Index
    "LogIndex",
]
