"""
OCEL 2.0 Data Model.

Immutable representations of the four collections in an object-centric
event log:
- Object types (e.g., MAT_PLA, PO_ITEM, SUPPLIER)
- Event types (e.g., Goods Receipt, Goods Issue)
- Object instances with attributes and relationships
- Event instances with timestamps, attributes and object associations

A loaded OCELLog is a snapshot: every analysis runs over it without mutating it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class OCELRelationship:
    """A qualified link from an event or object to an object."""
    object_id: str
    qualifier: str = ""

    def to_ocel(self) -> Dict[str, str]:
        """Convert to OCEL 2.0 JSON format."""
        return {"objectId": self.object_id, "qualifier": self.qualifier}


@dataclass(frozen=True)
class OCELObjectType:
    """
    OCEL 2.0 object type definition.

    Used to enumerate the selectable lead object types of a log.
    """
    name: str
    attributes: Tuple[Dict[str, str], ...] = ()

    def to_ocel(self) -> Dict[str, Any]:
        """Convert to OCEL 2.0 JSON format."""
        return {
            "name": self.name,
            "attributes": list(self.attributes)
        }


@dataclass(frozen=True)
class OCELEventType:
    """OCEL 2.0 event type definition."""
    name: str
    attributes: Tuple[Dict[str, str], ...] = ()

    def to_ocel(self) -> Dict[str, Any]:
        """Convert to OCEL 2.0 JSON format."""
        return {
            "name": self.name,
            "attributes": list(self.attributes)
        }


@dataclass(frozen=True, eq=False)
class OCELObject:
    """
    OCEL 2.0 object instance.

    Represents a specific business object (e.g., one material in one plant).
    """
    id: str
    type: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    relationships: Tuple[OCELRelationship, ...] = ()

    def to_ocel(self) -> Dict[str, Any]:
        """Convert to OCEL 2.0 JSON format."""
        result = {
            "id": self.id,
            "type": self.type,
            "attributes": [
                {"name": name, "value": value}
                for name, value in self.attributes.items()
            ],
        }
        if self.relationships:
            result["relationships"] = [rel.to_ocel() for rel in self.relationships]
        return result


@dataclass(frozen=True, eq=False)
class OCELEvent:
    """
    OCEL 2.0 event instance.

    The type may encode a sub-activity in parentheses, e.g.
    "Goods Issue (Sale)"; base_activity strips it.
    """
    id: str
    type: str
    timestamp: datetime
    attributes: Dict[str, Any] = field(default_factory=dict)
    relationships: Tuple[OCELRelationship, ...] = ()

    @property
    def base_activity(self) -> str:
        """Event type without a parenthesised sub-activity."""
        return base_activity(self.type)

    @property
    def object_ids(self) -> List[str]:
        """Related object ids in relationship order."""
        return [rel.object_id for rel in self.relationships]

    def get_attribute(self, *names: str, default: Any = None) -> Any:
        """Return the first attribute present among names."""
        for name in names:
            if name in self.attributes:
                return self.attributes[name]
        return default

    def to_ocel(self) -> Dict[str, Any]:
        """Convert to OCEL 2.0 JSON format."""
        return {
            "id": self.id,
            "type": self.type,
            "time": self.timestamp.isoformat(),
            "attributes": [
                {"name": name, "value": value}
                for name, value in self.attributes.items()
            ],
            "relationships": [rel.to_ocel() for rel in self.relationships],
        }


@dataclass(frozen=True, eq=False)
class OCELLog:
    """A complete object-centric event log."""
    object_types: Tuple[OCELObjectType, ...] = ()
    event_types: Tuple[OCELEventType, ...] = ()
    objects: Tuple[OCELObject, ...] = ()
    events: Tuple[OCELEvent, ...] = ()

    @property
    def object_type_names(self) -> List[str]:
        """Declared object type names, in document order."""
        return [ot.name for ot in self.object_types]

    def replace(
        self,
        objects: Optional[Tuple[OCELObject, ...]] = None,
        events: Optional[Tuple[OCELEvent, ...]] = None,
    ) -> "OCELLog":
        """Return a new log sharing type definitions with this one."""
        return OCELLog(
            object_types=self.object_types,
            event_types=self.event_types,
            objects=self.objects if objects is None else tuple(objects),
            events=self.events if events is None else tuple(events),
        )

    def to_ocel(self) -> Dict[str, Any]:
        """Convert to the OCEL 2.0 JSON document shape."""
        return {
            "objectTypes": [ot.to_ocel() for ot in self.object_types],
            "eventTypes": [et.to_ocel() for et in self.event_types],
            "objects": [obj.to_ocel() for obj in self.objects],
            "events": [ev.to_ocel() for ev in self.events],
        }


def base_activity(event_type: str) -> str:
    """
    Strip a parenthesised sub-activity from an event type.

    Args:
        event_type: Event type such as "Goods Issue (Sale)"

    Returns:
        The activity name before the first "(", whitespace-trimmed
    """
    return event_type.split("(")[0].strip()
