"""
Lookup structures over an OCELLog.

The index is built once per log snapshot and shared by every builder:
- object-by-id
- events-by-related-object-id, sorted by timestamp (stable: ties keep log order)
- object-type membership in document order
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from .models import OCELEvent, OCELLog, OCELObject

logger = logging.getLogger(__name__)


class LogIndex:
    """
    Read-only index over an OCEL log.

    Example:
        index = LogIndex(log)
        lead_type = index.resolve_lead_type("MAT_PLA")
        for material in index.objects_of_type(lead_type):
            history = index.events_for(material.id)
    """

    def __init__(self, log: OCELLog):
        """
        Build the index.

        Args:
            log: The log snapshot to index
        """
        self.log = log
        self._objects: Dict[str, OCELObject] = {}
        self._by_type: Dict[str, List[OCELObject]] = defaultdict(list)
        self._events_by_object: Dict[str, List[OCELEvent]] = defaultdict(list)

        for obj in log.objects:
            # First definition wins for duplicated ids
            if obj.id not in self._objects:
                self._objects[obj.id] = obj
                self._by_type[obj.type].append(obj)

        for event in log.events:
            seen = set()
            for rel in event.relationships:
                # An event qualified twice for the same object is still one event
                if rel.object_id in seen:
                    continue
                seen.add(rel.object_id)
                self._events_by_object[rel.object_id].append(event)

        for events in self._events_by_object.values():
            events.sort(key=lambda e: e.timestamp)

        logger.debug(
            f"Indexed {len(self._objects)} objects, {len(log.events)} events, "
            f"{len(self._by_type)} object types"
        )

    @property
    def object_type_names(self) -> List[str]:
        """Selectable object type names: declared types first, then any used ones."""
        names = list(self.log.object_type_names)
        for type_name in self._by_type:
            if type_name not in names:
                names.append(type_name)
        return names

    def get_object(self, object_id: str) -> Optional[OCELObject]:
        """Look up an object; None for unknown ids."""
        return self._objects.get(object_id)

    def object_type(self, object_id: str) -> Optional[str]:
        """Type of an object; None for unknown ids."""
        obj = self._objects.get(object_id)
        return obj.type if obj is not None else None

    def objects_of_type(self, type_name: str) -> List[OCELObject]:
        """All objects of a type, in log order."""
        return list(self._by_type.get(type_name, []))

    def events_for(self, object_id: str) -> List[OCELEvent]:
        """Events directly related to an object, oldest first."""
        return list(self._events_by_object.get(object_id, []))

    def resolve_lead_type(self, requested: Optional[str]) -> Optional[str]:
        """
        Validate a lead object type.

        Unknown types fall back to the first available object type instead
        of failing.

        Args:
            requested: The requested lead object type

        Returns:
            The requested type if known, else the first available type,
            or None when the log has no object types at all
        """
        available = self.object_type_names
        if requested in available:
            return requested
        if not available:
            logger.warning("Log has no object types; no lead type available")
            return None
        logger.warning(
            f"Unknown lead object type '{requested}', falling back to '{available[0]}'"
        )
        return available[0]
