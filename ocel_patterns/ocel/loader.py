"""
OCEL 2.0 JSON loader.

Parses an OCEL 2.0 JSON document into an immutable OCELLog. The document is
consumed once per load; there is no partial or streaming ingestion.

Validation follows a two-tier approach:
- Structural problems (wrong top-level shape, events without id/type/time,
  unparseable timestamps) are collected as errors and raised once as an
  OCELFormatError.
- Missing optional data (no attributes, no relationships, relationships to
  unknown objects, undeclared types) is collected as warnings and logged.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..errors import OCELFormatError
from .models import (
    OCELEvent,
    OCELEventType,
    OCELLog,
    OCELObject,
    OCELObjectType,
    OCELRelationship,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of document validation."""
    valid: bool = True
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.valid = False
        self.errors.append(message)


class OCELLoader:
    """Loads OCEL 2.0 JSON documents into OCELLog snapshots."""

    # Top-level collections: normalized name -> accepted keys
    COLLECTION_KEYS = {
        'objectTypes': ['objectTypes', 'object_types'],
        'eventTypes': ['eventTypes', 'event_types'],
        'objects': ['objects'],
        'events': ['events'],
    }

    # Timestamp formats tried after ISO 8601 parsing fails
    TIMESTAMP_FORMATS = [
        "%Y-%m-%d",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%dT%H:%M:%S.%f",
        "%Y-%m-%d %H:%M:%S",
        "%d.%m.%Y",
        "%Y%m%d",
    ]

    def __init__(self):
        """Initialize the loader."""
        self.validation = ValidationResult()

    def load(self, path: Union[str, Path]) -> OCELLog:
        """
        Load an OCEL 2.0 JSON file.

        Args:
            path: Path to the .json / .jsonocel file

        Returns:
            The parsed OCELLog

        Raises:
            OCELFormatError: If the file is missing, not JSON, or structurally invalid
        """
        file_path = Path(path)
        if not file_path.exists():
            raise OCELFormatError(f"OCEL file not found: {file_path}")

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise OCELFormatError(f"Failed to parse {file_path.name}: {e}") from e

        log = self.parse(document)
        logger.info(
            f"Loaded {len(log.events)} events and {len(log.objects)} objects "
            f"from {file_path.name}"
        )
        return log

    def parse(self, document: Any) -> OCELLog:
        """
        Parse an already-decoded OCEL 2.0 document.

        Args:
            document: Dictionary with objectTypes, eventTypes, objects, events

        Returns:
            The parsed OCELLog

        Raises:
            OCELFormatError: If the document is structurally invalid
        """
        self.validation = ValidationResult()

        if not isinstance(document, dict):
            raise OCELFormatError(
                "OCEL document must be a JSON object",
                [f"got {type(document).__name__}"],
            )

        raw = {name: self._collection(document, name) for name in self.COLLECTION_KEYS}

        object_types = tuple(
            OCELObjectType(name=str(t.get('name')), attributes=tuple(t.get('attributes') or ()))
            for t in raw['objectTypes'] if isinstance(t, dict) and t.get('name') is not None
        )
        event_types = tuple(
            OCELEventType(name=str(t.get('name')), attributes=tuple(t.get('attributes') or ()))
            for t in raw['eventTypes'] if isinstance(t, dict) and t.get('name') is not None
        )

        objects = tuple(
            obj for obj in (
                self._parse_object(i, o) for i, o in enumerate(raw['objects'])
            ) if obj is not None
        )
        events = tuple(
            ev for ev in (
                self._parse_event(i, e) for i, e in enumerate(raw['events'])
            ) if ev is not None
        )

        if not self.validation.valid:
            raise OCELFormatError("Invalid OCEL document", self.validation.errors)

        # Object types used but not declared still count as selectable lead types
        declared = {ot.name for ot in object_types}
        undeclared = []
        for obj in objects:
            if obj.type not in declared:
                declared.add(obj.type)
                undeclared.append(obj.type)
        if undeclared:
            self.validation.warnings.append(f"Undeclared object types: {undeclared}")
            object_types = object_types + tuple(OCELObjectType(name=n) for n in undeclared)

        self._check_references(objects, events)

        for warning in self.validation.warnings:
            logger.warning(warning)

        return OCELLog(
            object_types=object_types,
            event_types=event_types,
            objects=objects,
            events=events,
        )

    def _collection(self, document: Dict[str, Any], name: str) -> List[Any]:
        """Fetch a top-level collection, accepting alternate key spellings."""
        for key in self.COLLECTION_KEYS[name]:
            if key in document:
                value = document[key]
                if value is None:
                    return []
                if not isinstance(value, list):
                    self.validation.add_error(f"'{key}' must be a list")
                    return []
                return value
        if name in ('objects', 'events'):
            self.validation.add_error(f"Missing required collection '{name}'")
        else:
            self.validation.warnings.append(f"Missing collection '{name}'")
        return []

    def _parse_object(self, position: int, raw: Any) -> Optional[OCELObject]:
        """Parse one object entry."""
        if not isinstance(raw, dict):
            self.validation.add_error(f"objects[{position}] is not an object")
            return None
        if raw.get('id') is None or raw.get('type') is None:
            self.validation.add_error(f"objects[{position}] lacks id or type")
            return None

        return OCELObject(
            id=str(raw['id']),
            type=str(raw['type']),
            attributes=self._parse_attributes(raw.get('attributes')),
            relationships=self._parse_relationships(raw.get('relationships')),
        )

    def _parse_event(self, position: int, raw: Any) -> Optional[OCELEvent]:
        """Parse one event entry."""
        if not isinstance(raw, dict):
            self.validation.add_error(f"events[{position}] is not an object")
            return None
        if raw.get('id') is None or raw.get('type') is None:
            self.validation.add_error(f"events[{position}] lacks id or type")
            return None

        timestamp = parse_timestamp(raw.get('time', raw.get('timestamp')))
        if timestamp is None:
            self.validation.add_error(
                f"events[{position}] ({raw.get('id')}) has a missing or unparseable time"
            )
            return None

        return OCELEvent(
            id=str(raw['id']),
            type=str(raw['type']),
            timestamp=timestamp,
            attributes=self._parse_attributes(raw.get('attributes')),
            relationships=self._parse_relationships(raw.get('relationships')),
        )

    def _parse_attributes(self, raw: Any) -> Dict[str, Any]:
        """
        Normalize attributes to a name -> value mapping.

        OCEL 2.0 stores attributes as a list of {name, value[, time]} records;
        a plain mapping is accepted as well. For time-stamped object attributes
        the last record wins.
        """
        if not raw:
            return {}
        if isinstance(raw, dict):
            return dict(raw)

        attributes = {}
        for entry in raw:
            if isinstance(entry, dict) and 'name' in entry:
                attributes[str(entry['name'])] = entry.get('value')
        return attributes

    def _parse_relationships(self, raw: Any) -> Tuple[OCELRelationship, ...]:
        """Parse a relationship list, skipping entries without an object id."""
        if not raw:
            return ()

        relationships = []
        for entry in raw:
            if isinstance(entry, dict) and entry.get('objectId') is not None:
                relationships.append(OCELRelationship(
                    object_id=str(entry['objectId']),
                    qualifier=str(entry.get('qualifier') or ''),
                ))
        return tuple(relationships)

    def _check_references(self, objects: Tuple[OCELObject, ...], events: Tuple[OCELEvent, ...]) -> None:
        """Record (but tolerate) relationships pointing at unknown objects."""
        known = {obj.id for obj in objects}
        dangling = sum(
            1 for ev in events for rel in ev.relationships
            if rel.object_id not in known
        )
        if dangling:
            self.validation.warnings.append(
                f"{dangling} event relationships reference unknown objects"
            )


def parse_timestamp(value: Optional[Union[str, datetime]]) -> Optional[datetime]:
    """
    Parse a timestamp into a timezone-aware datetime.

    Naive values are interpreted as UTC so that all timestamps of a log
    compare with each other.

    Args:
        value: ISO 8601 string, datetime, or one of the fallback formats

    Returns:
        Parsed datetime, or None if the value cannot be parsed
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'

        parsed = None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            for fmt in OCELLoader.TIMESTAMP_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue

        if parsed is None:
            logger.debug(f"Could not parse timestamp: {value}")
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def load_ocel(path: Union[str, Path]) -> OCELLog:
    """Convenience function: load an OCEL 2.0 JSON file."""
    return OCELLoader().load(path)


def parse_ocel(document: Dict[str, Any]) -> OCELLog:
    """Convenience function: parse a decoded OCEL 2.0 document."""
    return OCELLoader().parse(document)
