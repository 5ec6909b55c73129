"""
Ordered event sequences per lead instance.

Sequences are the input of sequential-pattern mining and of step-based
variant grouping. A step is either the plain event type or, in signature
mode, the event type tagged with the multiset of object types it touches
besides the lead type, e.g. "Goods Receipt[PO_ITEM,SUPPLIER]".
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..ocel.index import LogIndex
from ..ocel.models import OCELEvent
from .segments import DEFAULT_STATUS_ATTRIBUTES, split_segments
from .transactions import STEP_SEPARATOR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SequenceRecord:
    """Ordered steps of one lead instance segment."""
    lead_id: str
    segment: int
    steps: Tuple[str, ...]

    @property
    def signature(self) -> str:
        """Order-preserving signature of the steps."""
        return STEP_SEPARATOR.join(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def to_dict(self) -> Dict[str, object]:
        return {
            'lead_id': self.lead_id,
            'segment': self.segment,
            'steps': list(self.steps),
        }


class SequenceBuilder:
    """
    Builds one step sequence per lead instance (or status segment).

    Example:
        builder = SequenceBuilder(status="Understock")
        records = builder.build(LogIndex(log), "MAT_PLA")
        sequences = [r.steps for r in records]
    """

    def __init__(
        self,
        status: Optional[str] = None,
        signature_steps: bool = False,
        status_attributes: Tuple[str, ...] = DEFAULT_STATUS_ATTRIBUTES,
    ):
        """
        Initialize the builder.

        Args:
            status: Status value to segment on; None or "All" disables segmentation
            signature_steps: Tag each event type with its related object types
            status_attributes: Attribute names holding the event status
        """
        self.status = status
        self.signature_steps = signature_steps
        self.status_attributes = status_attributes

    def build(self, index: LogIndex, lead_type: str) -> List[SequenceRecord]:
        """
        Build sequences for all lead instances, in log order.

        Segments without events never produce a record.
        """
        records = []
        for lead in index.objects_of_type(lead_type):
            segments = split_segments(
                index.events_for(lead.id), self.status, self.status_attributes
            )
            for seg_idx, segment in enumerate(segments):
                steps = tuple(self.step(index, lead_type, e) for e in segment)
                if steps:
                    records.append(SequenceRecord(lead_id=lead.id, segment=seg_idx, steps=steps))

        logger.info(f"Built {len(records)} sequences for '{lead_type}'")
        return records

    def step(self, index: LogIndex, lead_type: str, event: OCELEvent) -> str:
        """Step label of a single event."""
        if not self.signature_steps:
            return event.type
        related = sorted(
            object_type for object_type in (
                index.object_type(object_id) for object_id in event.object_ids
            )
            if object_type is not None and object_type != lead_type
        )
        return f"{event.type}[{','.join(related)}]"


def build_sequences(
    index: LogIndex,
    lead_type: str,
    status: Optional[str] = None,
    signature_steps: bool = False,
) -> List[SequenceRecord]:
    """Convenience function for one-shot sequence construction."""
    return SequenceBuilder(status=status, signature_steps=signature_steps).build(index, lead_type)
