"""
Symbolic transaction construction for frequent-pattern mining.

Each lead-object instance (or status segment of it) becomes one transaction:
a set of string tokens describing its behavior. Two token families exist:

- Event-to-object edges:   "Goods Receipt-->SUPPLIER(e2o)"
- Directly-follows n-grams: "Goods Receipt-->Goods Issue(df_MAT_PLA)"

The n-gram family is produced per object touched by the segment and tagged
with that object's type; optionally a GLOBAL n-gram family covers the whole
segment regardless of object grouping.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..ocel.index import LogIndex
from ..ocel.models import OCELEvent
from .segments import DEFAULT_STATUS_ATTRIBUTES, split_segments

logger = logging.getLogger(__name__)

# Token syntax
STEP_SEPARATOR = "-->"
E2O_TAG = "e2o"
DF_TAG_PREFIX = "df_"
GLOBAL_SCOPE = "GLOBAL"
KEY_SEPARATOR = "|"

# Related object types that yield e2o tokens by default
DEFAULT_E2O_OBJECT_TYPES = ("PO_ITEM", "SO_ITEM", "SUPPLIER")

# Object types whose instance id is used as label in instance labelling mode
ID_LABELLED_TYPES = ("SUPPLIER",)


def e2o_token(event_type: str, label: str) -> str:
    """Build an event-to-object token."""
    return f"{event_type}{STEP_SEPARATOR}{label}({E2O_TAG})"


def df_token(event_types: Sequence[str], scope: str) -> str:
    """Build a directly-follows n-gram token for an object type or GLOBAL."""
    return f"{STEP_SEPARATOR.join(event_types)}({DF_TAG_PREFIX}{scope})"


def parse_token(token: str) -> Optional[Tuple[List[str], str]]:
    """
    Split a token into its steps and tag.

    Args:
        token: A token such as "A-->B(df_MAT_PLA)"

    Returns:
        (steps, tag) such as (["A", "B"], "df_MAT_PLA"), or None if the token
        does not end with a parenthesised tag
    """
    open_idx = token.rfind("(")
    if open_idx == -1 or not token.endswith(")"):
        return None
    base = token[:open_idx]
    tag = token[open_idx + 1:-1]
    return base.split(STEP_SEPARATOR), tag


def contains_marker(tokens: Iterable[str], marker: Optional[str]) -> bool:
    """True if any token contains the marker substring (always True without a marker)."""
    if not marker:
        return True
    return any(marker in token for token in tokens)


@dataclass
class Transaction:
    """
    Symbolic transaction of one lead instance segment.

    Attributes:
        lead_id: Id of the lead object instance
        segment: Index of the status segment within the instance (0 if unsegmented)
        tokens: Unique tokens in first-appearance order
    """
    lead_id: str
    segment: int
    tokens: Tuple[str, ...]
    items: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self.items = frozenset(self.tokens)

    @property
    def key(self) -> str:
        """Canonical, order-independent signature of the token set."""
        return KEY_SEPARATOR.join(sorted(self.tokens))

    def __len__(self) -> int:
        return len(self.tokens)

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary."""
        return {
            'lead_id': self.lead_id,
            'segment': self.segment,
            'tokens': list(self.tokens),
        }


@dataclass
class TransactionConfig:
    """
    Configuration for transaction construction.

    Attributes:
        df_window: Length n of directly-follows n-grams (>= 1)
        include_e2o: Emit event-to-object tokens
        include_global: Emit GLOBAL n-grams over the whole segment
        e2o_object_types: Related object types that yield e2o tokens
        e2o_label: "type" labels e2o tokens by object type, "instance" by a
            per-transaction instance label (suppliers keep their id)
        status: Status value to segment on; None or "All" disables segmentation
        status_attributes: Attribute names holding the event status
    """
    df_window: int = 2
    include_e2o: bool = True
    include_global: bool = False
    e2o_object_types: Tuple[str, ...] = DEFAULT_E2O_OBJECT_TYPES
    e2o_label: str = "type"
    status: Optional[str] = None
    status_attributes: Tuple[str, ...] = DEFAULT_STATUS_ATTRIBUTES

    def __post_init__(self):
        if self.df_window < 1:
            raise ValueError(f"df_window must be >= 1, got {self.df_window}")
        if self.e2o_label not in ("type", "instance"):
            raise ValueError(f"e2o_label must be 'type' or 'instance', got {self.e2o_label!r}")


class TransactionBuilder:
    """
    Builds symbolic transactions for every instance of a lead object type.

    Example:
        builder = TransactionBuilder(TransactionConfig(df_window=2))
        transactions = builder.build(LogIndex(log), "MAT_PLA")
    """

    def __init__(self, config: Optional[TransactionConfig] = None):
        """
        Initialize the builder.

        Args:
            config: Transaction construction settings
        """
        self.config = config or TransactionConfig()

    def build(self, index: LogIndex, lead_type: str) -> List[Transaction]:
        """
        Build transactions for all lead instances.

        Args:
            index: Index over the log snapshot
            lead_type: Lead object type

        Returns:
            One transaction per retained lead instance segment, in log order.
            Transactions without tokens are dropped.
        """
        transactions = []
        n_instances = 0
        n_empty = 0

        for lead in index.objects_of_type(lead_type):
            n_instances += 1
            history = index.events_for(lead.id)
            segments = split_segments(
                history, self.config.status, self.config.status_attributes
            )
            for seg_idx, segment in enumerate(segments):
                tokens = self.segment_tokens(index, lead.id, lead_type, segment)
                if not tokens:
                    n_empty += 1
                    continue
                transactions.append(Transaction(lead_id=lead.id, segment=seg_idx, tokens=tokens))

        logger.info(
            f"Built {len(transactions)} transactions from {n_instances} "
            f"'{lead_type}' instances ({n_empty} empty segments dropped)"
        )
        return transactions

    def segment_tokens(
        self,
        index: LogIndex,
        lead_id: str,
        lead_type: str,
        segment: Sequence[OCELEvent],
    ) -> Tuple[str, ...]:
        """
        Derive the deduplicated token tuple of one segment.

        Args:
            index: Index over the log snapshot
            lead_id: Lead instance id
            lead_type: Lead object type
            segment: Time-ordered events of the segment

        Returns:
            Unique tokens in first-appearance order
        """
        tokens: List[str] = []

        if self.config.include_e2o:
            tokens.extend(self._e2o_tokens(index, lead_type, segment))

        # Events of the segment grouped by the objects they touch, in segment order
        events_by_object: Dict[str, List[OCELEvent]] = {}
        for event in segment:
            for object_id in dict.fromkeys(event.object_ids):
                events_by_object.setdefault(object_id, []).append(event)

        involved: List[Tuple[str, str]] = []
        for object_id in events_by_object:
            object_type = index.object_type(object_id)
            if object_type is not None:
                involved.append((object_id, object_type))
        if not any(object_id == lead_id for object_id, _ in involved):
            involved.append((lead_id, lead_type))

        n = self.config.df_window
        for object_id, object_type in involved:
            tokens.extend(self._ngrams(events_by_object.get(object_id, []), n, object_type))

        if self.config.include_global:
            tokens.extend(self._ngrams(segment, n, GLOBAL_SCOPE))

        return tuple(dict.fromkeys(tokens))

    def _e2o_tokens(
        self,
        index: LogIndex,
        lead_type: str,
        segment: Sequence[OCELEvent],
    ) -> List[str]:
        """Event-to-object tokens for allow-listed related object types."""
        allowed = set(self.config.e2o_object_types)
        allowed.discard(lead_type)

        tokens = []
        labels: Dict[str, str] = {}
        counters: Dict[str, int] = {}

        for event in segment:
            for object_id in event.object_ids:
                obj = index.get_object(object_id)
                if obj is None or obj.type not in allowed:
                    continue
                if self.config.e2o_label == "instance":
                    if obj.id not in labels:
                        counters[obj.type] = counters.get(obj.type, 0) + 1
                        labels[obj.id] = (
                            obj.id if obj.type in ID_LABELLED_TYPES
                            else f"{obj.type}{counters[obj.type]}"
                        )
                    label = labels[obj.id]
                else:
                    label = obj.type
                tokens.append(e2o_token(event.type, label))
        return tokens

    @staticmethod
    def _ngrams(events: Sequence[OCELEvent], n: int, scope: str) -> List[str]:
        """Directly-follows n-gram tokens over consecutive events."""
        if len(events) < n:
            return []
        return [
            df_token([e.type for e in events[i:i + n]], scope)
            for i in range(len(events) - n + 1)
        ]


def filter_transactions(
    transactions: Sequence[Transaction],
    marker: Optional[str],
) -> List[Transaction]:
    """
    Keep only transactions containing a token with the problem marker.

    Args:
        transactions: Transactions to filter
        marker: Substring to look for; None or empty keeps everything

    Returns:
        The retained transactions in input order
    """
    if not marker:
        return list(transactions)
    kept = [t for t in transactions if contains_marker(t.tokens, marker)]
    logger.info(f"Problem-marker pre-filter '{marker}' kept {len(kept)}/{len(transactions)} transactions")
    return kept


def build_transactions(
    index: LogIndex,
    lead_type: str,
    config: Optional[TransactionConfig] = None,
) -> List[Transaction]:
    """Convenience function for one-shot transaction construction."""
    return TransactionBuilder(config).build(index, lead_type)
