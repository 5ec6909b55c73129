"""
Variant grouping.

Partitions lead instances into equivalence classes of identical signature,
either the sorted-token transaction key or the ordered step signature of a
sequence. There is no threshold: every instance lands in exactly one variant.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from ..features.sequences import SequenceRecord
from ..features.transactions import Transaction

logger = logging.getLogger(__name__)


@dataclass
class Variant:
    """
    Lead instances sharing one signature.

    Attributes:
        signature: Canonical signature string
        tokens: Tokens (sorted) or steps (ordered) behind the signature
        object_ids: Member lead ids, unique, in first-appearance order
    """
    signature: str
    tokens: Tuple[str, ...]
    object_ids: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.object_ids)

    def to_filter(self) -> List[str]:
        """Member ids to hand to the log filter."""
        return list(self.object_ids)

    def to_dict(self) -> Dict[str, object]:
        return {
            'signature': self.signature,
            'tokens': list(self.tokens),
            'object_ids': list(self.object_ids),
            'count': self.count,
        }


def group_variants(pairs: Iterable[Tuple[str, str, Sequence[str]]]) -> List[Variant]:
    """
    Group (lead_id, signature, tokens) triples by exact signature.

    Args:
        pairs: One triple per lead instance or segment

    Returns:
        Variants sorted by member count descending; ties keep first appearance
    """
    variants: Dict[str, Variant] = {}
    members: Dict[str, set] = {}

    for lead_id, signature, tokens in pairs:
        variant = variants.get(signature)
        if variant is None:
            variant = Variant(signature=signature, tokens=tuple(tokens))
            variants[signature] = variant
            members[signature] = set()
        if lead_id not in members[signature]:
            members[signature].add(lead_id)
            variant.object_ids.append(lead_id)

    result = sorted(variants.values(), key=lambda v: -v.count)
    logger.info(f"Grouped {sum(v.count for v in result)} instances into {len(result)} variants")
    return result


def variants_from_transactions(transactions: Iterable[Transaction]) -> List[Variant]:
    """Variants keyed by the sorted token set of each transaction."""
    return group_variants(
        (t.lead_id, t.key, tuple(sorted(t.tokens))) for t in transactions
    )


def variants_from_sequences(records: Iterable[SequenceRecord]) -> List[Variant]:
    """Variants keyed by the ordered step signature of each sequence."""
    return group_variants(
        (r.lead_id, r.signature, r.steps) for r in records
    )
