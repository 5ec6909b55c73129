"""
Sequential pattern mining (PrefixSpan).

Patterns are grown by prefix extension over pseudo-projected databases: a
projection is a list of (sequence index, start offset) pairs instead of
copied suffixes. Within one (sub-)database an item counts once per sequence,
at its first occurrence, and the projection keeps the suffix strictly after
that occurrence.

The search is depth first and runs on an explicit stack, so long lifecycles
never hit the interpreter recursion limit. The returned list is stably
re-sorted by support descending; ties keep discovery order.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..features.sequences import SequenceRecord
from ..features.transactions import STEP_SEPARATOR

logger = logging.getLogger(__name__)

SequenceLike = Union[SequenceRecord, Sequence[str]]

# (sequence index, offset of the first item of the suffix)
Projection = List[Tuple[int, int]]


@dataclass(frozen=True)
class SequentialPattern:
    """An ordered, possibly non-contiguous subsequence and its support."""
    items: Tuple[str, ...]
    support: int

    @property
    def length(self) -> int:
        return len(self.items)

    @property
    def signature(self) -> str:
        return STEP_SEPARATOR.join(self.items)

    def to_dict(self) -> Dict[str, object]:
        return {
            'items': list(self.items),
            'support': self.support,
            'length': self.length,
        }


def min_support_count(n_sequences: int, percent: float, floor: int = 2) -> int:
    """
    Convert a percentage threshold into an absolute count.

    Args:
        n_sequences: Number of sequences
        percent: Minimum support in percent (0-100)
        floor: Lowest admissible count

    Returns:
        max(floor, ceil(n * percent / 100))
    """
    return max(floor, math.ceil(n_sequences * percent / 100))


def is_subsequence(pattern: Sequence[str], sequence: Sequence[str]) -> bool:
    """True if pattern occurs in sequence in order, gaps allowed."""
    remaining = iter(sequence)
    return all(any(item == step for step in remaining) for item in pattern)


def sequence_support(pattern: Sequence[str], sequences: Iterable[Sequence[str]]) -> int:
    """Number of sequences containing pattern as a subsequence."""
    return sum(1 for seq in sequences if is_subsequence(pattern, seq))


class SequentialPatternMiner:
    """
    PrefixSpan miner.

    Example:
        miner = SequentialPatternMiner()
        patterns = miner.mine([r.steps for r in records], min_support=2)
    """

    def __init__(self, max_pattern_length: Optional[int] = None):
        """
        Initialize the miner.

        Args:
            max_pattern_length: Stop extending prefixes at this length (None = unbounded)
        """
        if max_pattern_length is not None and max_pattern_length < 1:
            raise ValueError(f"max_pattern_length must be >= 1, got {max_pattern_length}")
        self.max_pattern_length = max_pattern_length

    def mine(self, sequences: Sequence[SequenceLike], min_support: int) -> List[SequentialPattern]:
        """
        Mine sequential patterns.

        Args:
            sequences: Sequence records or plain step lists; empty ones are ignored
            min_support: Absolute support threshold (values below 1 count as 1)

        Returns:
            Patterns sorted by support descending, ties in depth-first discovery order
        """
        min_support = max(1, int(min_support))
        database = [
            seq.steps if isinstance(seq, SequenceRecord) else tuple(seq)
            for seq in sequences
        ]
        database = [seq for seq in database if seq]
        if not database:
            return []

        discovered: List[SequentialPattern] = []
        root: Projection = [(i, 0) for i in range(len(database))]

        # Children are pushed in reverse so they pop in discovery order
        stack = list(reversed(self._extensions(database, (), root, min_support)))
        while stack:
            prefix, support, projection = stack.pop()
            discovered.append(SequentialPattern(items=prefix, support=support))

            if not projection:
                continue
            if self.max_pattern_length is not None and len(prefix) >= self.max_pattern_length:
                continue
            stack.extend(reversed(self._extensions(database, prefix, projection, min_support)))

        discovered.sort(key=lambda p: -p.support)
        logger.info(
            f"PrefixSpan found {len(discovered)} patterns in {len(database)} sequences "
            f"(min support {min_support})"
        )
        return discovered

    @staticmethod
    def _extensions(
        database: List[Tuple[str, ...]],
        prefix: Tuple[str, ...],
        projection: Projection,
        min_support: int,
    ) -> List[Tuple[Tuple[str, ...], int, Projection]]:
        """Frequent one-item extensions of a prefix with their projections."""
        counts: Dict[str, int] = {}
        projected: Dict[str, Projection] = {}

        for seq_idx, start in projection:
            sequence = database[seq_idx]
            seen = set()
            for pos in range(start, len(sequence)):
                item = sequence[pos]
                if item in seen:
                    continue
                seen.add(item)
                counts[item] = counts.get(item, 0) + 1
                suffix_start = pos + 1
                if suffix_start < len(sequence):
                    projected.setdefault(item, []).append((seq_idx, suffix_start))

        return [
            (prefix + (item,), count, projected.get(item, []))
            for item, count in counts.items()
            if count >= min_support
        ]


def mine_sequences(
    sequences: Sequence[SequenceLike],
    min_support_percent: float = 20.0,
    floor: int = 2,
) -> List[SequentialPattern]:
    """Convenience function: mine with a percentage threshold."""
    non_empty = [s for s in sequences if len(s)]
    min_support = min_support_count(len(non_empty), min_support_percent, floor)
    return SequentialPatternMiner().mine(non_empty, min_support)
