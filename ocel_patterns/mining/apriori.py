"""
Frequent itemset mining over symbolic transactions.

Level-wise Apriori search with a hard cap that bounds both the number of live
candidates per level and the number of recorded results. Once the cap fires
the result is partial: every reported support is still an exact count, only
recall is reduced, and the result carries truncated=True.

Post-processing (select_patterns) filters by size and problem marker, ranks by
(support desc, size desc) and reduces the ranking to maximal patterns.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from ..features.transactions import Transaction, contains_marker

logger = logging.getLogger(__name__)

# Default bound on candidates per level and on recorded results
DEFAULT_MAX_CANDIDATES = 3000

TransactionLike = Union[Transaction, Iterable[str]]


@dataclass(frozen=True)
class Pattern:
    """
    A frequent itemset.

    Attributes:
        items: Tokens of the itemset, sorted
        support: Number of transactions containing every token
    """
    items: Tuple[str, ...]
    support: int

    @property
    def size(self) -> int:
        return len(self.items)

    @property
    def item_set(self) -> FrozenSet[str]:
        return frozenset(self.items)

    def relative_support(self, n_transactions: int) -> float:
        """Support as a fraction of the transaction count (0 for no transactions)."""
        return self.support / n_transactions if n_transactions else 0.0

    def has_marker(self, marker: Optional[str]) -> bool:
        return contains_marker(self.items, marker)

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary."""
        return {
            'items': list(self.items),
            'support': self.support,
            'size': self.size,
        }


@dataclass
class AprioriResult:
    """
    Outcome of one mining run.

    Attributes:
        patterns: Frequent itemsets in discovery order (level by level)
        truncated: True when the candidate or result cap cut the search short
        levels: Number of levels whose candidates were counted
        n_transactions: Size of the mined transaction list
        min_support: Absolute support threshold used
    """
    patterns: List[Pattern] = field(default_factory=list)
    truncated: bool = False
    levels: int = 0
    n_transactions: int = 0
    min_support: int = 1

    def support_of(self, items: Iterable[str]) -> Optional[int]:
        """Support of an itemset if it was reported, else None."""
        wanted = frozenset(items)
        for pattern in self.patterns:
            if pattern.item_set == wanted:
                return pattern.support
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            'patterns': [p.to_dict() for p in self.patterns],
            'truncated': self.truncated,
            'levels': self.levels,
            'n_transactions': self.n_transactions,
            'min_support': self.min_support,
        }


def min_support_count(n_transactions: int, percent: float) -> int:
    """
    Convert a percentage threshold into an absolute count.

    Args:
        n_transactions: Number of transactions
        percent: Minimum support in percent (0-100)

    Returns:
        ceil(n * percent / 100), never below 1
    """
    return max(1, math.ceil(n_transactions * percent / 100))


class FrequentPatternMiner:
    """
    Capped level-wise Apriori miner.

    Example:
        miner = FrequentPatternMiner(max_candidates=3000)
        result = miner.mine(transactions, min_support=min_support_count(len(transactions), 10))
        if result.truncated:
            ...
    """

    def __init__(self, max_candidates: int = DEFAULT_MAX_CANDIDATES):
        """
        Initialize the miner.

        Args:
            max_candidates: Cap on live candidates per level and on recorded results
        """
        if max_candidates < 1:
            raise ValueError(f"max_candidates must be >= 1, got {max_candidates}")
        self.max_candidates = max_candidates

    def mine(self, transactions: Sequence[TransactionLike], min_support: int) -> AprioriResult:
        """
        Mine frequent itemsets.

        Args:
            transactions: Transactions or plain token collections
            min_support: Absolute support threshold (values below 1 count as 1)

        Returns:
            AprioriResult with exact supports
        """
        min_support = max(1, int(min_support))
        result = AprioriResult(n_transactions=len(transactions), min_support=min_support)
        if not transactions:
            return result

        cap = self.max_candidates
        item_sets, first_seen = self._prepare(transactions)

        if len(first_seen) > cap:
            first_seen = first_seen[:cap]
            result.truncated = True
        candidates: List[FrozenSet[str]] = [frozenset([token]) for token in first_seen]

        size = 1
        while candidates and len(result.patterns) < cap:
            frequent: List[FrozenSet[str]] = []
            for candidate in candidates:
                support = sum(1 for items in item_sets if candidate <= items)
                if support < min_support:
                    continue
                frequent.append(candidate)
                if len(result.patterns) < cap:
                    result.patterns.append(Pattern(items=tuple(sorted(candidate)), support=support))
                else:
                    result.truncated = True
            result.levels += 1

            logger.debug(
                f"Level {size}: {len(candidates)} candidates, {len(frequent)} frequent"
            )

            candidates = self._next_candidates(frequent, size + 1, result)
            size += 1

        if candidates and len(result.patterns) >= cap:
            result.truncated = True

        if result.truncated:
            logger.info(
                f"Apriori stopped at cap {cap}: {len(result.patterns)} patterns "
                f"after {result.levels} levels (result is partial)"
            )
        else:
            logger.info(
                f"Apriori found {len(result.patterns)} patterns in {result.levels} levels "
                f"(min support {min_support}/{len(transactions)})"
            )
        return result

    @staticmethod
    def _prepare(transactions: Sequence[TransactionLike]) -> Tuple[List[FrozenSet[str]], List[str]]:
        """Item sets per transaction and distinct tokens in first-appearance order."""
        item_sets = []
        first_seen: Dict[str, None] = {}
        for transaction in transactions:
            tokens = transaction.tokens if isinstance(transaction, Transaction) else tuple(transaction)
            item_sets.append(frozenset(tokens))
            for token in tokens:
                first_seen.setdefault(token, None)
        return item_sets, list(first_seen)

    def _next_candidates(
        self,
        frequent: List[FrozenSet[str]],
        size: int,
        result: AprioriResult,
    ) -> List[FrozenSet[str]]:
        """Pairwise unions of frequent itemsets with exactly `size` items."""
        candidates: List[FrozenSet[str]] = []
        seen = set()
        for i in range(len(frequent)):
            for j in range(i + 1, len(frequent)):
                union = frequent[i] | frequent[j]
                if len(union) != size or union in seen:
                    continue
                if len(candidates) >= self.max_candidates:
                    result.truncated = True
                    return candidates
                seen.add(union)
                candidates.append(union)
        return candidates


def maximal_patterns(patterns: Sequence[Pattern]) -> List[Pattern]:
    """
    Greedy maximal reduction of a ranked pattern list.

    A pattern is kept only if no already-kept pattern is a superset of it, so
    earlier (better ranked) patterns win.
    """
    kept: List[Pattern] = []
    kept_sets: List[FrozenSet[str]] = []
    for pattern in patterns:
        items = pattern.item_set
        if any(items <= other for other in kept_sets):
            continue
        kept.append(pattern)
        kept_sets.append(items)
    return kept


def rank_patterns(patterns: Iterable[Pattern]) -> List[Pattern]:
    """Stable sort by support descending, then size descending."""
    return sorted(patterns, key=lambda p: (-p.support, -p.size))


def select_patterns(
    result: Union[AprioriResult, Sequence[Pattern]],
    min_length: int = 1,
    marker: Optional[str] = None,
    max_patterns: int = 50,
) -> List[Pattern]:
    """
    Post-process mined patterns into the reported list.

    Args:
        result: Mining result or a plain pattern list
        min_length: Minimum itemset size
        marker: If set, keep only patterns with a token containing it
        max_patterns: Maximum number of reported patterns (at least 1)

    Returns:
        Ranked maximal patterns
    """
    patterns = result.patterns if isinstance(result, AprioriResult) else list(result)
    filtered = [
        p for p in patterns
        if p.size >= min_length and p.has_marker(marker)
    ]
    reduced = maximal_patterns(rank_patterns(filtered))
    return reduced[:max(1, max_patterns)]


def mine_patterns(
    transactions: Sequence[TransactionLike],
    min_support_percent: float = 10.0,
    max_candidates: int = DEFAULT_MAX_CANDIDATES,
) -> AprioriResult:
    """Convenience function: mine with a percentage threshold."""
    min_support = min_support_count(len(transactions), min_support_percent)
    return FrequentPatternMiner(max_candidates).mine(transactions, min_support)
