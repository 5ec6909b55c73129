"""
Pattern mining over transactions and sequences.

Main components:
- apriori: capped level-wise frequent itemset mining with maximal reduction
- prefixspan: sequential pattern mining over projected databases
- variants: equivalence-class grouping by signature
"""

from .apriori import (
    AprioriResult,
    FrequentPatternMiner,
    Pattern,
    maximal_patterns,
    min_support_count,
    mine_patterns,
    rank_patterns,
    select_patterns,
)

from .prefixspan import (
    SequentialPattern,
    SequentialPatternMiner,
    is_subsequence,
    mine_sequences,
    sequence_support,
)
from .prefixspan import min_support_count as sequence_min_support_count

from .variants import (
    Variant,
    group_variants,
    variants_from_sequences,
    variants_from_transactions,
)

__all__ = [
    # Apriori
    "AprioriResult",
    "FrequentPatternMiner",
    "Pattern",
    "maximal_patterns",
    "min_support_count",
    "mine_patterns",
    "rank_patterns",
    "select_patterns",
    # PrefixSpan
    "SequentialPattern",
    "SequentialPatternMiner",
    "is_subsequence",
    "mine_sequences",
    "sequence_min_support_count",
    "sequence_support",
    # Variants
    "Variant",
    "group_variants",
    "variants_from_sequences",
    "variants_from_transactions",
]
