"""
Feature construction for pattern mining.

Turns a lead instance's event history into the symbolic inputs of the
miners:
- transactions: unordered token sets (e2o edges and directly-follows n-grams)
- sequences: ordered step lists
- segments: status-run splitting shared by both

Example usage:
    from ocel_patterns.features import TransactionBuilder, TransactionConfig

    builder = TransactionBuilder(TransactionConfig(df_window=2, status="Understock"))
    transactions = builder.build(index, "MAT_PLA")
"""

from .segments import (
    ALL_STATUSES,
    DEFAULT_STATUS_ATTRIBUTES,
    event_status,
    is_segmenting,
    split_segments,
)

from .transactions import (
    DEFAULT_E2O_OBJECT_TYPES,
    Transaction,
    TransactionBuilder,
    TransactionConfig,
    build_transactions,
    contains_marker,
    df_token,
    e2o_token,
    filter_transactions,
    parse_token,
)

from .sequences import (
    SequenceBuilder,
    SequenceRecord,
    build_sequences,
)

__all__ = [
    # Segmentation
    "ALL_STATUSES",
    "DEFAULT_STATUS_ATTRIBUTES",
    "event_status",
    "is_segmenting",
    "split_segments",
    # Transactions
    "DEFAULT_E2O_OBJECT_TYPES",
    "Transaction",
    "TransactionBuilder",
    "TransactionConfig",
    "build_transactions",
    "contains_marker",
    "df_token",
    "e2o_token",
    "filter_transactions",
    "parse_token",
    # Sequences
    "SequenceBuilder",
    "SequenceRecord",
    "build_sequences",
]
