"""
Analysis engine.

Pure functions from (log, config) to results. Nothing here keeps state
between calls: the same log and config always give the same result, and a
new computation never sees leftovers of an earlier one.

Pipelines:
- compute_patterns: transactions -> Apriori -> ranked maximal patterns
- compute_lifecycle: sequences -> PrefixSpan -> ranked sequential patterns
- compute_variants: transactions or sequences -> variants
- compute_causal: indicators -> correlation/latent model
- compute: all of the above as one AnalysisSnapshot
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Union

from .causal.estimator import CausalEstimator, CausalModel
from .causal.indicators import IndicatorTable, extract_indicators
from .causal.schema import DomainSchema, get_schema
from .config import MiningConfig
from .features.sequences import SequenceBuilder
from .features.transactions import TransactionBuilder, filter_transactions
from .mining import apriori, prefixspan
from .mining.apriori import AprioriResult, FrequentPatternMiner, Pattern, select_patterns
from .mining.prefixspan import SequentialPattern, SequentialPatternMiner
from .mining.variants import Variant, variants_from_sequences, variants_from_transactions
from .ocel.index import LogIndex
from .ocel.models import OCELLog

logger = logging.getLogger(__name__)

LogLike = Union[OCELLog, LogIndex]


@dataclass
class PatternAnalysis:
    """Frequent pattern mining outcome."""
    lead_type: Optional[str]
    n_transactions: int = 0
    min_support: int = 1
    result: AprioriResult = field(default_factory=AprioriResult)
    patterns: List[Pattern] = field(default_factory=list)

    @property
    def truncated(self) -> bool:
        return self.result.truncated

    def to_dict(self) -> Dict[str, object]:
        return {
            'lead_type': self.lead_type,
            'n_transactions': self.n_transactions,
            'min_support': self.min_support,
            'n_frequent': len(self.result.patterns),
            'truncated': self.truncated,
            'patterns': [
                dict(p.to_dict(), relative_support=round(p.relative_support(self.n_transactions), 4))
                for p in self.patterns
            ],
        }


@dataclass
class LifecycleAnalysis:
    """Sequential pattern mining outcome."""
    lead_type: Optional[str]
    n_sequences: int = 0
    min_support: int = 2
    n_found: int = 0
    patterns: List[SequentialPattern] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            'lead_type': self.lead_type,
            'n_sequences': self.n_sequences,
            'min_support': self.min_support,
            'n_found': self.n_found,
            'patterns': [p.to_dict() for p in self.patterns],
        }


@dataclass
class CausalAnalysis:
    """Indicator table and the model estimated from it."""
    table: IndicatorTable
    model: CausalModel

    def to_dict(self) -> Dict[str, object]:
        result = self.model.to_dict()
        result['n_instances'] = self.table.n_instances
        return result


@dataclass
class AnalysisSnapshot:
    """Complete result set of one computation."""
    config: MiningConfig
    lead_type: Optional[str]
    n_events: int
    n_objects: int
    patterns: PatternAnalysis
    lifecycle: LifecycleAnalysis
    variants: List[Variant]
    causal: Optional[CausalAnalysis]

    def to_dict(self) -> Dict[str, object]:
        return {
            'config': self.config.to_dict(),
            'lead_type': self.lead_type,
            'n_events': self.n_events,
            'n_objects': self.n_objects,
            'patterns': self.patterns.to_dict(),
            'lifecycle': self.lifecycle.to_dict(),
            'variants': [v.to_dict() for v in self.variants],
            'causal': self.causal.to_dict() if self.causal else None,
        }


def _index(log: LogLike) -> LogIndex:
    return log if isinstance(log, LogIndex) else LogIndex(log)


def resolve_lead_type(log: LogLike, config: MiningConfig) -> Optional[str]:
    """Configured lead type, or the first available one if unknown."""
    return _index(log).resolve_lead_type(config.lead_object_type)


def compute_patterns(log: LogLike, config: MiningConfig) -> PatternAnalysis:
    """
    Mine ranked maximal frequent patterns.

    Args:
        log: Log snapshot or its index
        config: Run configuration

    Returns:
        PatternAnalysis (empty when the log has no usable lead type)
    """
    index = _index(log)
    lead_type = index.resolve_lead_type(config.lead_object_type)
    if lead_type is None:
        return PatternAnalysis(lead_type=None)

    builder = TransactionBuilder(config.transaction_config(e2o_label=config.pattern_e2o_label))
    transactions = builder.build(index, lead_type)
    if config.problem_prefilter:
        transactions = filter_transactions(transactions, config.problem_marker)

    min_support = apriori.min_support_count(len(transactions), config.min_support_percent)
    result = FrequentPatternMiner(config.max_candidates).mine(transactions, min_support)
    selected = select_patterns(
        result,
        min_length=config.min_pattern_length,
        marker=config.problem_marker if config.problem_postfilter else None,
        max_patterns=config.max_patterns,
    )
    return PatternAnalysis(
        lead_type=lead_type,
        n_transactions=len(transactions),
        min_support=min_support,
        result=result,
        patterns=selected,
    )


def compute_lifecycle(log: LogLike, config: MiningConfig) -> LifecycleAnalysis:
    """Mine sequential patterns over lead instance lifecycles."""
    index = _index(log)
    lead_type = index.resolve_lead_type(config.lead_object_type)
    if lead_type is None:
        return LifecycleAnalysis(lead_type=None, min_support=config.sequence_min_support_floor)

    records = SequenceBuilder(
        status=config.status, signature_steps=config.sequence_signature
    ).build(index, lead_type)
    min_support = prefixspan.min_support_count(
        len(records), config.sequence_min_support_percent, config.sequence_min_support_floor
    )
    found = SequentialPatternMiner().mine(records, min_support)
    return LifecycleAnalysis(
        lead_type=lead_type,
        n_sequences=len(records),
        min_support=min_support,
        n_found=len(found),
        patterns=found[:config.max_patterns],
    )


def compute_variants(log: LogLike, config: MiningConfig) -> List[Variant]:
    """Group lead instances into variants by transaction key or step signature."""
    index = _index(log)
    lead_type = index.resolve_lead_type(config.lead_object_type)
    if lead_type is None:
        return []

    if config.variant_source == "sequences":
        records = SequenceBuilder(
            status=config.status, signature_steps=config.sequence_signature
        ).build(index, lead_type)
        return variants_from_sequences(records)

    tc = replace(
        config.transaction_config(e2o_label="type"),
        include_global=config.variant_include_global_df,
    )
    transactions = TransactionBuilder(tc).build(index, lead_type)
    return variants_from_transactions(transactions)


def domain_schema(config: MiningConfig) -> DomainSchema:
    """Schema of the configured domain with sign overrides applied."""
    schema = get_schema(config.domain)
    if config.sign_overrides:
        schema = schema.with_signs(config.sign_overrides)
    return schema


def compute_causal(log: LogLike, config: MiningConfig) -> Optional[CausalAnalysis]:
    """Extract indicators and estimate the latent-variable model."""
    index = _index(log)
    lead_type = index.resolve_lead_type(config.lead_object_type)
    if lead_type is None:
        return None

    schema = domain_schema(config)
    table = extract_indicators(index, lead_type, schema, config.selected_observed)
    model = CausalEstimator(schema).estimate(
        table,
        selected_observed=config.selected_observed,
        selected_latent=config.selected_latent,
    )
    return CausalAnalysis(table=table, model=model)


def compute(log: OCELLog, config: Optional[MiningConfig] = None) -> AnalysisSnapshot:
    """
    Run every analysis over one log snapshot.

    Args:
        log: The (possibly filtered) log
        config: Run configuration; validated copy is used

    Returns:
        AnalysisSnapshot with all result sets
    """
    config = (config or MiningConfig()).with_overrides()
    config.validate()

    index = LogIndex(log)
    lead_type = index.resolve_lead_type(config.lead_object_type)
    if lead_type is not None:
        config = config.with_overrides(lead_object_type=lead_type)

    snapshot = AnalysisSnapshot(
        config=config,
        lead_type=lead_type,
        n_events=len(log.events),
        n_objects=len(log.objects),
        patterns=compute_patterns(index, config),
        lifecycle=compute_lifecycle(index, config),
        variants=compute_variants(index, config),
        causal=compute_causal(index, config),
    )
    logger.info(
        f"Analysis of '{lead_type}': {len(snapshot.patterns.patterns)} patterns, "
        f"{len(snapshot.lifecycle.patterns)} lifecycle patterns, "
        f"{len(snapshot.variants)} variants"
    )
    return snapshot
