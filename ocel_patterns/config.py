"""
Configuration of an analysis run.

MiningConfig holds every scalar option of the mining and estimation
pipeline with its documented default. Out-of-range values are clamped by
validate() (and logged) rather than rejected, so a UI or CLI can pass user
input straight through.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple

from . import DEFAULT_CONFIG
from .causal.schema import SCHEMAS
from .features.segments import ALL_STATUSES
from .features.transactions import DEFAULT_E2O_OBJECT_TYPES, TransactionConfig

logger = logging.getLogger(__name__)

VARIANT_SOURCES = ("transactions", "sequences")


@dataclass
class MiningConfig:
    """Options of one analysis run."""

    # Unit of analysis
    lead_object_type: str = DEFAULT_CONFIG["lead_object_type"]

    # Frequent patterns (percent of transactions, rounded up, floor 1)
    min_support_percent: float = DEFAULT_CONFIG["min_support_percent"]
    max_patterns: int = DEFAULT_CONFIG["max_patterns"]
    max_candidates: int = DEFAULT_CONFIG["max_candidates"]
    min_pattern_length: int = 1

    # Lifecycle patterns (percent of sequences, rounded up, floored)
    sequence_min_support_percent: float = DEFAULT_CONFIG["sequence_min_support_percent"]
    sequence_min_support_floor: int = 2
    sequence_signature: bool = False

    # Transaction tokens
    df_window: int = DEFAULT_CONFIG["df_window"]
    include_e2o: bool = DEFAULT_CONFIG["include_e2o"]
    include_global_df: bool = False
    e2o_object_types: Tuple[str, ...] = DEFAULT_E2O_OBJECT_TYPES
    # Pattern tokens number related instances ("PO_ITEM1"), variant tokens use the type
    pattern_e2o_label: str = "instance"

    # Variant signatures from "transactions" (token sets) or "sequences" (steps)
    variant_source: str = "transactions"
    # GLOBAL n-grams in variant signatures (independent of include_global_df)
    variant_include_global_df: bool = True

    # Status segmentation ("All" disables it)
    status: str = DEFAULT_CONFIG["status"]

    # Problem marker pre-filter (transactions) and post-filter (patterns)
    problem_marker: str = DEFAULT_CONFIG["problem_marker"]
    problem_prefilter: bool = True
    problem_postfilter: bool = True

    # Causal model
    domain: str = DEFAULT_CONFIG["domain"]
    selected_observed: Optional[Tuple[str, ...]] = None
    selected_latent: Optional[Tuple[str, ...]] = None
    sign_overrides: Dict[str, int] = field(default_factory=dict)

    def validate(self) -> List[str]:
        """
        Clamp values into their admissible range.

        Returns:
            Descriptions of the adjustments made (empty if none)
        """
        adjustments = []

        def clamp(name: str, low: float, high: Optional[float] = None) -> None:
            value = getattr(self, name)
            fixed = max(low, value)
            if high is not None:
                fixed = min(high, fixed)
            if fixed != value:
                setattr(self, name, type(value)(fixed))
                adjustments.append(f"{name}: {value} -> {fixed}")

        clamp("min_support_percent", 0.0, 100.0)
        clamp("sequence_min_support_percent", 0.0, 100.0)
        clamp("sequence_min_support_floor", 1)
        clamp("max_patterns", 1)
        clamp("max_candidates", 1)
        clamp("min_pattern_length", 1)
        clamp("df_window", 1)

        if not self.status:
            adjustments.append(f"status: {self.status!r} -> {ALL_STATUSES!r}")
            self.status = ALL_STATUSES

        if self.pattern_e2o_label not in ("type", "instance"):
            adjustments.append(f"pattern_e2o_label: {self.pattern_e2o_label!r} -> 'instance'")
            self.pattern_e2o_label = "instance"

        if self.variant_source not in VARIANT_SOURCES:
            adjustments.append(f"variant_source: {self.variant_source!r} -> 'transactions'")
            self.variant_source = "transactions"

        if self.domain not in SCHEMAS:
            adjustments.append(f"domain: {self.domain!r} -> {DEFAULT_CONFIG['domain']!r}")
            self.domain = DEFAULT_CONFIG["domain"]

        indicator_ids = set(SCHEMAS[self.domain].indicator_ids)
        signs = {}
        for indicator, sign in self.sign_overrides.items():
            if indicator in indicator_ids and sign in (1, -1):
                signs[indicator] = sign
            else:
                adjustments.append(f"sign_overrides: dropped {indicator}={sign!r} for domain {self.domain!r}")
        if len(signs) != len(self.sign_overrides):
            self.sign_overrides = signs

        for message in adjustments:
            logger.warning(f"Config adjusted {message}")
        return adjustments

    def with_overrides(self, **changes: Any) -> "MiningConfig":
        """
        New config with some fields replaced.

        Raises:
            TypeError: For unknown field names
        """
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise TypeError(f"Unknown config fields: {sorted(unknown)}")
        return replace(self, **changes)

    def transaction_config(self, e2o_label: str = "type") -> TransactionConfig:
        """Transaction builder settings derived from this config."""
        return TransactionConfig(
            df_window=self.df_window,
            include_e2o=self.include_e2o,
            include_global=self.include_global_df,
            e2o_object_types=tuple(self.e2o_object_types),
            e2o_label=e2o_label,
            status=self.status,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = list(value) if isinstance(value, tuple) else value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MiningConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        for key in ("e2o_object_types", "selected_observed", "selected_latent"):
            if kwargs.get(key) is not None:
                kwargs[key] = tuple(kwargs[key])
        return cls(**kwargs)
