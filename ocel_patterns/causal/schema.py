"""
Domain schemas for the latent-variable estimator.

A domain is configuration, not code: one table listing the observed
indicators (with display name, category and sign), the latent variables
with their indicator groups, and the structural paths between latents.
The estimator and the indicator extraction read everything they need from
these tables, so a new domain only needs a new DomainSchema and an extractor.

Sign metadata: the structural coefficient multiplies each correlation by the
signs of both indicators. A sign of -1 marks an indicator where larger values
mean a worse latent state (e.g. waiting time for process performance).
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

# Variable kinds
OBSERVED = "observed"
LATENT = "latent"

# Variable categories
CATEGORY_ACTIVITY = "activity"
CATEGORY_OBJECT_METRIC = "object-metric"
CATEGORY_PERFORMANCE = "performance"
CATEGORY_COMPLEXITY = "complexity"


@dataclass(frozen=True)
class IndicatorSpec:
    """An observed per-instance indicator."""
    id: str
    name: str
    category: str
    sign: int = 1
    short_name: str = ""


@dataclass(frozen=True)
class LatentSpec:
    """A latent variable and the indicators that load on it."""
    id: str
    name: str
    category: str
    short: str
    indicators: Tuple[str, ...]


@dataclass(frozen=True)
class DomainSchema:
    """
    Complete latent/indicator/sign table of one analysis domain.

    Attributes:
        name: Domain name ("inventory", "process")
        extractor: Key of the indicator extractor computing this domain's values
        indicators: Observed indicators in presentation order
        latents: Latent variables in presentation order
        structural_paths: (source latent, target latent) pairs
    """
    name: str
    extractor: str
    indicators: Tuple[IndicatorSpec, ...]
    latents: Tuple[LatentSpec, ...]
    structural_paths: Tuple[Tuple[str, str], ...]

    @property
    def indicator_ids(self) -> List[str]:
        return [spec.id for spec in self.indicators]

    @property
    def latent_ids(self) -> List[str]:
        return [spec.id for spec in self.latents]

    def indicator(self, indicator_id: str) -> Optional[IndicatorSpec]:
        for spec in self.indicators:
            if spec.id == indicator_id:
                return spec
        return None

    def latent(self, latent_id: str) -> Optional[LatentSpec]:
        for spec in self.latents:
            if spec.id == latent_id:
                return spec
        return None

    def sign(self, indicator_id: str) -> int:
        """Sign adjustment of an indicator (+1 for unknown ids)."""
        spec = self.indicator(indicator_id)
        return spec.sign if spec is not None else 1

    def with_signs(self, signs: Dict[str, int]) -> "DomainSchema":
        """
        Copy of the schema with overridden indicator signs.

        Args:
            signs: indicator id -> +1 / -1

        Raises:
            ValueError: For unknown indicator ids or signs other than +1/-1
        """
        unknown = set(signs) - set(self.indicator_ids)
        if unknown:
            raise ValueError(f"Unknown indicators for domain '{self.name}': {sorted(unknown)}")
        bad = {k: v for k, v in signs.items() if v not in (1, -1)}
        if bad:
            raise ValueError(f"Signs must be +1 or -1, got {bad}")
        indicators = tuple(
            replace(spec, sign=signs.get(spec.id, spec.sign)) for spec in self.indicators
        )
        return replace(self, indicators=indicators)


INVENTORY_SCHEMA = DomainSchema(
    name="inventory",
    extractor="inventory",
    indicators=(
        IndicatorSpec("stockout_freq", "Stock-out Frequency", CATEGORY_PERFORMANCE, short_name="SO Freq"),
        IndicatorSpec("avg_stockout_dur", "Avg Stock-out Duration", CATEGORY_PERFORMANCE, short_name="SO Dur"),
        IndicatorSpec("overstock_exposure", "Overstock Exposure", CATEGORY_PERFORMANCE, short_name="OS Exp"),
        IndicatorSpec("stability_ratio", "Stability Ratio", CATEGORY_PERFORMANCE, short_name="Stability"),
        IndicatorSpec("status_switch_rate", "Status-switch Rate", CATEGORY_PERFORMANCE, short_name="Switches"),
        IndicatorSpec("repl_median_gap", "Median Replenishment Interval", CATEGORY_COMPLEXITY, short_name="Repl Gap"),
        IndicatorSpec("repl_mean_size", "Mean Replenishment Size", CATEGORY_COMPLEXITY, short_name="Repl Size"),
        IndicatorSpec("repl_overshoot_rate", "Replenishment Overshoot Rate", CATEGORY_COMPLEXITY, short_name="Overshoot"),
        IndicatorSpec("avg_daily_consumption", "Avg Daily Consumption", CATEGORY_COMPLEXITY, short_name="Daily Cons"),
        IndicatorSpec("days_of_supply", "Days of Supply", CATEGORY_COMPLEXITY, short_name="DoS"),
        IndicatorSpec("demand_cv", "Demand CV", CATEGORY_COMPLEXITY, short_name="Dem CV"),
        IndicatorSpec("demand_acf1", "Lag-1 Autocorr", CATEGORY_COMPLEXITY, short_name="ACF1"),
        IndicatorSpec("cons_gap_mean", "Avg Inter-consumption Gap", CATEGORY_COMPLEXITY, short_name="Gap Mean"),
        IndicatorSpec("cons_gap_cv", "Gap CV", CATEGORY_COMPLEXITY, short_name="Gap CV"),
        IndicatorSpec("demand_entropy", "Demand Entropy", CATEGORY_COMPLEXITY, short_name="Entropy"),
    ),
    latents=(
        LatentSpec(
            "stock_health", "Stock Health", CATEGORY_PERFORMANCE, "sh",
            ("stockout_freq", "avg_stockout_dur", "overstock_exposure",
             "stability_ratio", "status_switch_rate"),
        ),
        LatentSpec(
            "repl_efficiency", "Replenishment Efficiency", CATEGORY_PERFORMANCE, "re",
            ("repl_median_gap", "repl_mean_size", "repl_overshoot_rate",
             "avg_daily_consumption", "days_of_supply"),
        ),
        LatentSpec(
            "demand_predictability", "Demand Predictability", CATEGORY_COMPLEXITY, "dp",
            ("demand_cv", "demand_acf1", "cons_gap_mean", "cons_gap_cv", "demand_entropy"),
        ),
    ),
    structural_paths=(
        ("demand_predictability", "repl_efficiency"),
        ("repl_efficiency", "stock_health"),
        ("demand_predictability", "stock_health"),
    ),
)


PROCESS_SCHEMA = DomainSchema(
    name="process",
    extractor="process",
    indicators=(
        IndicatorSpec("throughput_time", "Throughput Time", CATEGORY_PERFORMANCE, sign=-1, short_name="TPT"),
        IndicatorSpec("avg_waiting_time", "Avg Waiting Time", CATEGORY_PERFORMANCE, sign=-1, short_name="Wait"),
        IndicatorSpec("waiting_ratio", "Waiting Ratio", CATEGORY_PERFORMANCE, sign=-1, short_name="Wait %"),
        IndicatorSpec("rework_ratio", "Rework Ratio", CATEGORY_PERFORMANCE, sign=-1, short_name="Rework"),
        IndicatorSpec("event_rate", "Event Rate", CATEGORY_PERFORMANCE, short_name="Rate"),
        IndicatorSpec("event_count", "Event Count", CATEGORY_ACTIVITY, short_name="Events"),
        IndicatorSpec("distinct_activities", "Distinct Activities", CATEGORY_ACTIVITY, short_name="Acts"),
        IndicatorSpec("activity_entropy", "Activity Entropy", CATEGORY_COMPLEXITY, short_name="Act H"),
        IndicatorSpec("gap_cv", "Inter-event Gap CV", CATEGORY_COMPLEXITY, short_name="Gap CV"),
        IndicatorSpec("related_object_count", "Related Objects", CATEGORY_OBJECT_METRIC, short_name="Objs"),
        IndicatorSpec("related_type_count", "Related Object Types", CATEGORY_OBJECT_METRIC, short_name="Types"),
        IndicatorSpec("objects_per_event", "Objects per Event", CATEGORY_OBJECT_METRIC, short_name="Obj/Ev"),
    ),
    latents=(
        LatentSpec(
            "process_performance", "Process Performance", CATEGORY_PERFORMANCE, "pp",
            ("throughput_time", "avg_waiting_time", "waiting_ratio", "rework_ratio", "event_rate"),
        ),
        LatentSpec(
            "process_complexity", "Process Complexity", CATEGORY_COMPLEXITY, "pc",
            ("event_count", "distinct_activities", "activity_entropy", "gap_cv"),
        ),
        LatentSpec(
            "object_involvement", "Object Involvement", CATEGORY_COMPLEXITY, "oi",
            ("related_object_count", "related_type_count", "objects_per_event"),
        ),
    ),
    structural_paths=(
        ("process_complexity", "process_performance"),
        ("object_involvement", "process_complexity"),
        ("object_involvement", "process_performance"),
    ),
)


SCHEMAS: Dict[str, DomainSchema] = {
    INVENTORY_SCHEMA.name: INVENTORY_SCHEMA,
    PROCESS_SCHEMA.name: PROCESS_SCHEMA,
}


def get_schema(domain: str) -> DomainSchema:
    """
    Look up a domain schema by name.

    Raises:
        KeyError: If the domain is unknown
    """
    if domain not in SCHEMAS:
        raise KeyError(f"Unknown domain '{domain}', expected one of {sorted(SCHEMAS)}")
    return SCHEMAS[domain]
