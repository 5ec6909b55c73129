"""
Per-instance indicator extraction.

Every observed indicator is a pure function of one lead instance's full
direct-event history (oldest first). Durations are expressed in days.

Inventory indicators read "Current Status" and "Stock After" from the
events: status switches and stock-out episodes come from the status
sequence, replenishments are positive stock deltas on events touching a
PO_ITEM, consumptions are negative deltas aggregated per UTC day.

The extraction result is an IndicatorTable value holding raw, mean, std and
z-scored columns. It is passed explicitly to the estimator and never cached.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import numpy as np
from scipy import stats
from sklearn.preprocessing import StandardScaler

from ..features.segments import event_status
from ..ocel.index import LogIndex
from ..ocel.models import OCELEvent
from .schema import DomainSchema

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# Object type marking an event as a replenishment when the stock rises
REPLENISHMENT_OBJECT_TYPE = "PO_ITEM"

STOCK_AFTER_ATTRIBUTE = "Stock After"
STATUS_ATTRIBUTES = ("Current Status", "Status")

STATUS_NORMAL = "Normal"
STATUS_UNDERSTOCK = "Understock"
STATUS_OVERSTOCK = "Overstock"

Extractor = Callable[[Sequence[OCELEvent], LogIndex, str, str], Dict[str, float]]


def _to_float(value, default: float = 0.0) -> float:
    """Numeric attribute value; default for missing or non-numeric values."""
    if value is None or value == "":
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if np.isfinite(result) else default


def _mean(values: Sequence[float]) -> float:
    return float(np.mean(values)) if len(values) else 0.0


def _cv(values: Sequence[float]) -> float:
    """Coefficient of variation with population std; 0 for a zero mean."""
    if not len(values):
        return 0.0
    mean = float(np.mean(values))
    return float(np.std(values)) / mean if mean else 0.0


def _entropy(counts: Iterable[int]) -> float:
    """Base-2 Shannon entropy of a frequency table; 0 when empty."""
    counts = list(counts)
    if not counts:
        return 0.0
    return float(stats.entropy(counts, base=2))


def _days(events: Sequence[OCELEvent]) -> np.ndarray:
    return np.array([e.timestamp.timestamp() / SECONDS_PER_DAY for e in events], dtype=float)


INVENTORY_INDICATORS = (
    "stockout_freq", "avg_stockout_dur", "overstock_exposure", "stability_ratio",
    "status_switch_rate", "repl_median_gap", "repl_mean_size", "repl_overshoot_rate",
    "avg_daily_consumption", "days_of_supply", "demand_cv", "demand_acf1",
    "cons_gap_mean", "cons_gap_cv", "demand_entropy",
)


def inventory_indicators(
    events: Sequence[OCELEvent],
    index: LogIndex,
    lead_id: str,
    lead_type: str,
) -> Dict[str, float]:
    """
    Stock-health, replenishment and demand indicators of one material.

    Args:
        events: Direct events of the instance, oldest first
        index: Log index (object types of related objects)
        lead_id: Lead instance id
        lead_type: Lead object type

    Returns:
        indicator id -> value; all zeros for fewer than two events
    """
    values = dict.fromkeys(INVENTORY_INDICATORS, 0.0)
    if len(events) < 2:
        return values

    times = _days(events)
    statuses = [event_status(e, STATUS_ATTRIBUTES) for e in events]
    stocks = [_to_float(e.get_attribute(STOCK_AFTER_ATTRIBUTE)) for e in events]

    overstock_time = 0.0
    normal_time = 0.0
    switches = 0
    stockout_entries = 0
    stockout_durations: List[float] = []
    under_since: Optional[float] = None

    repl_intervals: List[float] = []
    repl_sizes: List[float] = []
    repl_overshoot = 0

    daily_consumption: Dict[str, float] = {}
    consumption_times: List[float] = []

    for i in range(1, len(events)):
        dt = times[i] - times[i - 1]
        # Time is attributed to the status held before the event
        if statuses[i - 1] == STATUS_OVERSTOCK:
            overstock_time += dt
        if statuses[i - 1] == STATUS_NORMAL:
            normal_time += dt

        if statuses[i] != statuses[i - 1]:
            switches += 1
            if statuses[i] == STATUS_UNDERSTOCK:
                stockout_entries += 1
                under_since = times[i]
            elif statuses[i - 1] == STATUS_UNDERSTOCK and under_since is not None:
                stockout_durations.append(times[i] - under_since)
                under_since = None

        delta = stocks[i] - stocks[i - 1]
        replenishes = delta > 0 and any(
            index.object_type(object_id) == REPLENISHMENT_OBJECT_TYPE
            for object_id in events[i].object_ids
        )
        if replenishes:
            repl_intervals.append(dt)
            repl_sizes.append(delta)
            if statuses[i] == STATUS_OVERSTOCK:
                repl_overshoot += 1
        elif delta < 0:
            day = events[i].timestamp.astimezone(timezone.utc).date().isoformat()
            daily_consumption[day] = daily_consumption.get(day, 0.0) - delta
            consumption_times.append(times[i])

    # An episode still open at the end lasts until the last event
    if statuses[-1] == STATUS_UNDERSTOCK and under_since is not None:
        stockout_durations.append(times[-1] - under_since)

    total_time = float(times[-1] - times[0])
    total_days = max(total_time, 1.0)

    values["stockout_freq"] = stockout_entries / total_days
    values["avg_stockout_dur"] = _mean(stockout_durations)
    values["overstock_exposure"] = overstock_time / total_time if total_time else 0.0
    values["stability_ratio"] = normal_time / total_time if total_time else 0.0
    values["status_switch_rate"] = switches / total_days

    # Upper median
    values["repl_median_gap"] = (
        float(sorted(repl_intervals)[len(repl_intervals) // 2]) if repl_intervals else 0.0
    )
    values["repl_mean_size"] = _mean(repl_sizes)
    values["repl_overshoot_rate"] = repl_overshoot / len(repl_sizes) if repl_sizes else 0.0

    consumption = list(daily_consumption.values())
    avg_cons = _mean(consumption)
    values["avg_daily_consumption"] = avg_cons
    values["days_of_supply"] = _mean([s / avg_cons if avg_cons else 0.0 for s in stocks])

    std_cons = float(np.std(consumption)) if consumption else 0.0
    values["demand_cv"] = std_cons / avg_cons if avg_cons else 0.0
    if len(consumption) > 1:
        z = (np.array(consumption) - avg_cons) / (std_cons or 1.0)
        values["demand_acf1"] = float(np.mean(z[:-1] * z[1:]))

    if len(consumption_times) > 1:
        gaps = np.diff(consumption_times)
        values["cons_gap_mean"] = float(np.mean(gaps))
        values["cons_gap_cv"] = _cv(gaps)

    values["demand_entropy"] = _entropy(Counter(consumption).values())
    return values


PROCESS_INDICATORS = (
    "throughput_time", "avg_waiting_time", "waiting_ratio", "rework_ratio",
    "event_rate", "event_count", "distinct_activities", "activity_entropy",
    "gap_cv", "related_object_count", "related_type_count", "objects_per_event",
)


def process_indicators(
    events: Sequence[OCELEvent],
    index: LogIndex,
    lead_id: str,
    lead_type: str,
) -> Dict[str, float]:
    """
    Generic lifecycle indicators of one lead instance.

    Waiting time is the gap between consecutive events; the waiting ratio is
    the longest gap relative to the throughput time. Rework counts repeated
    event types. Related objects exclude the lead instance itself.
    """
    values = dict.fromkeys(PROCESS_INDICATORS, 0.0)
    if not events:
        return values

    n = len(events)
    times = _days(events)
    gaps = np.diff(times)
    total_time = float(times[-1] - times[0])
    activities = Counter(e.type for e in events)

    values["throughput_time"] = total_time
    values["avg_waiting_time"] = _mean(gaps)
    values["waiting_ratio"] = float(gaps.max()) / total_time if gaps.size and total_time else 0.0
    values["rework_ratio"] = (n - len(activities)) / n
    values["event_rate"] = n / max(total_time, 1.0)
    values["event_count"] = float(n)
    values["distinct_activities"] = float(len(activities))
    values["activity_entropy"] = _entropy(activities.values())
    values["gap_cv"] = _cv(gaps)

    related = {}
    relationships = 0
    for event in events:
        for object_id in dict.fromkeys(event.object_ids):
            object_type = index.object_type(object_id)
            if object_id == lead_id or object_type is None:
                continue
            related[object_id] = object_type
            relationships += 1

    values["related_object_count"] = float(len(related))
    values["related_type_count"] = float(len(set(related.values())))
    values["objects_per_event"] = relationships / n
    return values


EXTRACTORS: Dict[str, Extractor] = {
    "inventory": inventory_indicators,
    "process": process_indicators,
}


@dataclass
class IndicatorTable:
    """
    Indicator values of all lead instances.

    Attributes:
        lead_type: Lead object type the rows belong to
        object_ids: Row labels (lead ids, log order)
        indicator_ids: Column labels
        raw: indicator id -> raw values per instance
        standardized: indicator id -> z-scores per instance
        means: indicator id -> population mean
        std_devs: indicator id -> population standard deviation
    """
    lead_type: str
    object_ids: List[str] = field(default_factory=list)
    indicator_ids: List[str] = field(default_factory=list)
    raw: Dict[str, np.ndarray] = field(default_factory=dict)
    standardized: Dict[str, np.ndarray] = field(default_factory=dict)
    means: Dict[str, float] = field(default_factory=dict)
    std_devs: Dict[str, float] = field(default_factory=dict)

    @property
    def n_instances(self) -> int:
        return len(self.object_ids)

    def __contains__(self, indicator_id: str) -> bool:
        return indicator_id in self.standardized

    def to_dict(self) -> Dict[str, object]:
        return {
            'lead_type': self.lead_type,
            'object_ids': list(self.object_ids),
            'indicators': {
                ind: {
                    'mean': self.means[ind],
                    'std_dev': self.std_devs[ind],
                    'values': self.raw[ind].tolist(),
                }
                for ind in self.indicator_ids
            },
        }


def extract_indicators(
    index: LogIndex,
    lead_type: str,
    schema: DomainSchema,
    selected: Optional[Iterable[str]] = None,
) -> IndicatorTable:
    """
    Compute and standardize indicators for every lead instance.

    Args:
        index: Index over the log snapshot
        lead_type: Lead object type
        schema: Domain schema naming the indicators and their extractor
        selected: Indicator ids to compute (default: all of the schema)

    Returns:
        IndicatorTable with columns in schema order
    """
    if selected is None:
        indicator_ids = schema.indicator_ids
    else:
        wanted = set(selected)
        unknown = wanted - set(schema.indicator_ids)
        if unknown:
            logger.warning(f"Ignoring indicators unknown to domain '{schema.name}': {sorted(unknown)}")
        indicator_ids = [i for i in schema.indicator_ids if i in wanted]

    extractor = EXTRACTORS[schema.extractor]
    leads = index.objects_of_type(lead_type)
    table = IndicatorTable(
        lead_type=lead_type,
        object_ids=[lead.id for lead in leads],
        indicator_ids=list(indicator_ids),
    )

    rows = []
    for lead in leads:
        values = extractor(index.events_for(lead.id), index, lead.id, lead_type)
        rows.append([values.get(ind, 0.0) for ind in indicator_ids])
    matrix = np.array(rows, dtype=float).reshape(len(leads), len(indicator_ids))

    if matrix.size == 0:
        for col, ind in enumerate(indicator_ids):
            table.raw[ind] = matrix[:, col]
            table.standardized[ind] = matrix[:, col]
            table.means[ind] = 0.0
            table.std_devs[ind] = 0.0
        logger.info(f"No '{lead_type}' instances to extract indicators from")
        return table

    # Population statistics; zero-variance columns keep a scale of 1
    scaler = StandardScaler()
    standardized = scaler.fit_transform(matrix)
    for col, ind in enumerate(indicator_ids):
        table.raw[ind] = matrix[:, col].copy()
        table.standardized[ind] = standardized[:, col].copy()
        table.means[ind] = float(scaler.mean_[col])
        table.std_devs[ind] = float(np.sqrt(scaler.var_[col]))

    logger.info(
        f"Extracted {len(indicator_ids)} '{schema.name}' indicators "
        f"for {len(leads)} '{lead_type}' instances"
    )
    return table
