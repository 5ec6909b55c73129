"""
Event context analysis.

For every event of a lead instance, describe what happened in fixed time
windows before and after it (by default 14 and 28 days):

- number of Goods Issue, Goods Receipt and ST CHANGE events
- whether any event in the window carried an Understock/Overstock status
- the stock difference across the window boundary

Each context feature is then correlated with the indicator "the event's type
starts with the selected activity" over all events of the log, which shows
which surroundings make an activity more (or less) likely.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy import stats

from ..ocel.index import LogIndex
from ..ocel.models import OCELLog, base_activity
from .. import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

DEFAULT_WINDOWS_DAYS = (14, 28)
DEFAULT_ACTIVITY = "Goods Receipt"

# Counted activities: feature name -> event type prefix
COUNTED_ACTIVITIES = {
    "goods_issue": "Goods Issue",
    "goods_receipt": "Goods Receipt",
    "st_change": "ST CHANGE",
}

CRITICAL_STATUSES = ("understock", "overstock")
STATUS_ATTRIBUTE = "Current Status"
STOCK_BEFORE_ATTRIBUTE = "Stock Before"
STOCK_AFTER_ATTRIBUTE = "Stock After"

FEATURES = ("under_over",) + tuple(COUNTED_ACTIVITIES) + ("stock_diff",)
DIRECTIONS = ("before", "after")


def feature_key(direction: str, feature: str, days: int) -> str:
    """Column name of a context feature, e.g. "before_goods_issue_14d"."""
    return f"{direction}_{feature}_{days}d"


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0 when either side is constant or empty."""
    n = min(len(x), len(y))
    if n < 2:
        return 0.0
    xs = np.asarray(x[:n], dtype=float)
    ys = np.asarray(y[:n], dtype=float)
    if np.ptp(xs) == 0 or np.ptp(ys) == 0:
        return 0.0
    r, _ = stats.pearsonr(xs, ys)
    return float(np.clip(r, -1.0, 1.0))


def scale_correlation(c: float) -> float:
    """Log-scale a correlation for display: sign(c) * log10(1 + 9|c|)."""
    return math.copysign(math.log10(1 + 9 * abs(c)), c) if c else 0.0


def activities(log: OCELLog) -> List[str]:
    """Sorted distinct base activities of the log."""
    return sorted({base_activity(e.type) for e in log.events})


def _stock(value) -> float:
    try:
        return float(value) if value not in (None, "") else 0.0
    except (TypeError, ValueError):
        return 0.0


@dataclass
class ContextCorrelations:
    """
    Correlations of context features with one activity.

    Attributes:
        activity: Selected activity (event type prefix)
        correlations: window key (e.g. "before_14d") -> feature -> correlation
        n_events: Number of events the correlations were computed over
    """
    activity: str
    correlations: Dict[str, Dict[str, float]] = field(default_factory=dict)
    n_events: int = 0

    def scaled(self) -> Dict[str, Dict[str, float]]:
        """Correlations passed through scale_correlation."""
        return {
            window: {feature: scale_correlation(c) for feature, c in values.items()}
            for window, values in self.correlations.items()
        }

    def strongest(self, limit: int = 5) -> List[Tuple[str, str, float]]:
        """(window, feature, correlation) triples with the largest magnitude."""
        flat = [
            (window, feature, c)
            for window, values in self.correlations.items()
            for feature, c in values.items()
        ]
        return sorted(flat, key=lambda item: -abs(item[2]))[:limit]

    def to_dict(self) -> Dict[str, object]:
        return {
            'activity': self.activity,
            'n_events': self.n_events,
            'correlations': {
                window: {feature: round(c, 4) for feature, c in values.items()}
                for window, values in self.correlations.items()
            },
        }


class EventContextAnalyzer:
    """
    Computes windowed context features and their activity correlations.

    Example:
        analyzer = EventContextAnalyzer()
        result = analyzer.analyze(log, activity="Goods Receipt")
        print(result.correlations["before_14d"]["st_change"])
    """

    def __init__(
        self,
        lead_type: str = DEFAULT_CONFIG['lead_object_type'],
        windows_days: Sequence[int] = DEFAULT_WINDOWS_DAYS,
    ):
        """
        Initialize the analyzer.

        Args:
            lead_type: Object type whose histories define the windows
            windows_days: Window lengths in days
        """
        self.lead_type = lead_type
        self.windows_days = tuple(windows_days)

    @property
    def window_keys(self) -> List[str]:
        return [f"{d}_{days}d" for d in DIRECTIONS for days in self.windows_days]

    def analyze(self, log: OCELLog, activity: Optional[str] = None) -> ContextCorrelations:
        """
        Compute context features and correlate them with an activity.

        Args:
            log: The log snapshot
            activity: Activity prefix; defaults to Goods Receipt, or the first
                activity of the log when that is absent

        Returns:
            ContextCorrelations for the resolved activity
        """
        available = activities(log)
        if activity is None:
            activity = DEFAULT_ACTIVITY
        if activity not in available and available:
            logger.warning(f"Activity '{activity}' not in log, using '{available[0]}'")
            activity = available[0]

        metrics = self.compute_metrics(LogIndex(log))
        return self.correlate(log, metrics, activity or "")

    def compute_metrics(self, index: LogIndex) -> Dict[str, Dict[str, float]]:
        """
        Context features per event id.

        Events related to several lead instances keep the features of the
        last instance processed; events outside any lead history are absent.
        """
        metrics: Dict[str, Dict[str, float]] = {}
        for lead in index.objects_of_type(self.lead_type):
            history = index.events_for(lead.id)
            if not history:
                continue

            times = np.array([e.timestamp.timestamp() for e in history], dtype=float)
            stock_before = np.array([_stock(e.get_attribute(STOCK_BEFORE_ATTRIBUTE)) for e in history])
            stock_after = np.array([_stock(e.get_attribute(STOCK_AFTER_ATTRIBUTE)) for e in history])

            flags = {
                name: np.array([e.type.startswith(prefix) for e in history], dtype=int)
                for name, prefix in COUNTED_ACTIVITIES.items()
            }
            flags["under_over"] = np.array([
                str(e.get_attribute(STATUS_ATTRIBUTE, default="")).lower() in CRITICAL_STATUSES
                for e in history
            ], dtype=int)
            # Prefix sums: count over positions [a, b) is cum[b] - cum[a]
            cumulative = {name: np.concatenate(([0], np.cumsum(f))) for name, f in flags.items()}

            n = len(history)
            rows = [dict() for _ in range(n)]
            for days in self.windows_days:
                span = days * SECONDS_PER_DAY
                starts = np.searchsorted(times, times - span, side='left')
                ends = np.searchsorted(times, times + span, side='right') - 1

                for i in range(n):
                    # Before: earlier positions inside the window; after: later ones
                    lo, hi = min(int(starts[i]), i), max(int(ends[i]), i)
                    for name, cum in cumulative.items():
                        before = int(cum[i] - cum[lo])
                        after = int(cum[hi + 1] - cum[i + 1])
                        if name == "under_over":
                            before, after = int(before > 0), int(after > 0)
                        rows[i][feature_key("before", name, days)] = float(before)
                        rows[i][feature_key("after", name, days)] = float(after)

                    prev_idx = lo - 1
                    next_idx = hi + 1
                    rows[i][feature_key("before", "stock_diff", days)] = (
                        float(stock_before[i] - stock_after[prev_idx]) if prev_idx >= 0 else 0.0
                    )
                    rows[i][feature_key("after", "stock_diff", days)] = (
                        float(stock_before[next_idx] - stock_after[i]) if next_idx < n else 0.0
                    )

            for event, row in zip(history, rows):
                metrics[event.id] = row

        logger.debug(f"Computed context features for {len(metrics)} events")
        return metrics

    def correlate(
        self,
        log: OCELLog,
        metrics: Dict[str, Dict[str, float]],
        activity: str,
    ) -> ContextCorrelations:
        """Correlate every context feature with the activity indicator over all log events."""
        y = [1.0 if e.type.startswith(activity) else 0.0 for e in log.events]
        result = ContextCorrelations(activity=activity, n_events=len(log.events))

        for direction in DIRECTIONS:
            for days in self.windows_days:
                window = f"{direction}_{days}d"
                result.correlations[window] = {}
                for feature in FEATURES:
                    key = feature_key(direction, feature, days)
                    x = [metrics.get(e.id, {}).get(key, 0.0) for e in log.events]
                    result.correlations[window][feature] = pearson(x, y)

        logger.info(f"Correlated context features with '{activity}' over {len(log.events)} events")
        return result
