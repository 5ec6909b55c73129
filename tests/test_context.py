"""
Tests for windowed event context analysis.
"""

import numpy as np
import pytest

from ocel_patterns.context import (
    EventContextAnalyzer,
    activities,
    feature_key,
    pearson,
    scale_correlation,
)
from ocel_patterns.ocel import LogIndex


class TestHelpers:
    """Tests for the context helper functions."""

    def test_feature_key(self):
        assert feature_key("before", "goods_issue", 14) == "before_goods_issue_14d"

    def test_scale_correlation(self):
        assert scale_correlation(0.0) == 0.0
        assert scale_correlation(1.0) == pytest.approx(1.0)
        assert scale_correlation(-1.0) == pytest.approx(-1.0)
        assert 0 < scale_correlation(0.1) < scale_correlation(0.5) < 1

    def test_pearson(self):
        assert pearson([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
        assert pearson([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)
        assert pearson([1, 1, 1], [1, 2, 3]) == 0.0
        assert pearson([], []) == 0.0

    def test_pearson_matches_numpy(self):
        x = [0.0, 1.0, 0.0, 3.0, 2.0, 5.0]
        y = [1.0, 0.0, 0.0, 1.0, 1.0, 1.0]

        assert pearson(x, y) == pytest.approx(np.corrcoef(x, y)[0, 1])

    def test_pearson_short_inputs(self):
        assert pearson([1.0], [2.0]) == 0.0
        assert pearson([1.0, 2.0, 3.0], [1.0, 2.0]) == pytest.approx(1.0)

    def test_activities(self, sample_log):
        assert activities(sample_log) == ["Goods Issue", "Goods Receipt", "ST CHANGE"]


class TestEventContextAnalyzer:
    """Tests for the analyzer."""

    def test_window_features_of_goods_issue(self, sample_log):
        """Test counts around M1's goods issue within 14 days."""
        metrics = EventContextAnalyzer(lead_type="MAT_PLA").compute_metrics(LogIndex(sample_log))

        row = metrics["e2"]
        assert row["before_goods_receipt_14d"] == 1.0
        assert row["before_st_change_14d"] == 0.0
        assert row["after_st_change_14d"] == 1.0
        assert row["after_goods_receipt_14d"] == 1.0
        assert row["before_under_over_14d"] == 0.0
        assert row["after_under_over_14d"] == 1.0
        assert row["before_stock_diff_14d"] == 0.0

    def test_window_excludes_distant_events(self, sample_log):
        """Test that a short window only sees nearby events."""
        metrics = EventContextAnalyzer(lead_type="MAT_PLA", windows_days=(1,)).compute_metrics(
            LogIndex(sample_log)
        )

        row = metrics["e4"]
        assert row["before_goods_issue_1d"] == 0.0
        assert row["before_st_change_1d"] == 0.0

    def test_every_lead_event_has_metrics(self, sample_log):
        metrics = EventContextAnalyzer().compute_metrics(LogIndex(sample_log))

        assert set(metrics) == {e.id for e in sample_log.events}

    def test_analyze_default_activity(self, sample_log):
        result = EventContextAnalyzer().analyze(sample_log)

        assert result.activity == "Goods Receipt"
        assert result.n_events == 8
        assert set(result.correlations) == {"before_14d", "before_28d", "after_14d", "after_28d"}
        for values in result.correlations.values():
            assert set(values) == {"under_over", "goods_issue", "goods_receipt", "st_change", "stock_diff"}
            for c in values.values():
                assert -1.0 <= c <= 1.0

    def test_unknown_activity_falls_back(self, sample_log):
        result = EventContextAnalyzer().analyze(sample_log, activity="Invoice")

        assert result.activity == "Goods Issue"

    def test_strongest_and_scaled(self, sample_log):
        result = EventContextAnalyzer().analyze(sample_log, activity="ST CHANGE")

        strongest = result.strongest(3)
        assert len(strongest) == 3
        assert abs(strongest[0][2]) >= abs(strongest[-1][2])
        scaled = result.scaled()
        assert set(scaled) == set(result.correlations)
