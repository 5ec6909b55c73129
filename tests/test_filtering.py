"""
Tests for object filters and activity statistics.
"""

import pytest

from ocel_patterns.filtering import ObjectFilter, activity_statistics, apply_filters, surviving_ids


class TestSurvivingIds:
    """Tests for filter combination."""

    def test_intersection(self):
        filters = [
            ObjectFilter("first", "MAT_PLA", {"M1", "M2"}),
            ObjectFilter("second", "MAT_PLA", {"M2", "M3"}),
        ]

        assert surviving_ids(filters) == {"M2"}

    def test_no_filters(self):
        assert surviving_ids([]) == set()


class TestApplyFilters:
    """Tests for log restriction."""

    def test_no_filters_returns_log(self, sample_log):
        assert apply_filters(sample_log, []) is sample_log

    def test_neighbours_pulled_in(self, sample_log):
        """Test that events of directly related objects are kept."""
        filtered = apply_filters(sample_log, [ObjectFilter("m1", "MAT_PLA", {"M1"})])

        # S1 also supplies M2, so M2's receipt stays in the working log
        assert [e.id for e in filtered.events] == ["e1", "e5", "e2", "e3", "e4"]
        assert "M2" in {o.id for o in filtered.objects}
        assert "M3" not in {o.id for o in filtered.objects}

    def test_related_type_whitelist(self, sample_log):
        filtered = apply_filters(
            sample_log,
            [ObjectFilter("m1", "MAT_PLA", {"M1"})],
            related_types=["PO_ITEM", "SO_ITEM"],
        )

        assert [e.id for e in filtered.events] == ["e1", "e2", "e3", "e4"]

    def test_and_semantics(self, sample_log):
        filtered = apply_filters(sample_log, [
            ObjectFilter("a", "MAT_PLA", {"M1", "M3"}),
            ObjectFilter("b", "MAT_PLA", {"M3"}),
        ])

        assert [e.id for e in filtered.events] == ["e8"]
        assert {o.id for o in filtered.objects} == {"M3"}

    def test_disjoint_filters_empty_log(self, sample_log):
        filtered = apply_filters(sample_log, [
            ObjectFilter("a", "MAT_PLA", {"M1"}),
            ObjectFilter("b", "MAT_PLA", {"M2"}),
        ])

        assert filtered.events == ()
        assert filtered.objects == ()
        assert filtered.object_type_names == sample_log.object_type_names

    def test_base_log_untouched(self, sample_log):
        apply_filters(sample_log, [ObjectFilter("m3", "MAT_PLA", {"M3"})])

        assert len(sample_log.events) == 8


class TestActivityStatistics:
    """Tests for event type frequencies."""

    def test_counts_and_percent(self, sample_log):
        stats = activity_statistics(sample_log, ["M1"])

        assert stats[0].activity == "Goods Receipt"
        assert stats[0].count == 2
        assert stats[0].percent == pytest.approx(50.0)
        assert sum(s.count for s in stats) == 4

    def test_no_matching_objects(self, sample_log):
        assert activity_statistics(sample_log, ["NOPE"]) == []

    def test_filter_to_dict(self):
        data = ObjectFilter("v", "MAT_PLA", ["M2", "M1"]).to_dict()

        assert data['object_ids'] == ["M1", "M2"]
