"""
Tests for capped Apriori mining and pattern selection.

Tests cover:
- Exact supports on small inputs
- Anti-monotonicity and subset closure of the result
- Candidate cap and the truncated flag
- Ranking and greedy maximal reduction
"""

from itertools import combinations

import pytest

from ocel_patterns.features import Transaction
from ocel_patterns.mining import (
    FrequentPatternMiner,
    Pattern,
    maximal_patterns,
    min_support_count,
    mine_patterns,
    rank_patterns,
    select_patterns,
)


def brute_force_support(itemset, transactions):
    return sum(1 for t in transactions if set(itemset) <= set(t))


@pytest.fixture
def small_transactions():
    return [["a", "b"], ["a"], ["a", "b", "c"]]


@pytest.fixture
def medium_transactions():
    return [
        ["bread", "milk"],
        ["bread", "diaper", "beer", "eggs"],
        ["milk", "diaper", "beer", "cola"],
        ["bread", "milk", "diaper", "beer"],
        ["bread", "milk", "diaper", "cola"],
    ]


class TestMinSupport:
    """Tests for the percentage conversion."""

    def test_rounds_up(self):
        assert min_support_count(25, 10) == 3
        assert min_support_count(20, 10) == 2

    def test_floor_of_one(self):
        assert min_support_count(0, 10) == 1
        assert min_support_count(5, 0) == 1


class TestFrequentPatternMiner:
    """Tests for the level-wise miner."""

    def test_trivial_example(self, small_transactions):
        """Test the exact frequent itemsets of a three-transaction input."""
        result = FrequentPatternMiner().mine(small_transactions, min_support=2)

        found = {p.items: p.support for p in result.patterns}
        assert found == {("a",): 3, ("b",): 2, ("a", "b"): 2}
        assert not result.truncated

    def test_supports_are_exact(self, medium_transactions):
        result = FrequentPatternMiner().mine(medium_transactions, min_support=2)

        for pattern in result.patterns:
            assert pattern.support == brute_force_support(pattern.items, medium_transactions)
            assert pattern.support >= 2

    def test_complete_without_cap(self, medium_transactions):
        """Test that every frequent itemset is found when the cap never fires."""
        result = FrequentPatternMiner().mine(medium_transactions, min_support=2)
        items = sorted({i for t in medium_transactions for i in t})

        expected = set()
        for size in range(1, len(items) + 1):
            for itemset in combinations(items, size):
                if brute_force_support(itemset, medium_transactions) >= 2:
                    expected.add(itemset)

        assert {p.items for p in result.patterns} == expected

    def test_anti_monotone(self, medium_transactions):
        """Test that every subset of a reported itemset is reported with support at least as high."""
        result = FrequentPatternMiner().mine(medium_transactions, min_support=2)
        supports = {p.items: p.support for p in result.patterns}

        for items, support in supports.items():
            for size in range(1, len(items)):
                for subset in combinations(items, size):
                    assert subset in supports
                    assert supports[subset] >= support

    def test_accepts_transaction_objects(self, small_transactions):
        transactions = [
            Transaction(lead_id=str(i), segment=0, tokens=tuple(t))
            for i, t in enumerate(small_transactions)
        ]

        result = FrequentPatternMiner().mine(transactions, min_support=2)

        assert result.support_of(["a", "b"]) == 2
        assert result.support_of(["c"]) is None

    def test_empty_input(self):
        result = FrequentPatternMiner().mine([], min_support=1)

        assert result.patterns == []
        assert not result.truncated
        assert result.n_transactions == 0

    def test_min_support_above_count(self, small_transactions):
        result = FrequentPatternMiner().mine(small_transactions, min_support=4)

        assert result.patterns == []

    def test_cap_sets_truncated(self):
        """Test that the cap bounds the results and flags them as partial."""
        transactions = [[f"t{i}" for i in range(12)]] * 3

        result = FrequentPatternMiner(max_candidates=20).mine(transactions, min_support=1)

        assert result.truncated
        assert len(result.patterns) <= 20
        for pattern in result.patterns:
            assert pattern.support == 3

    def test_level_one_cap_keeps_first_seen_tokens(self):
        """Test that level-1 truncation keeps tokens in first-appearance order."""
        transactions = [["z", "y", "x", "w"]]

        result = FrequentPatternMiner(max_candidates=2).mine(transactions, min_support=1)

        assert result.truncated
        assert [p.items for p in result.patterns][:2] == [("z",), ("y",)]

    def test_invalid_cap(self):
        with pytest.raises(ValueError):
            FrequentPatternMiner(max_candidates=0)

    def test_mine_patterns_percent(self, small_transactions):
        result = mine_patterns(small_transactions, min_support_percent=50)

        assert result.min_support == 2
        assert result.support_of(["a"]) == 3


class TestPatternSelection:
    """Tests for ranking and maximal reduction."""

    def test_rank_by_support_then_size(self):
        patterns = [Pattern(("a",), 3), Pattern(("a", "b"), 3), Pattern(("c",), 5)]

        ranked = rank_patterns(patterns)

        assert [p.items for p in ranked] == [("c",), ("a", "b"), ("a",)]

    def test_maximal_drops_subsets_of_kept(self):
        patterns = rank_patterns([Pattern(("a",), 3), Pattern(("a", "b"), 3), Pattern(("b",), 3)])

        kept = maximal_patterns(patterns)

        assert [p.items for p in kept] == [("a", "b")]

    def test_maximal_is_greedy(self):
        """Test that a higher-ranked subset is kept even if a superset follows."""
        patterns = rank_patterns([Pattern(("a",), 5), Pattern(("a", "b"), 2)])

        kept = maximal_patterns(patterns)

        assert [p.items for p in kept] == [("a",), ("a", "b")]

    def test_no_kept_pattern_is_subset_of_earlier(self, medium_transactions):
        result = FrequentPatternMiner().mine(medium_transactions, min_support=2)

        selected = select_patterns(result, max_patterns=100)

        for i, later in enumerate(selected):
            for earlier in selected[:i]:
                assert not later.item_set <= earlier.item_set

    def test_select_by_marker_and_length(self):
        patterns = [
            Pattern(("x-->ST CHANGE(df_M)",), 4),
            Pattern(("a", "x-->ST CHANGE(df_M)"), 3),
            Pattern(("a", "b"), 3),
        ]

        selected = select_patterns(patterns, min_length=2, marker="ST CHANGE")

        assert [p.items for p in selected] == [("a", "x-->ST CHANGE(df_M)")]

    def test_select_truncates_to_max_patterns(self, medium_transactions):
        result = FrequentPatternMiner().mine(medium_transactions, min_support=1)

        assert len(select_patterns(result, max_patterns=2)) == 2
        assert len(select_patterns(result, max_patterns=0)) == 1

    def test_relative_support(self):
        assert Pattern(("a",), 2).relative_support(4) == 0.5
        assert Pattern(("a",), 2).relative_support(0) == 0.0
