"""
Tests for variant grouping.
"""

from ocel_patterns.features import SequenceBuilder, Transaction, TransactionBuilder
from ocel_patterns.mining import group_variants, variants_from_sequences, variants_from_transactions


class TestGroupVariants:
    """Tests for signature grouping."""

    def test_partition(self):
        """Test that every instance lands in exactly one variant."""
        triples = [
            ("o1", "A|B", ("A", "B")),
            ("o2", "A", ("A",)),
            ("o3", "A|B", ("A", "B")),
            ("o4", "C", ("C",)),
        ]

        variants = group_variants(triples)

        members = [oid for v in variants for oid in v.object_ids]
        assert sorted(members) == ["o1", "o2", "o3", "o4"]
        assert variants[0].signature == "A|B"
        assert variants[0].count == 2

    def test_ties_keep_first_appearance(self):
        variants = group_variants([("o1", "X", ()), ("o2", "Y", ()), ("o3", "Z", ())])

        assert [v.signature for v in variants] == ["X", "Y", "Z"]

    def test_duplicate_ids_counted_once(self):
        """Test that segments of one instance with the same signature count once."""
        variants = group_variants([("o1", "X", ()), ("o1", "X", ()), ("o2", "X", ())])

        assert variants[0].object_ids == ["o1", "o2"]

    def test_empty(self):
        assert group_variants([]) == []


class TestVariantSources:
    """Tests for transaction and sequence variants."""

    def test_transaction_variants_ignore_token_order(self):
        transactions = [
            Transaction(lead_id="o1", segment=0, tokens=("b", "a")),
            Transaction(lead_id="o2", segment=0, tokens=("a", "b")),
        ]

        variants = variants_from_transactions(transactions)

        assert len(variants) == 1
        assert variants[0].tokens == ("a", "b")
        assert variants[0].to_filter() == ["o1", "o2"]

    def test_sample_log_transaction_variants(self, sample_index):
        """Test that the two materials with different histories form two variants."""
        transactions = TransactionBuilder().build(sample_index, "MAT_PLA")

        variants = variants_from_transactions(transactions)

        assert sorted(v.count for v in variants) == [1, 1]

    def test_sequence_variants_respect_order(self, sample_index):
        records = SequenceBuilder(status="Understock").build(sample_index, "MAT_PLA")

        variants = variants_from_sequences(records)

        assert len(variants) == 1
        assert variants[0].signature == "Goods Issue (Sale)-->ST CHANGE"
        assert variants[0].object_ids == ["M1", "M2"]

    def test_to_dict(self):
        variant = group_variants([("o1", "X", ("X",))])[0]

        assert variant.to_dict() == {
            'signature': "X",
            'tokens': ["X"],
            'object_ids': ["o1"],
            'count': 1,
        }
