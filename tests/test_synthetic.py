"""
Tests for the synthetic inventory log generator.
"""

import pytest

from ocel_patterns.ocel import LogIndex, load_ocel
from ocel_patterns.synthetic import GeneratorConfig, InventoryLogGenerator, generate_inventory_log


@pytest.fixture(scope="module")
def generated():
    generator = InventoryLogGenerator(GeneratorConfig(seed=11, num_materials=6, num_days=60))
    return generator, generator.generate()


class TestGeneratorConfig:
    """Tests for generator settings."""

    def test_defaults(self):
        config = GeneratorConfig()

        assert config.seed == 42
        assert config.num_materials == 20
        assert sum(config.issue_kinds.values()) == pytest.approx(1.0)

    @pytest.mark.parametrize("changes", [
        {"num_materials": -1},
        {"num_suppliers": 0},
        {"num_days": 0},
    ])
    def test_invalid(self, changes):
        with pytest.raises(ValueError):
            GeneratorConfig(**changes)


class TestInventoryLogGenerator:
    """Tests for the simulated log."""

    def test_same_seed_same_log(self):
        first = generate_inventory_log(seed=5, num_materials=3, num_days=30)
        second = generate_inventory_log(seed=5, num_materials=3, num_days=30)

        assert first.to_ocel() == second.to_ocel()

    def test_different_seed_differs(self):
        first = generate_inventory_log(seed=5, num_materials=3, num_days=30)
        second = generate_inventory_log(seed=6, num_materials=3, num_days=30)

        assert first.to_ocel() != second.to_ocel()

    def test_object_counts(self, generated):
        _, log = generated
        index = LogIndex(log)

        assert len(index.objects_of_type("MAT_PLA")) == 6
        assert len(index.objects_of_type("SUPPLIER")) == 5
        assert log.object_type_names == ["MAT_PLA", "PO_ITEM", "SO_ITEM", "SUPPLIER"]

    def test_events_time_ordered(self, generated):
        _, log = generated
        timestamps = [e.timestamp for e in log.events]

        assert timestamps == sorted(timestamps)
        assert [e.id for e in log.events[:3]] == ["e1", "e2", "e3"]

    def test_stock_attributes(self, generated):
        _, log = generated

        for event in log.events:
            assert event.get_attribute("Stock After") >= 0
            assert event.get_attribute("Current Status") in ("Understock", "Normal", "Overstock")

    def test_status_changes_recorded(self, generated):
        generator, log = generated
        changes = [e for e in log.events if e.type == "ST CHANGE"]

        assert len(changes) == generator.stats["status_changes"]
        for event in changes:
            assert event.get_attribute("Previous Status") != event.get_attribute("Current Status")
            assert len(event.object_ids) == 1

    def test_receipts_relate_order_and_supplier(self, generated):
        generator, log = generated
        index = LogIndex(log)
        receipts = [e for e in log.events if e.type == "Goods Receipt"]

        assert len(receipts) == generator.stats["goods_receipts"]
        for event in receipts:
            types = sorted(index.object_type(oid) for oid in event.object_ids)
            assert types == ["MAT_PLA", "PO_ITEM", "SUPPLIER"]

    def test_sales_relate_so_item(self, generated):
        _, log = generated
        index = LogIndex(log)

        for event in log.events:
            if event.type == "Goods Issue (Sale)":
                assert "SO_ITEM" in {index.object_type(oid) for oid in event.object_ids}

    def test_no_materials(self):
        log = InventoryLogGenerator(GeneratorConfig(num_materials=0, num_days=10)).generate()

        assert log.events == ()
        assert len(log.objects) == 5

    def test_save_round_trip(self, generated, tmp_path):
        generator, log = generated

        path = generator.save(log, tmp_path / "out" / "inventory.json")
        loaded = load_ocel(path)

        assert len(loaded.events) == len(log.events)
        assert len(loaded.objects) == len(log.objects)
