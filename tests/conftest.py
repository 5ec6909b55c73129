"""
Pytest configuration and fixtures for pattern engine tests.

The sample log is small enough to derive every expected token, pattern and
variant by hand:

- M1: Goods Receipt (PO1, S1) -> Goods Issue (Sale) (SO1) -> ST CHANGE
      -> Goods Receipt (PO2, S1)
- M2: Goods Receipt (PO3, S1) -> Goods Issue (Sale) (SO2) -> ST CHANGE
- M3: Goods Issue (Transfer), no related objects
"""

import json

import pytest

from ocel_patterns.ocel import LogIndex, parse_ocel


def _event(event_id, event_type, time, objects, status, before, after):
    return {
        "id": event_id,
        "type": event_type,
        "time": time,
        "attributes": [
            {"name": "Current Status", "value": status},
            {"name": "Stock Before", "value": before},
            {"name": "Stock After", "value": after},
        ],
        "relationships": [{"objectId": oid, "qualifier": ""} for oid in objects],
    }


@pytest.fixture
def sample_document():
    """Small OCEL 2.0 document with three materials."""
    return {
        "objectTypes": [
            {"name": "MAT_PLA", "attributes": []},
            {"name": "PO_ITEM", "attributes": []},
            {"name": "SO_ITEM", "attributes": []},
            {"name": "SUPPLIER", "attributes": []},
        ],
        "eventTypes": [
            {"name": "Goods Receipt", "attributes": []},
            {"name": "Goods Issue (Sale)", "attributes": []},
            {"name": "Goods Issue (Transfer)", "attributes": []},
            {"name": "ST CHANGE", "attributes": []},
        ],
        "objects": [
            {"id": "M1", "type": "MAT_PLA", "attributes": [{"name": "Plant", "value": "1000"}]},
            {"id": "M2", "type": "MAT_PLA"},
            {"id": "M3", "type": "MAT_PLA"},
            {"id": "PO1", "type": "PO_ITEM"},
            {"id": "PO2", "type": "PO_ITEM"},
            {"id": "PO3", "type": "PO_ITEM"},
            {"id": "SO1", "type": "SO_ITEM"},
            {"id": "SO2", "type": "SO_ITEM"},
            {"id": "S1", "type": "SUPPLIER"},
        ],
        "events": [
            _event("e1", "Goods Receipt", "2024-01-01T08:00:00Z", ["M1", "PO1", "S1"], "Normal", 10, 60),
            _event("e5", "Goods Receipt", "2024-01-02T08:00:00Z", ["M2", "PO3", "S1"], "Normal", 20, 80),
            _event("e2", "Goods Issue (Sale)", "2024-01-03T12:00:00Z", ["M1", "SO1"], "Understock", 60, 15),
            _event("e3", "ST CHANGE", "2024-01-03T12:01:00Z", ["M1"], "Understock", 15, 15),
            _event("e6", "Goods Issue (Sale)", "2024-01-04T12:00:00Z", ["M2", "SO2"], "Understock", 80, 5),
            _event("e7", "ST CHANGE", "2024-01-04T12:01:00Z", ["M2"], "Understock", 5, 5),
            _event("e8", "Goods Issue (Transfer)", "2024-01-05T09:00:00Z", ["M3"], "Normal", 50, 40),
            _event("e4", "Goods Receipt", "2024-01-10T08:00:00Z", ["M1", "PO2", "S1"], "Normal", 15, 70),
        ],
    }


@pytest.fixture
def sample_log(sample_document):
    """Parsed sample log."""
    return parse_ocel(sample_document)


@pytest.fixture
def sample_index(sample_log):
    """Index over the sample log."""
    return LogIndex(sample_log)


@pytest.fixture
def sample_file(tmp_path, sample_document):
    """Sample log written to a JSON file."""
    path = tmp_path / "sample_ocel.json"
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path


@pytest.fixture
def process_document():
    """Order log with uneven lifecycles for the process domain."""
    def ev(event_id, event_type, time, objects):
        return {
            "id": event_id,
            "type": event_type,
            "time": time,
            "relationships": [{"objectId": oid} for oid in objects],
        }

    return {
        "objectTypes": [{"name": "ORDER"}, {"name": "ITEM"}, {"name": "CUSTOMER"}],
        "eventTypes": [],
        "objects": [
            {"id": "O1", "type": "ORDER"},
            {"id": "O2", "type": "ORDER"},
            {"id": "O3", "type": "ORDER"},
            {"id": "I1", "type": "ITEM"},
            {"id": "I2", "type": "ITEM"},
            {"id": "C1", "type": "CUSTOMER"},
        ],
        "events": [
            ev("p1", "Create Order", "2024-03-01T09:00:00", ["O1", "C1"]),
            ev("p2", "Pick Item", "2024-03-02T09:00:00", ["O1", "I1"]),
            ev("p3", "Ship", "2024-03-03T09:00:00", ["O1"]),
            ev("p4", "Create Order", "2024-03-01T10:00:00", ["O2", "C1"]),
            ev("p5", "Pick Item", "2024-03-05T10:00:00", ["O2", "I1", "I2"]),
            ev("p6", "Pick Item", "2024-03-09T10:00:00", ["O2", "I2"]),
            ev("p7", "Ship", "2024-03-20T10:00:00", ["O2"]),
            ev("p8", "Create Order", "2024-03-02T11:00:00", ["O3"]),
            ev("p9", "Ship", "2024-03-04T11:00:00", ["O3"]),
        ],
    }


@pytest.fixture
def process_log(process_document):
    """Parsed process log."""
    return parse_ocel(process_document)
