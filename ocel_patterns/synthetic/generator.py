"""
Synthetic Inventory OCEL Generator

Simulates day-by-day stock levels of materials in plants and records them
as an OCEL 2.0 log:
- MAT_PLA objects (one material in one plant)
- SUPPLIER objects delivering purchase-order items
- PO_ITEM objects, one per replenishment order
- SO_ITEM objects, one per sales-driven goods issue

Events:
- "Goods Issue (<kind>)": stock decreases; related to the material (and a
  SO_ITEM for sales)
- "Goods Receipt": a purchase order arrives; related to material, PO_ITEM
  and SUPPLIER
- "ST CHANGE": the material's status (Understock / Normal / Overstock)
  changes after a stock movement

Every event carries "Stock Before", "Stock After" and "Current Status".
The same seed always yields the same log.

Usage:
    generator = InventoryLogGenerator(GeneratorConfig(seed=42, num_materials=10))
    log = generator.generate()
    generator.save(log, "inventory_ocel.json")
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
from faker import Faker

from ..ocel.models import (
    OCELEvent,
    OCELEventType,
    OCELLog,
    OCELObject,
    OCELObjectType,
    OCELRelationship,
)
from .config import GeneratorConfig

logger = logging.getLogger(__name__)

STATUS_UNDERSTOCK = "Understock"
STATUS_NORMAL = "Normal"
STATUS_OVERSTOCK = "Overstock"

EVENT_ATTRIBUTES = (
    {"name": "Stock Before", "type": "float"},
    {"name": "Stock After", "type": "float"},
    {"name": "Current Status", "type": "string"},
    {"name": "Quantity", "type": "float"},
)


class InventoryLogGenerator:
    """
    Synthetic OCEL generator for material stock movements.

    Each material follows a reorder-point policy: when stock falls below its
    minimum and no order is open, a PO_ITEM is placed with a random supplier
    and received after a random lead time. Order sizes vary around the stock
    band width, so some receipts overshoot into Overstock.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config or GeneratorConfig()

        # Initialize random generators
        self.rng = np.random.default_rng(self.config.seed)
        self.faker = Faker()
        self.faker.seed_instance(self.config.seed)

        self.start = datetime.strptime(self.config.start_date, "%Y-%m-%d").replace(tzinfo=timezone.utc)

        self.objects: List[OCELObject] = []
        self._pending: List[Tuple[datetime, str, Dict[str, Any], List[OCELRelationship]]] = []
        self._po_counter = 4500000000
        self._so_counter = 1000000

        # Statistics
        self.stats = {
            "goods_issues": 0,
            "goods_receipts": 0,
            "status_changes": 0,
            "overshooting_receipts": 0,
        }

    def generate(self) -> OCELLog:
        """
        Simulate all materials and assemble the log.

        Returns:
            OCELLog with events in time order
        """
        suppliers = self._generate_suppliers()
        for m in range(self.config.num_materials):
            self._simulate_material(m, suppliers)

        self._pending.sort(key=lambda item: item[0])
        events = tuple(
            OCELEvent(
                id=f"e{i}",
                type=event_type,
                timestamp=ts,
                attributes=attributes,
                relationships=tuple(relationships),
            )
            for i, (ts, event_type, attributes, relationships) in enumerate(self._pending, 1)
        )

        event_type_names = list(dict.fromkeys(e.type for e in events))
        log = OCELLog(
            object_types=tuple(
                OCELObjectType(name=name) for name in ("MAT_PLA", "PO_ITEM", "SO_ITEM", "SUPPLIER")
            ),
            event_types=tuple(
                OCELEventType(name=name, attributes=EVENT_ATTRIBUTES) for name in sorted(event_type_names)
            ),
            objects=tuple(self.objects),
            events=events,
        )
        logger.info(
            f"Generated {len(events)} events and {len(self.objects)} objects "
            f"({self.stats['status_changes']} status changes)"
        )
        return log

    def save(self, log: OCELLog, path: Union[str, Path]) -> Path:
        """Write a log as OCEL 2.0 JSON."""
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(log.to_ocel(), f, indent=2)
        logger.info(f"Saved synthetic log to {output}")
        return output

    def _generate_suppliers(self) -> List[str]:
        suppliers = []
        for i in range(self.config.num_suppliers):
            supplier_id = f"SUP{i + 1:03d}"
            self.objects.append(OCELObject(
                id=supplier_id,
                type="SUPPLIER",
                attributes={"Name": self.faker.company(), "Country": self.faker.country_code()},
            ))
            suppliers.append(supplier_id)
        return suppliers

    @staticmethod
    def _status(stock: float, min_stock: int, max_stock: int) -> str:
        if stock < min_stock:
            return STATUS_UNDERSTOCK
        if stock > max_stock:
            return STATUS_OVERSTOCK
        return STATUS_NORMAL

    def _simulate_material(self, m: int, suppliers: List[str]) -> None:
        """Simulate the stock of one material over the configured period."""
        cfg = self.config
        plant = cfg.plants[m % len(cfg.plants)]
        material_id = f"MAT{m + 1:04d}-{plant}"
        min_stock = int(self.rng.integers(cfg.min_stock_range[0], cfg.min_stock_range[1] + 1))
        max_stock = int(self.rng.integers(cfg.max_stock_range[0], cfg.max_stock_range[1] + 1))
        issue_probability = float(self.rng.uniform(*cfg.issue_probability_range))

        self.objects.append(OCELObject(
            id=material_id,
            type="MAT_PLA",
            attributes={
                "Description": f"{self.faker.word().title()} {self.faker.word().title()}",
                "Plant": plant,
                "Min Stock": min_stock,
                "Max Stock": max_stock,
            },
        ))

        stock = float(round(min_stock + (max_stock - min_stock) * self.rng.uniform(*cfg.initial_fill_range)))
        status = self._status(stock, min_stock, max_stock)
        open_order: Optional[Tuple[int, str, str, float]] = None  # (arrival day, po item, supplier, qty)

        issue_kinds = list(cfg.issue_kinds)
        weights = np.array(list(cfg.issue_kinds.values()))
        weights = weights / weights.sum()

        for day in range(cfg.num_days):
            day_start = self.start + timedelta(days=day)

            if open_order is not None and open_order[0] == day:
                _, po_item, supplier, quantity = open_order
                ts = day_start + timedelta(hours=int(self.rng.integers(7, 11)), minutes=int(self.rng.integers(0, 60)))
                stock, status = self._movement(
                    ts, "Goods Receipt", material_id, stock, quantity, min_stock, max_stock, status,
                    [OCELRelationship(po_item, "item"), OCELRelationship(supplier, "supplier")],
                )
                self.stats["goods_receipts"] += 1
                if status == STATUS_OVERSTOCK:
                    self.stats["overshooting_receipts"] += 1
                open_order = None

            if self.rng.random() < issue_probability and stock > 0:
                kind = str(self.rng.choice(issue_kinds, p=weights))
                quantity = min(stock, float(self.rng.poisson(cfg.issue_quantity_mean) + 1))
                related = []
                if kind.endswith("(Sale)"):
                    related.append(OCELRelationship(self._new_so_item(), "item"))
                ts = day_start + timedelta(hours=int(self.rng.integers(12, 18)), minutes=int(self.rng.integers(0, 60)))
                stock, status = self._movement(
                    ts, kind, material_id, stock, -quantity, min_stock, max_stock, status, related,
                )
                self.stats["goods_issues"] += 1

            if open_order is None and stock < min_stock:
                lead_time = int(self.rng.integers(cfg.lead_time_range[0], cfg.lead_time_range[1] + 1))
                supplier = str(self.rng.choice(suppliers))
                quantity = float(round((max_stock - min_stock) * self.rng.uniform(*cfg.order_fill_range)))
                open_order = (day + lead_time, self._new_po_item(supplier, material_id), supplier, quantity)

    def _movement(
        self,
        ts: datetime,
        event_type: str,
        material_id: str,
        stock: float,
        delta: float,
        min_stock: int,
        max_stock: int,
        status: str,
        related: List[OCELRelationship],
    ) -> Tuple[float, str]:
        """Record a stock movement and, if the status flips, an ST CHANGE event."""
        new_stock = max(0.0, stock + delta)
        new_status = self._status(new_stock, min_stock, max_stock)
        self._pending.append((
            ts,
            event_type,
            {
                "Stock Before": stock,
                "Stock After": new_stock,
                "Current Status": new_status,
                "Quantity": abs(delta),
            },
            [OCELRelationship(material_id, "material")] + related,
        ))
        if new_status != status:
            self._pending.append((
                ts + timedelta(minutes=1),
                "ST CHANGE",
                {
                    "Stock Before": new_stock,
                    "Stock After": new_stock,
                    "Current Status": new_status,
                    "Previous Status": status,
                },
                [OCELRelationship(material_id, "material")],
            ))
            self.stats["status_changes"] += 1
        return new_stock, new_status

    def _new_po_item(self, supplier: str, material_id: str) -> str:
        self._po_counter += 1
        po_item = f"PO{self._po_counter}-10"
        self.objects.append(OCELObject(
            id=po_item,
            type="PO_ITEM",
            attributes={"Material": material_id},
            relationships=(OCELRelationship(supplier, "supplier"),),
        ))
        return po_item

    def _new_so_item(self) -> str:
        self._so_counter += 1
        so_item = f"SO{self._so_counter}-10"
        self.objects.append(OCELObject(
            id=so_item,
            type="SO_ITEM",
            attributes={"Customer": self.faker.company()},
        ))
        return so_item


def generate_inventory_log(
    seed: int = 42,
    num_materials: int = 20,
    num_days: int = 180,
) -> OCELLog:
    """Convenience function: generate a synthetic inventory log."""
    config = GeneratorConfig(seed=seed, num_materials=num_materials, num_days=num_days)
    return InventoryLogGenerator(config).generate()
