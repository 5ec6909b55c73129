"""
Configuration settings for the synthetic inventory OCEL generator.

All parameters that shape the simulated material flows: master-data
counts, the simulated period, stock bands that define the status of a
material, and demand/replenishment behavior.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass
class GeneratorConfig:
    """Main configuration for the synthetic inventory log generator."""

    # Random seed for reproducibility
    seed: int = 42

    # Master data counts
    num_materials: int = 20
    num_suppliers: int = 5

    # Simulated period
    start_date: str = "2024-01-01"
    num_days: int = 180

    # Plants materials are assigned to
    plants: Tuple[str, ...] = ("1000", "1100", "2000")

    # Stock band per material (min stock, max stock) drawn from these ranges
    min_stock_range: Tuple[int, int] = (20, 40)
    max_stock_range: Tuple[int, int] = (120, 180)

    # Initial stock relative to the band (fraction between min and max)
    initial_fill_range: Tuple[float, float] = (0.3, 0.8)

    # Demand: daily probability of a goods issue and mean issued quantity
    issue_probability_range: Tuple[float, float] = (0.3, 0.8)
    issue_quantity_mean: float = 8.0

    # Replenishment: lead time in days, order size relative to the band width
    lead_time_range: Tuple[int, int] = (3, 12)
    order_fill_range: Tuple[float, float] = (0.6, 1.4)

    # Goods issue sub-activities and their weights
    issue_kinds: Dict[str, float] = field(default_factory=lambda: {
        "Goods Issue (Sale)": 0.80,
        "Goods Issue (Scrap)": 0.05,
        "Goods Issue (Transfer)": 0.15,
    })

    def __post_init__(self):
        if self.num_materials < 0 or self.num_suppliers < 1:
            raise ValueError("num_materials must be >= 0 and num_suppliers >= 1")
        if self.num_days < 1:
            raise ValueError(f"num_days must be >= 1, got {self.num_days}")
