"""
Reproducible synthetic inventory logs for demos and tests.
"""

from .config import GeneratorConfig
from .generator import InventoryLogGenerator, generate_inventory_log

__all__ = [
    "GeneratorConfig",
    "InventoryLogGenerator",
    "generate_inventory_log",
]
