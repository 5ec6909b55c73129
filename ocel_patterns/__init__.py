"""
OCEL Pattern Engine

This engine ingests object-centric event logs (OCEL 2.0), mines recurring
structural and behavioral patterns around a lead object type, and estimates
a small latent-variable model over per-instance performance indicators.
"""

__version__ = "0.1.0"
__author__ = "OCEL Pattern Engine Team"

from pathlib import Path

# Package root directory
PACKAGE_ROOT = Path(__file__).parent

# Default configuration
DEFAULT_CONFIG = {
    "lead_object_type": "MAT_PLA",
    "min_support_percent": 10.0,
    "sequence_min_support_percent": 20.0,
    "max_patterns": 50,
    "max_candidates": 3000,
    "df_window": 2,
    "include_e2o": True,
    "status": "All",  # "All" or a specific status value
    "problem_marker": "ST CHANGE",
    "domain": "inventory",  # "inventory" or "process"
}
