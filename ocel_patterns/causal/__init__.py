"""
Correlation-based causal analysis.

Main components:
- schema: data-driven domain tables (latents, indicators, signs, paths)
- indicators: per-instance indicator extraction into an IndicatorTable
- estimator: correlation matrix, factor loadings and structural paths

Example usage:
    from ocel_patterns.causal import CausalEstimator, INVENTORY_SCHEMA, extract_indicators

    table = extract_indicators(index, "MAT_PLA", INVENTORY_SCHEMA)
    model = CausalEstimator(INVENTORY_SCHEMA).estimate(table)
"""

from .schema import (
    CATEGORY_ACTIVITY,
    CATEGORY_COMPLEXITY,
    CATEGORY_OBJECT_METRIC,
    CATEGORY_PERFORMANCE,
    INVENTORY_SCHEMA,
    LATENT,
    OBSERVED,
    PROCESS_SCHEMA,
    SCHEMAS,
    DomainSchema,
    IndicatorSpec,
    LatentSpec,
    get_schema,
)

from .indicators import (
    EXTRACTORS,
    IndicatorTable,
    extract_indicators,
    inventory_indicators,
    process_indicators,
)

from .estimator import (
    CausalEstimator,
    CausalModel,
    CausalPath,
    CausalVariable,
    pearson_standardized,
)

__all__ = [
    # Schema
    "CATEGORY_ACTIVITY",
    "CATEGORY_COMPLEXITY",
    "CATEGORY_OBJECT_METRIC",
    "CATEGORY_PERFORMANCE",
    "INVENTORY_SCHEMA",
    "LATENT",
    "OBSERVED",
    "PROCESS_SCHEMA",
    "SCHEMAS",
    "DomainSchema",
    "IndicatorSpec",
    "LatentSpec",
    "get_schema",
    # Indicators
    "EXTRACTORS",
    "IndicatorTable",
    "extract_indicators",
    "inventory_indicators",
    "process_indicators",
    # Estimator
    "CausalEstimator",
    "CausalModel",
    "CausalPath",
    "CausalVariable",
    "pearson_standardized",
]
