"""
Correlation-based latent-variable (SEM-like) estimation.

This is not a fitted structural equation model. Given standardized indicator
columns, it derives:

- a Pearson correlation matrix over the selected observed indicators,
  computed as the mean of products of z-scores;
- a factor loading per indicator: sqrt of the mean absolute correlation with
  the other selected members of its latent group;
- a structural coefficient per latent pair: mean sign-adjusted correlation
  over all cross pairs of selected indicators.

Paths are flagged significant against fixed thresholds. Degenerate inputs
(no instances, zero variance, empty groups) yield zero coefficients.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .indicators import IndicatorTable
from .schema import LATENT, OBSERVED, DomainSchema

logger = logging.getLogger(__name__)


@dataclass
class CausalVariable:
    """
    A node of the causal model.

    Observed variables carry population statistics of their indicator;
    latent variables carry their indicator ids.
    """
    id: str
    name: str
    kind: str
    category: str
    mean: Optional[float] = None
    std_dev: Optional[float] = None
    value: Optional[float] = None
    indicators: List[str] = field(default_factory=list)

    @property
    def is_latent(self) -> bool:
        return self.kind == LATENT

    def to_dict(self) -> Dict[str, object]:
        result = {
            'id': self.id,
            'name': self.name,
            'kind': self.kind,
            'category': self.category,
        }
        if self.is_latent:
            result['indicators'] = list(self.indicators)
        else:
            result.update({'mean': self.mean, 'std_dev': self.std_dev, 'value': self.value})
        return result


@dataclass
class CausalPath:
    """A loading (latent -> observed) or structural (latent -> latent) edge."""
    id: str
    source: str
    target: str
    coefficient: float
    is_significant: bool
    kind: str

    def to_dict(self) -> Dict[str, object]:
        return {
            'id': self.id,
            'source': self.source,
            'target': self.target,
            'coefficient': round(self.coefficient, 4),
            'is_significant': self.is_significant,
            'kind': self.kind,
        }


@dataclass
class CausalModel:
    """Estimated model: selected variables, paths and the correlation matrix."""
    domain: str
    lead_type: str
    variables: List[CausalVariable] = field(default_factory=list)
    paths: List[CausalPath] = field(default_factory=list)
    correlation_matrix: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    variable_names: List[str] = field(default_factory=list)

    def get_variable(self, variable_id: str) -> Optional[CausalVariable]:
        for variable in self.variables:
            if variable.id == variable_id:
                return variable
        return None

    def get_path(self, path_id: str) -> Optional[CausalPath]:
        for path in self.paths:
            if path.id == path_id:
                return path
        return None

    def correlation(self, first: str, second: str) -> Optional[float]:
        """Correlation of two indicators in the matrix, None if either is absent."""
        if first not in self.variable_names or second not in self.variable_names:
            return None
        i = self.variable_names.index(first)
        j = self.variable_names.index(second)
        return float(self.correlation_matrix[i, j])

    def significant_paths(self) -> List[CausalPath]:
        return [p for p in self.paths if p.is_significant]

    def to_dict(self) -> Dict[str, object]:
        return {
            'domain': self.domain,
            'lead_type': self.lead_type,
            'variables': [v.to_dict() for v in self.variables],
            'paths': [p.to_dict() for p in self.paths],
            'correlation_matrix': np.round(self.correlation_matrix, 4).tolist(),
            'variable_names': list(self.variable_names),
        }


class CausalEstimator:
    """
    Estimates loadings and structural paths for one domain schema.

    Example:
        table = extract_indicators(index, "MAT_PLA", INVENTORY_SCHEMA)
        model = CausalEstimator(INVENTORY_SCHEMA).estimate(table)
        for path in model.significant_paths():
            print(path.source, path.target, path.coefficient)
    """

    LOADING_THRESHOLD = 0.3
    STRUCTURAL_THRESHOLD = 0.2

    def __init__(self, schema: DomainSchema):
        self.schema = schema

    def estimate(
        self,
        table: IndicatorTable,
        selected_observed: Optional[Iterable[str]] = None,
        selected_latent: Optional[Iterable[str]] = None,
    ) -> CausalModel:
        """
        Estimate the model over a user selection.

        Args:
            table: Indicator values from extract_indicators
            selected_observed: Observed indicator ids (default: all of the schema)
            selected_latent: Latent ids (default: all of the schema)

        Returns:
            CausalModel with variables in schema order (latents first)
        """
        observed = self._selection(selected_observed, self.schema.indicator_ids)
        latent = self._selection(selected_latent, self.schema.latent_ids)

        matrix, names = self.correlation_matrix(table, observed)
        model = CausalModel(
            domain=self.schema.name,
            lead_type=table.lead_type,
            correlation_matrix=matrix,
            variable_names=names,
        )
        model.variables = self._variables(table, observed, latent)

        groups = {
            spec.id: [ind for ind in spec.indicators if ind in observed]
            for spec in self.schema.latents
        }

        for spec in self.schema.latents:
            if spec.id not in latent:
                continue
            for indicator in groups[spec.id]:
                loading = self.factor_loading(indicator, groups[spec.id], matrix, names)
                model.paths.append(CausalPath(
                    id=f"path_{spec.short}_{indicator}",
                    source=spec.id,
                    target=indicator,
                    coefficient=loading,
                    is_significant=abs(loading) > self.LOADING_THRESHOLD,
                    kind="loading",
                ))

        for source_id, target_id in self.schema.structural_paths:
            if source_id not in latent or target_id not in latent:
                continue
            source = self.schema.latent(source_id)
            target = self.schema.latent(target_id)
            coefficient = self.structural_coefficient(
                groups[source_id], groups[target_id], matrix, names
            )
            model.paths.append(CausalPath(
                id=f"path_{source.short}_{target.short}",
                source=source_id,
                target=target_id,
                coefficient=coefficient,
                is_significant=abs(coefficient) > self.STRUCTURAL_THRESHOLD,
                kind="structural",
            ))

        logger.info(
            f"Estimated '{self.schema.name}' model: {len(model.variables)} variables, "
            f"{len(model.paths)} paths ({len(model.significant_paths())} significant)"
        )
        return model

    @staticmethod
    def _selection(selected: Optional[Iterable[str]], available: Sequence[str]) -> List[str]:
        if selected is None:
            return list(available)
        wanted = set(selected)
        return [item for item in available if item in wanted]

    def _variables(
        self,
        table: IndicatorTable,
        observed: Sequence[str],
        latent: Sequence[str],
    ) -> List[CausalVariable]:
        variables = []
        for spec in self.schema.latents:
            if spec.id in latent:
                variables.append(CausalVariable(
                    id=spec.id,
                    name=spec.name,
                    kind=LATENT,
                    category=spec.category,
                    indicators=list(spec.indicators),
                ))
        for spec in self.schema.indicators:
            if spec.id in observed and spec.id in table:
                mean = table.means[spec.id]
                variables.append(CausalVariable(
                    id=spec.id,
                    name=spec.name,
                    kind=OBSERVED,
                    category=spec.category,
                    mean=mean,
                    std_dev=table.std_devs[spec.id],
                    value=mean,
                ))
        return variables

    @staticmethod
    def correlation_matrix(
        table: IndicatorTable,
        selected: Sequence[str],
    ) -> Tuple[np.ndarray, List[str]]:
        """
        Correlation matrix over the selected indicators present in the table.

        Returns:
            (matrix, names): symmetric matrix with unit diagonal, values in [-1, 1]
        """
        names = [ind for ind in selected if ind in table]
        size = len(names)
        matrix = np.eye(size)
        for i in range(size):
            for j in range(i + 1, size):
                value = pearson_standardized(table.standardized[names[i]], table.standardized[names[j]])
                matrix[i, j] = value
                matrix[j, i] = value
        return matrix, names

    @staticmethod
    def factor_loading(
        indicator: str,
        group: Sequence[str],
        matrix: np.ndarray,
        names: Sequence[str],
    ) -> float:
        """sqrt(mean |corr|) with the other group members present; 0 if none."""
        if indicator not in names:
            return 0.0
        idx = names.index(indicator)
        correlations = [
            abs(matrix[idx, names.index(other)])
            for other in group
            if other != indicator and other in names
        ]
        if not correlations:
            return 0.0
        return math.sqrt(sum(correlations) / len(correlations))

    def structural_coefficient(
        self,
        predictors: Sequence[str],
        outcomes: Sequence[str],
        matrix: np.ndarray,
        names: Sequence[str],
    ) -> float:
        """Mean sign-adjusted cross correlation of two indicator groups; 0 if none."""
        total = 0.0
        count = 0
        for p in predictors:
            if p not in names:
                continue
            i = names.index(p)
            for q in outcomes:
                if q not in names:
                    continue
                j = names.index(q)
                total += self.schema.sign(p) * self.schema.sign(q) * matrix[i, j]
                count += 1
        return float(total / count) if count else 0.0


def pearson_standardized(x: np.ndarray, y: np.ndarray) -> float:
    """
    Pearson correlation of two z-scored vectors.

    Vectors of different length are truncated to the shorter one; empty input
    gives 0. The result is clipped into [-1, 1].
    """
    n = min(len(x), len(y))
    if n == 0:
        return 0.0
    value = float(np.mean(np.asarray(x[:n]) * np.asarray(y[:n])))
    return float(np.clip(value, -1.0, 1.0))

