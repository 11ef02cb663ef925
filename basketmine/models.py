"""
Value types shared by the miners, the rule generator and the engine.

All of them are frozen: a mining run produces them once and nothing
downstream mutates them. ``to_dict`` gives the JSON shape served by the API.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from .errors import InvalidParameterError

APRIORI = 'apriori'
FP_GROWTH = 'fp_growth'

# Accepted spellings, mapped to the canonical algorithm name
ALGORITHM_ALIASES = {
    'apriori': APRIORI,
    'fp_growth': FP_GROWTH,
    'fp-growth': FP_GROWTH,
    'fpgrowth': FP_GROWTH,
}


def normalize_algorithm(name):
    """Map an algorithm name or alias to its canonical form."""
    if not isinstance(name, str):
        raise InvalidParameterError(f'algorithm must be a string, got {name!r}')
    algorithm = ALGORITHM_ALIASES.get(name.strip().lower())
    if algorithm is None:
        raise InvalidParameterError(
            f'Unknown algorithm: {name}. Available: {list(ALGORITHM_ALIASES.keys())}'
        )
    return algorithm


def _fraction(name, value):
    if isinstance(value, bool):
        raise InvalidParameterError(f'{name} must be a number, got {value!r}')
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f'{name} must be a number, got {value!r}') from None
    if math.isnan(value) or not 0 < value <= 1:
        raise InvalidParameterError(f'{name} must be between 0 and 1')
    return value


def validate_parameters(min_support, min_confidence, algorithm):
    """
    Check and normalize raw mining parameters.

    Returns a ``(min_support, min_confidence, algorithm)`` tuple of floats and
    the canonical algorithm name. Raises ``InvalidParameterError`` when either
    threshold falls outside (0, 1] or the algorithm is unknown.
    """
    return (
        _fraction('min_support', min_support),
        _fraction('min_confidence', min_confidence),
        normalize_algorithm(algorithm),
    )


@dataclass(frozen=True)
class MiningParameters:
    min_support: float
    min_confidence: float
    algorithm: str = FP_GROWTH

    def __post_init__(self):
        min_support, min_confidence, algorithm = validate_parameters(
            self.min_support, self.min_confidence, self.algorithm
        )
        object.__setattr__(self, 'min_support', min_support)
        object.__setattr__(self, 'min_confidence', min_confidence)
        object.__setattr__(self, 'algorithm', algorithm)

    @classmethod
    def from_dict(cls, data, defaults=None):
        """Build parameters from a request body, filling gaps from ``defaults``."""
        defaults = defaults or {}
        return cls(
            min_support=data.get('min_support', defaults.get('min_support')),
            min_confidence=data.get('min_confidence', defaults.get('min_confidence')),
            algorithm=data.get('algorithm', defaults.get('algorithm', FP_GROWTH)),
        )

    def to_dict(self):
        return {
            'min_support': self.min_support,
            'min_confidence': self.min_confidence,
            'algorithm': self.algorithm,
        }


@dataclass(frozen=True)
class FrequentItemset:
    itemset: Tuple[str, ...]
    support: float
    count: int

    def __len__(self):
        return len(self.itemset)

    def to_dict(self):
        return {
            'itemset': list(self.itemset),
            'support': self.support,
            'count': self.count,
        }


@dataclass(frozen=True)
class AssociationRule:
    antecedent: Tuple[str, ...]
    consequent: Tuple[str, ...]
    support: float
    confidence: float
    lift: float

    @property
    def items(self):
        """The sorted itemset the rule was derived from."""
        return tuple(sorted(self.antecedent + self.consequent))

    def to_dict(self):
        return {
            'antecedent': list(self.antecedent),
            'consequent': list(self.consequent),
            'support': self.support,
            'confidence': self.confidence,
            'lift': self.lift,
        }


@dataclass(frozen=True)
class MiningResult:
    """One orchestrated run. ``id`` stays 0 until a store persists it."""
    algorithm: str
    min_support: float
    min_confidence: float
    frequent_itemsets: Tuple[FrequentItemset, ...] = ()
    association_rules: Tuple[AssociationRule, ...] = ()
    execution_time_ms: float = 0.0
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    id: int = 0

    @property
    def parameters(self):
        return {
            'min_support': self.min_support,
            'min_confidence': self.min_confidence,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'algorithm': self.algorithm,
            'parameters': self.parameters,
            'frequent_itemsets': [f.to_dict() for f in self.frequent_itemsets],
            'association_rules': [r.to_dict() for r in self.association_rules],
            'execution_time_ms': self.execution_time_ms,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class ComparisonMetrics:
    execution_time_difference: float
    itemsets_count_difference: int
    rules_count_difference: int
    faster_algorithm: str

    def to_dict(self):
        return {
            'execution_time_difference': self.execution_time_difference,
            'itemsets_count_difference': self.itemsets_count_difference,
            'rules_count_difference': self.rules_count_difference,
            'faster_algorithm': self.faster_algorithm,
        }


@dataclass(frozen=True)
class MiningComparison:
    apriori_result: Optional[MiningResult] = None
    fp_growth_result: Optional[MiningResult] = None
    comparison_metrics: Optional[ComparisonMetrics] = field(default=None)

    def to_dict(self):
        return {
            'apriori_result': self.apriori_result.to_dict() if self.apriori_result else None,
            'fp_growth_result': self.fp_growth_result.to_dict() if self.fp_growth_result else None,
            'comparison_metrics': (
                self.comparison_metrics.to_dict() if self.comparison_metrics else None
            ),
        }
