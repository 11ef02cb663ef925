"""Frequent itemset mining and association rules over basket data."""

from .algorithms import MINERS, mine, mine_apriori, mine_fp_growth
from .baskets import extract_baskets, normalize_baskets, profile_dataset
from .engine import compare, run
from .errors import BasketLimitError, InvalidParameterError, MiningError
from .models import (
    APRIORI,
    FP_GROWTH,
    AssociationRule,
    FrequentItemset,
    MiningComparison,
    MiningParameters,
    MiningResult,
)
from .rules import generate_rules
from .store import MiningResultStore

__version__ = '1.0.0'
