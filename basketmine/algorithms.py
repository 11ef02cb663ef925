"""
Frequent itemset miners.

Both strategies share one contract, ``mine(baskets, min_support)``, and
return ``FrequentItemset`` values whose members are sorted. They are
dispatched by name through ``MINERS`` rather than through a class hierarchy.

- Apriori: level-wise candidate generation, bounded at
  ``config.APRIORI_MAX_ITEMSET_SIZE`` (3 by default).
- FP-Growth: items ordered by descending frequency, then every pair of
  frequent items is counted. No FP-tree is built and no itemset larger than
  a pair is ever produced.
"""

import logging
import math
from collections import defaultdict
from itertools import combinations

from . import config
from .errors import InvalidParameterError
from .models import APRIORI, FP_GROWTH, FrequentItemset

log = logging.getLogger(__name__)


# =============================================================================
# SUPPORT COUNTING
# =============================================================================

def as_basket_sets(baskets):
    """Make sure every basket supports fast subset checks."""
    return [b if isinstance(b, (set, frozenset)) else frozenset(b) for b in baskets]


def min_support_count(min_support, n_baskets):
    """Smallest absolute count that satisfies ``min_support``."""
    return math.ceil(round(min_support * n_baskets, 9))


def count_containing(items, baskets):
    """Number of baskets holding every one of ``items`` (full scan)."""
    needed = frozenset(items)
    return sum(1 for basket in baskets if needed <= basket)


def count_items(baskets):
    item_counts = defaultdict(int)
    for basket in baskets:
        for item in basket:
            item_counts[item] += 1
    return item_counts


def _frequent(itemset, count, n_baskets):
    return FrequentItemset(itemset=tuple(itemset), support=count / n_baskets, count=count)


# =============================================================================
# APRIORI
# =============================================================================

def apriori_gen(itemsets):
    """
    Join step of Apriori.

    ``itemsets`` must be sorted tuples of equal length k-1, given in
    lexicographic order. Two of them are joined when they share their first
    k-2 members. Candidates whose other (k-1)-subsets are infrequent are
    kept; counting filters them out later.
    """
    candidates = []
    for i, first in enumerate(itemsets):
        prefix = first[:-1]
        for second in itemsets[i + 1:]:
            if second[:-1] != prefix:
                break
            candidates.append(first + (second[-1],))
    return candidates


def mine_apriori(baskets, min_support, max_size=None):
    """Mine frequent itemsets level by level, up to ``max_size`` members."""
    if max_size is None:
        max_size = config.APRIORI_MAX_ITEMSET_SIZE
    baskets = as_basket_sets(baskets)
    n_baskets = len(baskets)
    if n_baskets == 0:
        return []

    min_count = min_support_count(min_support, n_baskets)

    # Level 1
    current = {
        (item,): count
        for item, count in count_items(baskets).items()
        if count >= min_count
    }

    frequent_itemsets = []
    k = 1
    while current:
        for itemset in sorted(current):
            frequent_itemsets.append(_frequent(itemset, current[itemset], n_baskets))

        k += 1
        if k > max_size:
            break

        candidates = apriori_gen(sorted(current))
        current = {}
        for candidate in candidates:
            count = count_containing(candidate, baskets)
            if count >= min_count:
                current[candidate] = count
        log.debug("apriori level %d: %d candidates, %d frequent", k, len(candidates), len(current))

    return frequent_itemsets


# =============================================================================
# FP-GROWTH (frequency-ordered, pairs only)
# =============================================================================

def mine_fp_growth(baskets, min_support, max_size=None):
    """Mine frequent singletons and pairs in descending item frequency order."""
    if max_size is None:
        max_size = config.FP_GROWTH_MAX_ITEMSET_SIZE
    max_size = min(max_size, 2)
    baskets = as_basket_sets(baskets)
    n_baskets = len(baskets)
    if n_baskets == 0:
        return []

    min_count = min_support_count(min_support, n_baskets)

    ordered = sorted(count_items(baskets).items(), key=lambda x: (-x[1], x[0]))
    frequent_items = [(item, count) for item, count in ordered if count >= min_count]

    frequent_itemsets = [_frequent((item,), count, n_baskets) for item, count in frequent_items]
    if max_size < 2:
        return frequent_itemsets

    n_pairs = 0
    for (first, _), (second, _) in combinations(frequent_items, 2):
        pair = tuple(sorted((first, second)))
        count = count_containing(pair, baskets)
        if count >= min_count:
            frequent_itemsets.append(_frequent(pair, count, n_baskets))
            n_pairs += 1
    log.debug("fp_growth: %d frequent items, %d frequent pairs", len(frequent_items), n_pairs)

    return frequent_itemsets


MINERS = {
    APRIORI: mine_apriori,
    FP_GROWTH: mine_fp_growth,
}


def get_miner(algorithm):
    miner = MINERS.get(algorithm)
    if miner is None:
        raise InvalidParameterError(f'Unknown algorithm: {algorithm}. Available: {list(MINERS)}')
    return miner


def mine(algorithm, baskets, min_support, max_size=None):
    """Run the strategy registered under ``algorithm``."""
    return get_miner(algorithm)(baskets, min_support, max_size=max_size)
