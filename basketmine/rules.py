"""
Association rule generation from frequent itemsets.
"""

import logging
from itertools import combinations

from . import config
from .algorithms import as_basket_sets, count_containing
from .models import AssociationRule

log = logging.getLogger(__name__)

LIFT_ITEMSET = 'itemset'
LIFT_CONSEQUENT = 'consequent'
LIFT_FORMULAS = (LIFT_ITEMSET, LIFT_CONSEQUENT)


def generate_rules(frequent_itemsets, min_confidence, baskets, lift_formula=None):
    """
    Generate association rules from frequent itemsets.

    Every non-empty proper subset of an itemset with two or more members is
    tried as the antecedent, with the remaining members as the consequent.
    Antecedent support is counted by scanning ``baskets``; splits whose
    antecedent never occurs are skipped.

    With the default ``'itemset'`` formula lift is
    ``confidence / (itemset.count / n_baskets)``. ``'consequent'`` divides by
    the scanned support of the consequent instead.
    """
    if lift_formula is None:
        lift_formula = config.LIFT_FORMULA
    if lift_formula not in LIFT_FORMULAS:
        raise ValueError(f'Unknown lift formula: {lift_formula}. Available: {list(LIFT_FORMULAS)}')

    baskets = as_basket_sets(baskets)
    n_baskets = len(baskets)
    rules = []

    if n_baskets == 0:
        return rules

    for frequent in frequent_itemsets:
        itemset = tuple(sorted(frequent.itemset))
        if len(itemset) < 2:
            continue

        for size in range(1, len(itemset)):
            for antecedent in combinations(itemset, size):
                ant_support = count_containing(antecedent, baskets) / n_baskets
                if ant_support == 0:
                    continue

                confidence = frequent.support / ant_support
                if confidence < min_confidence:
                    continue

                consequent = tuple(item for item in itemset if item not in antecedent)
                if lift_formula == LIFT_ITEMSET:
                    denominator = frequent.count / n_baskets
                else:
                    denominator = count_containing(consequent, baskets) / n_baskets
                if denominator == 0:
                    continue

                rules.append(AssociationRule(
                    antecedent=antecedent,
                    consequent=consequent,
                    support=frequent.support,
                    confidence=confidence,
                    lift=confidence / denominator,
                ))

    log.debug("generated %d rules from %d itemsets", len(rules), len(frequent_itemsets))
    return rules
