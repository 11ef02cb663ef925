"""
Mining orchestrator and comparison engine.

``run`` times one strategy plus rule generation and packages the output as a
``MiningResult``. ``compare`` runs both strategies on the same input.
Persistence is delegated to an optional store exposing ``save(result)``.
"""

import logging
import time
from datetime import datetime, timezone

from . import config
from .algorithms import as_basket_sets, mine
from .errors import BasketLimitError
from .models import (
    APRIORI,
    FP_GROWTH,
    ComparisonMetrics,
    MiningComparison,
    MiningParameters,
    MiningResult,
    normalize_algorithm,
)
from .rules import generate_rules

log = logging.getLogger(__name__)

MAX_SIZE_SETTINGS = {
    APRIORI: 'APRIORI_MAX_ITEMSET_SIZE',
    FP_GROWTH: 'FP_GROWTH_MAX_ITEMSET_SIZE',
}


def check_basket_limit(baskets, limit=None):
    """Raise ``BasketLimitError`` when there are more baskets than ``limit``."""
    if limit is None:
        limit = config.MAX_BASKETS
    if limit and len(baskets) > limit:
        raise BasketLimitError(len(baskets), limit)


def run(algorithm, parameters, baskets, owner_id, store=None, settings=None):
    """
    Execute one mining run.

    ``settings`` may carry the itemset size caps and ``LIFT_FORMULA``; missing
    keys fall back to ``basketmine.config``.

    Only mining and rule generation are inside the timed section. Without a
    store the result keeps the placeholder id 0; with one, the stored copy is
    returned and any store error propagates to the caller.
    """
    algorithm = normalize_algorithm(algorithm)
    baskets = as_basket_sets(baskets)
    settings = settings or {}
    max_size = settings.get(MAX_SIZE_SETTINGS[algorithm])
    lift_formula = settings.get('LIFT_FORMULA')

    start = time.perf_counter()
    frequent_itemsets = mine(algorithm, baskets, parameters.min_support, max_size=max_size)
    rules = generate_rules(
        frequent_itemsets, parameters.min_confidence, baskets, lift_formula=lift_formula,
    )
    elapsed_ms = (time.perf_counter() - start) * 1000

    log.info(
        "%s on %d baskets: %d itemsets, %d rules in %.3f ms",
        algorithm, len(baskets), len(frequent_itemsets), len(rules), elapsed_ms,
    )

    result = MiningResult(
        algorithm=algorithm,
        min_support=parameters.min_support,
        min_confidence=parameters.min_confidence,
        frequent_itemsets=tuple(frequent_itemsets),
        association_rules=tuple(rules),
        execution_time_ms=elapsed_ms,
        created_by=owner_id,
        created_at=datetime.now(timezone.utc),
    )

    if store is not None:
        result = store.save(result)
    return result


def run_parameters(parameters, baskets, owner_id, store=None, settings=None):
    """Run the algorithm named by ``parameters.algorithm``."""
    return run(parameters.algorithm, parameters, baskets, owner_id, store=store, settings=settings)


def comparison_metrics(apriori_result, fp_growth_result):
    """Differences are fp_growth minus apriori; ties count as fp_growth being faster."""
    if apriori_result is None or fp_growth_result is None:
        return None
    apriori_time = apriori_result.execution_time_ms
    fp_time = fp_growth_result.execution_time_ms
    return ComparisonMetrics(
        execution_time_difference=fp_time - apriori_time,
        itemsets_count_difference=(
            len(fp_growth_result.frequent_itemsets) - len(apriori_result.frequent_itemsets)
        ),
        rules_count_difference=(
            len(fp_growth_result.association_rules) - len(apriori_result.association_rules)
        ),
        faster_algorithm=APRIORI if apriori_time < fp_time else FP_GROWTH,
    )


def build_comparison(apriori_result=None, fp_growth_result=None):
    return MiningComparison(
        apriori_result=apriori_result,
        fp_growth_result=fp_growth_result,
        comparison_metrics=comparison_metrics(apriori_result, fp_growth_result),
    )


def compare(parameters, baskets, owner_id, store=None, settings=None):
    """Run Apriori then FP-Growth with identical inputs and compare them."""
    if not isinstance(parameters, MiningParameters):
        parameters = MiningParameters.from_dict(parameters)
    baskets = as_basket_sets(baskets)

    apriori_result = run(APRIORI, parameters, baskets, owner_id, store=store, settings=settings)
    fp_growth_result = run(FP_GROWTH, parameters, baskets, owner_id, store=store, settings=settings)

    comparison = build_comparison(apriori_result, fp_growth_result)
    log.info("comparison: %s faster", comparison.comparison_metrics.faster_algorithm)
    return comparison
