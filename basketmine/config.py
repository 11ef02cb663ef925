"""
Runtime configuration for basketmine.

Every setting is a module-level constant that can be overridden from the
environment with a ``BASKETMINE_`` prefix, e.g. ``BASKETMINE_MAX_BASKETS=5000``.
Applications built with ``create_app`` may override them again per instance.
"""

import os


def _env(name, default, cast=str):
    value = os.environ.get('BASKETMINE_' + name)
    if value is None or value == '':
        return default
    return cast(value)


# Largest itemset the Apriori strategy explores. Raising it changes result sets.
APRIORI_MAX_ITEMSET_SIZE = _env('APRIORI_MAX_ITEMSET_SIZE', 3, int)

# The frequency-ordered strategy only ever counts singletons and pairs.
FP_GROWTH_MAX_ITEMSET_SIZE = _env('FP_GROWTH_MAX_ITEMSET_SIZE', 2, int)

# 'itemset': lift = confidence / itemset support (compatibility formula)
# 'consequent': lift = confidence / consequent support
LIFT_FORMULA = _env('LIFT_FORMULA', 'itemset')

# Candidate counting rescans every basket, so cap the input size at the API.
MAX_BASKETS = _env('MAX_BASKETS', 100000, int)

DEFAULT_MIN_SUPPORT = _env('DEFAULT_MIN_SUPPORT', 0.1, float)
DEFAULT_MIN_CONFIDENCE = _env('DEFAULT_MIN_CONFIDENCE', 0.5, float)
DEFAULT_ALGORITHM = _env('DEFAULT_ALGORITHM', 'fp_growth')

LOG_LEVEL = _env('LOG_LEVEL', 'INFO')
LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(message)s"

CORS_ORIGINS = _env('CORS_ORIGINS', '*')


def as_dict():
    """Return the current settings as a plain dict, e.g. for ``app.config``."""
    return {
        'APRIORI_MAX_ITEMSET_SIZE': APRIORI_MAX_ITEMSET_SIZE,
        'FP_GROWTH_MAX_ITEMSET_SIZE': FP_GROWTH_MAX_ITEMSET_SIZE,
        'LIFT_FORMULA': LIFT_FORMULA,
        'MAX_BASKETS': MAX_BASKETS,
        'DEFAULT_MIN_SUPPORT': DEFAULT_MIN_SUPPORT,
        'DEFAULT_MIN_CONFIDENCE': DEFAULT_MIN_CONFIDENCE,
        'DEFAULT_ALGORITHM': DEFAULT_ALGORITHM,
        'LOG_LEVEL': LOG_LEVEL,
        'CORS_ORIGINS': CORS_ORIGINS,
    }
