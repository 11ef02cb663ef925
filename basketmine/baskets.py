"""
Basket extraction and dataset profiling.

A basket is the frozenset of distinct item identifiers in one transaction.
Quantities are dropped: mining only looks at presence.
"""

from collections import defaultdict

import numpy as np
import pandas as pd

from .errors import InvalidParameterError


# =============================================================================
# BASKET EXTRACTION
# =============================================================================

def _frame(records, columns=None, dtype=None):
    if isinstance(records, pd.DataFrame):
        return records
    return pd.DataFrame(list(records), columns=columns, dtype=dtype)


def _item_key(value):
    # Integral ids upcast to float by a null elsewhere in the column keep their integer form
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def extract_baskets(transactions, transaction_items, items=None):
    """
    Build one basket per transaction from transaction and line-item records.

    ``transactions`` need an ``id``; ``transaction_items`` need
    ``transaction_id`` and ``item_id`` (``quantity`` is ignored). When an
    ``items`` table with ``id`` and ``name`` is given, baskets hold item names,
    otherwise the stringified item ids. Baskets come back in transaction
    order; a transaction without line items gives an empty basket.
    """
    tx = _frame(transactions)
    if tx.empty:
        return []
    if 'id' not in tx.columns:
        raise InvalidParameterError('transactions must have an "id" field')

    lines = _frame(transaction_items, columns=['transaction_id', 'item_id'], dtype=object)
    lines = lines[['transaction_id', 'item_id']].dropna().copy()
    if lines.empty:
        return [frozenset() for _ in tx['id']]

    names = {}
    if items is not None:
        item_frame = _frame(items, dtype=object)
        if not item_frame.empty:
            names = {
                _item_key(item_id): str(name)
                for item_id, name in zip(item_frame['id'], item_frame['name'])
            }

    keys = [_item_key(item_id) for item_id in lines['item_id']]
    lines['item'] = [names.get(key, key) for key in keys]

    grouped = lines.groupby('transaction_id')['item'].agg(set)
    return [frozenset(grouped.get(tid, ())) for tid in tx['id']]


def normalize_baskets(rows):
    """
    Coerce raw rows (lists, tuples or sets of items) into baskets.

    Items are stringified and stripped; empty and null items are dropped.
    """
    baskets = []
    for row in rows:
        if isinstance(row, (str, bytes)) or not hasattr(row, '__iter__'):
            raise InvalidParameterError('each basket must be a list of items')
        basket = set()
        for item in row:
            if item is None:
                continue
            item = str(item).strip()
            if item:
                basket.add(item)
        baskets.append(frozenset(basket))
    return baskets


# =============================================================================
# DATASET PROFILING
# =============================================================================

def convert_numpy_types(obj):
    """Convert numpy types to Python native types for JSON serialization."""
    if isinstance(obj, dict):
        return {k: convert_numpy_types(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy_types(i) for i in obj]
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    else:
        return obj


def item_counts(baskets):
    counts = defaultdict(int)
    for basket in baskets:
        for item in basket:
            counts[item] += 1
    return counts


def top_items(baskets, limit=10):
    counts = item_counts(baskets)
    ranked = sorted(counts.items(), key=lambda x: (-x[1], x[0]))[:limit]
    return [{'item': item, 'count': int(count)} for item, count in ranked]


def profile_dataset(baskets):
    """
    Summarize basket data: size, item variety, basket lengths and density.
    """
    n_baskets = len(baskets)
    if n_baskets == 0:
        return {}

    counts = item_counts(baskets)
    lengths = [len(b) for b in baskets]

    n_unique_items = len(counts)
    avg_length = float(np.mean(lengths))
    density = avg_length / n_unique_items if n_unique_items > 0 else 0.0
    frequencies = list(counts.values())

    profile = {
        'n_transactions': n_baskets,
        'n_unique_items': n_unique_items,
        'avg_transaction_length': round(avg_length, 2),
        'max_transaction_length': int(max(lengths)),
        'min_transaction_length': int(min(lengths)),
        'density': round(float(density), 4),
        'sparsity': round(float(1.0 - density), 4),
        'freq_mean': round(float(np.mean(frequencies)), 2) if frequencies else 0.0,
        'freq_std': round(float(np.std(frequencies)), 2) if frequencies else 0.0,
        'is_large': n_baskets > 10000,
        'is_dense': density > 0.1,
    }

    return convert_numpy_types(profile)
