import threading
from dataclasses import replace
from datetime import datetime, timezone


class MiningResultStore:
    """
    In-memory persistence for mining results.

    Assigns increasing integer ids and a UTC creation timestamp on ``save``.
    Safe to share between request threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._results = {}
        self._next_id = 1

    def save(self, result):
        with self._lock:
            stored = replace(result, id=self._next_id, created_at=datetime.now(timezone.utc))
            self._results[stored.id] = stored
            self._next_id += 1
        return stored

    def list(self, owner_id=None):
        """Results newest first; all owners when ``owner_id`` is None."""
        with self._lock:
            results = list(self._results.values())
        if owner_id is not None:
            results = [r for r in results if r.created_by == owner_id]
        results.sort(key=lambda r: r.id, reverse=True)
        return results

    def get(self, result_id, owner_id=None):
        """Return the result, or None when it is missing or owned by someone else."""
        with self._lock:
            result = self._results.get(result_id)
        if result is None:
            return None
        if owner_id is not None and result.created_by != owner_id:
            return None
        return result

    def clear(self):
        with self._lock:
            self._results.clear()
            self._next_id = 1

    def __len__(self):
        with self._lock:
            return len(self._results)
