"""Bounded per-tab cache of the most recent scan result."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Hashable

from codegrab import settings
from codegrab.items import ScanResult


class ScanStore:
    """Thread-safe LRU mapping of tab key -> latest :class:`ScanResult`.

    Storing a new result for a key replaces the previous batch.  When more
    than *capacity* keys are held, the least recently used one is evicted.
    """

    def __init__(self, capacity: int = settings.STORE_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self._capacity = capacity
        self._lock = threading.Lock()
        self._results: OrderedDict[Hashable, ScanResult] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def put(self, key: Hashable, result: ScanResult) -> None:
        with self._lock:
            self._results[key] = result
            self._results.move_to_end(key)
            while len(self._results) > self._capacity:
                self._results.popitem(last=False)

    def get(self, key: Hashable) -> ScanResult | None:
        with self._lock:
            result = self._results.get(key)
            if result is not None:
                self._results.move_to_end(key)
            return result

    def discard(self, key: Hashable) -> None:
        """Forget *key* (e.g. when its tab is closed). Missing keys are ignored."""
        with self._lock:
            self._results.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._results.clear()

    def keys(self) -> list[Hashable]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._results
