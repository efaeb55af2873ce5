"""Thread-safe lazily populated cache."""

from __future__ import annotations

import threading
from typing import Callable, Dict, Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class LazyCache(Generic[K, V]):
    """Get-or-insert cache where the first resolution of a key wins.

    The factory runs while the lock is held, so concurrent first lookups of
    the same key resolve it exactly once and all observe the same value.
    """

    def __init__(self) -> None:
        self._data: Dict[K, V] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: K, factory: Callable[[K], V]) -> V:
        """Return the cached value for ``key``, resolving it on first access."""
        try:
            return self._data[key]
        except KeyError:
            pass
        with self._lock:
            if key not in self._data:
                self._data[key] = factory(key)
            return self._data[key]

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._data.clear()
