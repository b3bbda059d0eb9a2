from __future__ import annotations

import threading
from collections import OrderedDict
from typing import List, Optional

from .base import LRUCacheBackend


class MemoryLRUBackend(LRUCacheBackend):
    """In-memory, thread-safe LRU cache of bot decisions."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be > 0, got {capacity}")
        self.capacity = capacity
        # Ordered from least to most recently used
        self._data: "OrderedDict[str, bool]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bool]:
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def set(self, key: str, value: bool) -> Optional[str]:
        """
        Insert or refresh key as the most recently used entry.

        If the key is new and the cache is full, the least recently used entry
        is evicted first, so the size never exceeds capacity.
        """
        with self._lock:
            if key in self._data:
                self._data[key] = value
                self._data.move_to_end(key)
                return None

            evicted = None
            if len(self._data) >= self.capacity:
                evicted, _ = self._data.popitem(last=False)
            self._data[key] = value
            return evicted

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        # Membership checks do not touch recency
        with self._lock:
            return key in self._data
