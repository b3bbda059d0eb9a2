from __future__ import annotations

from typing import List, Optional, Protocol


class LRUCacheBackend(Protocol):
    """Interface for bounded decision caches."""

    capacity: int

    def get(self, key: str) -> Optional[bool]:
        """Retrieve a decision and mark it as most recently used."""
        ...

    def set(self, key: str, value: bool) -> Optional[str]:
        """Store a decision as most recently used. Returns the evicted key, if any."""
        ...

    def keys(self) -> List[str]:
        """Keys from least to most recently used."""
        ...

    def clear(self) -> None:
        """Drop every entry."""
        ...

    def __len__(self) -> int:
        ...

    def __contains__(self, key: object) -> bool:
        ...
