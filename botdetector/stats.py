from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field


@dataclass
class DetectorStats:
    """Thread-safe detector statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    bots: int = 0
    humans: int = 0
    total_requests: int = 0
    start_time: float = field(default_factory=time.time)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_decision(self, is_bot: bool) -> None:
        """Count one classified request (thread-safe)."""
        with self._lock:
            if is_bot:
                self.bots += 1
            else:
                self.humans += 1
            self.total_requests += 1

    def increment_hit(self) -> None:
        with self._lock:
            self.hits += 1

    def increment_miss(self) -> None:
        with self._lock:
            self.misses += 1

    def increment_eviction(self) -> None:
        with self._lock:
            self.evictions += 1

    @staticmethod
    def _ratio(part: int, whole: int) -> float:
        return part / whole if whole > 0 else 0.0

    @property
    def hit_rate(self) -> float:
        """Share of cache lookups answered without evaluating the ruleset."""
        with self._lock:
            return self._ratio(self.hits, self.hits + self.misses)

    @property
    def bot_rate(self) -> float:
        """Share of classified requests flagged as bots."""
        with self._lock:
            return self._ratio(self.bots, self.total_requests)

    @property
    def eviction_pressure(self) -> float:
        """
        Evictions per miss. Close to 1.0 means the cache is full and every new
        User-Agent pushes another one out; consider a larger cache_size.
        """
        with self._lock:
            return self._ratio(self.evictions, self.misses)

    def reset(self) -> None:
        with self._lock:
            self.hits = self.misses = self.evictions = 0
            self.bots = self.humans = self.total_requests = 0
            self.start_time = time.time()

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
                "bots": self.bots,
                "humans": self.humans,
                "total_requests": self.total_requests,
                "hit_rate": self._ratio(self.hits, self.hits + self.misses),
                "bot_rate": self._ratio(self.bots, self.total_requests),
                "eviction_pressure": self._ratio(self.evictions, self.misses),
                "uptime_seconds": time.time() - self.start_time,
            }
