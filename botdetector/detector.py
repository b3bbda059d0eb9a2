from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, List, Optional, Protocol, Tuple

import httpx

from .backends.base import LRUCacheBackend
from .backends.memory import MemoryLRUBackend
from .config import DetectorConfig
from .exceptions import ConfigError
from .metrics import DetectorMetrics
from .patterns import Ruleset, classify
from .stats import DetectorStats

logger = logging.getLogger(__name__)

USER_AGENT_HEADER = "User-Agent"


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        # Raw header octets, as WSGI decodes them
        return value.decode("latin-1")
    return None


def _header_pairs(headers: Any) -> List[Tuple[str, str]]:
    items = headers.items() if hasattr(headers, "items") else headers
    if not isinstance(items, Iterable):
        return []

    pairs = []
    for item in items:
        if not isinstance(item, tuple) or len(item) != 2:
            continue
        name, value = _as_text(item[0]), _as_text(item[1])
        if name is not None and value is not None:
            pairs.append((name, value))
    return pairs


def _user_agent(request: Any) -> str:
    """
    Read the User-Agent value from a request-like object.

    A missing header, or one whose value is not text, reads as empty. When the
    header is repeated only the first value counts.
    """
    headers = getattr(request, "headers", None)
    if not headers:
        return ""
    if not isinstance(headers, httpx.Headers):
        # Header names are case-insensitive; utf-8 round-trips any value verbatim
        headers = httpx.Headers(_header_pairs(headers), encoding="utf-8")
    values = headers.get_list(USER_AGENT_HEADER)
    return values[0] if values else ""


def _lookup(cache: LRUCacheBackend, ruleset: Ruleset, user_agent: str) -> Tuple[bool, bool, Optional[str]]:
    """Returns (decision, hit, evicted key)."""
    cached = cache.get(user_agent)
    if cached is not None:
        return cached, True, None

    result = classify(ruleset, user_agent)
    evicted = cache.set(user_agent, result)
    return result, False, evicted


def classify_cached(cache: LRUCacheBackend, ruleset: Ruleset, user_agent: str) -> bool:
    """
    Classify user_agent, memoizing the decision in cache.

    The empty value is cached under "" like any other key. Concurrent misses
    for the same key may both evaluate the ruleset; both store the same value.
    """
    result, _, _ = _lookup(cache, ruleset, user_agent)
    return result


class BotDetector(Protocol):
    """Anything able to tell whether a request was made by a bot."""

    def is_bot(self, request: Any) -> bool:
        ...


class Detector:
    """Detector evaluating the ruleset on every request."""

    def __init__(
        self,
        ruleset: Ruleset,
        *,
        namespace: str = "default",
        enable_logging: bool = False,
        metrics: Optional[DetectorMetrics] = None,
    ) -> None:
        self.ruleset = ruleset
        self.namespace = namespace
        self.enable_logging = enable_logging
        self.stats = DetectorStats()
        self.metrics = metrics or DetectorMetrics(namespace=namespace)

    def get_stats(self) -> DetectorStats:
        return self.stats

    def is_bot(self, request: Any) -> bool:
        return self.classify(_user_agent(request))

    def classify(self, user_agent: str) -> bool:
        result = self._evaluate(user_agent)
        self.stats.record_decision(result)
        self.metrics.record_decision(result)
        if self.enable_logging:
            logger.debug(
                "bot_decision",
                extra={
                    "event": "bot_decision",
                    "user_agent": user_agent,
                    "is_bot": result,
                    "namespace": self.namespace,
                },
            )
        return result

    def _evaluate(self, user_agent: str) -> bool:
        return classify(self.ruleset, user_agent)


class LRUDetector(Detector):
    """
    Detector memoizing decisions in a bounded LRU cache.

    User-Agent values repeat heavily across a request stream, so most
    requests skip pattern evaluation. The bound keeps a client cycling
    through distinct values from growing the cache without limit.
    """

    def __init__(
        self,
        ruleset: Ruleset,
        cache_size: Optional[int] = None,
        *,
        backend: Optional[LRUCacheBackend] = None,
        namespace: str = "default",
        enable_logging: bool = False,
        metrics: Optional[DetectorMetrics] = None,
    ) -> None:
        super().__init__(
            ruleset,
            namespace=namespace,
            enable_logging=enable_logging,
            metrics=metrics,
        )
        if backend is None:
            if cache_size is None:
                raise ConfigError("LRUDetector needs either a cache_size or a backend")
            try:
                backend = MemoryLRUBackend(cache_size)
            except ValueError as e:
                raise ConfigError(f"invalid cache size: {e}") from e
        self.cache = backend

    def _evaluate(self, user_agent: str) -> bool:
        result, hit, evicted = _lookup(self.cache, self.ruleset, user_agent)
        if hit:
            self.stats.increment_hit()
            self.metrics.record_hit()
            return result

        self.stats.increment_miss()
        self.metrics.record_miss()
        if evicted is not None:
            self.stats.increment_eviction()
            self.metrics.record_eviction()
            if self.enable_logging:
                logger.debug(f"Evicted cached decision for {evicted!r}")
        return result


def new_detector(config: DetectorConfig, metrics: Optional[DetectorMetrics] = None) -> BotDetector:
    """
    Build the detector described by config.

    A cache_size of 0 yields a plain Detector; anything larger an LRUDetector.

    Raises:
        ConfigError: If a pattern does not compile or the cache cannot be built
    """
    ruleset = config.compile()
    if config.cache_size == 0:
        return Detector(
            ruleset,
            namespace=config.namespace,
            enable_logging=config.enable_logging,
            metrics=metrics,
        )
    return LRUDetector(
        ruleset,
        config.cache_size,
        namespace=config.namespace,
        enable_logging=config.enable_logging,
        metrics=metrics,
    )
