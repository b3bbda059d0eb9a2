from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter

logger = logging.getLogger(__name__)


class DetectorMetrics:
    """Prometheus metrics for detector decisions and cache operations."""

    # Collectors are registered once per registry; namespaces share them via labels
    _collectors: Dict[CollectorRegistry, Dict[str, Any]] = {}
    _lock = threading.Lock()

    def __init__(self, namespace: str = "default", registry: Optional[CollectorRegistry] = None):
        self.namespace = namespace
        registry = registry if registry is not None else REGISTRY

        with self._lock:
            collectors = self._collectors.get(registry)
            if collectors is None:
                collectors = {
                    "decisions": Counter(
                        "botdetector_decisions_total",
                        "Total classified requests",
                        ["namespace", "result"],
                        registry=registry,
                    ),
                    "hits": Counter(
                        "botdetector_cache_hits_total",
                        "Total decision cache hits",
                        ["namespace"],
                        registry=registry,
                    ),
                    "misses": Counter(
                        "botdetector_cache_misses_total",
                        "Total decision cache misses",
                        ["namespace"],
                        registry=registry,
                    ),
                    "evictions": Counter(
                        "botdetector_cache_evictions_total",
                        "Total decision cache evictions",
                        ["namespace"],
                        registry=registry,
                    ),
                }
                self._collectors[registry] = collectors
                logger.debug(f"Registered botdetector metrics for namespace {namespace}")

        self.decisions = collectors["decisions"]
        self.hits = collectors["hits"]
        self.misses = collectors["misses"]
        self.evictions = collectors["evictions"]

    def record_decision(self, is_bot: bool) -> None:
        result = "bot" if is_bot else "human"
        self.decisions.labels(namespace=self.namespace, result=result).inc()

    def record_hit(self) -> None:
        self.hits.labels(namespace=self.namespace).inc()

    def record_miss(self) -> None:
        self.misses.labels(namespace=self.namespace).inc()

    def record_eviction(self) -> None:
        self.evictions.labels(namespace=self.namespace).inc()
