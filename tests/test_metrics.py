from __future__ import annotations

from prometheus_client import CollectorRegistry

from botdetector import DetectorMetrics, LRUDetector, compile_ruleset


def test_metrics_track_decisions_and_cache() -> None:
    registry = CollectorRegistry()
    metrics = DetectorMetrics(namespace="t", registry=registry)
    detector = LRUDetector(compile_ruleset(deny=["a"]), 1, namespace="t", metrics=metrics)

    detector.classify("a")
    detector.classify("a")
    detector.classify("b")

    def sample(name: str, **labels: str) -> float:
        return registry.get_sample_value(name, {"namespace": "t", **labels})

    assert sample("botdetector_decisions_total", result="bot") == 2
    assert sample("botdetector_decisions_total", result="human") == 1
    assert sample("botdetector_cache_hits_total") == 1
    assert sample("botdetector_cache_misses_total") == 2
    assert sample("botdetector_cache_evictions_total") == 1


def test_collectors_shared_per_registry() -> None:
    registry = CollectorRegistry()
    m1 = DetectorMetrics(namespace="one", registry=registry)
    m2 = DetectorMetrics(namespace="two", registry=registry)

    assert m1.decisions is m2.decisions

    m1.record_decision(True)
    m2.record_decision(True)
    m2.record_decision(True)

    assert registry.get_sample_value("botdetector_decisions_total", {"namespace": "one", "result": "bot"}) == 1
    assert registry.get_sample_value("botdetector_decisions_total", {"namespace": "two", "result": "bot"}) == 2
