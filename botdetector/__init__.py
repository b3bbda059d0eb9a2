from .backends.base import LRUCacheBackend
from .backends.memory import MemoryLRUBackend
from .config import NAMESPACE, DetectorConfig, parse_config
from .detector import BotDetector, Detector, LRUDetector, classify_cached, new_detector
from .exceptions import ConfigError, NoConfigError
from .metrics import DetectorMetrics
from .middleware import BotDetectorMiddleware
from .patterns import Ruleset, classify, compile_ruleset
from .stats import DetectorStats

__all__ = [
    "LRUCacheBackend",
    "MemoryLRUBackend",
    "NAMESPACE",
    "DetectorConfig",
    "parse_config",
    "BotDetector",
    "Detector",
    "LRUDetector",
    "classify_cached",
    "new_detector",
    "ConfigError",
    "NoConfigError",
    "DetectorMetrics",
    "BotDetectorMiddleware",
    "Ruleset",
    "classify",
    "compile_ruleset",
    "DetectorStats",
]

__version__ = "1.0.0"
