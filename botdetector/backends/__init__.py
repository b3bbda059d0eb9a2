"""Backend initialization."""
from .base import LRUCacheBackend
from .memory import MemoryLRUBackend

__all__ = [
    "LRUCacheBackend",
    "MemoryLRUBackend",
]
