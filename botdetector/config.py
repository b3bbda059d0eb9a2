from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, List, Mapping

from .exceptions import ConfigError, NoConfigError
from .patterns import Ruleset, compile_ruleset

# Key under which a host's extra-config mapping stores the detector record
NAMESPACE = "github.com/devopsfaith/krakend-botdetector"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in {"1", "true", "yes"}


def _string_list(name: str, value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
        raise ConfigError(f"{name} must be a list of strings, got {type(value).__name__}")
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{name} must only contain strings, got {item!r}")
    return list(value)


@dataclass
class DetectorConfig:
    deny: List[str] = field(default_factory=list)
    allow: List[str] = field(default_factory=list)
    patterns: List[str] = field(default_factory=list)
    cache_size: int = int(os.environ.get("BOTDETECTOR_CACHE_SIZE", "0"))
    reject_if_empty: bool = _env_flag("BOTDETECTOR_REJECT_IF_EMPTY")
    enable_logging: bool = _env_flag("BOTDETECTOR_LOGGING")
    namespace: str = os.environ.get("BOTDETECTOR_NAMESPACE", "default")

    def __post_init__(self) -> None:
        self.deny = _string_list("deny", self.deny)
        self.allow = _string_list("allow", self.allow)
        self.patterns = _string_list("patterns", self.patterns)

        # bool is an int subclass; a flag is never a valid size
        if isinstance(self.cache_size, bool) or not isinstance(self.cache_size, int):
            raise ConfigError(f"cache_size must be an integer, got {self.cache_size!r}")

        if self.cache_size < 0:
            raise ConfigError(f"cache_size must be >= 0, got {self.cache_size}")

        if not isinstance(self.reject_if_empty, bool):
            raise ConfigError(f"reject_if_empty must be a boolean, got {self.reject_if_empty!r}")

    @classmethod
    def from_dict(cls, record: Mapping[str, Any], **overrides: Any) -> "DetectorConfig":
        """
        Build a config from a raw configuration record.

        Recognised keys are ``deny``, ``allow``, ``patterns``, ``cache_size``
        and ``reject_if_empty``. Absent keys keep their defaults; unknown keys
        are ignored so hosts can keep their own annotations in the record.

        Raises:
            ConfigError: If the record is not a mapping or a field is malformed
        """
        if not isinstance(record, Mapping):
            raise ConfigError(f"detector config must be a mapping, got {type(record).__name__}")

        kwargs: dict = {}
        for key in ("deny", "allow", "patterns", "cache_size", "reject_if_empty"):
            if key in record and record[key] is not None:
                kwargs[key] = record[key]
        kwargs.update(overrides)
        return cls(**kwargs)

    def compile(self) -> Ruleset:
        """Compile the lists into an immutable ruleset."""
        return compile_ruleset(
            deny=self.deny,
            allow=self.allow,
            patterns=self.patterns,
            reject_if_empty=self.reject_if_empty,
        )


def parse_config(extra_config: Mapping[str, Any], **overrides: Any) -> DetectorConfig:
    """
    Extract the detector config stored under NAMESPACE in a host's extra config.

    Raises:
        NoConfigError: If the namespace is not present
        ConfigError: If extra_config or the stored record is malformed
    """
    if not isinstance(extra_config, Mapping):
        raise ConfigError(f"extra config must be a mapping, got {type(extra_config).__name__}")
    if NAMESPACE not in extra_config:
        raise NoConfigError("no config defined for the module")
    return DetectorConfig.from_dict(extra_config[NAMESPACE], **overrides)
