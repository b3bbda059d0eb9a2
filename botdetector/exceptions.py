from __future__ import annotations


class ConfigError(ValueError):
    """Raised when a detector cannot be built from its configuration."""
    pass


class NoConfigError(ConfigError):
    """Raised when the extra config has no entry for the detector namespace."""
    pass
