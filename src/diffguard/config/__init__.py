"""Configuration loading, schema, and defaults."""

from diffguard.config.loader import ConfigError, load_config
from diffguard.config.schema import DiffGuardConfig

__all__ = [
    "ConfigError",
    "DiffGuardConfig",
    "load_config",
]
