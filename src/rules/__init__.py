"""Configuration for the codebase map."""

from rules.config import (
    CONFIG_FILENAME,
    CodeMapConfig,
    ConfigError,
    IgnoreConfig,
    load_config,
)

__all__ = [
    "CONFIG_FILENAME",
    "CodeMapConfig",
    "ConfigError",
    "IgnoreConfig",
    "load_config",
]
